from __future__ import annotations

from typing import List

import structlog
from fastapi import APIRouter, Depends, status

from src.api.schemas import (
    ClassificationMetricsSchema,
    ClassificationResultSchema,
    FeedbackAck,
    FeedbackRequest,
)
from src.services.session_store import SessionStore, get_session_store

__all__: list[str] = [
    "router",
]

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["classifications"])

STORE_DEP: SessionStore = Depends(get_session_store)


@router.get(
    "/classifications",
    summary="Classification history for the current session, newest first.",
    response_model=List[ClassificationResultSchema],
)
async def list_classifications(
    store: SessionStore = STORE_DEP,
) -> List[ClassificationResultSchema]:
    return [ClassificationResultSchema.from_domain(item) for item in store.history()]


@router.get(
    "/classifications/summary",
    summary="Aggregate counts for the dashboard.",
    response_model=ClassificationMetricsSchema,
)
async def classification_summary(
    store: SessionStore = STORE_DEP,
) -> ClassificationMetricsSchema:
    return ClassificationMetricsSchema.from_domain(store.metrics())


@router.post(
    "/feedback",
    summary="Mark a classification result as correct or incorrect.",
    response_model=FeedbackAck,
    status_code=status.HTTP_202_ACCEPTED,
)
async def submit_feedback(
    body: FeedbackRequest,
    store: SessionStore = STORE_DEP,
) -> FeedbackAck:
    """Record the verdict. Feedback is stored for review only; it does not retrain."""
    record = store.submit_feedback(body.result_id, body.feedback)
    logger.info(
        "feedback_recorded",
        result_id=record.result_id,
        feedback=record.feedback.value,
    )
    return FeedbackAck.from_domain(record)
