from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from src.api.schemas import ModelStatsSchema
from src.classification.pipeline import SensitivityClassifier, get_classifier
from src.core.exceptions import ModelTrainingError

__all__: list[str] = [
    "router",
]

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/v1/model", tags=["model"])

CLASSIFIER_DEP: SensitivityClassifier = Depends(get_classifier)


@router.get(
    "/stats",
    summary="Evaluation metrics from the most recent training run.",
    response_model=ModelStatsSchema,
)
async def model_stats(
    classifier: SensitivityClassifier = CLASSIFIER_DEP,
) -> ModelStatsSchema:
    """Return the latest stats. All zeros until the first run completes."""
    return ModelStatsSchema.from_domain(
        classifier.get_model_stats(), is_ready=classifier.model.is_ready
    )


@router.post(
    "/train",
    summary="Regenerate the synthetic dataset and retrain the model.",
    response_model=ModelStatsSchema,
)
async def train_model(
    classifier: SensitivityClassifier = CLASSIFIER_DEP,
) -> ModelStatsSchema:
    """
    Run one training pass and swap the new network in.

    A request arriving while a run is in flight waits for that run instead
    of starting another. On failure the previous model keeps serving.
    """
    try:
        stats = await classifier.retrain()
    except ModelTrainingError as e:
        logger.error("model_train_request_failed", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Model training failed: {e}",
        ) from e

    return ModelStatsSchema.from_domain(stats, is_ready=classifier.model.is_ready)
