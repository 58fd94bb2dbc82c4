from __future__ import annotations

import asyncio
import uuid
from typing import List

import structlog
from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status
from fastapi.responses import JSONResponse

from src.api.schemas import ClassificationResultSchema
from src.classification.pipeline import SensitivityClassifier, get_classifier
from src.classification.types import ClassificationSource
from src.core.config import Settings, get_settings
from src.ingestion.validators import to_uploaded_file, validate_file
from src.services.session_store import SessionStore, get_session_store

__all__: list[str] = [
    "router",
]

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["files"])

FILES_PARAM: List[UploadFile] = File(..., description="One or many files to classify")

SETTINGS_DEP: Settings = Depends(get_settings)
CLASSIFIER_DEP: SensitivityClassifier = Depends(get_classifier)
STORE_DEP: SessionStore = Depends(get_session_store)


def _error_response(status_code: int, detail: str, request_id: str) -> JSONResponse:
    response = JSONResponse(
        status_code=status_code,
        content={
            "error": {"code": status_code, "message": detail, "request_id": request_id},
            "detail": detail,
        },
    )
    response.headers["X-Request-ID"] = request_id
    return response


@router.post(
    "/files",
    summary="Classify the sensitivity of one or many uploaded files.",
    response_model=List[ClassificationResultSchema],
    status_code=status.HTTP_200_OK,
)
async def upload_and_classify_files(
    request: Request,
    files: List[UploadFile] = FILES_PARAM,
    settings: Settings = SETTINGS_DEP,
    classifier: SensitivityClassifier = CLASSIFIER_DEP,
    store: SessionStore = STORE_DEP,
) -> JSONResponse:
    """
    Validate every file, then classify the batch concurrently.

    Concurrent classifications share one training run when the model is not
    trained yet. Each result is recorded in the session store.
    """
    request_id = (
        request.headers.get("x-request-id")
        or structlog.contextvars.get_contextvars().get("request_id")
        or uuid.uuid4().hex
    )

    if not files:
        logger.warning("upload_no_files_supplied", request_id=request_id)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No files supplied under form field 'files'.",
        )

    if len(files) > settings.max_batch_size:
        logger.warning(
            "upload_batch_too_large",
            request_id=request_id,
            num_files=len(files),
            max_files=settings.max_batch_size,
        )
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=(
                f"Batch size {len(files)} exceeds limit of {settings.max_batch_size}."
            ),
        )

    uploads = []
    for upload in files:
        try:
            size = validate_file(upload, settings=settings)
        except HTTPException as e:
            logger.warning(
                "upload_validation_failed",
                request_id=request_id,
                filename=upload.filename,
                detail=e.detail,
            )
            return _error_response(e.status_code, str(e.detail), request_id)
        uploads.append(to_uploaded_file(upload, size))

    results = await asyncio.gather(*(classifier.classify(item) for item in uploads))
    for result in results:
        store.record(result)

    logger.info(
        "batch_classification_complete",
        request_id=request_id,
        batch_size=len(results),
        fallback_count=sum(
            1 for r in results if r.source is ClassificationSource.FALLBACK
        ),
    )

    payload = [
        ClassificationResultSchema.from_domain(r, request_id=request_id).model_dump(
            mode="json"
        )
        for r in results
    ]
    response = JSONResponse(content=payload, status_code=status.HTTP_200_OK)
    response.headers["X-Request-ID"] = request_id
    return response
