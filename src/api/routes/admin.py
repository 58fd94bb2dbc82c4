from __future__ import annotations

from typing import Any, Dict

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from src.classification.pipeline import SensitivityClassifier, get_classifier
from src.core.config import Settings, get_settings

__all__: list[str] = [
    "router",
]

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/v1", tags=["Admin"])

SETTINGS_DEP: Settings = Depends(get_settings)
CLASSIFIER_DEP: SensitivityClassifier = Depends(get_classifier)


@router.get("/health", response_model=Dict[str, Any])
async def health(
    settings: Settings = SETTINGS_DEP,
    classifier: SensitivityClassifier = CLASSIFIER_DEP,
) -> Dict[str, Any]:
    """Return service health plus whether a trained model is loaded.

    The service is healthy without a model: uploads are served by the
    fallback classifier until training completes.
    """
    return {
        "status": "ok",
        "commit_sha": settings.commit_sha or "unknown",
        "model_ready": classifier.model.is_ready,
        "model_training": classifier.model.is_training,
    }


@router.get("/version", summary="Application version information")
async def version(
    request: Request,
    settings: Settings = SETTINGS_DEP,
) -> JSONResponse:
    """Return the application version declared on the FastAPI instance and the
    git commit SHA, in a stable shape for CI checks."""

    return JSONResponse(
        {
            "version": request.app.version,
            "commit_sha": settings.commit_sha,
        }
    )
