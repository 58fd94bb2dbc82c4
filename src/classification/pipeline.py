"""
Classification Orchestrator

Coordinates the model lifecycle, the inference engine and the fallback
classifier to turn an uploaded file into a :class:`ClassificationResult`.

Key Responsibilities:
- Make sure a model is trained (single-flight, shared by concurrent calls).
- Run inference and derive the encryption-level tier from the score.
- Swallow any training or inference failure and return the fallback result
  instead, so a single file never fails visibly.
- Expose model stats and on-demand retraining to the API layer.

Dependencies:
- `src.classification.model`: owned model state (`SensitivityModel`).
- `src.classification.inference`: network scoring + threshold.
- `src.classification.fallback`: keyword/hash heuristics.
- `structlog`: structured logging of every outcome.
"""

from __future__ import annotations

import time
import uuid
from typing import Optional

import structlog

from src.classification.confidence import encryption_level_for, sensitivity_label
from src.classification.fallback import fallback_classify
from src.classification.features import determine_file_type, extract_metadata
from src.classification.inference import InferenceEngine
from src.classification.model import SensitivityModel
from src.classification.trainer import Trainer
from src.classification.types import (
    ClassificationResult,
    ClassificationSource,
    ModelStats,
    UploadedFile,
)
from src.core.config import Settings, get_settings
from src.core.exceptions import (
    InferenceError,
    ModelNotAvailableError,
    ModelTrainingError,
)

__all__: list[str] = [
    "SensitivityClassifier",
    "get_classifier",
    "classify",
    "get_model_stats",
]

logger = structlog.get_logger(__name__)


class SensitivityClassifier:
    """Classify files with the trained network, degrading to heuristics.

    Parameters
    ----------
    model:
        Model state to use; a new one (with a :class:`Trainer` built from
        *settings*) is created when omitted.
    settings:
        Supplies the sensitivity threshold and training hyper-parameters.
    """

    def __init__(
        self,
        model: Optional[SensitivityModel] = None,
        *,
        settings: Optional[Settings] = None,
    ) -> None:
        settings = settings or get_settings()
        self.model = model or SensitivityModel(Trainer(settings))
        self.engine = InferenceEngine(
            self.model, threshold=settings.sensitivity_threshold
        )

    async def classify(self, file: UploadedFile) -> ClassificationResult:
        """Return the sensitivity classification of *file*. Never raises."""
        start_time = time.perf_counter()
        metadata = extract_metadata(file)

        try:
            await self.model.ensure_trained()
            prediction = await self.engine.predict(metadata)
        except (ModelTrainingError, ModelNotAvailableError, InferenceError) as e:
            logger.warning(
                "inference_failed_fallback",
                filename=file.name,
                error=str(e),
                error_type=type(e).__name__,
            )
            return fallback_classify(file)
        except Exception as e:  # noqa: BLE001 – a single file must never fail visibly
            logger.error(
                "inference_unexpected_exception",
                filename=file.name,
                error=str(e),
                exc_info=True,
            )
            return fallback_classify(file)

        score = prediction.confidence_score
        result = ClassificationResult(
            id=uuid.uuid4().hex,
            file_name=file.name,
            file_path=metadata.path,
            file_type=determine_file_type(file.name),
            extension=metadata.extension,
            sensitivity=sensitivity_label(prediction.is_sensitive),
            confidence_score=score,
            encryption_level=encryption_level_for(score),
            source=ClassificationSource.MODEL,
        )

        logger.info(
            "classification_complete",
            filename=result.file_name,
            sensitivity=result.sensitivity.value,
            confidence_score=result.confidence_score,
            encryption_level=result.encryption_level.value,
            processing_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        return result

    def get_model_stats(self) -> ModelStats:
        return self.model.stats()

    async def retrain(self) -> ModelStats:
        """Run a new training run; errors propagate to the caller."""
        return await self.model.train()


_DEFAULT_CLASSIFIER: Optional[SensitivityClassifier] = None


def get_classifier() -> SensitivityClassifier:
    """Return the process-wide classifier, creating it on first use."""
    global _DEFAULT_CLASSIFIER  # noqa: PLW0603 – process-wide default instance

    if _DEFAULT_CLASSIFIER is None:
        _DEFAULT_CLASSIFIER = SensitivityClassifier()
    return _DEFAULT_CLASSIFIER


async def classify(file: UploadedFile) -> ClassificationResult:
    """Classify *file* with the process-wide classifier."""
    return await get_classifier().classify(file)


def get_model_stats() -> ModelStats:
    return get_classifier().get_model_stats()
