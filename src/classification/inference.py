"""
Inference engine

Scores one file with the trained network. The first call in a process pays
the training cost: :meth:`InferenceEngine.predict` awaits
``SensitivityModel.ensure_trained()`` before encoding the metadata.

Every failure propagates; the orchestrator decides whether to fall back.
"""

from __future__ import annotations

import structlog

from src.classification.confidence import (
    DEFAULT_SENSITIVITY_THRESHOLD,
    is_sensitive,
    to_confidence_score,
)
from src.classification.features import encode
from src.classification.model import SensitivityModel
from src.classification.types import FileMetadata, Prediction
from src.core.exceptions import InferenceError

__all__: list[str] = ["InferenceEngine"]

logger = structlog.get_logger(__name__)


class InferenceEngine:
    def __init__(
        self,
        model: SensitivityModel,
        threshold: int = DEFAULT_SENSITIVITY_THRESHOLD,
    ) -> None:
        self.model = model
        self.threshold = threshold

    async def predict(self, metadata: FileMetadata) -> Prediction:
        """Return the sensitivity decision and 0-100 confidence for *metadata*.

        Raises
        ------
        ModelTrainingError
            When on-demand training fails.
        InferenceError
            When the network yields non-finite probabilities.
        """
        await self.model.ensure_trained()

        vector = encode(metadata)
        _, sensitive_probability = await self.model.predict_proba(vector)

        try:
            score = to_confidence_score(sensitive_probability)
        except ValueError as exc:
            raise InferenceError(str(exc)) from exc

        prediction = Prediction(
            is_sensitive=is_sensitive(score, self.threshold),
            confidence_score=score,
        )
        logger.debug(
            "inference_complete",
            filename=metadata.name,
            features=list(vector),
            confidence_score=score,
            threshold=self.threshold,
        )
        return prediction
