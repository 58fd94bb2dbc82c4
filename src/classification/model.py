###############################################################################
# src/classification/model.py
# -----------------------------------------------------------------------------
# Model lifecycle state
#
# ``SensitivityModel`` owns the trained network and its evaluation stats.
# It is an explicit object (one per orchestrator) rather than a module global,
# so tests can run several independent instances side by side.
#
# • ``train()``          – run a training cycle, or join the one in flight.
# • ``ensure_trained()`` – train on first use; no-op once a model is loaded.
# • ``is_ready``         – whether a trained network is available.
# • ``stats()``          – snapshot of the latest evaluation.
# • ``predict_proba()``  – class probabilities for one feature vector.
#
# Lifecycle rules
# ===============
# 1. **Lazy training** – nothing is trained until the first request (or the
#    optional startup hook) asks for it; the model is never persisted.
# 2. **Single flight** – at most one training run at a time. The first caller
#    creates an asyncio task; concurrent callers await the same task through
#    ``asyncio.shield`` so one cancelled caller does not cancel the run.
# 3. **Atomic swap** – the network and its stats are published together as a
#    single immutable ``TrainingOutcome`` once training succeeds. During a
#    retrain the previous model keeps serving predictions.
# 4. **Failure isolation** – a failed run leaves the previous model and stats
#    untouched and clears the in-flight handle so a later call can retry.
###############################################################################

from __future__ import annotations

import asyncio
from typing import Optional, Tuple

import structlog

from src.classification.network import predict_proba
from src.classification.trainer import Trainer, TrainingOutcome
from src.classification.types import FeatureVector, ModelStats
from src.core.exceptions import ModelNotAvailableError

__all__: list[str] = ["SensitivityModel"]

logger = structlog.get_logger(__name__)


class SensitivityModel:
    """Holds the trained network and serialises training runs."""

    def __init__(self, trainer: Optional[Trainer] = None) -> None:
        self._trainer: Trainer = trainer or Trainer()
        self._current: Optional[TrainingOutcome] = None
        self._inflight: Optional["asyncio.Future[TrainingOutcome]"] = None

    @property
    def is_ready(self) -> bool:
        return self._current is not None

    @property
    def is_training(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    def stats(self) -> ModelStats:
        """Return the latest stats, or a zeroed snapshot before the first run."""
        current = self._current
        return current.stats if current is not None else ModelStats()

    async def train(self) -> ModelStats:
        """Train a fresh network, or wait for the run already in progress.

        Raises
        ------
        ModelTrainingError
            Propagated from the trainer; the previous model stays in service.
        """
        if self._inflight is None:
            task = asyncio.ensure_future(self._run_training())
            task.add_done_callback(self._release)
            self._inflight = task
        else:
            logger.debug("training_already_in_flight")

        outcome = await asyncio.shield(self._inflight)
        return outcome.stats

    async def ensure_trained(self) -> None:
        """Train once if no model is loaded yet."""
        if self._current is None:
            await self.train()

    async def predict_proba(self, vector: FeatureVector) -> Tuple[float, float]:
        """Return *(p_non_sensitive, p_sensitive)* for *vector*.

        Raises
        ------
        ModelNotAvailableError
            When no training run has completed yet.
        """
        current = self._current
        if current is None:
            raise ModelNotAvailableError("No trained sensitivity model is loaded.")
        return await asyncio.to_thread(predict_proba, current.network, vector)

    async def _run_training(self) -> TrainingOutcome:
        outcome = await self._trainer.train()
        self._current = outcome
        logger.info(
            "model_swapped_in",
            accuracy=round(outcome.stats.accuracy, 4),
            last_trained=outcome.stats.last_trained.isoformat()
            if outcome.stats.last_trained
            else None,
        )
        return outcome

    def _release(self, task: "asyncio.Future[TrainingOutcome]") -> None:
        if self._inflight is task:
            self._inflight = None
        if not task.cancelled() and task.exception() is not None:
            logger.warning("training_run_failed", error=str(task.exception()))
