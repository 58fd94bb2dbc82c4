"""src/classification/trainer.py
###############################################################################
Model training and evaluation
###############################################################################
One training run:

1. generate ``training_samples`` synthetic examples;
2. split them 80/20 into train/test **preserving order** (the generator is
   already random);
3. fit a fresh :class:`SensitivityNetwork` with Adam + cross-entropy, holding
   the last ``validation_split`` of the training split out as a validation
   slice that is reported per epoch;
4. evaluate on the untouched test split.

Accuracy comes from the network's own scoring pass. Precision, recall and F1
are computed from explicit confusion counts of arg-max predictions against
the true labels.

Fitting and evaluation are CPU-bound and run via :pyfunc:`asyncio.to_thread`
so the event loop keeps serving other work. The trainer returns a
:class:`TrainingOutcome` and never touches shared state; the caller decides
when to swap it in.
"""

from __future__ import annotations

import asyncio
import math
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

import structlog
import torch
from sklearn.model_selection import train_test_split  # type: ignore
from torch import nn
from torch.utils.data import DataLoader, TensorDataset

from src.classification.dataset import SyntheticDatasetGenerator
from src.classification.network import SensitivityNetwork, build_optimizer, to_tensor
from src.classification.types import ModelStats, TrainingExample
from src.core.config import Settings, get_settings
from src.core.exceptions import ModelTrainingError

__all__: list[str] = [
    "ConfusionCounts",
    "TrainingOutcome",
    "Trainer",
    "confusion_counts",
]

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ConfusionCounts:
    true_positives: int = 0
    false_positives: int = 0
    false_negatives: int = 0
    true_negatives: int = 0

    @property
    def precision(self) -> float:
        return _ratio(self.true_positives, self.true_positives + self.false_positives)

    @property
    def recall(self) -> float:
        return _ratio(self.true_positives, self.true_positives + self.false_negatives)

    @property
    def f1_score(self) -> float:
        return _ratio(
            2 * self.precision * self.recall, self.precision + self.recall
        )


def _ratio(numerator: float, denominator: float) -> float:
    """Division that reports 0 instead of failing on an empty denominator."""
    return numerator / denominator if denominator else 0.0


def confusion_counts(predicted: Sequence[int], actual: Sequence[int]) -> ConfusionCounts:
    """Tally predictions against labels, class ``1`` being *sensitive*."""
    if len(predicted) != len(actual):
        raise ValueError("predicted and actual must have the same length")

    tp = fp = fn = tn = 0
    for guess, truth in zip(predicted, actual):
        if guess == 1 and truth == 1:
            tp += 1
        elif guess == 1:
            fp += 1
        elif truth == 1:
            fn += 1
        else:
            tn += 1
    return ConfusionCounts(tp, fp, fn, tn)


@dataclass(frozen=True)
class TrainingOutcome:
    """A trained network together with the stats it was evaluated to."""

    network: SensitivityNetwork
    stats: ModelStats


def _labels(examples: Sequence[TrainingExample]) -> torch.Tensor:
    return torch.tensor([example.label for example in examples], dtype=torch.long)


class Trainer:
    """Build, fit and evaluate the sensitivity network.

    Parameters
    ----------
    settings:
        Hyper-parameters; defaults to :func:`get_settings`.
    generator:
        Dataset source; defaults to a generator using
        ``settings.sensitive_ratio`` and an unseeded RNG.
    seed:
        When given, seeds the dataset RNG (if no generator is passed), the
        torch weight initialisation and the mini-batch shuffling.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        generator: Optional[SyntheticDatasetGenerator] = None,
        seed: Optional[int] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._seed = seed
        self._generator = generator or SyntheticDatasetGenerator(
            sensitive_ratio=self.settings.sensitive_ratio,
            rng=random.Random(seed) if seed is not None else None,
        )

    async def train(self) -> TrainingOutcome:
        """Run a full training cycle and return the fitted network plus stats.

        Raises
        ------
        ModelTrainingError
            When fitting or evaluation fails (non-finite loss, torch errors).
        """
        settings = self.settings
        logger.info(
            "training_started",
            samples=settings.training_samples,
            epochs=settings.epochs,
            batch_size=settings.batch_size,
        )

        dataset = self._generator.generate(settings.training_samples)
        train_split, test_split = train_test_split(
            dataset, test_size=settings.test_split, shuffle=False
        )

        if self._seed is not None:
            torch.manual_seed(self._seed)
        network = SensitivityNetwork(dropout_rate=settings.dropout_rate)

        try:
            await asyncio.to_thread(self._fit, network, train_split)
            accuracy, predicted = await asyncio.to_thread(
                self._evaluate, network, test_split
            )
        except ModelTrainingError:
            raise
        except (RuntimeError, ValueError) as exc:
            logger.error("training_failed", error=str(exc), exc_info=True)
            raise ModelTrainingError(f"Training failed: {exc}") from exc

        counts = confusion_counts(predicted, [example.label for example in test_split])
        stats = ModelStats(
            accuracy=accuracy,
            precision=counts.precision,
            recall=counts.recall,
            f1_score=counts.f1_score,
            training_samples=len(train_split),
            testing_samples=len(test_split),
            last_trained=datetime.now(timezone.utc),
        )
        logger.info(
            "training_complete",
            accuracy=round(stats.accuracy, 4),
            precision=round(stats.precision, 4),
            recall=round(stats.recall, 4),
            f1_score=round(stats.f1_score, 4),
            training_samples=stats.training_samples,
            testing_samples=stats.testing_samples,
        )
        return TrainingOutcome(network=network, stats=stats)

    # ------------------------------------------------------------------
    # Worker-thread helpers
    # ------------------------------------------------------------------

    def _fit(self, network: SensitivityNetwork, examples: List[TrainingExample]) -> None:
        settings = self.settings
        xs = to_tensor([example.features for example in examples])
        ys = _labels(examples)

        split_at = len(examples) - int(len(examples) * settings.validation_split)
        fit_x, fit_y = xs[:split_at], ys[:split_at]
        val_x, val_y = xs[split_at:], ys[split_at:]

        shuffle_generator = None
        if self._seed is not None:
            shuffle_generator = torch.Generator().manual_seed(self._seed)
        loader = DataLoader(
            TensorDataset(fit_x, fit_y),
            batch_size=settings.batch_size,
            shuffle=True,
            generator=shuffle_generator,
        )
        optimizer = build_optimizer(
            network, settings.learning_rate, settings.weight_decay
        )
        loss_fn = nn.CrossEntropyLoss()

        for epoch in range(settings.epochs):
            network.train()
            running_loss, seen = 0.0, 0
            for batch_x, batch_y in loader:
                optimizer.zero_grad()
                loss = loss_fn(network(batch_x), batch_y)
                if not torch.isfinite(loss):
                    raise ModelTrainingError(
                        f"Non-finite training loss at epoch {epoch + 1}"
                    )
                loss.backward()
                optimizer.step()
                running_loss += loss.item() * len(batch_x)
                seen += len(batch_x)

            val_loss, val_accuracy = self._score(network, val_x, val_y, loss_fn)
            logger.debug(
                "training_epoch_complete",
                epoch=epoch + 1,
                epochs=settings.epochs,
                loss=round(running_loss / seen, 4) if seen else None,
                val_loss=val_loss,
                val_accuracy=val_accuracy,
            )

    @staticmethod
    def _score(
        network: SensitivityNetwork,
        xs: torch.Tensor,
        ys: torch.Tensor,
        loss_fn: nn.Module,
    ) -> Tuple[Optional[float], Optional[float]]:
        """Return *(loss, accuracy)* over a held-out slice, ``None`` when empty."""
        if len(xs) == 0:
            return None, None
        network.eval()
        with torch.no_grad():
            logits = network(xs)
            loss = float(loss_fn(logits, ys).item())
            accuracy = float((logits.argmax(dim=1) == ys).float().mean().item())
        if not math.isfinite(loss):
            raise ModelTrainingError("Non-finite validation loss")
        return round(loss, 4), round(accuracy, 4)

    def _evaluate(
        self, network: SensitivityNetwork, examples: List[TrainingExample]
    ) -> Tuple[float, List[int]]:
        """Return test accuracy and the arg-max class per example."""
        xs = to_tensor([example.features for example in examples])
        ys = _labels(examples)
        network.eval()
        with torch.no_grad():
            predicted = network(xs).argmax(dim=1)
        accuracy = float((predicted == ys).float().mean().item())
        return accuracy, [int(label) for label in predicted.tolist()]
