"""
Decision kernel for confidence scores

Pure helpers that turn a sensitive-class probability into the integer
confidence score, the binary sensitivity decision and the encryption-level
tier. Both the model path and the fallback path go through these helpers so
the boundaries are identical everywhere.

Boundaries
==========
• Sensitivity is ``score > threshold`` (strict). The default threshold of 45
  sits below 50 so borderline files are flagged: a missed sensitive file
  costs more than an over-encrypted harmless one.
• Encryption tier: ``> 90`` Strongest, ``> 80`` Moderate, otherwise Basic.
  A score of exactly 90 is therefore Moderate and exactly 80 is Basic.
"""

from __future__ import annotations

import math

from src.classification.types import EncryptionLevel, Sensitivity

__all__: list[str] = [
    "DEFAULT_SENSITIVITY_THRESHOLD",
    "STRONGEST_ABOVE",
    "MODERATE_ABOVE",
    "to_confidence_score",
    "is_sensitive",
    "sensitivity_label",
    "encryption_level_for",
]

DEFAULT_SENSITIVITY_THRESHOLD: int = 45
STRONGEST_ABOVE: int = 90
MODERATE_ABOVE: int = 80


def to_confidence_score(probability: float) -> int:
    """Scale a probability to 0-100, rounding halves up.

    Raises
    ------
    ValueError
        When *probability* is NaN or infinite.
    """
    if not math.isfinite(probability):
        raise ValueError(f"probability must be finite, got {probability!r}")
    score = math.floor(probability * 100 + 0.5)
    return int(min(max(score, 0), 100))


def is_sensitive(confidence_score: int, threshold: int = DEFAULT_SENSITIVITY_THRESHOLD) -> bool:
    return confidence_score > threshold


def sensitivity_label(sensitive: bool) -> Sensitivity:
    return Sensitivity.SENSITIVE if sensitive else Sensitivity.NON_SENSITIVE


def encryption_level_for(confidence_score: int) -> EncryptionLevel:
    """Map a confidence score onto its encryption-level tier."""
    if confidence_score > STRONGEST_ABOVE:
        return EncryptionLevel.STRONGEST
    if confidence_score > MODERATE_ABOVE:
        return EncryptionLevel.MODERATE
    return EncryptionLevel.BASIC
