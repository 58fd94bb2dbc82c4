from __future__ import annotations

import math

import pytest

from src.classification.confidence import (
    encryption_level_for,
    is_sensitive,
    sensitivity_label,
    to_confidence_score,
)
from src.classification.types import EncryptionLevel, Sensitivity


@pytest.mark.parametrize(
    "probability, expected",
    [
        (0.0, 0),
        (1.0, 100),
        (0.454, 45),
        (0.455, 46),  # halves round up
        (-0.2, 0),
        (1.3, 100),
    ],
)
def test_to_confidence_score(probability: float, expected: int) -> None:
    assert to_confidence_score(probability) == expected


@pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
def test_non_finite_probability_is_rejected(bad: float) -> None:
    with pytest.raises(ValueError):
        to_confidence_score(bad)


def test_threshold_is_strict() -> None:
    assert is_sensitive(45) is False
    assert is_sensitive(46) is True
    assert is_sensitive(60, threshold=60) is False
    assert is_sensitive(61, threshold=60) is True


def test_sensitivity_label() -> None:
    assert sensitivity_label(True) is Sensitivity.SENSITIVE
    assert sensitivity_label(False) is Sensitivity.NON_SENSITIVE


@pytest.mark.parametrize(
    "score, expected",
    [
        (100, EncryptionLevel.STRONGEST),
        (91, EncryptionLevel.STRONGEST),
        (90, EncryptionLevel.MODERATE),
        (81, EncryptionLevel.MODERATE),
        (80, EncryptionLevel.BASIC),
        (0, EncryptionLevel.BASIC),
    ],
)
def test_encryption_level_boundaries(score: int, expected: EncryptionLevel) -> None:
    assert encryption_level_for(score) is expected
