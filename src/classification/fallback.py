"""src/classification/fallback.py
###############################################################################
Rule-based fallback classifier
###############################################################################
Used only when the trained network cannot produce a prediction. It depends on
nothing but the file name, so it cannot fail.

A 32-bit string hash of the name yields a base score in ``[70, 99]``; a
sensitivity keyword in the name adds 10 (capped at 99). The file is
*Sensitive* when the score exceeds 80. Hashing keeps repeated
classifications of the same name consistent.
"""

from __future__ import annotations

import uuid

import structlog

from src.classification.confidence import encryption_level_for, sensitivity_label
from src.classification.features import determine_file_type, get_file_extension
from src.classification.types import (
    ClassificationResult,
    ClassificationSource,
    UploadedFile,
)

__all__: list[str] = [
    "FALLBACK_KEYWORDS",
    "name_hash",
    "fallback_score",
    "fallback_classify",
]

logger = structlog.get_logger(__name__)

BASE_SCORE: int = 70
SCORE_SPREAD: int = 30
KEYWORD_BOOST: int = 10
MAX_SCORE: int = 99
SENSITIVE_ABOVE: int = 80

_INT32_MASK = 0xFFFFFFFF
_INT32_SIGN = 0x80000000

# Narrower than the encoder vocabulary: card, credit, debit, ssn, dob and
# birth earn no boost here.
FALLBACK_KEYWORDS: tuple[str, ...] = (
    "pan",
    "aadhar",
    "passport",
    "bank",
    "statement",
    "financial",
    "medical",
    "health",
    "insurance",
    "tax",
    "salary",
    "personal",
    "confidential",
    "private",
    "secret",
    "social",
    "security",
)


def name_hash(name: str) -> int:
    """``h = h * 31 + unit`` over UTF-16 code units, wrapped to signed 32 bits.

    Returns the absolute value of the final hash.
    """
    encoded = name.encode("utf-16-le")
    value = 0
    for index in range(0, len(encoded), 2):
        unit = int.from_bytes(encoded[index : index + 2], "little")
        value = ((value << 5) - value + unit) & _INT32_MASK
    if value & _INT32_SIGN:
        value -= 1 << 32
    return abs(value)


def fallback_score(name: str) -> int:
    """Deterministic pseudo-confidence for *name*, in ``[70, 99]``."""
    score = name_hash(name) % SCORE_SPREAD + BASE_SCORE
    lowered = name.lower()
    if any(keyword in lowered for keyword in FALLBACK_KEYWORDS):
        score = min(score + KEYWORD_BOOST, MAX_SCORE)
    return score


def fallback_classify(file: UploadedFile) -> ClassificationResult:
    """Classify *file* from its name alone."""
    score = fallback_score(file.name)
    result = ClassificationResult(
        id=uuid.uuid4().hex,
        file_name=file.name,
        file_path=file.relative_path or f"/{file.name}",
        file_type=determine_file_type(file.name),
        extension=get_file_extension(file.name),
        sensitivity=sensitivity_label(score > SENSITIVE_ABOVE),
        confidence_score=score,
        encryption_level=encryption_level_for(score),
        source=ClassificationSource.FALLBACK,
    )
    logger.debug(
        "fallback_classification",
        filename=file.name,
        confidence_score=score,
        sensitivity=result.sensitivity.value,
    )
    return result
