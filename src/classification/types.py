from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, NamedTuple, Optional

__all__: list[str] = [
    "Sensitivity",
    "EncryptionLevel",
    "ClassificationSource",
    "SensitivityFeedback",
    "UploadedFile",
    "FileMetadata",
    "FeatureVector",
    "TrainingExample",
    "ModelStats",
    "Prediction",
    "ClassificationResult",
    "ClassificationMetrics",
    "FeedbackRecord",
]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Sensitivity(str, Enum):
    SENSITIVE = "Sensitive"
    NON_SENSITIVE = "Non-Sensitive"


class EncryptionLevel(str, Enum):
    STRONGEST = "Strongest"
    MODERATE = "Moderate"
    BASIC = "Basic"


class ClassificationSource(str, Enum):
    """Which path produced a result: the trained network or the fallback."""

    MODEL = "model"
    FALLBACK = "fallback"


class SensitivityFeedback(str, Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"


@dataclass(frozen=True)
class UploadedFile:
    """
    A file submitted for classification.

    Attributes:
        name: Original file name including extension
        size: Size in bytes
        declared_type: MIME type declared by the client (may be empty)
        last_modified: Client-side modification timestamp, if known
        relative_path: Path relative to the dropped folder (may be empty)
    """

    name: str
    size: int = 0
    declared_type: str = ""
    last_modified: Optional[datetime] = None
    relative_path: str = ""


@dataclass(frozen=True)
class FileMetadata:
    """Derived view of an uploaded file, discarded after classification."""

    id: str
    name: str
    path: str
    mime_type: str
    size: int
    extension: str
    location: str
    owner: str
    created: datetime
    modified: datetime
    permissions: str


class FeatureVector(NamedTuple):
    """Fixed-length numeric encoding of :class:`FileMetadata`."""

    has_sensitive_keyword: float
    file_type_id: float
    extension_id: float
    location_id: float
    permission_id: float
    normalized_log_size: float


@dataclass(frozen=True)
class TrainingExample:
    features: FeatureVector
    label: int
    file_name: str = ""


@dataclass(frozen=True)
class ModelStats:
    """
    Evaluation snapshot of the most recent training run.

    Attributes:
        accuracy: Fraction of test examples classified correctly
        precision: TP / (TP + FP) on the test split, 0 when undefined
        recall: TP / (TP + FN) on the test split, 0 when undefined
        f1_score: Harmonic mean of precision and recall, 0 when undefined
        training_samples: Examples used for fitting (validation slice included)
        testing_samples: Examples held out for evaluation
        last_trained: When the run finished, None before the first run
    """

    accuracy: float = 0.0
    precision: float = 0.0
    recall: float = 0.0
    f1_score: float = 0.0
    training_samples: int = 0
    testing_samples: int = 0
    last_trained: Optional[datetime] = None

    def dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Prediction:
    is_sensitive: bool
    confidence_score: int


@dataclass(frozen=True)
class ClassificationResult:
    """
    Sensitivity classification of a single file.

    Attributes:
        id: Unique identifier, referenced by feedback submissions
        file_name: Original file name
        file_path: Relative path or ``/<file_name>``
        file_type: Human-readable file type label (e.g. "PDF Document")
        extension: Extension as it appears in the file name
        sensitivity: Sensitive / Non-Sensitive
        confidence_score: Integer 0-100
        encryption_level: Tier derived from the confidence score
        classified_at: Creation timestamp
        source: Whether the trained model or the fallback produced the result
    """

    id: str
    file_name: str
    file_path: str
    file_type: str
    extension: str
    sensitivity: Sensitivity
    confidence_score: int
    encryption_level: EncryptionLevel
    classified_at: datetime = field(default_factory=_utcnow)
    source: ClassificationSource = ClassificationSource.MODEL

    def dict(self) -> dict[str, Any]:
        """Return a plain ``dict`` the API schemas can be built from."""
        return asdict(self)


@dataclass(frozen=True)
class ClassificationMetrics:
    total_classified: int
    sensitive_count: int
    non_sensitive_count: int
    average_confidence: float
    by_file_type: Dict[str, int]
    by_encryption_level: Dict[str, int]

    def dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class FeedbackRecord:
    """User verdict on a result. Recorded only, never used for retraining."""

    result_id: str
    feedback: SensitivityFeedback
    submitted_at: datetime = field(default_factory=_utcnow)

    def dict(self) -> dict[str, Any]:
        return asdict(self)
