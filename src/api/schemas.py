"""src/api/schemas.py
###############################################################################
Public Pydantic models exposed by the API layer.
###############################################################################
The classification engine works with frozen dataclasses
(`src.classification.types`). The HTTP contract is defined here so the
internal records can evolve without breaking clients; each schema offers a
``from_domain`` constructor that copies the matching dataclass.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.classification.types import (
    ClassificationMetrics,
    ClassificationResult,
    ClassificationSource,
    EncryptionLevel,
    FeedbackRecord,
    ModelStats,
    Sensitivity,
    SensitivityFeedback,
)

__all__: list[str] = [
    "ClassificationResultSchema",
    "ClassificationMetricsSchema",
    "ModelStatsSchema",
    "FeedbackRequest",
    "FeedbackAck",
]


class ClassificationResultSchema(BaseModel):
    """Public response model for a single file classification."""

    model_config = ConfigDict(frozen=True)

    id: str
    file_name: str
    file_path: str
    file_type: str
    extension: str
    sensitivity: Sensitivity
    confidence_score: int = Field(..., ge=0, le=100)
    encryption_level: EncryptionLevel
    classified_at: datetime
    source: ClassificationSource = Field(
        default=ClassificationSource.MODEL,
        description="'fallback' when the trained model was unavailable.",
    )
    request_id: Optional[str] = Field(
        default=None, description="Request-scoped id, filled by the route handler."
    )

    @classmethod
    def from_domain(
        cls, result: ClassificationResult, request_id: Optional[str] = None
    ) -> "ClassificationResultSchema":
        return cls(**result.dict(), request_id=request_id)


class ModelStatsSchema(BaseModel):
    accuracy: float = Field(..., ge=0.0, le=1.0)
    precision: float = Field(..., ge=0.0, le=1.0)
    recall: float = Field(..., ge=0.0, le=1.0)
    f1_score: float = Field(..., ge=0.0, le=1.0)
    training_samples: int
    testing_samples: int
    last_trained: Optional[datetime] = None
    is_ready: bool = False

    @classmethod
    def from_domain(cls, stats: ModelStats, *, is_ready: bool) -> "ModelStatsSchema":
        return cls(**stats.dict(), is_ready=is_ready)


class ClassificationMetricsSchema(BaseModel):
    total_classified: int
    sensitive_count: int
    non_sensitive_count: int
    average_confidence: float
    by_file_type: Dict[str, int]
    by_encryption_level: Dict[str, int]

    @classmethod
    def from_domain(cls, metrics: ClassificationMetrics) -> "ClassificationMetricsSchema":
        return cls(**metrics.dict())


class FeedbackRequest(BaseModel):
    result_id: str = Field(..., min_length=1)
    feedback: SensitivityFeedback


class FeedbackAck(BaseModel):
    result_id: str
    feedback: SensitivityFeedback
    submitted_at: datetime
    status: str = "recorded"

    @classmethod
    def from_domain(cls, record: FeedbackRecord) -> "FeedbackAck":
        return cls(**record.dict())
