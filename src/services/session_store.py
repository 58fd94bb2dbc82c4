"""
In-memory session store for classification results and feedback.

Nothing here is durable: results, feedback and the dashboard summary live for
the lifetime of the process. Both are bounded: past ``max_entries`` the
oldest recorded entries are dropped first. The store starts with a fixed seed
history so a fresh session has something to show. Feedback is recorded for
inspection only and never feeds back into training.
"""

from __future__ import annotations

import logging
from collections import Counter, deque
from datetime import datetime, timedelta, timezone
from typing import Deque, Dict, Iterable, List, Optional

from src.classification.types import (
    ClassificationMetrics,
    ClassificationResult,
    ClassificationSource,
    EncryptionLevel,
    FeedbackRecord,
    Sensitivity,
    SensitivityFeedback,
)
from src.core.config import get_settings

# Initialize logger for this module
logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 10_000


def seed_history(now: Optional[datetime] = None) -> List[ClassificationResult]:
    """Return the fixed example history shown before anything is uploaded."""
    now = now or datetime.now(timezone.utc)
    # fmt: off
    rows = [
        ("1", "tax_returns_2023.pdf", "/documents/financial", "PDF Document", "pdf",
         Sensitivity.SENSITIVE, 95, EncryptionLevel.STRONGEST, timedelta(days=2)),
        ("2", "project_proposal.docx", "/documents/work", "Word Document", "docx",
         Sensitivity.NON_SENSITIVE, 75, EncryptionLevel.BASIC, timedelta(days=1)),
        ("3", "bank_statement_march.pdf", "/documents/financial", "PDF Document", "pdf",
         Sensitivity.SENSITIVE, 92, EncryptionLevel.STRONGEST, timedelta(hours=12)),
        ("4", "meeting_notes.txt", "/documents/work", "Text File", "txt",
         Sensitivity.NON_SENSITIVE, 68, EncryptionLevel.BASIC, timedelta(hours=6)),
        ("5", "medical_records.pdf", "/documents/personal", "PDF Document", "pdf",
         Sensitivity.SENSITIVE, 98, EncryptionLevel.STRONGEST, timedelta(hours=1)),
    ]
    # fmt: on
    return [
        ClassificationResult(
            id=result_id,
            file_name=name,
            file_path=f"{folder}/{name}",
            file_type=file_type,
            extension=extension,
            sensitivity=sensitivity,
            confidence_score=score,
            encryption_level=level,
            classified_at=now - age,
            source=ClassificationSource.MODEL,
        )
        for result_id, name, folder, file_type, extension, sensitivity, score, level, age in rows
    ]


class SessionStore:
    """
    Holds classification results and feedback for the running session.

    The store is used from a single event loop; methods are synchronous and
    never yield, so no locking is needed.
    """

    def __init__(
        self,
        seed: Optional[Iterable[ClassificationResult]] = None,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._max_entries = max_entries
        self._results: Dict[str, ClassificationResult] = {}
        self._feedback: Deque[FeedbackRecord] = deque(maxlen=max_entries)
        for result in seed if seed is not None else seed_history():
            self.record(result)
        logger.info("SessionStore initialized with %d results.", len(self._results))

    def record(self, result: ClassificationResult) -> None:
        self._results.pop(result.id, None)
        self._results[result.id] = result
        while len(self._results) > self._max_entries:
            del self._results[next(iter(self._results))]

    def get(self, result_id: str) -> Optional[ClassificationResult]:
        return self._results.get(result_id)

    def history(self) -> List[ClassificationResult]:
        """All known results, newest first."""
        return sorted(
            self._results.values(), key=lambda item: item.classified_at, reverse=True
        )

    def submit_feedback(
        self, result_id: str, feedback: SensitivityFeedback
    ) -> FeedbackRecord:
        """Record *feedback* for *result_id* and return the acknowledgement.

        Unknown ids are accepted: the result may predate this process.
        """
        if result_id not in self._results:
            logger.warning("Feedback received for unknown result '%s'.", result_id)
        record = FeedbackRecord(result_id=result_id, feedback=feedback)
        self._feedback.append(record)
        logger.info("Feedback submitted for result %s: %s", result_id, feedback.value)
        return record

    def feedback_for(self, result_id: str) -> List[FeedbackRecord]:
        return [record for record in self._feedback if record.result_id == result_id]

    def metrics(self) -> ClassificationMetrics:
        """Summarise the history for the dashboard."""
        history = self.history()
        sensitive = sum(1 for item in history if item.sensitivity is Sensitivity.SENSITIVE)
        by_level: Dict[str, int] = {level.value: 0 for level in EncryptionLevel}
        by_level.update(Counter(item.encryption_level.value for item in history))
        total_confidence = sum(item.confidence_score for item in history)

        return ClassificationMetrics(
            total_classified=len(history),
            sensitive_count=sensitive,
            non_sensitive_count=len(history) - sensitive,
            average_confidence=total_confidence / len(history) if history else 0.0,
            by_file_type=dict(Counter(item.file_type for item in history)),
            by_encryption_level=by_level,
        )


_DEFAULT_STORE: Optional[SessionStore] = None


def get_session_store() -> SessionStore:
    """Return the process-wide store, creating it on first use."""
    global _DEFAULT_STORE  # noqa: PLW0603 – process-wide default instance

    if _DEFAULT_STORE is None:
        _DEFAULT_STORE = SessionStore(max_entries=get_settings().session_history_limit)
    return _DEFAULT_STORE
