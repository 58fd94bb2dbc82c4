"""
Core Custom Exceptions

Domain-specific exceptions raised by the sensitivity classification engine.
Each one marks a distinct failure boundary so callers can decide between
propagating the error and degrading to the heuristic fallback.

Defined Exceptions:
- `ModelTrainingError`: Raised when a training run fails (numerical blow-up,
  torch runtime failure). Propagates to whoever requested the run; the
  previously trained model stays in service.
- `ModelNotAvailableError`: Raised when inference is attempted before any
  model has been trained.
- `InferenceError`: Raised when a forward pass yields unusable output.
  The orchestrator catches it and switches to the fallback classifier.
"""

from __future__ import annotations

__all__: list[str] = [
    "ModelTrainingError",
    "ModelNotAvailableError",
    "InferenceError",
]


class ModelTrainingError(RuntimeError):
    """Raised when fitting or evaluating the network fails."""


class ModelNotAvailableError(RuntimeError):
    """Raised when no trained network is loaded."""


class InferenceError(RuntimeError):
    """Raised by the inference engine when a prediction cannot be produced.

    Callers at the orchestrator boundary are expected to catch this error and
    fall back to the rule-based classifier.
    """

    pass
