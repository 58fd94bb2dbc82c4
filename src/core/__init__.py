from __future__ import annotations

# Ambient plumbing shared by the API, the classifier and the scripts.
from .config import Settings, get_settings  # noqa: F401
from .exceptions import (  # noqa: F401
    InferenceError,
    ModelNotAvailableError,
    ModelTrainingError,
)
from .logging import configure_logging  # noqa: F401

__all__: list[str] = [
    "Settings",
    "get_settings",
    "configure_logging",
    "ModelTrainingError",
    "ModelNotAvailableError",
    "InferenceError",
]
