# ruff: noqa: E402
from __future__ import annotations

import os
import sys
from pathlib import Path

# Ensure repository root is first on sys.path
_repo_root: Path = Path(__file__).resolve().parent.parent  # tests/ -> repo root
if str(_repo_root) not in sys.path:
    sys.path.insert(0, str(_repo_root))

# Importing src.api.app must not start a background training run.
os.environ.setdefault("TRAIN_ON_STARTUP", "false")
os.environ.setdefault("PROMETHEUS_ENABLED", "false")

from datetime import datetime, timezone
from typing import Optional, Set

import pytest

from src.classification.network import SensitivityNetwork
from src.classification.trainer import TrainingOutcome
from src.classification.types import ModelStats


class MockSettings:  # Does NOT inherit from real Settings
    """Mock Settings class for testing."""

    debug: bool = False
    commit_sha: Optional[str] = None
    prometheus_enabled: bool = False

    # File upload settings
    allowed_extensions_raw: str = "pdf,doc,docx,xls,xlsx,txt,csv,zip,rar"
    allowed_extensions: Set[str] = {
        "pdf",
        "doc",
        "docx",
        "xls",
        "xlsx",
        "txt",
        "csv",
        "zip",
        "rar",
    }
    max_file_size_mb: int = 10
    max_batch_size: int = 50

    # Decision thresholds
    sensitivity_threshold: int = 45
    sensitive_ratio: float = 0.45

    # Training hyper-parameters, kept small so real runs finish quickly
    training_samples: int = 200
    test_split: float = 0.2
    validation_split: float = 0.2
    epochs: int = 3
    batch_size: int = 32
    learning_rate: float = 0.001
    weight_decay: float = 0.001
    dropout_rate: float = 0.2
    session_history_limit: int = 10_000
    train_on_startup: bool = False

    def __init__(self, **kwargs):
        """Initialize with optional overrides for any attribute."""
        # Set default values from class attributes first
        for key, value in self.__class__.__dict__.items():
            if not key.startswith("__") and not callable(value):
                setattr(self, key, value)
        self.allowed_extensions = set(self.allowed_extensions)

        for key, value in kwargs.items():
            setattr(self, key, value)

        # If allowed_extensions_raw is provided in kwargs, re-calculate allowed_extensions
        if "allowed_extensions_raw" in kwargs:
            raw_value = kwargs["allowed_extensions_raw"] or ""
            self.allowed_extensions = {
                ext.strip().lower().lstrip(".")
                for ext in raw_value.split(",")
                if ext.strip()
            }

    def is_extension_allowed(self, extension: str) -> bool:
        """Check if file extension is allowed."""
        if not extension:
            return False
        clean_ext = extension.lower().lstrip(".")
        return clean_ext in self.allowed_extensions


class StubTrainer:
    """Trainer double that returns an untrained network with fixed stats.

    ``calls`` counts how many training runs were started; ``error`` makes
    the next runs raise instead.
    """

    STATS = ModelStats(
        accuracy=0.9,
        precision=0.88,
        recall=0.86,
        f1_score=0.87,
        training_samples=160,
        testing_samples=40,
        last_trained=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )

    def __init__(self, error: Optional[Exception] = None) -> None:
        self.calls = 0
        self.error = error

    async def train(self) -> TrainingOutcome:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return TrainingOutcome(network=SensitivityNetwork(), stats=self.STATS)


@pytest.fixture
def mock_settings():
    """Provide a plain MockSettings instance. Dependency injection is handled by app.dependency_overrides in client fixtures."""
    settings = MockSettings()
    yield settings


@pytest.fixture
def stub_trainer() -> StubTrainer:
    return StubTrainer()


@pytest.fixture(autouse=True)
def _disable_dotenv(monkeypatch):
    """Prevent the application Settings class from reading the developer *.env* file.

    Unit-tests must operate against a clean environment. Loading the real
    *.env* would inject values such as ``ALLOWED_EXTENSIONS`` that invalidate
    default-value assertions (see *tests/unit/core/test_config.py*).
    """

    from src.core.config import Settings  # Imported here to avoid circularity

    monkeypatch.setitem(Settings.model_config, "env_file", None)
    monkeypatch.delenv("ALLOWED_EXTENSIONS", raising=False)
    monkeypatch.delenv("ALLOWED_EXTENSIONS_RAW", raising=False)
