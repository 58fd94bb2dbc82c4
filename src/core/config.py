from __future__ import annotations

import json
import os
from typing import Any, List, Optional, Set

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Upload acceptance boundary: the only extensions the service will classify.
DEFAULT_ALLOWED_EXTENSIONS: str = "pdf,doc,docx,xls,xlsx,txt,csv,zip,rar"


def _parse_csv_str(v: str) -> List[str]:
    """Parse a comma-separated string into a list of values, stripping whitespace."""
    return [x.strip() for x in v.split(",") if x.strip()]


def _normalise_extensions(values: Any) -> Set[str]:
    """Lower-case and strip leading dots from an iterable of extensions."""
    return {
        str(ext).strip().lower().lstrip(".") for ext in values if str(ext).strip()
    }


# ---------------------------------------------------------------------------
# Environment pre-processing
# ---------------------------------------------------------------------------

# ``ALLOWED_EXTENSIONS`` may be written comma-separated in *.env* files; turn
# it into JSON so the settings source can coerce it into a set.
_env_allowed_ext = os.environ.get("ALLOWED_EXTENSIONS")
if _env_allowed_ext and not _env_allowed_ext.strip().startswith("["):
    os.environ["ALLOWED_EXTENSIONS"] = json.dumps(_parse_csv_str(_env_allowed_ext))


class Settings(BaseSettings):
    """
    Application configuration settings, loaded from environment variables.
    """

    debug: bool = False
    commit_sha: Optional[str] = None
    prometheus_enabled: bool = True

    # Upload boundary
    allowed_extensions_raw: Optional[str] = DEFAULT_ALLOWED_EXTENSIONS
    allowed_extensions: Set[str] = set()
    max_file_size_mb: int = 10
    max_batch_size: int = 50

    # Decision thresholds
    sensitivity_threshold: int = Field(default=45, ge=0, le=100)
    sensitive_ratio: float = Field(default=0.45, ge=0.0, le=1.0)

    # Training hyper-parameters
    training_samples: int = Field(default=2000, ge=10)
    test_split: float = Field(default=0.2, gt=0.0, lt=1.0)
    validation_split: float = Field(default=0.2, ge=0.0, lt=1.0)
    epochs: int = Field(default=50, ge=1)
    batch_size: int = Field(default=32, ge=1)
    learning_rate: float = Field(default=0.001, gt=0.0)
    weight_decay: float = Field(default=0.001, ge=0.0)
    dropout_rate: float = Field(default=0.2, ge=0.0, lt=1.0)

    # Oldest session results and feedback are dropped past this many entries.
    session_history_limit: int = Field(default=10_000, ge=1)

    # Kick off the first training run in the background when the API starts.
    train_on_startup: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        enable_decoding=False,
    )

    @model_validator(mode="after")
    def _derive_allowed_extensions(self) -> "Settings":
        """Fall back to ``allowed_extensions_raw`` unless ALLOWED_EXTENSIONS was set."""
        if os.getenv("ALLOWED_EXTENSIONS") is None and not self.allowed_extensions:
            raw = self.allowed_extensions_raw or ""
            self.allowed_extensions = _normalise_extensions(raw.split(","))
        return self

    @field_validator("allowed_extensions", mode="before")
    @classmethod
    def _coerce_allowed_extensions(cls, v: Any) -> Set[str]:
        """Convert comma or JSON strings into a set[str]."""
        if v is None or v == "":
            return set()

        if isinstance(v, str):
            stripped = v.strip()
            if stripped.startswith("["):
                try:
                    return _normalise_extensions(json.loads(stripped))
                except json.JSONDecodeError:
                    pass  # malformed JSON is treated as a plain CSV string
            return _normalise_extensions(stripped.split(","))

        if isinstance(v, (list, set, tuple)):
            return _normalise_extensions(v)

        raise ValueError("ALLOWED_EXTENSIONS must be a string or a sequence")

    def is_extension_allowed(self, extension: str) -> bool:
        """
        Check if file extension is allowed.

        Args:
            extension: The file extension to check (with or without leading dot)

        Returns:
            True if extension is allowed, False otherwise
        """
        if not extension:
            return False
        return extension.lower().lstrip(".") in self.allowed_extensions


_CACHED_SETTINGS: Optional[Settings] = None


def get_settings() -> Settings:  # noqa: D401 – accessor helper
    """Return a cached Settings instance unless running under pytest.

    Under pytest every call builds a fresh instance so tests can tweak the
    environment with ``monkeypatch`` and observe the effect immediately.
    """

    global _CACHED_SETTINGS  # noqa: PLW0603 – module-level singleton

    if "PYTEST_CURRENT_TEST" in os.environ:
        return Settings()

    if _CACHED_SETTINGS is None:
        _CACHED_SETTINGS = Settings()

    return _CACHED_SETTINGS


def _clear_settings_cache() -> None:
    """Drop the cached Settings instance."""

    global _CACHED_SETTINGS
    _CACHED_SETTINGS = None


get_settings.cache_clear = _clear_settings_cache  # type: ignore[attr-defined]
