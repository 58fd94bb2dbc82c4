from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from src.core.config import Settings, _parse_csv_str, get_settings

_DEFAULT_EXTENSIONS = {"pdf", "doc", "docx", "xls", "xlsx", "txt", "csv", "zip", "rar"}


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "DEBUG",
        "COMMIT_SHA",
        "PROMETHEUS_ENABLED",
        "SENSITIVITY_THRESHOLD",
        "TRAINING_SAMPLES",
        "EPOCHS",
        "TRAIN_ON_STARTUP",
        "MAX_FILE_SIZE_MB",
    ):
        monkeypatch.delenv(name, raising=False)


def test_settings_default_values() -> None:
    """Settings have correct default values when no env vars are set."""
    get_settings.cache_clear()
    settings = get_settings()

    assert settings.debug is False
    assert settings.commit_sha is None
    assert settings.prometheus_enabled is True
    assert settings.allowed_extensions == _DEFAULT_EXTENSIONS
    assert settings.max_file_size_mb == 10
    assert settings.max_batch_size == 50
    assert settings.sensitivity_threshold == 45
    assert settings.sensitive_ratio == 0.45
    assert settings.training_samples == 2000
    assert settings.test_split == 0.2
    assert settings.validation_split == 0.2
    assert settings.epochs == 50
    assert settings.batch_size == 32
    assert settings.learning_rate == 0.001
    assert settings.weight_decay == 0.001
    assert settings.dropout_rate == 0.2
    assert settings.session_history_limit == 10_000
    assert settings.train_on_startup is True


def test_settings_parsing_from_env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEBUG", "true")
    monkeypatch.setenv("ALLOWED_EXTENSIONS_RAW", "py, .Js, TXT")
    monkeypatch.setenv("SENSITIVITY_THRESHOLD", "60")
    monkeypatch.setenv("TRAINING_SAMPLES", "500")
    monkeypatch.setenv("EPOCHS", "5")
    monkeypatch.setenv("COMMIT_SHA", "testsha123env")
    monkeypatch.setenv("TRAIN_ON_STARTUP", "false")

    settings = get_settings()

    assert settings.debug is True
    assert settings.allowed_extensions == {"py", "js", "txt"}
    assert settings.sensitivity_threshold == 60
    assert settings.training_samples == 500
    assert settings.epochs == 5
    assert settings.commit_sha == "testsha123env"
    assert settings.train_on_startup is False


@pytest.mark.parametrize(
    "field, value",
    [
        ("sensitivity_threshold", 101),
        ("sensitivity_threshold", -1),
        ("sensitive_ratio", 1.5),
        ("training_samples", 5),
        ("test_split", 0.0),
        ("test_split", 1.0),
        ("validation_split", 1.0),
        ("epochs", 0),
        ("batch_size", 0),
        ("learning_rate", 0.0),
        ("dropout_rate", 1.0),
        ("session_history_limit", 0),
    ],
)
def test_out_of_range_values_are_rejected(field: str, value: float) -> None:
    with pytest.raises(ValidationError):
        Settings(**{field: value})


def test_settings_is_extension_allowed() -> None:
    settings = Settings()

    assert settings.is_extension_allowed("pdf") is True
    assert settings.is_extension_allowed(".PDF") is True
    assert settings.is_extension_allowed("exe") is False
    assert settings.is_extension_allowed("") is False


def test_explicit_extensions_env_accepts_json_and_csv(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("ALLOWED_EXTENSIONS", json.dumps(["PDF", ".txt"]))
    assert Settings().allowed_extensions == {"pdf", "txt"}

    monkeypatch.setenv("ALLOWED_EXTENSIONS", "csv, zip")
    assert Settings().allowed_extensions == {"csv", "zip"}


def test_explicit_empty_extensions_env_is_honoured(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("ALLOWED_EXTENSIONS", "")

    assert Settings().allowed_extensions == set()


def test_coerce_extensions_from_sequences() -> None:
    assert Settings(allowed_extensions=["DOC", ".xls"]).allowed_extensions == {
        "doc",
        "xls",
    }
    assert Settings(allowed_extensions=("rar",)).allowed_extensions == {"rar"}


def test_parse_csv_str_helper() -> None:
    assert _parse_csv_str(" a, b ,,c ") == ["a", "b", "c"]
    assert _parse_csv_str("") == []


def test_get_settings_pytest_env_returns_fresh_instances() -> None:
    assert get_settings() is not get_settings()


def test_get_settings_caching_normal_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PYTEST_CURRENT_TEST", raising=False)
    get_settings.cache_clear()

    try:
        assert get_settings() is get_settings()
    finally:
        get_settings.cache_clear()
