from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from src.api.app import _warm_up_model, create_app
from src.classification.model import SensitivityModel
from src.classification.pipeline import SensitivityClassifier
from src.core.exceptions import ModelTrainingError
from tests.conftest import MockSettings, StubTrainer

pytestmark = [pytest.mark.integration]


def _classifier(trainer: StubTrainer) -> SensitivityClassifier:
    return SensitivityClassifier(SensitivityModel(trainer), settings=MockSettings())


def test_startup_trains_in_background_when_enabled(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("TRAIN_ON_STARTUP", "true")
    trainer = StubTrainer()
    classifier = _classifier(trainer)

    with patch("src.api.app.get_classifier", return_value=classifier):
        app = create_app()
        with TestClient(app) as client:
            assert client.get("/v1/version").status_code == 200
            task = app.state.training_task
            assert task is not None

    assert trainer.calls == 1
    assert classifier.model.is_ready is True


def test_startup_training_failure_is_not_fatal(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("TRAIN_ON_STARTUP", "true")
    trainer = StubTrainer(error=ModelTrainingError("diverged"))
    classifier = _classifier(trainer)

    with patch("src.api.app.get_classifier", return_value=classifier):
        app = create_app()
        with TestClient(app) as client:
            assert client.get("/v1/version").status_code == 200

    assert classifier.model.is_ready is False


def test_startup_skips_training_when_disabled(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("TRAIN_ON_STARTUP", "false")
    trainer = StubTrainer()

    with patch("src.api.app.get_classifier", return_value=_classifier(trainer)):
        app = create_app()
        with TestClient(app):
            pass

    assert app.state.training_task is None
    assert trainer.calls == 0


@pytest.mark.asyncio
async def test_warm_up_logs_unexpected_errors_instead_of_raising() -> None:
    classifier = _classifier(StubTrainer())
    failing = AsyncMock(side_effect=RuntimeError("cuda unavailable"))
    mock_logger = MagicMock()

    with patch.object(classifier.model, "ensure_trained", failing), patch(
        "src.api.app.get_classifier", return_value=classifier
    ), patch("src.api.app.logger", mock_logger):
        task = asyncio.ensure_future(_warm_up_model())
        await task

    assert task.exception() is None
    mock_logger.error.assert_called_once_with(
        "startup_training_failed", error="cuda unavailable", exc_info=True
    )
