from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

import src.classification.pipeline as pipeline_module
from src.classification.model import SensitivityModel
from src.classification.pipeline import SensitivityClassifier
from src.classification.trainer import Trainer
from src.classification.types import (
    ClassificationSource,
    EncryptionLevel,
    ModelStats,
    Sensitivity,
    UploadedFile,
)
from src.core.exceptions import InferenceError, ModelTrainingError
from tests.conftest import MockSettings, StubTrainer


@pytest.fixture
def classifier(
    mock_settings: MockSettings, stub_trainer: StubTrainer
) -> SensitivityClassifier:
    return SensitivityClassifier(SensitivityModel(stub_trainer), settings=mock_settings)


@pytest.mark.asyncio
async def test_classify_uses_trained_model(classifier: SensitivityClassifier) -> None:
    classifier.model.predict_proba = AsyncMock(return_value=(0.08, 0.92))
    upload = UploadedFile(
        name="payroll.xlsx", size=4096, relative_path="finance/q3/payroll.xlsx"
    )

    result = await classifier.classify(upload)

    assert result.source is ClassificationSource.MODEL
    assert result.confidence_score == 92
    assert result.sensitivity is Sensitivity.SENSITIVE
    assert result.encryption_level is EncryptionLevel.STRONGEST
    assert result.file_type == "Excel Spreadsheet"
    assert result.extension == "xlsx"
    assert result.file_path == "finance/q3/payroll.xlsx"
    assert result.id


@pytest.mark.asyncio
async def test_score_at_threshold_is_not_sensitive(
    classifier: SensitivityClassifier,
) -> None:
    classifier.model.predict_proba = AsyncMock(return_value=(0.55, 0.45))

    result = await classifier.classify(UploadedFile(name="memo.txt", size=10))

    assert result.confidence_score == 45
    assert result.sensitivity is Sensitivity.NON_SENSITIVE
    assert result.encryption_level is EncryptionLevel.BASIC


@pytest.mark.asyncio
async def test_training_failure_falls_back(mock_settings: MockSettings) -> None:
    trainer = StubTrainer(error=ModelTrainingError("diverged"))
    classifier = SensitivityClassifier(SensitivityModel(trainer), settings=mock_settings)

    result = await classifier.classify(UploadedFile(name="bank_statement_march.pdf"))

    assert result.source is ClassificationSource.FALLBACK
    assert result.confidence_score == 99
    assert result.sensitivity is Sensitivity.SENSITIVE


@pytest.mark.asyncio
async def test_inference_error_falls_back(classifier: SensitivityClassifier) -> None:
    with patch.object(
        classifier.engine, "predict", AsyncMock(side_effect=InferenceError("nan"))
    ):
        result = await classifier.classify(UploadedFile(name="doc_xyz123.txt"))

    assert result.source is ClassificationSource.FALLBACK
    assert result.confidence_score == 72


@pytest.mark.asyncio
async def test_unexpected_error_falls_back(classifier: SensitivityClassifier) -> None:
    classifier.model.predict_proba = AsyncMock(side_effect=MemoryError())

    result = await classifier.classify(UploadedFile(name="doc_xyz123.txt"))

    assert result.source is ClassificationSource.FALLBACK


@pytest.mark.asyncio
async def test_concurrent_classifications_train_once(
    classifier: SensitivityClassifier, stub_trainer: StubTrainer
) -> None:
    uploads = [UploadedFile(name=f"file_{i}.txt", size=100) for i in range(8)]

    results = await asyncio.gather(*(classifier.classify(u) for u in uploads))

    assert stub_trainer.calls == 1
    assert all(r.source is ClassificationSource.MODEL for r in results)
    assert len({r.id for r in results}) == len(results)


@pytest.mark.asyncio
async def test_model_stats_zero_until_trained(
    classifier: SensitivityClassifier,
) -> None:
    assert classifier.get_model_stats() == ModelStats()

    await classifier.classify(UploadedFile(name="a.txt", size=1))

    assert classifier.get_model_stats() == StubTrainer.STATS


@pytest.mark.asyncio
async def test_retrain_propagates_failure(mock_settings: MockSettings) -> None:
    trainer = StubTrainer(error=ModelTrainingError("no memory"))
    classifier = SensitivityClassifier(SensitivityModel(trainer), settings=mock_settings)

    with pytest.raises(ModelTrainingError):
        await classifier.retrain()


@pytest.mark.asyncio
async def test_end_to_end_with_real_training(mock_settings: MockSettings) -> None:
    """Small real run: stats are consistent and classifications come from the model."""
    mock_settings.training_samples = 150
    mock_settings.epochs = 2
    classifier = SensitivityClassifier(
        SensitivityModel(Trainer(mock_settings, seed=1)), settings=mock_settings
    )

    result = await classifier.classify(UploadedFile(name="passport_scan.pdf", size=900_000))
    stats = classifier.get_model_stats()

    assert result.source is ClassificationSource.MODEL
    assert 0 <= result.confidence_score <= 100
    assert stats.training_samples + stats.testing_samples == 150
    for value in (stats.accuracy, stats.precision, stats.recall, stats.f1_score):
        assert 0.0 <= value <= 1.0


@pytest.mark.asyncio
async def test_module_level_helpers_use_default_classifier(
    monkeypatch: pytest.MonkeyPatch, classifier: SensitivityClassifier
) -> None:
    monkeypatch.setattr(pipeline_module, "_DEFAULT_CLASSIFIER", classifier)

    assert pipeline_module.get_classifier() is classifier
    assert pipeline_module.get_model_stats() == ModelStats()
    result = await pipeline_module.classify(UploadedFile(name="a.csv", size=5))
    assert result.file_type == "CSV File"
