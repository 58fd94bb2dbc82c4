from __future__ import annotations

from importlib import import_module as _import_module

_pipeline_module = _import_module(".pipeline", package=__name__)
classify = _pipeline_module.classify
get_classifier = _pipeline_module.get_classifier
get_model_stats = _pipeline_module.get_model_stats
SensitivityClassifier = _pipeline_module.SensitivityClassifier

_types_module = _import_module(".types", package=__name__)
ClassificationResult = _types_module.ClassificationResult
ModelStats = _types_module.ModelStats
UploadedFile = _types_module.UploadedFile

__all__: list[str] = [
    "classify",
    "get_classifier",
    "get_model_stats",
    "SensitivityClassifier",
    "ClassificationResult",
    "ModelStats",
    "UploadedFile",
]
