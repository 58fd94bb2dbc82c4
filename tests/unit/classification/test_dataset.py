from __future__ import annotations

import random

import pytest

from src.classification.dataset import SyntheticDatasetGenerator, generate_dataset
from src.classification.features import (
    EXTENSION_IDS,
    FILE_TYPE_IDS,
    LOCATION_IDS,
    PERMISSION_IDS,
    encode_fields,
)


def test_generate_returns_exact_sample_size() -> None:
    generator = SyntheticDatasetGenerator(rng=random.Random(1))

    assert len(generator.generate(0)) == 0
    assert len(generator.generate(1)) == 1
    assert len(generator.generate(257)) == 257


def test_negative_sample_size_is_rejected() -> None:
    with pytest.raises(ValueError):
        SyntheticDatasetGenerator().generate(-1)


@pytest.mark.parametrize("ratio", [-0.1, 1.5])
def test_ratio_out_of_range_is_rejected(ratio: float) -> None:
    with pytest.raises(ValueError):
        SyntheticDatasetGenerator(sensitive_ratio=ratio)


def test_same_seed_reproduces_dataset() -> None:
    first = generate_dataset(50, rng=random.Random(42))
    second = generate_dataset(50, rng=random.Random(42))

    assert first == second


@pytest.mark.parametrize("seed", range(5))
def test_label_distribution_tracks_ratio(seed: int) -> None:
    """Probabilistic: 100 draws at p=0.45 land in [30, 60] for these seeds."""
    examples = generate_dataset(100, sensitive_ratio=0.45, rng=random.Random(seed))

    sensitive = sum(example.label for example in examples)
    assert 30 <= sensitive <= 60


@pytest.mark.parametrize("ratio, expected", [(0.0, 0), (1.0, 1)])
def test_extreme_ratios_yield_single_class(ratio: float, expected: int) -> None:
    examples = generate_dataset(40, sensitive_ratio=ratio, rng=random.Random(3))

    assert {example.label for example in examples} == {expected}


def test_keyword_feature_matches_generated_name() -> None:
    examples = generate_dataset(200, rng=random.Random(7))

    for example in examples:
        recomputed = encode_fields(example.file_name, 0)
        assert example.features.has_sensitive_keyword == recomputed.has_sensitive_keyword
        assert example.features.extension_id == recomputed.extension_id
        assert example.features.file_type_id == recomputed.file_type_id


def test_sensitive_examples_skew_towards_keywords() -> None:
    """The labels mirror the keyword heuristic; the network learns that rule back."""
    examples = generate_dataset(400, rng=random.Random(11))
    sensitive = [e for e in examples if e.label == 1]
    benign = [e for e in examples if e.label == 0]

    def keyword_rate(rows):
        return sum(e.features.has_sensitive_keyword for e in rows) / len(rows)

    assert keyword_rate(sensitive) > keyword_rate(benign)


def test_generated_features_stay_inside_vocabularies() -> None:
    examples = generate_dataset(300, rng=random.Random(21))

    for example in examples:
        features = example.features
        assert features.extension_id in set(map(float, EXTENSION_IDS.values()))
        assert features.file_type_id in set(map(float, FILE_TYPE_IDS.values()))
        assert features.location_id in set(map(float, LOCATION_IDS.values()))
        assert features.permission_id in set(map(float, PERMISSION_IDS.values()))
        assert features.has_sensitive_keyword in (0.0, 1.0)
        assert 0.0 < features.normalized_log_size < 1.0
