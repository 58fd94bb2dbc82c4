"""src/classification/dataset.py
###############################################################################
Synthetic training data
###############################################################################
No labelled corpus of real documents exists for this service, so the network
is trained on examples generated at runtime.

Each example first draws its *label* (Bernoulli with ``sensitive_ratio``) and
only then samples file type, extension, permission, size and name
*conditioned on that label*. Sensitive examples lean toward spreadsheets,
PDFs and Word documents, read-only permissions, larger sizes and names that
carry a sensitivity keyword; non-sensitive ones lean toward text, image and
archive files with read/write permissions and smaller sizes. The keyword
feature is re-derived from the generated name through the encoder, so a
random token that happens to contain a keyword is counted as such.

Known limitation
================
The labelling rules above mirror the heuristics of the fallback classifier.
The network therefore learns what the heuristics already encode rather than
anything observed in real labelled data. This is a property of the demo.

Reproducibility
===============
Pass a seeded :class:`random.Random` to get an identical dataset on every
call; by default a fresh, unseeded source is used.
"""

from __future__ import annotations

import math
import random
from typing import Dict, List, Optional, Sequence, Tuple

import structlog
from faker import Faker  # type: ignore

from src.classification.features import LOCATION_IDS, SENSITIVE_KEYWORDS, encode_fields
from src.classification.types import TrainingExample

__all__: list[str] = [
    "DEFAULT_SENSITIVE_RATIO",
    "SyntheticDatasetGenerator",
    "generate_dataset",
]

logger = structlog.get_logger(__name__)

DEFAULT_SENSITIVE_RATIO: float = 0.45

_EXTENSIONS_BY_FILE_TYPE: Dict[str, Tuple[str, ...]] = {
    "PDF Document": ("pdf",),
    "Word Document": ("doc", "docx"),
    "Excel Spreadsheet": ("xls", "xlsx"),
    "Text File": ("txt",),
    "CSV File": ("csv",),
    "Image": ("jpg",),
    "Archive": ("zip", "rar"),
}

# label -> {file type: weight}
_FILE_TYPE_WEIGHTS: Dict[int, Dict[str, float]] = {
    1: {
        "Excel Spreadsheet": 0.35,
        "PDF Document": 0.30,
        "Word Document": 0.20,
        "CSV File": 0.05,
        "Text File": 0.04,
        "Image": 0.03,
        "Archive": 0.03,
    },
    0: {
        "Text File": 0.30,
        "Image": 0.25,
        "Archive": 0.20,
        "CSV File": 0.10,
        "Word Document": 0.07,
        "PDF Document": 0.05,
        "Excel Spreadsheet": 0.03,
    },
}

_PERMISSION_WEIGHTS: Dict[int, Dict[str, float]] = {
    1: {"Read Only": 0.60, "Full Control": 0.20, "Read/Write": 0.20},
    0: {"Read/Write": 0.75, "Full Control": 0.15, "Read Only": 0.10},
}

# label -> (min bytes, max bytes), sampled log-uniformly
_SIZE_RANGES: Dict[int, Tuple[int, int]] = {
    1: (100_000, 10_000_000),
    0: (1_000, 1_000_000),
}

# label -> probability that the generated name embeds a sensitivity keyword
_KEYWORD_PROBABILITY: Dict[int, float] = {1: 0.8, 0: 0.1}

_GENERIC_PREFIXES: Tuple[str, ...] = (
    "file",
    "notes",
    "draft",
    "meeting",
    "photo",
    "backup",
    "archive",
    "readme",
    "summary",
    "agenda",
)

_TOKEN_LETTERS = "abcdefghijklmnopqrstuvwxyz0123456789"


class SyntheticDatasetGenerator:
    """Produce labelled :class:`TrainingExample` records.

    Parameters
    ----------
    sensitive_ratio:
        Target probability of drawing a sensitive example, in ``[0, 1]``.
    rng:
        Source of randomness. Shared with the internal Faker instance so a
        single seed controls the whole dataset.
    """

    def __init__(
        self,
        sensitive_ratio: float = DEFAULT_SENSITIVE_RATIO,
        rng: Optional[random.Random] = None,
    ) -> None:
        if not 0.0 <= sensitive_ratio <= 1.0:
            raise ValueError("sensitive_ratio must lie in [0, 1]")
        self.sensitive_ratio = sensitive_ratio
        self._rng = rng or random.Random()
        self._faker = Faker()
        self._faker.random = self._rng

    def generate(self, sample_size: int) -> List[TrainingExample]:
        """Return exactly *sample_size* synthetic examples."""
        if sample_size < 0:
            raise ValueError("sample_size must be >= 0")

        examples = [self._example() for _ in range(sample_size)]
        logger.debug(
            "synthetic_dataset_generated",
            sample_size=sample_size,
            sensitive=sum(example.label for example in examples),
            sensitive_ratio=self.sensitive_ratio,
        )
        return examples

    # ------------------------------------------------------------------
    # Per-example sampling
    # ------------------------------------------------------------------

    def _example(self) -> TrainingExample:
        label = 1 if self._rng.random() < self.sensitive_ratio else 0

        file_type = self._weighted(_FILE_TYPE_WEIGHTS[label])
        extension = self._rng.choice(_EXTENSIONS_BY_FILE_TYPE[file_type])
        permission = self._weighted(_PERMISSION_WEIGHTS[label])
        location = self._rng.choice(list(LOCATION_IDS))
        size = self._size(label)
        file_name = f"{self._stem(label)}.{extension}"

        features = encode_fields(
            file_name, size, location=location, permissions=permission
        )
        return TrainingExample(features=features, label=label, file_name=file_name)

    def _weighted(self, weights: Dict[str, float]) -> str:
        population: Sequence[str] = list(weights)
        return self._rng.choices(population, weights=list(weights.values()))[0]

    def _size(self, label: int) -> int:
        low, high = _SIZE_RANGES[label]
        return int(math.exp(self._rng.uniform(math.log(low), math.log(high))))

    def _stem(self, label: int) -> str:
        token = self._faker.lexify("???????", letters=_TOKEN_LETTERS)
        if self._rng.random() < _KEYWORD_PROBABILITY[label]:
            return f"{self._rng.choice(SENSITIVE_KEYWORDS)}_{token}"
        return f"{self._rng.choice(_GENERIC_PREFIXES)}_{token}"


def generate_dataset(
    sample_size: int,
    *,
    sensitive_ratio: float = DEFAULT_SENSITIVE_RATIO,
    rng: Optional[random.Random] = None,
) -> List[TrainingExample]:
    """Convenience wrapper around :class:`SyntheticDatasetGenerator`."""
    generator = SyntheticDatasetGenerator(sensitive_ratio=sensitive_ratio, rng=rng)
    return generator.generate(sample_size)
