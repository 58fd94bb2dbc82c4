#!/usr/bin/env python
###############################################################################
# scripts/generate_synthetic.py
# -----------------------------------------------------------------------------
# Export the synthetic training set to CSV.
#
# Uses the same generator the trainer calls at runtime, so the file shows
# exactly what the network learns from: one row per example with the file
# name, the six encoded features and the label.
#
# Example
# -------
#     python scripts/generate_synthetic.py --count 2000 --seed 42 \
#         --out datasets/synthetic.csv
###############################################################################

from __future__ import annotations

# stdlib
import argparse
import random
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

# third-party
import pandas as pd

# Allow ``python scripts/generate_synthetic.py`` from the repository root.
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from src.classification.dataset import (  # noqa: E402
    DEFAULT_SENSITIVE_RATIO,
    generate_dataset,
)
from src.classification.types import FeatureVector, TrainingExample  # noqa: E402

__all__: List[str] = []  # script – no public API

FRAME_COLUMNS: List[str] = ["file_name", *FeatureVector._fields, "label"]


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Write the synthetic sensitivity dataset to a CSV file."
    )
    parser.add_argument("--count", type=int, default=2000, help="Number of rows")
    parser.add_argument(
        "--ratio",
        type=float,
        default=DEFAULT_SENSITIVE_RATIO,
        help="Share of sensitive examples (0-1)",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument(
        "--out",
        type=Path,
        default=Path("datasets/synthetic.csv"),
        help="Destination CSV path",
    )
    return parser.parse_args(argv)


def to_frame(examples: List[TrainingExample]) -> pd.DataFrame:
    """One row per example: file name, encoded features, label."""
    rows: List[Dict[str, Any]] = [
        {"file_name": example.file_name, **example.features._asdict(), "label": example.label}
        for example in examples
    ]
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)


def main(argv: Optional[List[str]] = None) -> int:  # noqa: D401
    args = _parse_args(argv)
    rng = random.Random(args.seed) if args.seed is not None else None
    examples = generate_dataset(args.count, sensitive_ratio=args.ratio, rng=rng)

    frame = to_frame(examples)
    args.out.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(args.out, index=False)

    summary = (
        frame["label"]
        .value_counts()
        .reindex([0, 1], fill_value=0)
        .rename({0: "non_sensitive", 1: "sensitive"})
    )
    print(f"Wrote {len(frame)} rows to {args.out}")
    print(summary.to_string())
    return 0


if __name__ == "__main__":
    sys.exit(main())
