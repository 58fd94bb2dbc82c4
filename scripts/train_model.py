#!/usr/bin/env python
###############################################################################
# scripts/train_model.py
# -----------------------------------------------------------------------------
# Train the sensitivity network once and print its evaluation stats.
#
# Handy for checking how hyper-parameter changes affect the held-out metrics
# without starting the API. Nothing is written to disk; the trained network
# lives only for the duration of the command.
#
# Example
# -------
#     python scripts/train_model.py --samples 5000 --epochs 30 --seed 7
###############################################################################

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional

# Allow ``python scripts/train_model.py`` from the repository root.
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from src.classification.trainer import Trainer  # noqa: E402
from src.core import ModelTrainingError, Settings, configure_logging  # noqa: E402

__all__: List[str] = []  # script – no public API


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Train the sensitivity network on synthetic data and report stats."
    )
    parser.add_argument("--samples", type=int, help="Synthetic dataset size")
    parser.add_argument("--epochs", type=int, help="Training epochs")
    parser.add_argument("--batch-size", type=int, help="Mini-batch size")
    parser.add_argument("--learning-rate", type=float, help="Adam learning rate")
    parser.add_argument(
        "--sensitive-ratio", type=float, help="Share of sensitive examples (0-1)"
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument(
        "--debug", action="store_true", help="Log per-epoch loss and accuracy"
    )
    return parser.parse_args(argv)


def _settings_from(args: argparse.Namespace) -> Settings:
    """Environment-derived settings with any CLI overrides applied."""
    overrides = {
        "training_samples": args.samples,
        "epochs": args.epochs,
        "batch_size": args.batch_size,
        "learning_rate": args.learning_rate,
        "sensitive_ratio": args.sensitive_ratio,
    }
    return Settings(
        debug=args.debug,
        **{key: value for key, value in overrides.items() if value is not None},
    )


def main(argv: Optional[List[str]] = None) -> int:  # noqa: D401
    args = _parse_args(argv)
    settings = _settings_from(args)
    configure_logging(settings.debug)

    trainer = Trainer(settings, seed=args.seed)
    try:
        outcome = asyncio.run(trainer.train())
    except ModelTrainingError as e:
        print(f"Training failed: {e}", file=sys.stderr)
        return 1

    stats = outcome.stats.dict()
    stats["last_trained"] = stats["last_trained"].isoformat()
    print(json.dumps(stats, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
