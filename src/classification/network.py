"""Feed-forward network scoring file sensitivity.

Architecture (6 real-valued inputs, 2 output classes)::

    Linear(6, 20)  -> ReLU -> Dropout     (L2 weight decay)
    Linear(20, 12) -> ReLU -> Dropout     (L2 weight decay)
    Linear(12, 6)  -> ReLU
    Linear(6, 2)   -> softmax over {non-sensitive, sensitive}

``forward`` returns raw logits; :func:`predict_proba` applies the softmax.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

import torch
from torch import nn

from src.classification.types import FeatureVector

__all__: list[str] = [
    "N_FEATURES",
    "N_CLASSES",
    "HIDDEN_UNITS",
    "SensitivityNetwork",
    "build_optimizer",
    "to_tensor",
    "predict_proba",
]

N_FEATURES: int = len(FeatureVector._fields)
N_CLASSES: int = 2
HIDDEN_UNITS: Tuple[int, int, int] = (20, 12, 6)


class SensitivityNetwork(nn.Module):
    def __init__(self, dropout_rate: float = 0.2) -> None:
        super().__init__()
        first, second, third = HIDDEN_UNITS
        self.dense1 = nn.Linear(N_FEATURES, first)
        self.dense2 = nn.Linear(first, second)
        self.dense3 = nn.Linear(second, third)
        self.output = nn.Linear(third, N_CLASSES)
        self.dropout = nn.Dropout(dropout_rate)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        x = self.dropout(torch.relu(self.dense1(x)))
        x = self.dropout(torch.relu(self.dense2(x)))
        x = torch.relu(self.dense3(x))
        return self.output(x)


def build_optimizer(
    network: SensitivityNetwork, learning_rate: float, weight_decay: float
) -> torch.optim.Optimizer:
    """Adam with weight decay applied to the first two dense layers only."""
    regularized: List[nn.Parameter] = [
        *network.dense1.parameters(),
        *network.dense2.parameters(),
    ]
    regularized_ids = {id(param) for param in regularized}
    rest = [p for p in network.parameters() if id(p) not in regularized_ids]
    return torch.optim.Adam(
        [
            {"params": regularized, "weight_decay": weight_decay},
            {"params": rest, "weight_decay": 0.0},
        ],
        lr=learning_rate,
    )


def to_tensor(vectors: Sequence[FeatureVector]) -> torch.Tensor:
    return torch.tensor([list(vector) for vector in vectors], dtype=torch.float32)


def predict_proba(network: SensitivityNetwork, vector: FeatureVector) -> Tuple[float, float]:
    """Return *(p_non_sensitive, p_sensitive)* for a single feature vector."""
    network.eval()
    with torch.no_grad():
        logits = network(to_tensor([vector]))
        probs = torch.softmax(logits, dim=-1)[0]
    return float(probs[0].item()), float(probs[1].item())
