from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Tuple

Weights = Tuple[int, int, int]


class Trend(str, Enum):
    DOWN = "Down"
    STABLE = "Stable"
    UP = "Up"


class FeatureTriple(NamedTuple):
    """Features sampled from the environment for a single operation.

    f0: logical clock mod modulus
    f1: sequence counter mod modulus
    f2: instance balance mod modulus
    """

    f0: int
    f1: int
    f2: int


@dataclass(frozen=True, slots=True)
class ModelState:
    """Committed model state. Replaced as a whole on every update."""

    weights: Weights
    last_updated: int
    update_count: int = 0

    def __post_init__(self) -> None:
        if len(self.weights) != 3:
            raise ValueError(f"weights must have exactly 3 entries, got {len(self.weights)}")
        if self.update_count < 0:
            raise ValueError("update_count must be >= 0")
        if self.last_updated < 0:
            raise ValueError("last_updated must be >= 0")


@dataclass(frozen=True, slots=True)
class PredictionResult:
    """Trend classification for one query.

    trend      -> Down / Stable / Up
    confidence -> min(|scaled|, cap), in [0, 100] with default params
    score      -> raw dot product weights . features
    scaled     -> score / score_scale, truncated toward zero
    """

    trend: Trend
    confidence: int
    score: int
    scaled: int
    features: FeatureTriple
