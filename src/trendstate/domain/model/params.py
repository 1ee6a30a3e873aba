from __future__ import annotations

from dataclasses import dataclass

from trendstate.domain.model.arithmetic import DEFAULT_BITS, int_bounds
from trendstate.domain.model.entities import Weights


@dataclass(frozen=True, slots=True)
class ModelParams:
    """Fixed arithmetic of the model.

    This object is the only configuration the domain consumes. It is
    intentionally decoupled from YAML and Pydantic.
    """

    default_weights: Weights = (1, 0, 0)
    learning_divisor: int = 10
    feature_modulus: int = 1000
    score_scale: int = 1000
    up_threshold: int = 50
    down_threshold: int = -50
    confidence_cap: int = 100
    int_bits: int = DEFAULT_BITS

    def __post_init__(self) -> None:
        if len(self.default_weights) != 3:
            raise ValueError("default_weights must have exactly 3 entries")
        if self.learning_divisor <= 0:
            raise ValueError("learning_divisor must be > 0")
        if self.feature_modulus <= 0:
            raise ValueError("feature_modulus must be > 0")
        if self.score_scale <= 0:
            raise ValueError("score_scale must be > 0")
        if self.down_threshold > self.up_threshold:
            raise ValueError("down_threshold must be <= up_threshold")
        if self.confidence_cap < 0:
            raise ValueError("confidence_cap must be >= 0")
        if self.int_bits < 8:
            raise ValueError("int_bits must be >= 8")
        lo, hi = int_bounds(self.int_bits)
        for w in self.default_weights:
            if w < lo or w > hi:
                raise ValueError(f"default weight {w} outside the {self.int_bits}-bit signed range")
