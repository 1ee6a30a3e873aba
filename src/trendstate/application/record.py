from __future__ import annotations

from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from trendstate.domain.model.arithmetic import DEFAULT_BITS, int_bounds, uint_max


class InstanceRecord(BaseModel):
    """Durable footprint of an instance: {controller, weights[3], last_updated, update_count}."""

    model_config = ConfigDict(frozen=True)

    controller: str = Field(min_length=1)
    weights: Tuple[int, int, int]
    last_updated: int = Field(ge=0)
    update_count: int = Field(ge=0)
    int_bits: int = DEFAULT_BITS

    @model_validator(mode="after")
    def _check_ranges(self) -> "InstanceRecord":
        lo, hi = int_bounds(self.int_bits)
        for w in self.weights:
            if w < lo or w > hi:
                raise ValueError(f"weight {w} outside the {self.int_bits}-bit signed range")
        if self.update_count > uint_max(self.int_bits):
            raise ValueError(f"update_count outside the {self.int_bits}-bit unsigned range")
        return self
