from __future__ import annotations

from trendstate.domain.model.arithmetic import checked_add, checked_increment, checked_sub, trunc_div
from trendstate.domain.model.entities import FeatureTriple, ModelState, Weights
from trendstate.domain.model.params import ModelParams


def ema_step(weight: int, feature: int, divisor: int, bits: int) -> int:
    """One integer moving-average step: w + trunc((f - w) / divisor).

    Stalls (returns ``weight``) whenever ``|feature - weight| < divisor``.
    """
    delta = checked_sub(feature, weight, bits)
    return checked_add(weight, trunc_div(delta, divisor, bits), bits)


def step_weights(weights: Weights, features: FeatureTriple, params: ModelParams) -> Weights:
    w0, w1, w2 = weights
    return (
        ema_step(w0, features.f0, params.learning_divisor, params.int_bits),
        ema_step(w1, features.f1, params.learning_divisor, params.int_bits),
        ema_step(w2, features.f2, params.learning_divisor, params.int_bits),
    )


def next_state(state: ModelState, features: FeatureTriple, now: int, params: ModelParams) -> ModelState:
    """Build the state that follows ``state``; raises before returning on overflow."""
    return ModelState(
        weights=step_weights(state.weights, features, params),
        last_updated=max(int(now), state.last_updated),
        update_count=checked_increment(state.update_count, params.int_bits),
    )
