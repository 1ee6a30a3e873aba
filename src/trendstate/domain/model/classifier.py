from __future__ import annotations

from trendstate.domain.model.arithmetic import checked_add, checked_mul, trunc_div
from trendstate.domain.model.entities import FeatureTriple, PredictionResult, Trend, Weights
from trendstate.domain.model.params import ModelParams


def dot_score(weights: Weights, features: FeatureTriple, bits: int) -> int:
    total = 0
    for w, f in zip(weights, features):
        total = checked_add(total, checked_mul(w, f, bits), bits)
    return total


def classify_scaled(scaled: int, params: ModelParams) -> Trend:
    # both boundaries are inclusive on the Stable side
    if scaled > params.up_threshold:
        return Trend.UP
    if scaled < params.down_threshold:
        return Trend.DOWN
    return Trend.STABLE


def confidence_of(scaled: int, params: ModelParams) -> int:
    return min(abs(scaled), params.confidence_cap)


def classify(weights: Weights, features: FeatureTriple, params: ModelParams) -> PredictionResult:
    score = dot_score(weights, features, params.int_bits)
    scaled = trunc_div(score, params.score_scale, params.int_bits)
    return PredictionResult(
        trend=classify_scaled(scaled, params),
        confidence=confidence_of(scaled, params),
        score=score,
        scaled=scaled,
        features=features,
    )
