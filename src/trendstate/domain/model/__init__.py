from .classifier import classify
from .entities import FeatureTriple, ModelState, PredictionResult, Trend
from .errors import AlreadyInitialized, ArithmeticOverflow, NotInitialized, TrendStateError, Unauthorized
from .features import extract_features
from .params import ModelParams
from .update_rule import next_state

__all__ = [
    "classify",
    "extract_features",
    "next_state",
    "FeatureTriple",
    "ModelParams",
    "ModelState",
    "PredictionResult",
    "Trend",
    "TrendStateError",
    "AlreadyInitialized",
    "ArithmeticOverflow",
    "NotInitialized",
    "Unauthorized",
]
