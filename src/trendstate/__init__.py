from trendstate.application.instance import TrendInstance
from trendstate.domain.model import (
    AlreadyInitialized,
    ArithmeticOverflow,
    FeatureTriple,
    ModelParams,
    ModelState,
    NotInitialized,
    PredictionResult,
    Trend,
    TrendStateError,
    Unauthorized,
)

__version__ = "0.1.0"

__all__ = [
    "TrendInstance",
    "AlreadyInitialized",
    "ArithmeticOverflow",
    "FeatureTriple",
    "ModelParams",
    "ModelState",
    "NotInitialized",
    "PredictionResult",
    "Trend",
    "TrendStateError",
    "Unauthorized",
]
