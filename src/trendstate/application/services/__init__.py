from .classifier import ClassifierService
from .treasury import Treasury
from .update_engine import UpdateEngine

__all__ = [
    "ClassifierService",
    "Treasury",
    "UpdateEngine",
]
