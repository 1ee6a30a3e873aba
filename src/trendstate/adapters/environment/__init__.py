from .replay import ReplayEnvironment
from .simulated import SimulatedEnvironment
from .system import SystemEnvironment

__all__ = [
    "ReplayEnvironment",
    "SimulatedEnvironment",
    "SystemEnvironment",
]
