from .event_factory import make_event
from .hub import TelemetryHub
from .notifier import InstanceTelemetry

__all__ = [
    "make_event",
    "TelemetryHub",
    "InstanceTelemetry",
]
