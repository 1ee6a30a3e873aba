from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Protocol

# Domain notifications (what the host would publish as contract events)
CHANNEL_AUDIT = "audit"
# Run loop lifecycle and diagnostics
CHANNEL_OPS = "ops"

EVT_MODEL_INITIALIZED = "ModelInitialized"
EVT_MODEL_UPDATED = "ModelUpdated"
EVT_PREDICTED = "Predicted"
EVT_FUNDS_WITHDRAWN = "FundsWithdrawn"


class TelemetryLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"

    @classmethod
    def coerce(cls, value: str | "TelemetryLevel" | None) -> "TelemetryLevel":
        if isinstance(value, TelemetryLevel):
            return value
        v = (value or "INFO").upper().strip()
        if v == "WARNING":
            v = "WARN"
        try:
            return TelemetryLevel(v)
        except ValueError:
            return TelemetryLevel.INFO

    def rank(self) -> int:
        return {
            TelemetryLevel.DEBUG: 10,
            TelemetryLevel.INFO: 20,
            TelemetryLevel.WARN: 30,
            TelemetryLevel.ERROR: 40,
        }[self]


@dataclass(frozen=True, slots=True)
class TelemetryEvent:
    """Notification envelope.

    `logical_ts` is the host logical clock at emission time; `ts_utc` is
    wall-clock and informational only. `scope` and `payload` must be
    JSON-serialisable.
    """

    ts_utc: datetime
    instance_id: str
    name: str
    level: TelemetryLevel
    channel: str
    scope: Mapping[str, Any] | None
    payload: Mapping[str, Any]
    logical_ts: int | None = None


class TelemetrySink(Protocol):
    """Adapter-side sink. Filters with `enabled`, persists/prints with `emit`."""

    def enabled(self, channel: str, level: TelemetryLevel, name: str | None = None) -> bool: ...

    def emit(self, event: TelemetryEvent) -> None: ...


class TelemetryPort(Protocol):
    """Application-facing event sink (fan-out hub or a single sink wrapper)."""

    def emit(self, event: TelemetryEvent) -> None: ...

    def enabled(self, channel: str, level: str | TelemetryLevel) -> bool: ...
