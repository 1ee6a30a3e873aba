from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping

from trendstate.ports.telemetry import TelemetryEvent, TelemetryLevel


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def make_event(
    *,
    instance_id: str,
    name: str,
    channel: str,
    level: str | TelemetryLevel = TelemetryLevel.INFO,
    logical_ts: int | None = None,
    scope: Mapping[str, Any] | None = None,
    payload: Mapping[str, Any] | None = None,
) -> TelemetryEvent:
    return TelemetryEvent(
        ts_utc=now_utc(),
        instance_id=str(instance_id),
        name=str(name),
        level=TelemetryLevel.coerce(level),
        channel=str(channel),
        scope=dict(scope or {}),
        payload=dict(payload or {}),
        logical_ts=(int(logical_ts) if logical_ts is not None else None),
    )
