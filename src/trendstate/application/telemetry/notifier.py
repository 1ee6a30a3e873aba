from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from trendstate.application.telemetry.event_factory import make_event
from trendstate.ports.telemetry import (
    CHANNEL_AUDIT,
    EVT_FUNDS_WITHDRAWN,
    EVT_MODEL_INITIALIZED,
    EVT_MODEL_UPDATED,
    EVT_PREDICTED,
    TelemetryLevel,
    TelemetryPort,
)

_log = logging.getLogger(__name__)


@dataclass(slots=True)
class InstanceTelemetry:
    """Produces consistent events for a single instance_id.

    The domain notifications (ModelUpdated, Predicted, ...) are typed helpers
    so payload keys stay identical across call sites and sinks.
    """

    port: TelemetryPort | None
    instance_id: str
    base_scope: Mapping[str, Any] | None = None

    def enabled(self, channel: str, level: str | TelemetryLevel) -> bool:
        if self.port is None:
            return False
        return self.port.enabled(channel, level)

    def emit(
        self,
        *,
        name: str,
        channel: str,
        level: str | TelemetryLevel = TelemetryLevel.INFO,
        logical_ts: int | None = None,
        scope: Mapping[str, Any] | None = None,
        payload: Mapping[str, Any] | None = None,
    ) -> None:
        if self.port is None:
            return
        merged_scope = dict(self.base_scope or {})
        if scope:
            merged_scope.update(dict(scope))
        event = make_event(
            instance_id=self.instance_id,
            name=name,
            channel=channel,
            level=level,
            logical_ts=logical_ts,
            scope=merged_scope,
            payload=payload,
        )
        try:
            self.port.emit(event)
        except Exception:
            # never fail a committed operation due to telemetry
            _log.warning("telemetry port failed on %s", name, exc_info=True)

    def child(self, scope: Mapping[str, Any]) -> "InstanceTelemetry":
        merged = dict(self.base_scope or {})
        merged.update(dict(scope or {}))
        return InstanceTelemetry(port=self.port, instance_id=self.instance_id, base_scope=merged)

    # -- domain notifications -------------------------------------------------

    def model_initialized(self, *, controller: str, weights: tuple[int, ...], timestamp: int) -> None:
        self.emit(
            name=EVT_MODEL_INITIALIZED,
            channel=CHANNEL_AUDIT,
            logical_ts=timestamp,
            payload={"controller": controller, "weights": list(weights), "timestamp": int(timestamp)},
        )

    def model_updated(self, *, caller: str, weights: tuple[int, ...], timestamp: int, update_count: int) -> None:
        self.emit(
            name=EVT_MODEL_UPDATED,
            channel=CHANNEL_AUDIT,
            logical_ts=timestamp,
            payload={
                "caller": caller,
                "weights": list(weights),
                "timestamp": int(timestamp),
                "update_count": int(update_count),
            },
        )

    def predicted(self, *, caller: str, trend: str, confidence: int, timestamp: int) -> None:
        self.emit(
            name=EVT_PREDICTED,
            channel=CHANNEL_AUDIT,
            logical_ts=timestamp,
            payload={
                "caller": caller,
                "trend": trend,
                "confidence": int(confidence),
                "timestamp": int(timestamp),
            },
        )

    def funds_withdrawn(self, *, caller: str, amount: int, timestamp: int) -> None:
        self.emit(
            name=EVT_FUNDS_WITHDRAWN,
            channel=CHANNEL_AUDIT,
            logical_ts=timestamp,
            payload={"caller": caller, "amount": int(amount), "timestamp": int(timestamp)},
        )
