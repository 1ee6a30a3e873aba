from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from trendstate.ports.telemetry import TelemetryEvent, TelemetryLevel, TelemetryPort, TelemetrySink

_log = logging.getLogger(__name__)


@dataclass(slots=True)
class TelemetryHub(TelemetryPort):
    """Fan-out hub.

    Forwards each event, in emission order, to every sink that accepts its
    channel and level. A failing sink is logged and skipped; it never turns
    a committed operation into a failed one.
    """

    sinks: list[TelemetrySink] = field(default_factory=list)
    base_scope: Mapping[str, Any] | None = None

    def emit(self, event: TelemetryEvent) -> None:
        if self.base_scope:
            scope = dict(self.base_scope)
            scope.update(dict(event.scope or {}))
            event = TelemetryEvent(
                ts_utc=event.ts_utc,
                instance_id=event.instance_id,
                name=event.name,
                level=event.level,
                channel=event.channel,
                scope=scope,
                payload=event.payload,
                logical_ts=event.logical_ts,
            )

        for sink in list(self.sinks):
            try:
                if sink.enabled(event.channel, event.level, event.name):
                    sink.emit(event)
            except Exception:
                _log.warning("telemetry sink %s failed on %s", type(sink).__name__, event.name, exc_info=True)

    def enabled(self, channel: str, level: str | TelemetryLevel) -> bool:
        lv = TelemetryLevel.coerce(level)
        for sink in list(self.sinks):
            try:
                if sink.enabled(str(channel), lv, None):
                    return True
            except Exception:
                continue
        return False

    def child(self, scope: Mapping[str, Any]) -> "TelemetryHub":
        merged = dict(self.base_scope or {})
        merged.update(dict(scope or {}))
        return TelemetryHub(sinks=self.sinks, base_scope=merged)

    def _each(self, method: str) -> None:
        for sink in list(self.sinks):
            fn = getattr(sink, method, None)
            if not callable(fn):
                continue
            try:
                fn()
            except Exception:
                _log.warning("telemetry sink %s failed on %s()", type(sink).__name__, method, exc_info=True)

    def flush(self) -> None:
        self._each("flush")

    def close(self) -> None:
        self._each("close")
