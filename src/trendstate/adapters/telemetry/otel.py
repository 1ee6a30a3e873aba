from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from opentelemetry import metrics as otel_metrics_api
from opentelemetry import trace as otel_trace

from trendstate.ports.telemetry import CHANNEL_AUDIT, CHANNEL_OPS, TelemetryEvent, TelemetryLevel, TelemetrySink

_INT64_MAX = (1 << 63) - 1


def _attr_value(v: Any) -> Any:
    # OTel attributes are primitives (or sequences of them) and ints are int64
    if isinstance(v, bool):
        return v
    if isinstance(v, int):
        return v if -_INT64_MAX - 1 <= v <= _INT64_MAX else str(v)
    if isinstance(v, (str, float)):
        return v
    if isinstance(v, (list, tuple)):
        items = [_attr_value(x) for x in v]
        if all(isinstance(x, int) and not isinstance(x, bool) for x in items):
            return items
        return [str(x) for x in items]
    return str(v)


def _attributes(event: TelemetryEvent) -> dict[str, Any]:
    attrs: dict[str, Any] = {
        "trendstate.instance_id": event.instance_id,
        "trendstate.channel": event.channel,
        "trendstate.level": event.level.value,
    }
    if event.logical_ts is not None:
        attrs["trendstate.logical_ts"] = _attr_value(event.logical_ts)
    for source in (event.scope or {}, event.payload or {}):
        for k, v in dict(source).items():
            if v is None:
                continue
            attrs[f"trendstate.{k}"] = _attr_value(v)
    return attrs


@dataclass(slots=True)
class OtelTelemetrySink(TelemetrySink):
    """Exports each notification as a short span and bumps a per-event counter.

    Only the OpenTelemetry API is touched here. Without an SDK provider
    registered by the runtime both calls are no-ops.
    """

    enabled_flag: bool = True
    channels: set[str] = field(default_factory=lambda: {CHANNEL_AUDIT, CHANNEL_OPS})
    min_level: TelemetryLevel = TelemetryLevel.INFO
    tracer_name: str = "trendstate"

    _tracer: Any = field(default=None, init=False, repr=False)
    _counter: Any = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        self._tracer = otel_trace.get_tracer(self.tracer_name)
        meter = otel_metrics_api.get_meter(self.tracer_name)
        self._counter = meter.create_counter(
            "trendstate.events",
            unit="1",
            description="Instance notifications by name",
        )

    def enabled(self, channel: str, level: TelemetryLevel, name: str | None = None) -> bool:
        _ = name
        if not self.enabled_flag:
            return False
        if channel not in self.channels:
            return False
        return TelemetryLevel.coerce(level).rank() >= TelemetryLevel.coerce(self.min_level).rank()

    def emit(self, event: TelemetryEvent) -> None:
        attrs: Mapping[str, Any] = _attributes(event)
        with self._tracer.start_as_current_span(f"trendstate.{event.name}", attributes=attrs) as span:
            span.add_event(event.name, attributes=attrs)
        self._counter.add(1, attributes={"name": event.name, "channel": event.channel})
