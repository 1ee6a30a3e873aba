from __future__ import annotations

from dataclasses import dataclass, field

from trendstate.ports.telemetry import CHANNEL_AUDIT, CHANNEL_OPS, TelemetryEvent, TelemetryLevel, TelemetrySink


@dataclass(slots=True)
class InMemoryTelemetrySink(TelemetrySink):
    """Keeps events in a list so tests can assert on emitted notifications."""

    enabled_flag: bool = True
    channels: set[str] = field(default_factory=lambda: {CHANNEL_AUDIT, CHANNEL_OPS})
    min_level: TelemetryLevel = TelemetryLevel.DEBUG
    events: list[TelemetryEvent] = field(default_factory=list)

    def enabled(self, channel: str, level: TelemetryLevel, name: str | None = None) -> bool:
        _ = name
        if not self.enabled_flag:
            return False
        if channel not in self.channels:
            return False
        return TelemetryLevel.coerce(level).rank() >= TelemetryLevel.coerce(self.min_level).rank()

    def emit(self, event: TelemetryEvent) -> None:
        self.events.append(event)

    def named(self, name: str) -> list[TelemetryEvent]:
        return [e for e in self.events if e.name == name]

    def clear(self) -> None:
        self.events.clear()
