from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Any

from trendstate.ports.telemetry import CHANNEL_AUDIT, TelemetryEvent, TelemetryLevel, TelemetrySink


def _short(v: Any, limit: int = 80) -> str:
    s = str(v)
    return s if len(s) <= limit else (s[: limit - 1] + "…")


def _summarize(event: TelemetryEvent) -> str:
    payload = dict(event.payload or {})

    parts: list[str] = []
    for k in (
        "caller",
        "controller",
        "weights",
        "update_count",
        "trend",
        "confidence",
        "amount",
        "step",
        "duration_ms",
        "reason",
    ):
        if k in payload:
            parts.append(f"{k}={_short(payload[k], 40)}")

    if not parts and payload:
        parts.append(f"payload_keys={list(payload.keys())[:8]}")

    return " ".join(parts)


@dataclass(slots=True)
class ConsoleTelemetrySink(TelemetrySink):
    """One line per event, easy to grep. Disabled unless configured."""

    enabled_flag: bool = False
    channels: set[str] = field(default_factory=lambda: {CHANNEL_AUDIT})
    min_level: TelemetryLevel = TelemetryLevel.INFO
    stream: Any = field(default_factory=lambda: sys.stdout)

    def enabled(self, channel: str, level: TelemetryLevel, name: str | None = None) -> bool:
        _ = name
        if not self.enabled_flag:
            return False
        if channel not in self.channels:
            return False
        return TelemetryLevel.coerce(level).rank() >= TelemetryLevel.coerce(self.min_level).rank()

    def emit(self, event: TelemetryEvent) -> None:
        clock = "-" if event.logical_ts is None else str(event.logical_ts)
        msg = f"[{event.level.value}][{event.channel}][{event.instance_id}@{clock}] {event.name}"
        summary = _summarize(event)
        if summary:
            msg = f"{msg} {summary}"
        self.stream.write(msg + "\n")
        self.stream.flush()
