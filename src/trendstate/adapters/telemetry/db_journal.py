from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass, field
from pathlib import Path

from trendstate.ports.telemetry import CHANNEL_AUDIT, TelemetryEvent, TelemetryLevel, TelemetrySink


_DDL = """
CREATE TABLE IF NOT EXISTS instance_events (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  ts_utc TEXT NOT NULL,
  logical_ts INTEGER,
  instance_id TEXT NOT NULL,
  name TEXT NOT NULL,
  level TEXT NOT NULL,
  channel TEXT NOT NULL,
  scope_json TEXT NOT NULL,
  payload_json TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_ie_instance_lts ON instance_events(instance_id, logical_ts);
CREATE INDEX IF NOT EXISTS idx_ie_name ON instance_events(name);
"""

_Row = tuple[str, int | None, str, str, str, str, str, str]


@dataclass(slots=True)
class DbEventJournalSink(TelemetrySink):
    """Append-only journal of instance notifications persisted in SQLite.

    Use ":memory:" as db_path for a throwaway journal.
    """

    db_path: str
    enabled_flag: bool = True
    channels: set[str] = field(default_factory=lambda: {CHANNEL_AUDIT})
    min_level: TelemetryLevel = TelemetryLevel.INFO
    batch_size: int = 50

    _conn: sqlite3.Connection | None = field(default=None, init=False, repr=False)
    _buffer: list[_Row] = field(default_factory=list, init=False, repr=False)

    def _ensure_conn(self) -> sqlite3.Connection:
        if self._conn is not None:
            return self._conn
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        conn.executescript(_DDL)
        conn.commit()
        self._conn = conn
        return conn

    def enabled(self, channel: str, level: TelemetryLevel, name: str | None = None) -> bool:
        _ = name
        if not self.enabled_flag:
            return False
        if channel not in self.channels:
            return False
        return TelemetryLevel.coerce(level).rank() >= TelemetryLevel.coerce(self.min_level).rank()

    def emit(self, event: TelemetryEvent) -> None:
        self._buffer.append(
            (
                event.ts_utc.isoformat(),
                event.logical_ts,
                str(event.instance_id),
                str(event.name),
                str(event.level.value),
                str(event.channel),
                json.dumps(dict(event.scope or {}), separators=(",", ":"), ensure_ascii=False),
                json.dumps(dict(event.payload or {}), separators=(",", ":"), ensure_ascii=False),
            )
        )
        if len(self._buffer) >= max(1, int(self.batch_size)):
            self.flush()

    def flush(self) -> None:
        if not self._buffer:
            return
        conn = self._ensure_conn()
        rows = list(self._buffer)
        self._buffer.clear()
        conn.executemany(
            """
            INSERT INTO instance_events
              (ts_utc, logical_ts, instance_id, name, level, channel, scope_json, payload_json)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            rows,
        )
        conn.commit()

    def fetch(self, name: str | None = None) -> list[dict]:
        """Flush pending rows and read them back, oldest first."""
        self.flush()
        conn = self._ensure_conn()
        sql = "SELECT logical_ts, instance_id, name, channel, payload_json FROM instance_events"
        args: tuple = ()
        if name is not None:
            sql += " WHERE name = ?"
            args = (name,)
        sql += " ORDER BY id"
        return [
            {
                "logical_ts": lts,
                "instance_id": iid,
                "name": n,
                "channel": ch,
                "payload": json.loads(payload),
            }
            for lts, iid, n, ch, payload in conn.execute(sql, args)
        ]

    def close(self) -> None:
        try:
            self.flush()
        finally:
            if self._conn is not None:
                self._conn.close()
                self._conn = None
