from __future__ import annotations

import contextlib
import io
import unittest

import pathlib
import sys

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from trendstate.adapters.environment.simulated import SimulatedEnvironment
from trendstate.adapters.telemetry.console import ConsoleTelemetrySink
from trendstate.adapters.telemetry.db_journal import DbEventJournalSink
from trendstate.adapters.telemetry.memory import InMemoryTelemetrySink
from trendstate.adapters.telemetry.otel import OtelTelemetrySink
from trendstate.application.instance import TrendInstance
from trendstate.application.telemetry.event_factory import make_event
from trendstate.application.telemetry.hub import TelemetryHub
from trendstate.application.telemetry.notifier import InstanceTelemetry
from trendstate.ports.telemetry import EVT_MODEL_UPDATED, EVT_PREDICTED, TelemetryEvent, TelemetryLevel


class _BrokenSink:
    def enabled(self, channel: str, level: TelemetryLevel, name: str | None = None) -> bool:
        return True

    def emit(self, event: TelemetryEvent) -> None:
        raise RuntimeError("sink down")


class TestTelemetryHub(unittest.TestCase):
    def test_enabled_any_sink_accepts(self) -> None:
        sink = InMemoryTelemetrySink(channels={"ops"}, min_level=TelemetryLevel.DEBUG)
        hub = TelemetryHub(sinks=[sink])

        self.assertTrue(hub.enabled("ops", "DEBUG"))
        self.assertFalse(hub.enabled("audit", "INFO"))

    def test_level_gating(self) -> None:
        sink = InMemoryTelemetrySink(channels={"ops"}, min_level=TelemetryLevel.WARN)
        hub = TelemetryHub(sinks=[sink])
        hub.emit(make_event(instance_id="i", name="a", channel="ops", level="INFO"))
        hub.emit(make_event(instance_id="i", name="b", channel="ops", level="warning"))
        self.assertEqual(["b"], [e.name for e in sink.events])

    def test_broken_sink_does_not_stop_delivery(self) -> None:
        sink = InMemoryTelemetrySink()
        hub = TelemetryHub(sinks=[_BrokenSink(), sink])
        with self.assertLogs("trendstate.application.telemetry.hub", level="WARNING"):
            hub.emit(make_event(instance_id="i", name="x", channel="audit"))
        self.assertEqual(1, len(sink.events))

    def test_child_scope_is_merged(self) -> None:
        sink = InMemoryTelemetrySink()
        hub = TelemetryHub(sinks=[sink], base_scope={"instance": "i"}).child({"component": "runmode"})
        hub.emit(make_event(instance_id="i", name="x", channel="ops", scope={"step": 1}))
        self.assertEqual({"instance": "i", "component": "runmode", "step": 1}, dict(sink.events[0].scope or {}))

    def test_notifier_without_port_is_noop(self) -> None:
        t = InstanceTelemetry(port=None, instance_id="i")
        self.assertFalse(t.enabled("audit", "INFO"))
        t.model_updated(caller="c", weights=(1, 2, 3), timestamp=1, update_count=1)

    def test_notifications_keep_operation_order(self) -> None:
        env = SimulatedEnvironment(clock=10, seq=0, funds=0)
        sink = InMemoryTelemetrySink()
        inst = TrendInstance(env, telemetry=TelemetryHub(sinks=[sink]))
        inst.initialize("owner")
        inst.update("owner")
        inst.predict("someone")
        inst.predict_silent()
        inst.update("owner")
        self.assertEqual(
            ["ModelInitialized", EVT_MODEL_UPDATED, EVT_PREDICTED, EVT_MODEL_UPDATED],
            [e.name for e in sink.events],
        )


class TestSinks(unittest.TestCase):
    def test_console_line(self) -> None:
        stream = io.StringIO()
        sink = ConsoleTelemetrySink(enabled_flag=True, stream=stream)
        hub = TelemetryHub(sinks=[sink])
        InstanceTelemetry(port=hub, instance_id="demo").model_updated(
            caller="owner", weights=(50, 20, 1), timestamp=500, update_count=1
        )
        line = stream.getvalue()
        self.assertTrue(line.startswith("[INFO][audit][demo@500] ModelUpdated"))
        self.assertIn("weights=[50, 20, 1]", line)

    def test_console_default_stream_is_resolved_per_instance(self) -> None:
        buf = io.StringIO()
        with contextlib.redirect_stdout(buf):
            sink = ConsoleTelemetrySink(enabled_flag=True)
        InstanceTelemetry(port=TelemetryHub(sinks=[sink]), instance_id="demo").model_updated(
            caller="owner", weights=(50, 20, 1), timestamp=500, update_count=1
        )
        self.assertIn("ModelUpdated", buf.getvalue())

    def test_console_disabled_by_default(self) -> None:
        sink = ConsoleTelemetrySink()
        self.assertFalse(sink.enabled("audit", TelemetryLevel.ERROR))

    def test_db_journal_persists_notifications(self) -> None:
        journal = DbEventJournalSink(db_path=":memory:", batch_size=10)
        env = SimulatedEnvironment(clock=500, seq=199, funds=10)
        inst = TrendInstance(env, telemetry=TelemetryHub(sinks=[journal]), instance_id="db")
        inst.initialize("owner")
        inst.update("owner")
        inst.predict("owner")

        rows = journal.fetch(EVT_MODEL_UPDATED)
        self.assertEqual(1, len(rows))
        self.assertEqual([50, 20, 1], rows[0]["payload"]["weights"])
        self.assertEqual(500, rows[0]["logical_ts"])
        self.assertEqual(3, len(journal.fetch()))
        journal.close()

    def test_otel_sink_accepts_wide_integers(self) -> None:
        sink = OtelTelemetrySink()
        sink.emit(
            make_event(
                instance_id="i",
                name=EVT_MODEL_UPDATED,
                channel="audit",
                logical_ts=1,
                payload={"weights": [1 << 200, 0, -1], "caller": "owner"},
            )
        )
        self.assertTrue(sink.enabled("audit", TelemetryLevel.INFO))
        self.assertFalse(sink.enabled("debug", TelemetryLevel.INFO))


if __name__ == "__main__":
    unittest.main()
