from __future__ import annotations

import os
import sqlite3
import tempfile
import textwrap
import unittest
from unittest import mock

import pathlib
import sys

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from trendstate.adapters.environment.simulated import SimulatedEnvironment
from trendstate.adapters.telemetry.memory import InMemoryTelemetrySink
from trendstate.application.instance import TrendInstance
from trendstate.application.runmodes.control_loop import LoopPolicy, run_control_loop
from trendstate.application.telemetry.hub import TelemetryHub
from trendstate.bootstrap.main import run_app
from trendstate.domain.model.errors import Unauthorized
from trendstate.domain.model.params import ModelParams
from trendstate.shared.config import EnvironmentCfg, load_config


def _write(tmp: str, body: str) -> str:
    path = pathlib.Path(tmp) / "cfg.yaml"
    path.write_text(textwrap.dedent(body), encoding="utf-8")
    return str(path)


class TestLoadConfig(unittest.TestCase):
    def test_defaults_match_model_params(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            cfg = load_config(_write(tmp, "controller: owner\n"))
        self.assertEqual("owner", cfg.controller)
        self.assertEqual(ModelParams(), cfg.model.to_params())
        self.assertEqual("simulated", cfg.environment.kind)

    def test_environment_defaults_match_simulated_host(self) -> None:
        cfg = EnvironmentCfg()
        self.assertEqual(SimulatedEnvironment().clock_step_per_commit, cfg.clock_step_per_commit)
        self.assertEqual(0, cfg.clock_step_per_commit)

    def test_controller_from_environment(self) -> None:
        with tempfile.TemporaryDirectory() as tmp, mock.patch.dict(os.environ, {"TRENDSTATE_CONTROLLER": "env-owner"}):
            cfg = load_config(_write(tmp, "instance_id: x\n"))
        self.assertEqual("env-owner", cfg.controller)
        self.assertEqual("x", cfg.instance_id)

    def test_yaml_wins_over_environment(self) -> None:
        with tempfile.TemporaryDirectory() as tmp, mock.patch.dict(os.environ, {"TRENDSTATE_CONTROLLER": "env-owner"}):
            cfg = load_config(_write(tmp, "controller: yaml-owner\n"))
        self.assertEqual("yaml-owner", cfg.controller)

    def test_invalid_values_rejected(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(ValueError):
                load_config(_write(tmp, "model:\n  default_weights: [1, 0]\n"))
            with self.assertRaises(ValueError):
                load_config(_write(tmp, "environment:\n  kind: chain\n"))

    def test_missing_file(self) -> None:
        with self.assertRaises(FileNotFoundError):
            load_config("/nonexistent/cfg.yaml")


class TestControlLoop(unittest.TestCase):
    def _instance(self) -> tuple[TrendInstance, SimulatedEnvironment, InMemoryTelemetrySink]:
        env = SimulatedEnvironment(clock=500, seq=199, funds=10)
        sink = InMemoryTelemetrySink()
        inst = TrendInstance(env, telemetry=TelemetryHub(sinks=[sink]))
        inst.initialize("owner")
        return inst, env, sink

    def test_runs_configured_number_of_steps(self) -> None:
        inst, env, sink = self._instance()
        results = run_control_loop(inst, "owner", LoopPolicy(steps=3), tick=lambda: env.advance(12) > 0)
        self.assertEqual(3, len(results))
        self.assertEqual(3, inst.state().update_count)
        self.assertEqual(3, len(sink.named("run.step_finished")))

    def test_stops_when_environment_is_exhausted(self) -> None:
        inst, _, sink = self._instance()
        results = run_control_loop(inst, "owner", LoopPolicy(run_forever=True), tick=lambda: False)
        self.assertEqual(1, len(results))
        self.assertEqual("environment exhausted", sink.named("run.stopped")[0].payload["reason"])

    def test_single_run_propagates_errors(self) -> None:
        inst, _, sink = self._instance()
        with self.assertRaises(Unauthorized):
            run_control_loop(inst, "intruder", LoopPolicy(steps=1))
        self.assertEqual(1, len(sink.named("error.exception")))


class TestRunApp(unittest.TestCase):
    def test_simulated_run_with_journal(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            db_path = pathlib.Path(tmp) / "journal.sqlite"
            path = _write(
                tmp,
                f"""
                instance_id: app-test
                controller: owner
                environment:
                  kind: simulated
                  start_clock: 500
                  start_sequence: 199
                  start_balance: 10
                  clock_step_per_commit: 0
                schedule:
                  steps: 3
                  interval_seconds: 12
                telemetry:
                  console_enabled: false
                  db_enabled: true
                  db_path: {db_path.as_posix()}
                  db_batch_size: 1
                """,
            )
            results = run_app(path)

            conn = sqlite3.connect(str(db_path))
            try:
                names = [r[0] for r in conn.execute("SELECT name FROM instance_events ORDER BY id")]
            finally:
                conn.close()

        self.assertEqual(3, len(results))
        self.assertEqual(1, names.count("ModelInitialized"))
        self.assertEqual(3, names.count("ModelUpdated"))
        self.assertEqual(3, names.count("Predicted"))

    def test_missing_controller_exits(self) -> None:
        with tempfile.TemporaryDirectory() as tmp, mock.patch.dict(os.environ, {"TRENDSTATE_CONTROLLER": ""}):
            path = _write(tmp, "telemetry:\n  console_enabled: false\n")
            with self.assertRaises(SystemExit):
                run_app(path)


if __name__ == "__main__":
    unittest.main()
