from __future__ import annotations

import logging
from typing import Callable

from trendstate.adapters.environment.replay import ReplayEnvironment
from trendstate.adapters.environment.simulated import SimulatedEnvironment
from trendstate.adapters.environment.system import SystemEnvironment
from trendstate.adapters.telemetry.console import ConsoleTelemetrySink
from trendstate.adapters.telemetry.db_journal import DbEventJournalSink
from trendstate.adapters.telemetry.otel import OtelTelemetrySink
from trendstate.application.instance import TrendInstance
from trendstate.application.runmodes.control_loop import LoopPolicy, run_control_loop
from trendstate.application.telemetry.hub import TelemetryHub
from trendstate.domain.model.entities import PredictionResult
from trendstate.ports.environment import EnvironmentPort
from trendstate.ports.telemetry import TelemetryLevel
from trendstate.shared.config import AppConfig, load_config

_log = logging.getLogger(__name__)


def run_app(config_path: str) -> list[PredictionResult]:
    cfg = load_config(config_path)
    logging.basicConfig(
        level=getattr(logging, cfg.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if not cfg.controller:
        raise SystemExit("No controller configured. Set `controller` in the YAML or TRENDSTATE_CONTROLLER.")

    telemetry = _build_telemetry(cfg)
    try:
        env, tick = _build_environment(cfg)
        instance = TrendInstance(
            env,
            params=cfg.model.to_params(),
            telemetry=telemetry,
            instance_id=cfg.instance_id,
        )
        instance.initialize(cfg.controller)

        policy = LoopPolicy(
            run_forever=cfg.schedule.run_forever,
            interval_seconds=cfg.schedule.interval_seconds,
            steps=cfg.schedule.steps,
        )
        return run_control_loop(instance, cfg.controller, policy, tick=tick)
    finally:
        telemetry.close()


def _build_environment(cfg: AppConfig) -> tuple[EnvironmentPort, Callable[[], bool | None] | None]:
    env_cfg = cfg.environment
    kind = (env_cfg.kind or "").lower()

    if kind == "simulated":
        sim = SimulatedEnvironment(
            clock=env_cfg.start_clock,
            seq=env_cfg.start_sequence,
            funds=env_cfg.start_balance,
            clock_step_per_commit=env_cfg.clock_step_per_commit,
        )
        interval = max(1, cfg.schedule.interval_seconds)
        return sim, lambda: sim.advance(interval) is not None

    if kind == "replay":
        if not env_cfg.replay_path:
            raise SystemExit("environment.kind=replay requires environment.replay_path")
        replay = ReplayEnvironment.from_csv(env_cfg.replay_path, advance_on_commit=env_cfg.advance_on_commit)
        return replay, replay.advance

    if kind == "system":
        return SystemEnvironment(start_sequence=env_cfg.start_sequence, start_balance=env_cfg.start_balance), None

    raise SystemExit(f"Unknown environment kind: {kind}")


def _build_telemetry(cfg: AppConfig) -> TelemetryHub:
    sinks = []
    telemetry_cfg = cfg.telemetry

    if telemetry_cfg.db_enabled:
        if not telemetry_cfg.db_path:
            raise SystemExit("telemetry.db_enabled requires telemetry.db_path")
        sinks.append(
            DbEventJournalSink(
                db_path=telemetry_cfg.db_path,
                channels=set(telemetry_cfg.db_channels),
                min_level=TelemetryLevel.coerce(telemetry_cfg.db_min_level),
                batch_size=telemetry_cfg.db_batch_size,
            )
        )

    if telemetry_cfg.console_enabled:
        sinks.append(
            ConsoleTelemetrySink(
                enabled_flag=True,
                channels=set(telemetry_cfg.console_channels),
                min_level=TelemetryLevel.coerce(telemetry_cfg.console_min_level),
            )
        )

    if telemetry_cfg.otel_enabled:
        sinks.append(
            OtelTelemetrySink(
                channels=set(telemetry_cfg.otel_channels),
                min_level=TelemetryLevel.coerce(telemetry_cfg.otel_min_level),
            )
        )

    _log.debug("telemetry sinks: %s", [type(s).__name__ for s in sinks])
    return TelemetryHub(sinks=sinks, base_scope={"instance": cfg.instance_id})
