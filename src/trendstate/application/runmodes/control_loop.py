from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable

from trendstate.application.instance import TrendInstance
from trendstate.application.telemetry.notifier import InstanceTelemetry
from trendstate.domain.model.entities import PredictionResult
from trendstate.domain.model.errors import TrendStateError
from trendstate.ports.telemetry import CHANNEL_OPS, TelemetryLevel

_log = logging.getLogger(__name__)


@dataclass
class LoopPolicy:
    run_forever: bool = False
    interval_seconds: int = 60
    steps: int = 1


def run_control_loop(
    instance: TrendInstance,
    controller: str,
    policy: LoopPolicy,
    *,
    tick: Callable[[], bool | None] | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> list[PredictionResult]:
    """Drive the instance: update, then a committed prediction, per step.

    `tick` moves the environment forward between steps; returning False
    means the environment has nothing more to offer and ends the loop.
    """

    t = instance.telemetry.child({"component": "runmode"})
    results: list[PredictionResult] = []

    def step_once(step: int) -> PredictionResult:
        start_t = time.perf_counter()
        state = instance.update(controller)
        result = instance.predict(controller)
        _log.info(
            "step %d: weights=%s trend=%s confidence=%d",
            step,
            state.weights,
            result.trend.value,
            result.confidence,
        )
        t.emit(
            name="run.step_finished",
            channel=CHANNEL_OPS,
            level=TelemetryLevel.INFO,
            logical_ts=state.last_updated,
            payload={
                "step": step,
                "update_count": state.update_count,
                "trend": result.trend.value,
                "confidence": result.confidence,
                "duration_ms": int((time.perf_counter() - start_t) * 1000),
            },
        )
        return result

    step = 0
    while True:
        step += 1
        try:
            results.append(step_once(step))
        except TrendStateError as e:
            _emit_error(t, step, e)
            if not policy.run_forever:
                raise
        except KeyboardInterrupt:
            t.emit(name="run.stopped", channel=CHANNEL_OPS, payload={"reason": "KeyboardInterrupt"})
            break

        if not policy.run_forever and step >= max(1, policy.steps):
            break
        if tick is not None and tick() is False:
            t.emit(name="run.stopped", channel=CHANNEL_OPS, payload={"reason": "environment exhausted"})
            break
        if policy.run_forever:
            try:
                sleep(max(1, policy.interval_seconds))
            except KeyboardInterrupt:
                t.emit(name="run.stopped", channel=CHANNEL_OPS, payload={"reason": "KeyboardInterrupt"})
                break

    return results


def _emit_error(t: InstanceTelemetry, step: int, exc: Exception) -> None:
    _log.error("step %d failed: %s", step, exc)
    t.emit(
        name="error.exception",
        channel=CHANNEL_OPS,
        level=TelemetryLevel.ERROR,
        payload={"step": step, "exception_type": type(exc).__name__, "message": str(exc)},
    )
