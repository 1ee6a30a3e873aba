from __future__ import annotations

import logging
from typing import Any

from trendstate.application.access import AccessControl
from trendstate.application.record import InstanceRecord
from trendstate.application.services.classifier import ClassifierService
from trendstate.application.services.treasury import Treasury
from trendstate.application.services.update_engine import UpdateEngine
from trendstate.application.store import ModelStore
from trendstate.application.telemetry.notifier import InstanceTelemetry
from trendstate.domain.model.entities import ModelState, PredictionResult
from trendstate.domain.model.params import ModelParams
from trendstate.ports.environment import EnvironmentPort, FundsPort
from trendstate.ports.telemetry import TelemetryPort
from trendstate.shared.decorators import logged

_log = logging.getLogger(__name__)


class TrendInstance:
    """Public operation surface of one running instance.

    | operation        | mutates            | access                    |
    |------------------|--------------------|---------------------------|
    | initialize       | yes, once          | anyone, first caller wins |
    | update           | model              | controller                |
    | predict          | no (committed)     | anyone                    |
    | predict_silent   | no (uncommitted)   | anyone                    |
    | withdraw         | external balance   | controller                |

    The environment is also used as the FundsPort unless `funds` is given.
    """

    def __init__(
        self,
        env: EnvironmentPort,
        *,
        params: ModelParams | None = None,
        telemetry: TelemetryPort | None = None,
        funds: FundsPort | None = None,
        instance_id: str = "trendstate",
    ) -> None:
        self.env = env
        self.params = params or ModelParams()
        self.instance_id = instance_id
        self.store = ModelStore()
        self.access = AccessControl()
        self.telemetry = InstanceTelemetry(port=telemetry, instance_id=instance_id)

        self._updater = UpdateEngine(
            store=self.store,
            access=self.access,
            env=env,
            params=self.params,
            telemetry=self.telemetry,
        )
        self._classifier = ClassifierService(
            store=self.store,
            env=env,
            params=self.params,
            telemetry=self.telemetry,
        )
        self._treasury = Treasury(
            store=self.store,
            access=self.access,
            env=env,
            funds=funds if funds is not None else env,  # type: ignore[arg-type]
            telemetry=self.telemetry,
        )

    @logged
    def initialize(self, caller: str) -> ModelState:
        with self.store.transaction():
            self.access.claim(caller)
            state = ModelState(
                weights=tuple(self.params.default_weights),  # type: ignore[arg-type]
                last_updated=self.env.logical_clock(),
                update_count=0,
            )
            self.store.create(state)
            self.env.commit()
            _log.info("instance %s initialized by %s", self.instance_id, caller)
            self.telemetry.model_initialized(
                controller=caller, weights=state.weights, timestamp=state.last_updated
            )
            return state

    def update(self, caller: str) -> ModelState:
        return self._updater.update(caller)

    def predict(self, caller: str) -> PredictionResult:
        return self._classifier.predict(caller)

    def predict_silent(self) -> PredictionResult:
        return self._classifier.predict_silent()

    def withdraw(self, caller: str) -> int:
        return self._treasury.withdraw(caller)

    @property
    def controller(self) -> str | None:
        return self.access.controller

    def state(self) -> ModelState:
        return self.store.current()

    def record(self) -> InstanceRecord:
        with self.store.transaction():
            state = self.store.current()
            return InstanceRecord(
                controller=str(self.access.controller),
                weights=state.weights,
                last_updated=state.last_updated,
                update_count=state.update_count,
                int_bits=self.params.int_bits,
            )

    @classmethod
    def restore(
        cls,
        record: InstanceRecord | dict[str, Any],
        env: EnvironmentPort,
        **kwargs: Any,
    ) -> "TrendInstance":
        """Rebuild an instance from its durable footprint without re-initializing."""
        rec = record if isinstance(record, InstanceRecord) else InstanceRecord.model_validate(record)
        inst = cls(env, **kwargs)
        if rec.int_bits != inst.params.int_bits:
            raise ValueError(f"record int_bits={rec.int_bits} does not match params int_bits={inst.params.int_bits}")
        inst.access.claim(rec.controller)
        inst.store.create(
            ModelState(weights=rec.weights, last_updated=rec.last_updated, update_count=rec.update_count)
        )
        return inst
