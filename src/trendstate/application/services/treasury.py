from __future__ import annotations

from dataclasses import dataclass

from trendstate.application.access import AccessControl
from trendstate.application.store import ModelStore
from trendstate.application.telemetry.notifier import InstanceTelemetry
from trendstate.ports.environment import EnvironmentPort, FundsPort
from trendstate.shared.decorators import controller_only, logged


@dataclass
class Treasury:
    """Controller-only withdraw of the whole instance balance."""

    store: ModelStore
    access: AccessControl
    env: EnvironmentPort
    funds: FundsPort
    telemetry: InstanceTelemetry

    @logged
    @controller_only
    def withdraw(self, caller: str) -> int:
        with self.store.transaction():
            amount = self.funds.withdraw_all(caller)
            timestamp = self.env.logical_clock()
            self.env.commit()
            self.telemetry.funds_withdrawn(caller=caller, amount=amount, timestamp=timestamp)
            return amount
