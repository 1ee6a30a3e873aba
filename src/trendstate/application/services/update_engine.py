from __future__ import annotations

import logging
from dataclasses import dataclass

from trendstate.application.access import AccessControl
from trendstate.application.store import ModelStore
from trendstate.application.telemetry.notifier import InstanceTelemetry
from trendstate.domain.model.entities import ModelState
from trendstate.domain.model.features import read_signals
from trendstate.domain.model.params import ModelParams
from trendstate.domain.model.update_rule import next_state
from trendstate.ports.environment import EnvironmentPort
from trendstate.shared.decorators import controller_only, logged

_log = logging.getLogger(__name__)


@dataclass
class UpdateEngine:
    """The only writer of ModelStore."""

    store: ModelStore
    access: AccessControl
    env: EnvironmentPort
    params: ModelParams
    telemetry: InstanceTelemetry

    @logged
    @controller_only
    def update(self, caller: str) -> ModelState:
        with self.store.transaction():
            current = self.store.current()
            # one snapshot for all three weights and the timestamp
            signals = read_signals(self.env)
            features = signals.features(self.params.feature_modulus)
            new = next_state(current, features, signals.clock, self.params)

            self.store.commit(current, new)
            self.env.commit()
            _log.debug("update #%d features=%s weights=%s", new.update_count, tuple(features), new.weights)
            self.telemetry.model_updated(
                caller=caller,
                weights=new.weights,
                timestamp=new.last_updated,
                update_count=new.update_count,
            )
            return new
