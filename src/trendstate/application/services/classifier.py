from __future__ import annotations

from dataclasses import dataclass

from trendstate.application.store import ModelStore
from trendstate.application.telemetry.notifier import InstanceTelemetry
from trendstate.domain.model.classifier import classify
from trendstate.domain.model.entities import PredictionResult
from trendstate.domain.model.features import read_signals
from trendstate.domain.model.params import ModelParams
from trendstate.ports.environment import EnvironmentPort
from trendstate.shared.decorators import logged


@dataclass
class ClassifierService:
    """Read path. Never writes to ModelStore.

    predict()        committed query: notifies and takes a sequence slot
    predict_silent() uncommitted query: no notification, no slot
    """

    store: ModelStore
    env: EnvironmentPort
    params: ModelParams
    telemetry: InstanceTelemetry

    def _evaluate(self) -> tuple[PredictionResult, int]:
        weights = self.store.current().weights
        signals = read_signals(self.env)
        return classify(weights, signals.features(self.params.feature_modulus), self.params), signals.clock

    @logged
    def predict(self, caller: str) -> PredictionResult:
        with self.store.transaction():
            result, timestamp = self._evaluate()
            self.env.commit()
            self.telemetry.predicted(
                caller=caller,
                trend=result.trend.value,
                confidence=result.confidence,
                timestamp=timestamp,
            )
            return result

    def predict_silent(self) -> PredictionResult:
        with self.store.transaction():
            return self._evaluate()[0]
