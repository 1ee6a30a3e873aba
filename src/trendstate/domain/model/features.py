from __future__ import annotations

from typing import NamedTuple

from trendstate.domain.model.entities import FeatureTriple
from trendstate.ports.environment import EnvironmentPort

DEFAULT_MODULUS = 1000


class SignalSnapshot(NamedTuple):
    """Raw host signals read once for a single operation."""

    clock: int
    sequence: int
    balance: int

    def features(self, modulus: int = DEFAULT_MODULUS) -> FeatureTriple:
        return FeatureTriple(
            f0=self.clock % modulus,
            f1=self.sequence % modulus,
            f2=self.balance % modulus,
        )


def read_signals(env: EnvironmentPort) -> SignalSnapshot:
    # each signal is read exactly once; callers take timestamps from here too
    return SignalSnapshot(
        clock=int(env.logical_clock()),
        sequence=int(env.sequence()),
        balance=int(env.balance()),
    )


def extract_features(env: EnvironmentPort, modulus: int = DEFAULT_MODULUS) -> FeatureTriple:
    return read_signals(env).features(modulus)
