from __future__ import annotations

import time
from typing import Callable, Dict

from trendstate.ports.environment import EnvironmentPort, FundsPort


class SystemEnvironment(EnvironmentPort, FundsPort):
    """Wall-clock host: clock is unix seconds, sequence counts commits."""

    def __init__(
        self,
        *,
        start_sequence: int = 0,
        start_balance: int = 0,
        time_fn: Callable[[], float] = time.time,
    ) -> None:
        if start_sequence < 0 or start_balance < 0:
            raise ValueError("start_sequence and start_balance must be >= 0")
        self._seq = int(start_sequence)
        self._funds = int(start_balance)
        self._time_fn = time_fn
        self._last_clock = 0
        self.payouts: Dict[str, int] = {}

    def logical_clock(self) -> int:
        # never hand out a smaller value than before, even if the wall clock steps back
        self._last_clock = max(self._last_clock, int(self._time_fn()))
        return self._last_clock

    def sequence(self) -> int:
        return self._seq

    def balance(self) -> int:
        return self._funds

    def commit(self) -> None:
        self._seq += 1

    def deposit(self, amount: int) -> int:
        if amount < 0:
            raise ValueError("deposit amount must be >= 0")
        self._funds += int(amount)
        return self._funds

    def withdraw_all(self, to: str) -> int:
        amount, self._funds = self._funds, 0
        self.payouts[to] = self.payouts.get(to, 0) + amount
        return amount
