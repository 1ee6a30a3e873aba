from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

from trendstate.ports.environment import EnvironmentPort, FundsPort


@dataclass
class SimulatedEnvironment(EnvironmentPort, FundsPort):
    """Deterministic in-process host.

    The clock only moves when told to (set_clock / advance, or
    clock_step_per_commit). Every committed operation takes the next
    sequence slot. Withdrawn amounts are credited to `payouts`.
    """

    clock: int = 0
    seq: int = 0
    funds: int = 0
    clock_step_per_commit: int = 0
    payouts: Dict[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for name in ("clock", "seq", "funds", "clock_step_per_commit"):
            if int(getattr(self, name)) < 0:
                raise ValueError(f"{name} must be >= 0")

    def logical_clock(self) -> int:
        return self.clock

    def sequence(self) -> int:
        return self.seq

    def balance(self) -> int:
        return self.funds

    def commit(self) -> None:
        self.seq += 1
        self.clock += self.clock_step_per_commit

    def set_clock(self, value: int) -> None:
        if value < self.clock:
            raise ValueError(f"clock cannot move backwards ({value} < {self.clock})")
        self.clock = int(value)

    def advance(self, seconds: int = 1) -> int:
        self.set_clock(self.clock + int(seconds))
        return self.clock

    def deposit(self, amount: int) -> int:
        if amount < 0:
            raise ValueError("deposit amount must be >= 0")
        self.funds += int(amount)
        return self.funds

    def withdraw_all(self, to: str) -> int:
        amount, self.funds = self.funds, 0
        self.payouts[to] = self.payouts.get(to, 0) + amount
        return amount
