from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict

import pandas as pd

from trendstate.ports.environment import EnvironmentPort, FundsPort

_log = logging.getLogger(__name__)

COLUMNS = ("clock", "sequence", "balance")


def _validate(frame: pd.DataFrame) -> pd.DataFrame:
    missing = [c for c in COLUMNS if c not in frame.columns]
    if missing:
        raise ValueError(f"Replay frame is missing columns: {missing}")
    if frame.empty:
        raise ValueError("Replay frame has no rows")

    df = frame.loc[:, list(COLUMNS)].reset_index(drop=True)
    if df.isna().any().any():
        raise ValueError("Replay frame contains missing values")
    df = df.astype("int64")
    if (df < 0).any().any():
        raise ValueError("Replay signals must be non-negative")
    if not df["clock"].is_monotonic_increasing:
        raise ValueError("Replay clock must be non-decreasing")
    if not df["sequence"].is_monotonic_increasing:
        raise ValueError("Replay sequence must be non-decreasing")
    return df


class ReplayEnvironment(EnvironmentPort, FundsPort):
    """Replays recorded host signals, one row per observation.

    Withdrawals are tracked on top of the recorded balance, so a row read
    after a withdraw reports what is left of the recorded amount.
    """

    def __init__(self, frame: pd.DataFrame, *, advance_on_commit: bool = False) -> None:
        self._df = _validate(frame)
        self._pos = 0
        self._withdrawn = 0
        self.advance_on_commit = advance_on_commit
        self.payouts: Dict[str, int] = {}

    @classmethod
    def from_csv(cls, path: str | Path, *, advance_on_commit: bool = False) -> "ReplayEnvironment":
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(f"Replay file not found: {path}")
        frame = pd.read_csv(p)
        _log.info("loaded %d replay rows from %s", len(frame), p)
        return cls(frame, advance_on_commit=advance_on_commit)

    def __len__(self) -> int:
        return len(self._df)

    @property
    def position(self) -> int:
        return self._pos

    def exhausted(self) -> bool:
        return self._pos >= len(self._df) - 1

    def advance(self) -> bool:
        """Move to the next row. Returns False (and stays put) at the end."""
        if self.exhausted():
            return False
        self._pos += 1
        return True

    def _row(self, column: str) -> int:
        return int(self._df.at[self._pos, column])

    def logical_clock(self) -> int:
        return self._row("clock")

    def sequence(self) -> int:
        return self._row("sequence")

    def balance(self) -> int:
        return max(self._row("balance") - self._withdrawn, 0)

    def commit(self) -> None:
        if self.advance_on_commit:
            self.advance()

    def withdraw_all(self, to: str) -> int:
        amount = self.balance()
        self._withdrawn += amount
        self.payouts[to] = self.payouts.get(to, 0) + amount
        return amount
