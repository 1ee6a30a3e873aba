from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class EnvironmentPort(Protocol):
    """Read-only host signals. All values are non-negative integers.

    commit() is called once for every committed operation (update,
    notifying prediction, withdraw) so hosts that model a sequential
    history can hand out the next slot. Silent queries never call it.
    """

    def logical_clock(self) -> int: ...
    def sequence(self) -> int: ...
    def balance(self) -> int: ...
    def commit(self) -> None: ...


@runtime_checkable
class FundsPort(Protocol):
    def withdraw_all(self, to: str) -> int: ...
