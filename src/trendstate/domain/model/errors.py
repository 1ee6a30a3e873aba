from __future__ import annotations


class TrendStateError(Exception):
    """Base class for every error surfaced by an instance operation."""


class AlreadyInitialized(TrendStateError):
    def __init__(self, controller: str) -> None:
        super().__init__(f"Instance already initialized (controller={controller!r})")
        self.controller = controller


class NotInitialized(TrendStateError):
    def __init__(self) -> None:
        super().__init__("Instance has not been initialized")


class Unauthorized(TrendStateError):
    def __init__(self, caller: str, operation: str) -> None:
        super().__init__(f"Caller {caller!r} is not allowed to {operation}")
        self.caller = caller
        self.operation = operation


class ArithmeticOverflow(TrendStateError):
    """Result left the signed (or unsigned) integer range of the model.

    Raised before anything is committed, so the operation has no effect.
    """

    def __init__(self, op: str, operands: tuple[int, ...], bits: int) -> None:
        super().__init__(f"{op}{operands} overflows {bits}-bit range")
        self.op = op
        self.operands = operands
        self.bits = bits
