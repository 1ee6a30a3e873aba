"""Checked integer arithmetic for the model.

Python integers never wrap, so every result is range-checked explicitly
against a fixed-width signed (or unsigned) integer. Division truncates
toward zero, unlike ``//`` which floors.
"""

from __future__ import annotations

from trendstate.domain.model.errors import ArithmeticOverflow

DEFAULT_BITS = 256


def int_bounds(bits: int = DEFAULT_BITS) -> tuple[int, int]:
    return -(1 << (bits - 1)), (1 << (bits - 1)) - 1


def uint_max(bits: int = DEFAULT_BITS) -> int:
    return (1 << bits) - 1


def check_int(value: int, bits: int = DEFAULT_BITS, *, op: str = "value", operands: tuple[int, ...] = ()) -> int:
    lo, hi = int_bounds(bits)
    if value < lo or value > hi:
        raise ArithmeticOverflow(op, operands or (value,), bits)
    return value


def checked_add(a: int, b: int, bits: int = DEFAULT_BITS) -> int:
    return check_int(a + b, bits, op="add", operands=(a, b))


def checked_sub(a: int, b: int, bits: int = DEFAULT_BITS) -> int:
    return check_int(a - b, bits, op="sub", operands=(a, b))


def checked_mul(a: int, b: int, bits: int = DEFAULT_BITS) -> int:
    return check_int(a * b, bits, op="mul", operands=(a, b))


def trunc_div(a: int, b: int, bits: int = DEFAULT_BITS) -> int:
    """Integer division truncating toward zero: ``trunc_div(-7, 2) == -3``."""
    if b == 0:
        raise ZeroDivisionError("trunc_div by zero")
    q = abs(a) // abs(b)
    if (a < 0) != (b < 0):
        q = -q
    # only MIN / -1 can leave the range
    return check_int(q, bits, op="div", operands=(a, b))


def checked_increment(counter: int, bits: int = DEFAULT_BITS) -> int:
    nxt = counter + 1
    if nxt > uint_max(bits):
        raise ArithmeticOverflow("increment", (counter,), bits)
    return nxt
