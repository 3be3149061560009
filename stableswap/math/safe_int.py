"""Checked unsigned integers for the invariant solver.

Balances, D and the Newton intermediates are all non-negative. Wrapping them
in SafeInt turns the two silent failure modes of unsigned integer math into
pool errors:

- ``a - b`` with ``b > a`` raises Underflow
- ``a // 0`` raises DivisionByZero

Both are ArithmeticFault, a StableSwapError, so a solver bug fails the
operation (and rolls it back) instead of producing a wrong price.

    d = S(d)
    d_p = (d_p * d) // (S(x) * 2)  # DivisionByZero if x == 0
"""

from __future__ import annotations

from collections.abc import Callable

from stableswap.errors import ArithmeticFault, DivisionByZero, Underflow

__all__ = ["ArithmeticFault", "DivisionByZero", "S", "SafeInt", "Underflow"]


def _raw(x: SafeInt | int) -> int:
    return x.value if isinstance(x, SafeInt) else x


class SafeInt:
    """Non-negative integer whose subtraction and division are checked."""

    __slots__ = ("value",)

    def __init__(self, value: SafeInt | int) -> None:
        if isinstance(value, SafeInt):
            value = value.value
        elif isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")
        self.value = value

    def __repr__(self) -> str:
        return f"S({self.value})"

    def _combine(self, other: SafeInt | int, op: Callable[[int, int], int]) -> SafeInt:
        return SafeInt(op(self.value, _raw(other)))

    def __add__(self, other: SafeInt | int) -> SafeInt:
        return self._combine(other, int.__add__)

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return self._combine(other, int.__mul__)

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        rhs = _raw(other)
        if rhs > self.value:
            raise Underflow(f"Underflow: {self.value} - {rhs}")
        return SafeInt(self.value - rhs)

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        rhs = _raw(other)
        if rhs == 0:
            raise DivisionByZero(f"Division by zero: {self.value} // 0")
        return SafeInt(self.value // rhs)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (SafeInt, int)):
            return self.value == _raw(other)
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __lt__(self, other: SafeInt | int) -> bool:
        return self.value < _raw(other)

    def __le__(self, other: SafeInt | int) -> bool:
        return self.value <= _raw(other)

    def __gt__(self, other: SafeInt | int) -> bool:
        return self.value > _raw(other)

    def __ge__(self, other: SafeInt | int) -> bool:
        return self.value >= _raw(other)

    def within(self, other: SafeInt | int, tolerance: int = 1) -> bool:
        """Newton stopping rule: ``|self - other| <= tolerance``."""
        return abs(self.value - _raw(other)) <= tolerance


S = SafeInt
