"""Typed fixed-point quantities.

The pool works with several fixed-point bases at once. Each base gets its own
type so that a fee fraction can never be compared with, or multiplied into, an
oracle price by accident:

- FeeFraction: scaled by 1e10 (FEE_DENOMINATOR), 1e6 == 0.01%
- OraclePrice: scaled by 1e8 (PRICE_SCALE), 830e8 == 830.0
- Ratio: scaled by 1e18 (THRESHOLD_SCALE), used for deviation thresholds

Raw balances, normalized balances and the invariant D stay plain ints; their
scale is documented at each call site.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import ClassVar

from stableswap.constants import FEE_DENOMINATOR, PRICE_SCALE, THRESHOLD_SCALE

__all__ = ["FixedPoint", "FeeFraction", "OraclePrice", "Ratio"]


class FixedPoint:
    """Base class for a non-negative integer scaled by ``SCALE``.

    Subclasses only interoperate with their own type; mixing two domains
    raises TypeError.
    """

    SCALE: ClassVar[int] = 1

    __slots__ = ("value",)
    __hash__ = None  # type: ignore[assignment]  # Unhashable since we define __eq__

    def __init__(self, value: int) -> None:
        """Create from raw scaled value."""
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"{type(self).__name__} requires int, got {type(value).__name__}")
        if value < 0:
            raise ValueError(f"{type(self).__name__} must be non-negative, got {value}")
        self.value = value

    @classmethod
    def from_decimal(cls, d: Decimal | str) -> FixedPoint:
        """Create from a decimal (scaled by SCALE, rounded half up)."""
        scaled = (Decimal(d) * cls.SCALE).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        return cls(int(scaled))

    def to_decimal(self) -> Decimal:
        """Convert to Decimal for display."""
        return Decimal(self.value) / Decimal(self.SCALE)

    def apply(self, amount: int) -> int:
        """Return ``amount * self`` in the units of ``amount``, rounding down."""
        return amount * self.value // self.SCALE

    def _check(self, other: object) -> FixedPoint:
        if type(other) is not type(self):
            raise TypeError(
                f"Cannot combine {type(self).__name__} with {type(other).__name__}"
            )
        return other  # type: ignore[return-value]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FixedPoint):
            return NotImplemented
        return self.value == self._check(other).value

    def __lt__(self, other: FixedPoint) -> bool:
        return self.value < self._check(other).value

    def __le__(self, other: FixedPoint) -> bool:
        return self.value <= self._check(other).value

    def __gt__(self, other: FixedPoint) -> bool:
        return self.value > self._check(other).value

    def __ge__(self, other: FixedPoint) -> bool:
        return self.value >= self._check(other).value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value})"

    def __str__(self) -> str:
        return str(self.to_decimal())


class FeeFraction(FixedPoint):
    """Fee fraction on the 1e10 scale."""

    SCALE: ClassVar[int] = FEE_DENOMINATOR


class OraclePrice(FixedPoint):
    """Oracle price on the 1e8 scale."""

    SCALE: ClassVar[int] = PRICE_SCALE


class Ratio(FixedPoint):
    """Dimensionless ratio on the 1e18 scale (thresholds, deviations)."""

    SCALE: ClassVar[int] = THRESHOLD_SCALE

    @classmethod
    def relative_deviation(cls, observed: OraclePrice, reference: OraclePrice) -> Ratio:
        """|observed - reference| / reference, as a 1e18-scaled Ratio.

        Raises:
            ZeroDivisionError: If reference is zero
        """
        reference._check(observed)
        if reference.value == 0:
            raise ZeroDivisionError("Reference price is zero")
        return cls(abs(observed.value - reference.value) * cls.SCALE // reference.value)
