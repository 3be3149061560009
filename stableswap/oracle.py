"""Price oracle collaborators.

The pool only depends on the PriceOracle protocol, so a deterministic fake can
be injected in tests and a real feed adapter in production.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol

from stableswap.errors import ValidationError
from stableswap.math.fixed_point import OraclePrice


class PriceOracle(Protocol):
    """Protocol for asset price feeds.

    Implementations return the USD price of one whole asset on the 1e8 scale.
    """

    def peek(self, asset: str) -> int:
        """Return the current price of ``asset`` (1e8 scale)."""
        ...


class StaticPriceOracle:
    """Oracle serving fixed prices, updatable for simulations and tests."""

    def __init__(self, prices: Mapping[str, int] | None = None) -> None:
        self._prices: dict[str, int] = {k.lower(): v for k, v in (prices or {}).items()}
        self.calls: list[str] = []  # Track reads for assertions

    def set_price(self, asset: str, price: int) -> None:
        self._prices[asset.lower()] = price

    def peek(self, asset: str) -> int:
        self.calls.append(asset)
        try:
            return self._prices[asset.lower()]
        except KeyError:
            raise ValidationError(f"No oracle price for asset {asset}") from None


def read_price(oracle: PriceOracle, asset: str) -> OraclePrice:
    """Read and validate a price from ``oracle``.

    Raises:
        ValidationError: If the oracle returns a non-positive price
    """
    price = oracle.peek(asset)
    if price <= 0:
        raise ValidationError(f"Oracle returned non-positive price for asset {asset}: {price}")
    return OraclePrice(price)
