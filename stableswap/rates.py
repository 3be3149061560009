"""Rate normalization helpers.

Converts raw asset balances to the common 18-decimal precision the invariant
solver works in, and back.
"""

from collections.abc import Sequence

from stableswap.constants import PRECISION
from stableswap.errors import ValidationError
from stableswap.state import Asset


class RateNormalizer:
    """Per-asset normalization using each asset's 1e18-scaled rate."""

    __slots__ = ("rates",)

    def __init__(self, assets: Sequence[Asset]) -> None:
        for asset in assets:
            if asset.rate <= 0:
                raise ValidationError(
                    f"Rate for asset {asset.address} must be positive, got {asset.rate}"
                )
        self.rates = tuple(asset.rate for asset in assets)

    def normalize(self, raw_balance: int, i: int) -> int:
        """Scale a raw balance of asset i to 18-decimal precision (rounds down)."""
        return raw_balance * self.rates[i] // PRECISION

    def denormalize(self, normalized: int, i: int) -> int:
        """Scale a normalized amount back to raw units of asset i.

        Rounds down so the pool never pays out more than it accounts for.
        """
        return normalized * PRECISION // self.rates[i]

    def normalize_all(self, balances: Sequence[int]) -> list[int]:
        """Normalized balance vector (``xp``)."""
        return [self.normalize(b, i) for i, b in enumerate(balances)]
