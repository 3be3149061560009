"""Pool state dataclasses.

Data structures for the assets held by the pool and the mutable pool ledger.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from stableswap.constants import N_COINS, NATIVE_ASSET, PRECISION
from stableswap.lifecycle import AmplificationRamp


@dataclass(frozen=True)
class Asset:
    """An asset slot in the pool.

    Attributes:
        address: Asset address (lowercase). NATIVE_ASSET marks the chain's
            native currency.
        decimals: Decimals of the raw asset unit (18 for the native asset).
        rate: Normalization multiplier on the 1e18 scale. Raw balance times
            rate / 1e18 gives the 18-decimal normalized balance. For a plain
            token this is 10^(36 - decimals); a liquid-staking asset multiplies
            in its exchange rate.
    """

    address: str
    decimals: int = 18
    rate: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "address", self.address.lower())
        if self.rate == 0:
            object.__setattr__(self, "rate", 10 ** (36 - self.decimals))

    @property
    def is_native(self) -> bool:
        """True if this slot holds the chain's native currency."""
        return self.address == NATIVE_ASSET

    @property
    def unit(self) -> int:
        """One whole asset in raw units."""
        return 10**self.decimals

    @classmethod
    def with_exchange_rate(cls, address: str, exchange_rate: int, decimals: int = 18) -> Asset:
        """Build an asset whose raw unit is worth ``exchange_rate / 1e18`` of its peg."""
        return cls(address, decimals, 10 ** (36 - decimals) * exchange_rate // PRECISION)


@dataclass
class PoolState:
    """Mutable ledger of a pool.

    Attributes:
        assets: The two asset slots
        balances: LP-owned raw balances (excludes accrued admin fees)
        amplification: Amplification ramp
        fee: Swap fee fraction (1e10 scale)
        admin_fee: Admin share of the swap fee (1e10 scale)
        price_thresholds: Max oracle deviation per asset (1e18 scale)
        accrued_admin_fee: Admin fees retained in custody, raw units
        lp_supply: Outstanding LP shares
        paused: Pause gate
    """

    assets: tuple[Asset, Asset]
    amplification: AmplificationRamp
    fee: int
    admin_fee: int
    price_thresholds: list[int]
    balances: list[int] = field(default_factory=lambda: [0] * N_COINS)
    accrued_admin_fee: list[int] = field(default_factory=lambda: [0] * N_COINS)
    lp_supply: int = 0
    paused: bool = False

    def copy(self) -> PoolState:
        """Deep enough copy for snapshot/restore (lists are copied)."""
        return replace(
            self,
            price_thresholds=list(self.price_thresholds),
            balances=list(self.balances),
            accrued_admin_fee=list(self.accrued_admin_fee),
        )
