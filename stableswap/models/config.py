"""Pool configuration models.

A PoolConfig carries everything the one-time pool initialization needs.
It is loaded from JSON (camelCase keys) for the service, or built directly
in code and tests (snake_case keys).
"""

from pydantic import BaseModel, Field, field_validator, model_validator

from stableswap.constants import (
    MAX_A,
    MAX_ADMIN_FEE,
    MAX_FEE,
    N_COINS,
    PRECISION,
    THRESHOLD_SCALE,
)
from stableswap.models.types import Address
from stableswap.state import Asset


class AssetConfig(BaseModel):
    """One asset slot.

    ``exchange_rate`` (1e18 scale) is the value of one raw unit relative to the
    peg; 1e18 for plain tokens, the staking exchange rate for an LST.
    """

    address: Address
    decimals: int = Field(default=18, ge=0, le=36)
    exchange_rate: int = Field(default=PRECISION, gt=0, alias="exchangeRate")

    model_config = {"populate_by_name": True}

    def to_asset(self) -> Asset:
        return Asset.with_exchange_rate(self.address, self.exchange_rate, self.decimals)


class PoolConfig(BaseModel):
    """Initial pool parameters and role holders."""

    assets: list[AssetConfig] = Field(min_length=N_COINS, max_length=N_COINS)
    amplification: int = Field(gt=0, lt=MAX_A)
    fee: int = Field(ge=0, le=MAX_FEE, description="Swap fee, 1e10 scale")
    admin_fee: int = Field(
        ge=0, le=MAX_ADMIN_FEE, alias="adminFee", description="Admin share of fees, 1e10 scale"
    )
    price_thresholds: list[int] = Field(
        min_length=N_COINS,
        max_length=N_COINS,
        alias="priceThresholds",
        description="Max oracle deviation per asset, 1e18 scale",
    )
    admin: Address
    manager: Address
    pauser: Address

    model_config = {"populate_by_name": True}

    @field_validator("price_thresholds")
    @classmethod
    def _check_thresholds(cls, value: list[int]) -> list[int]:
        for threshold in value:
            if not 0 < threshold <= THRESHOLD_SCALE:
                raise ValueError(f"Price threshold must be in (0, {THRESHOLD_SCALE}]: {threshold}")
        return value

    @model_validator(mode="after")
    def _distinct_assets(self) -> "PoolConfig":
        if self.assets[0].address == self.assets[1].address:
            raise ValueError("Pool assets must be distinct")
        return self

    def build_assets(self) -> tuple[Asset, Asset]:
        first, second = (config.to_asset() for config in self.assets)
        return first, second
