"""Request and response models for the quoting API.

Amounts travel as uint256 decimal strings so that 1e18-scaled values survive
JSON clients that parse numbers as doubles.
"""

from typing import Annotated

from pydantic import BaseModel, Field

from stableswap.constants import N_COINS
from stableswap.models.types import Address, Uint256

AssetIndex = Annotated[int, Field(ge=0, lt=N_COINS)]


class ExchangeQuoteRequest(BaseModel):
    i: AssetIndex
    j: AssetIndex
    dx: Uint256


class ExchangeQuoteResponse(BaseModel):
    """Output and fee breakdown (raw units of asset j)."""

    dy: Uint256
    fee: Uint256
    admin_fee: Uint256 = Field(alias="adminFee")

    model_config = {"populate_by_name": True}


class TokenAmountRequest(BaseModel):
    amounts: list[Uint256] = Field(min_length=N_COINS, max_length=N_COINS)
    is_deposit: bool = Field(alias="isDeposit")

    model_config = {"populate_by_name": True}


class TokenAmountResponse(BaseModel):
    """LP shares minted (deposit) or burned (withdrawal) and the imbalance fee."""

    lp_amount: Uint256 = Field(alias="lpAmount")
    fees: list[Uint256]

    model_config = {"populate_by_name": True}


class WithdrawOneCoinRequest(BaseModel):
    lp_amount: Uint256 = Field(alias="lpAmount")
    i: AssetIndex

    model_config = {"populate_by_name": True}


class WithdrawOneCoinResponse(BaseModel):
    dy: Uint256
    fee: Uint256


class RemoveLiquidityRequest(BaseModel):
    lp_amount: Uint256 = Field(alias="lpAmount")

    model_config = {"populate_by_name": True}


class RemoveLiquidityResponse(BaseModel):
    amounts: list[Uint256]


class AssetInfo(BaseModel):
    address: Address
    decimals: int
    rate: Uint256


class PoolResponse(BaseModel):
    """Snapshot of the pool's public state."""

    address: Address
    kind: str
    assets: list[AssetInfo]
    balances: list[Uint256]
    admin_balances: list[Uint256] = Field(alias="adminBalances")
    lp_supply: Uint256 = Field(alias="lpSupply")
    amplification: int
    fee: int
    admin_fee: int = Field(alias="adminFee")
    price_thresholds: list[Uint256] = Field(alias="priceThresholds")
    paused: bool
    virtual_price: Uint256 | None = Field(default=None, alias="virtualPrice")

    model_config = {"populate_by_name": True}
