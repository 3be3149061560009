"""Pydantic models for pool configuration and the quoting API."""

from stableswap.models.api import (
    ExchangeQuoteRequest,
    ExchangeQuoteResponse,
    PoolResponse,
    RemoveLiquidityRequest,
    RemoveLiquidityResponse,
    TokenAmountRequest,
    TokenAmountResponse,
    WithdrawOneCoinRequest,
    WithdrawOneCoinResponse,
)
from stableswap.models.config import AssetConfig, PoolConfig
from stableswap.models.types import Address, Uint256

__all__ = [
    # Types
    "Address",
    "Uint256",
    # Configuration
    "AssetConfig",
    "PoolConfig",
    # API
    "ExchangeQuoteRequest",
    "ExchangeQuoteResponse",
    "PoolResponse",
    "RemoveLiquidityRequest",
    "RemoveLiquidityResponse",
    "TokenAmountRequest",
    "TokenAmountResponse",
    "WithdrawOneCoinRequest",
    "WithdrawOneCoinResponse",
]
