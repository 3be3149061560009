"""Build an in-memory pool deployment from a JSON description.

Used by the API service to stand up the pool it quotes against. The file is
named by the STABLESWAP_POOL_CONFIG environment variable, for example:

    {
      "poolAddress": "0x...", "lpToken": "0x...",
      "pool": {"assets": [...], "amplification": 1000, "fee": 1000000, ...},
      "prices": {"0x...": 84660000000, "0x...": 83000000000},
      "seed": ["102000000000000000000000", "100000000000000000000000"]
    }
"""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path

import structlog
from pydantic import BaseModel, Field

from stableswap.constants import N_COINS
from stableswap.execution import CallContext
from stableswap.ledgers import InMemoryToken, LPShareToken, NativeLedger
from stableswap.models.config import PoolConfig
from stableswap.models.types import Address, Uint256
from stableswap.oracle import StaticPriceOracle
from stableswap.pool import StableSwapPool

logger = structlog.get_logger()

POOL_CONFIG_ENV = "STABLESWAP_POOL_CONFIG"


class DeploymentConfig(BaseModel):
    """Pool, oracle prices and optional initial liquidity."""

    pool_address: Address = Field(alias="poolAddress")
    lp_token: Address = Field(alias="lpToken")
    pool: PoolConfig
    prices: dict[str, int] = Field(description="Oracle prices per asset, 1e8 scale")
    seed: list[Uint256] | None = Field(
        default=None,
        min_length=N_COINS,
        max_length=N_COINS,
        description="Initial deposit made by the admin account",
    )

    model_config = {"populate_by_name": True}


def load_deployment(path: str | Path) -> DeploymentConfig:
    return DeploymentConfig.model_validate_json(Path(path).read_text())


def build_pool(
    deployment: DeploymentConfig, clock: Callable[[], int] | None = None
) -> StableSwapPool:
    """Create ledgers, oracle, LP token and pool; seed it if requested."""
    config = deployment.pool
    assets = config.build_assets()
    native = NativeLedger() if any(asset.is_native for asset in assets) else None
    tokens = {
        asset.address: InMemoryToken(asset.address) for asset in assets if not asset.is_native
    }

    pool = StableSwapPool.initialize(
        deployment.pool_address,
        config,
        LPShareToken(deployment.lp_token),
        StaticPriceOracle(deployment.prices),
        tokens,
        native,
        clock,
    )

    if deployment.seed is not None:
        amounts = [int(amount) for amount in deployment.seed]
        value = 0
        for i, asset in enumerate(assets):
            if asset.is_native:
                native.fund(config.admin, amounts[i])  # type: ignore[union-attr]
                value = amounts[i]
            else:
                tokens[asset.address].mint(config.admin, amounts[i])
        pool.add_liquidity(CallContext(config.admin, value), amounts, 0)

    logger.info("pool_deployed", pool=pool.address, seeded=deployment.seed is not None)
    return pool


_default_pool: StableSwapPool | None = None


def get_default_pool() -> StableSwapPool | None:
    """Pool described by STABLESWAP_POOL_CONFIG, built on first use.

    Returns None when the variable is unset.
    """
    global _default_pool
    if _default_pool is None:
        path = os.environ.get(POOL_CONFIG_ENV)
        if not path:
            return None
        _default_pool = build_pool(load_deployment(path))
    return _default_pool
