"""Test helpers module for shared test utilities.

- constants: Account/contract addresses and pool parameters
- factories: Pool factory and fake clock
"""

from tests.helpers.constants import (
    ADMIN,
    ADMIN_FEE,
    ALICE,
    AMPLIFICATION,
    BALANCED_SEED,
    BOB,
    FEE,
    MANAGER,
    NATIVE,
    PAUSER,
    PEG_PRICE,
    POOL,
    START_TIME,
    THRESHOLD,
    TOKEN_A,
    TOKEN_B,
)
from tests.helpers.factories import FakeClock, PoolEnv, make_pool, make_pool_config

__all__ = [
    # Constants
    "ADMIN",
    "MANAGER",
    "PAUSER",
    "ALICE",
    "BOB",
    "POOL",
    "TOKEN_A",
    "TOKEN_B",
    "NATIVE",
    "AMPLIFICATION",
    "FEE",
    "ADMIN_FEE",
    "THRESHOLD",
    "PEG_PRICE",
    "START_TIME",
    "BALANCED_SEED",
    # Factories
    "FakeClock",
    "PoolEnv",
    "make_pool",
    "make_pool_config",
]
