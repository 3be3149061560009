"""Pytest configuration and fixtures."""

import pytest

from tests.helpers import BALANCED_SEED, FakeClock, PoolEnv, make_pool


@pytest.fixture
def clock() -> FakeClock:
    """A fake clock starting at START_TIME."""
    return FakeClock()


@pytest.fixture
def empty_env() -> PoolEnv:
    """An unseeded token/token pool."""
    return make_pool()


@pytest.fixture
def env() -> PoolEnv:
    """A token/token pool seeded with 1M of each asset, oracle at parity."""
    return make_pool(seed=BALANCED_SEED)


@pytest.fixture
def native_env() -> PoolEnv:
    """A pool whose asset 0 is the native currency, seeded at parity."""
    return make_pool(native_slot=0, seed=BALANCED_SEED)
