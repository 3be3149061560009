"""Tests for StableSwapPool.exchange and the price guard."""

import pytest

from stableswap.errors import PriceDeviationError, SlippageError, ValidationError
from stableswap.execution import CallContext
from stableswap.pool_info import PoolInfo
from tests.helpers import (
    ALICE,
    BALANCED_SEED,
    MANAGER,
    PEG_PRICE,
    TOKEN_A,
    TOKEN_B,
    make_pool,
)

DX = 1000 * 10**18


class TestExchange:
    """Tests for successful trades."""

    def test_transfers_and_balances(self, env):
        pool = env.pool
        expected = pool.get_dy(0, 1, DX)
        env.fund(ALICE, [DX, 0])

        dy = pool.exchange(env.ctx(ALICE), 0, 1, DX, expected)

        assert dy == expected
        assert env.balance(ALICE, 0) == 0
        assert env.balance(ALICE, 1) == dy
        assert pool.balances(0) == BALANCED_SEED[0] + DX
        assert pool.balances(1) == BALANCED_SEED[1] - dy - pool.admin_balances(1)

    def test_near_parity_output(self, env):
        """A 0.1% trade at parity returns just under 1:1 minus the 0.01% fee."""
        dy = env.pool.get_dy(0, 1, DX)
        assert DX * 9998 // 10000 < dy < DX * 9999 // 10000

    def test_admin_fee_accrues_on_output_asset(self, env):
        fee, admin_fee = PoolInfo(env.pool).get_exchange_fee(0, 1, DX)
        env.fund(ALICE, [DX, 0])
        env.pool.exchange(env.ctx(ALICE), 0, 1, DX, 0)
        assert admin_fee > 0
        assert env.pool.admin_balances(1) == admin_fee
        assert env.pool.admin_balances(0) == 0
        assert fee >= admin_fee

    def test_custody_matches_ledger(self, env):
        env.fund(ALICE, [DX, 0])
        env.pool.exchange(env.ctx(ALICE), 0, 1, DX, 0)
        for i in range(2):
            assert env.custody(i) == env.pool.balances(i) + env.pool.admin_balances(i)

    def test_reverse_direction(self, env):
        env.fund(ALICE, [0, DX])
        dy = env.pool.exchange(env.ctx(ALICE), 1, 0, DX, 0)
        assert env.balance(ALICE, 0) == dy
        assert env.pool.admin_balances(0) > 0


class TestExchangeValidation:
    """Tests for rejected trades."""

    def test_slippage(self, env):
        expected = env.pool.get_dy(0, 1, DX)
        env.fund(ALICE, [DX, 0])
        with pytest.raises(SlippageError, match="below minimum"):
            env.pool.exchange(env.ctx(ALICE), 0, 1, DX, expected + 1)
        assert env.balance(ALICE, 0) == DX
        assert env.pool.balances(0) == BALANCED_SEED[0]

    def test_same_asset(self, env):
        with pytest.raises(ValidationError, match="itself"):
            env.pool.exchange(env.ctx(ALICE), 0, 0, DX, 0)

    def test_zero_amount(self, env):
        with pytest.raises(ValidationError, match="positive"):
            env.pool.exchange(env.ctx(ALICE), 0, 1, 0, 0)

    def test_bad_index(self, env):
        with pytest.raises(ValidationError, match="out of range"):
            env.pool.exchange(env.ctx(ALICE), 0, 2, DX, 0)

    def test_unfunded_trader(self, env):
        with pytest.raises(ValidationError):
            env.pool.exchange(env.ctx(ALICE), 0, 1, DX, 0)
        assert env.pool.balances(0) == BALANCED_SEED[0]

    def test_token_pool_rejects_value(self, env):
        env.fund(ALICE, [DX, 0])
        with pytest.raises(ValidationError, match="does not match"):
            env.pool.exchange(CallContext(ALICE, 1), 0, 1, DX, 0)

    def test_empty_pool(self, empty_env):
        with pytest.raises(ValidationError):
            empty_env.pool.get_dy(0, 1, DX)


class TestGetDy:
    """Tests for the exchange quote."""

    def test_deterministic(self, env):
        assert env.pool.get_dy(0, 1, DX) == env.pool.get_dy(0, 1, DX)

    def test_monotone_in_dx(self, env):
        quotes = [env.pool.get_dy(0, 1, dx) for dx in (10**15, 10**18, 10**21, 10**23, 10**24)]
        assert quotes == sorted(quotes)


class TestPriceGuard:
    """Tests for the oracle deviation check on trades."""

    def test_huge_trade_reverts(self, env):
        """Draining most of asset 1 moves the pool price far from the oracle."""
        dx = 1_900_000 * 10**18
        env.fund(ALICE, [dx, 0])
        with pytest.raises(PriceDeviationError) as exc_info:
            env.pool.exchange(env.ctx(ALICE), 0, 1, dx, 0)
        assert exc_info.value.asset in (TOKEN_A, TOKEN_B)
        assert env.balance(ALICE, 0) == dx
        assert env.pool.balances(1) == BALANCED_SEED[1]

    def test_oracle_off_peg_reverts_small_trade(self, env):
        """With the oracle 5% away from the pool price even a tiny trade fails."""
        env.oracle.set_price(TOKEN_A, PEG_PRICE * 105 // 100)
        env.fund(ALICE, [DX, 0])
        with pytest.raises(PriceDeviationError, match=TOKEN_A):
            env.pool.exchange(env.ctx(ALICE), 0, 1, DX, 0)

    def test_oracle_within_threshold_passes(self, env):
        env.oracle.set_price(TOKEN_A, PEG_PRICE * 102 // 100)
        env.fund(ALICE, [DX, 0])
        assert env.pool.exchange(env.ctx(ALICE), 0, 1, DX, 0) > 0

    def test_tighter_threshold_reverts(self, env):
        env.oracle.set_price(TOKEN_A, PEG_PRICE * 102 // 100)
        env.pool.set_price_thresholds(env.ctx(MANAGER), [10**16, 10**16])
        env.fund(ALICE, [DX, 0])
        with pytest.raises(PriceDeviationError):
            env.pool.exchange(env.ctx(ALICE), 0, 1, DX, 0)

    def test_reads_both_prices(self, env):
        env.fund(ALICE, [DX, 0])
        env.pool.exchange(env.ctx(ALICE), 0, 1, DX, 0)
        assert set(env.oracle.calls) == {TOKEN_A, TOKEN_B}

    def test_non_positive_oracle_price(self, env):
        env.oracle.set_price(TOKEN_B, 0)
        env.fund(ALICE, [DX, 0])
        with pytest.raises(ValidationError, match="non-positive price"):
            env.pool.exchange(env.ctx(ALICE), 0, 1, DX, 0)

    def test_six_decimal_asset(self):
        """Whole-token conversion makes the guard decimals-agnostic."""
        env = make_pool(decimals=(6, 18), seed=[10**12, 10**24])
        env.fund(ALICE, [10**9, 0])
        dy = env.pool.exchange(env.ctx(ALICE), 0, 1, 10**9, 0)
        assert 999 * 10**18 < dy < 1000 * 10**18
