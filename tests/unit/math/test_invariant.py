"""Tests for the stableswap invariant solver."""

from math import isqrt

import pytest

import stableswap.math.invariant as invariant
from stableswap.errors import ConvergenceError, ValidationError
from stableswap.math.invariant import get_d, get_y, get_y_d, spot_price

AMP = 1000
X = 10**24  # 1M normalized units


class TestGetD:
    """Tests for the invariant D."""

    def test_empty_pool_is_zero(self):
        assert get_d([0, 0], AMP) == 0

    def test_balanced_pool_equals_sum(self):
        """At parity the curve is the constant-sum line: D == x0 + x1."""
        assert get_d([X, X], AMP) == 2 * X
        assert get_d([X, X], 1) == 2 * X

    def test_imbalanced_between_product_and_sum(self):
        """D lies between the constant-product and constant-sum invariants."""
        xp = [3 * X, X]
        d = get_d(xp, AMP)
        assert 2 * isqrt(xp[0] * xp[1]) <= d < sum(xp)

    def test_higher_amp_is_closer_to_sum(self):
        xp = [3 * X, X]
        assert get_d(xp, 10) < get_d(xp, AMP) < sum(xp)

    def test_zero_balance_raises(self):
        """A single zero balance leaves the curve undefined."""
        with pytest.raises(ValidationError, match="index 1"):
            get_d([X, 0], AMP)

    def test_non_positive_amp_raises(self):
        with pytest.raises(ValidationError, match="Amplification"):
            get_d([X, X], 0)

    def test_non_convergence_raises(self, monkeypatch):
        """Fails closed when Newton's method runs out of rounds."""
        monkeypatch.setattr(invariant, "MAX_ITERATIONS", 0)
        with pytest.raises(ConvergenceError, match="did not converge"):
            get_d([3 * X, X], AMP)


class TestGetY:
    """Tests for the counterparty balance solve."""

    def test_preserves_invariant(self):
        xp = [X, X]
        d = get_d(xp, AMP)
        y = get_y(0, 1, X + 10**22, xp, AMP)
        assert y < X
        assert abs(get_d([X + 10**22, y], AMP) - d) <= 10

    def test_near_parity_swap_is_near_one_to_one(self):
        """With high amplification a small trade at parity is nearly 1:1."""
        dx = 10**21
        y = get_y(0, 1, X + dx, [X, X], AMP)
        dy = X - y
        assert dx * 9999 // 10000 <= dy <= dx

    def test_monotone_in_input(self):
        xp = [X, X]
        ys = [get_y(0, 1, X + dx, xp, AMP) for dx in (10**18, 10**21, 10**23)]
        assert ys[0] > ys[1] > ys[2]

    def test_same_index_raises(self):
        with pytest.raises(ValidationError, match="itself"):
            get_y(0, 0, X, [X, X], AMP)

    def test_index_out_of_range_raises(self):
        with pytest.raises(ValidationError, match="out of range"):
            get_y(0, 2, X, [X, X], AMP)

    def test_non_convergence_raises(self, monkeypatch):
        monkeypatch.setattr(invariant, "MAX_ITERATIONS", 0)
        with pytest.raises(ConvergenceError):
            get_y_d(AMP, 0, [X, X], 2 * X)


class TestGetYD:
    """Tests for the balance solve against a target D."""

    def test_recovers_balance_for_current_d(self):
        xp = [2 * X, X]
        d = get_d(xp, AMP)
        assert abs(get_y_d(AMP, 0, xp, d) - xp[0]) <= 10

    def test_lower_d_gives_lower_balance(self):
        xp = [X, X]
        d = get_d(xp, AMP)
        assert get_y_d(AMP, 0, xp, d * 9 // 10) < X

    def test_index_out_of_range_raises(self):
        with pytest.raises(ValidationError):
            get_y_d(AMP, 5, [X, X], 2 * X)


class TestSpotPrice:
    """Tests for the marginal price dx0/dx1."""

    def test_parity(self):
        assert spot_price([X, X], AMP) == 10**18

    def test_scarce_asset_is_more_expensive(self):
        """When asset 1 is scarce, one unit of it costs more than one unit of asset 0."""
        assert spot_price([2 * X, X], AMP) > 10**18
        assert spot_price([X, 2 * X], AMP) < 10**18

    def test_matches_small_trade(self):
        """Spot price agrees with the execution price of a tiny trade."""
        xp = [2 * X, X]
        p = spot_price(xp, AMP)
        dx1 = 10**18
        y0 = get_y(1, 0, xp[1] + dx1, xp, AMP)
        execution = (xp[0] - y0) * 10**18 // dx1
        assert abs(execution - p) * 1000 < p
