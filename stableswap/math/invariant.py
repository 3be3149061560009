"""Stableswap invariant solver.

Core math for the two-asset stableswap curve:

    A * n^n * sum(x_i) + D = A * D * n^n + D^(n+1) / (n^n * prod(x_i))

The pool uses the ``Ann = A * n`` parameterization: the remaining n^(n-1)
factor is folded into A itself, so A is the raw amplification coefficient
(e.g. 1000) with no extra precision multiplier.

All balances passed here are normalized (18-decimal) integers. Every solver
iterates Newton's method until successive iterates differ by at most one unit
and fails closed with ConvergenceError after MAX_ITERATIONS rounds.

IMPORTANT: All arithmetic uses SafeInt so that an underflow or a division by
zero surfaces as an error instead of a wrong price.
"""

from collections.abc import Sequence

from stableswap.constants import MAX_ITERATIONS, N_COINS, PRECISION
from stableswap.errors import ConvergenceError, ValidationError
from stableswap.math.safe_int import S, SafeInt


def _check_amp(amp: int) -> None:
    if amp <= 0:
        raise ValidationError(f"Amplification must be positive, got {amp}")


def get_d(xp: Sequence[int], amp: int) -> int:
    """Calculate the invariant D for normalized balances.

    Algorithm:
        1. Initial guess: D = sum(xp)
        2. D_P = D^(n+1) / (n^n * prod(xp)), built one factor at a time
        3. D = (Ann*S + D_P*n) * D / ((Ann - 1)*D + (n+1)*D_P)
        4. Stop when |D_new - D_old| <= 1

    Args:
        xp: Normalized balances (1e18 scale)
        amp: Amplification coefficient A (unscaled)

    Returns:
        The invariant D (1e18 scale). Zero for an empty pool.

    Raises:
        ValidationError: If amp is not positive or a balance is zero while
            the pool is not empty
        ConvergenceError: If iteration doesn't converge
    """
    _check_amp(amp)
    sum_balances = sum(xp)
    if sum_balances == 0:
        return 0
    for i, x in enumerate(xp):
        if x <= 0:
            raise ValidationError(f"Balance at index {i} must be positive")

    n = len(xp)
    total = S(sum_balances)
    ann = S(amp) * n
    d = total

    for _ in range(MAX_ITERATIONS):
        d_p = d
        for x in xp:
            d_p = (d_p * d) // (S(x) * n)
        d_prev = d

        numerator = (ann * total + d_p * n) * d
        denominator = (ann - 1) * d + d_p * (n + 1)
        d = numerator // denominator

        if d.within(d_prev):
            return d.value

    raise ConvergenceError(f"Invariant D did not converge after {MAX_ITERATIONS} iterations")


def _solve_balance(amp: int, others: Sequence[int], d: SafeInt) -> int:
    """Newton solve for the one free balance given D and the other balances.

    Solves y^2 + (b - D) * y = c with
        c = D^(n+1) / (n^n * prod(others) * Ann * n)
        b = sum(others) + D / Ann
    via y = (y^2 + c) / (2y + b - D), starting from y = D.
    """
    ann = S(amp) * N_COINS
    c = d
    sum_others = S(0)
    for x in others:
        if x <= 0:
            raise ValidationError("Counterparty solve requires positive balances")
        sum_others = sum_others + x
        c = (c * d) // (S(x) * N_COINS)
    c = (c * d) // (ann * N_COINS)
    b = sum_others + d // ann

    y = d
    for _ in range(MAX_ITERATIONS):
        y_prev = y
        span = y * 2 + b
        if span <= d:
            raise ConvergenceError("Counterparty balance denominator became non-positive")
        y = (y * y + c) // (span - d)
        if y.within(y_prev):
            return y.value

    raise ConvergenceError(
        f"Counterparty balance did not converge after {MAX_ITERATIONS} iterations"
    )


def get_y(i: int, j: int, x: int, xp: Sequence[int], amp: int) -> int:
    """Calculate xp[j] after setting xp[i] = x while preserving D.

    Used for trade pricing: the caller adds the normalized input to xp[i] and
    reads the new counterparty balance.

    Args:
        i: Index of the asset whose balance is set
        j: Index of the asset to solve for
        x: New normalized balance of asset i
        xp: Current normalized balances
        amp: Amplification coefficient A

    Returns:
        New normalized balance of asset j

    Raises:
        ValidationError: If indices are invalid or equal
        ConvergenceError: If iteration doesn't converge
    """
    n = len(xp)
    if i == j:
        raise ValidationError("Cannot swap asset with itself")
    if not (0 <= i < n and 0 <= j < n):
        raise ValidationError(f"Asset index out of range: i={i}, j={j}")

    d = S(get_d(xp, amp))
    others = [x if k == i else xp[k] for k in range(n) if k != j]
    return _solve_balance(amp, others, d)


def get_y_d(amp: int, i: int, xp: Sequence[int], d: int) -> int:
    """Calculate xp[i] that yields invariant ``d`` with every other balance fixed.

    Used for single-asset withdrawal sizing with a reduced target D.

    Raises:
        ValidationError: If i is out of range
        ConvergenceError: If iteration doesn't converge
    """
    _check_amp(amp)
    n = len(xp)
    if not 0 <= i < n:
        raise ValidationError(f"Asset index out of range: {i}")
    others = [xp[k] for k in range(n) if k != i]
    return _solve_balance(amp, others, S(d))


def spot_price(xp: Sequence[int], amp: int, d: int | None = None) -> int:
    """Marginal price dx0/dx1 on the 1e18 scale.

    This is the price of one unit of asset 1 expressed in asset 0 (both
    normalized). It is 1e18 for a balanced pool and grows as asset 1 becomes
    scarce.
    """
    if d is None:
        d = get_d(xp, amp)
    x0, x1 = S(xp[0]), S(xp[1])
    ann = S(amp) * N_COINS
    dr = S(d) // (N_COINS**N_COINS)
    for x in xp:
        dr = (dr * d) // S(x)
    return ((ann * x0 + (dr * x0) // x1) * PRECISION // (ann * x0 + dr)).value
