"""Liquidity accounting.

Every balance/supply mutation of the pool is first computed here as a frozen
plan over a read-only PoolView. The pool commits plans; quote functions simply
return them. Because both paths run the same code, a quote reproduces the
mutation's fee math bit for bit.

Units: ``balances``, ``amounts`` and fees in plans are raw asset units. The
invariant D and ``xp`` vectors are normalized (1e18 scale).
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from stableswap.constants import N_COINS, PRECISION
from stableswap.errors import ValidationError
from stableswap.fees import admin_portion, imbalance_fee, imbalance_fee_fraction, swap_fee
from stableswap.math.fixed_point import FeeFraction
from stableswap.math.invariant import get_d, get_y, get_y_d
from stableswap.rates import RateNormalizer


@dataclass(frozen=True)
class PoolView:
    """Read-only inputs to the accounting functions.

    Attributes:
        balances: LP-owned raw balances
        lp_supply: Outstanding LP shares
        amp: Effective amplification coefficient
        fee: Swap fee fraction
        admin_fee: Admin share of fees
        normalizer: Rate normalizer for the pool's assets
    """

    balances: tuple[int, ...]
    lp_supply: int
    amp: int
    fee: FeeFraction
    admin_fee: FeeFraction
    normalizer: RateNormalizer

    def xp(self, balances: Sequence[int] | None = None) -> list[int]:
        return self.normalizer.normalize_all(self.balances if balances is None else balances)

    def d(self, balances: Sequence[int] | None = None) -> int:
        return get_d(self.xp(balances), self.amp)


@dataclass(frozen=True)
class ExchangePlan:
    """Outcome of exchanging ``dx`` of asset i for asset j.

    Attributes:
        dy: Raw output paid to the trader (after fee)
        fee: Raw swap fee withheld
        admin_fee: Raw part of ``fee`` moved to accrued admin fees
        new_balances: LP-owned balances after the trade
    """

    i: int
    j: int
    dx: int
    dy: int
    fee: int
    admin_fee: int
    new_balances: tuple[int, ...]


@dataclass(frozen=True)
class LiquidityPlan:
    """Outcome of a liquidity change.

    Attributes:
        amounts: Raw amounts entering (deposit) or leaving (withdrawal) the pool
        lp_amount: LP shares minted (deposit) or burned (withdrawal)
        fees: Raw imbalance or withdrawal fee per asset
        admin_fees: Raw admin portion of ``fees`` per asset
        new_balances: LP-owned balances after the change
    """

    amounts: tuple[int, ...]
    lp_amount: int
    fees: tuple[int, ...]
    admin_fees: tuple[int, ...]
    new_balances: tuple[int, ...]


_NO_FEES = (0,) * N_COINS


def _check_index(i: int) -> None:
    if not 0 <= i < N_COINS:
        raise ValidationError(f"Asset index out of range: {i}")


def _check_amounts(amounts: Sequence[int]) -> tuple[int, ...]:
    if len(amounts) != N_COINS:
        raise ValidationError(f"Expected {N_COINS} amounts, got {len(amounts)}")
    if any(a < 0 for a in amounts):
        raise ValidationError(f"Amounts must be non-negative, got {list(amounts)}")
    if not any(amounts):
        raise ValidationError("At least one amount must be positive")
    return tuple(amounts)


def _check_lp_amount(view: PoolView, lp_amount: int) -> None:
    if view.lp_supply == 0:
        raise ValidationError("Pool has no liquidity")
    if not 0 < lp_amount <= view.lp_supply:
        raise ValidationError(f"LP amount must be in (0, {view.lp_supply}], got {lp_amount}")


def curve_dy(view: PoolView, balances: Sequence[int], i: int, j: int, dx: int) -> int:
    """Fee-free normalized output for ``dx`` raw units of asset i.

    Preserves D of ``balances``; one unit is withheld against rounding.
    """
    if i == j:
        raise ValidationError("Cannot swap asset with itself")
    _check_index(i)
    _check_index(j)
    if dx <= 0:
        raise ValidationError(f"Exchange amount must be positive, got {dx}")
    xp = view.xp(balances)
    x = xp[i] + view.normalizer.normalize(dx, i)
    y = get_y(i, j, x, xp, view.amp)
    if xp[j] <= y + 1:
        raise ValidationError("Exchange amount too small to produce output")
    return xp[j] - y - 1


def plan_exchange(view: PoolView, i: int, j: int, dx: int) -> ExchangePlan:
    """Plan an exchange of ``dx`` raw units of asset i into asset j.

    The swap fee is charged on the output in normalized units; output and
    admin fee are then denormalized (rounding down).
    """
    if view.lp_supply == 0:
        raise ValidationError("Pool has no liquidity")
    dy_norm = curve_dy(view, view.balances, i, j, dx)
    fee_norm = swap_fee(dy_norm, view.fee)
    dy = view.normalizer.denormalize(dy_norm - fee_norm, j)
    admin = view.normalizer.denormalize(admin_portion(fee_norm, view.admin_fee), j)

    new_balances = list(view.balances)
    new_balances[i] += dx
    # When rounding errors happen, we undercharge admin fee in favor of LP
    new_balances[j] -= dy + admin
    return ExchangePlan(
        i=i,
        j=j,
        dx=dx,
        dy=dy,
        fee=view.normalizer.denormalize(fee_norm, j),
        admin_fee=admin,
        new_balances=tuple(new_balances),
    )


def _charge_imbalance(
    view: PoolView, old: Sequence[int], new: Sequence[int], d0: int, d1: int
) -> tuple[list[int], list[int], list[int], int]:
    """Imbalance fees for moving from ``old`` to ``new`` balances.

    Returns:
        (fees, admin_fees, lp_balances, d2) where lp_balances are the LP-owned
        balances to store and d2 is the invariant net of the full fee.
    """
    ideal = [d1 * balance // d0 for balance in old]
    fees = imbalance_fee(ideal, new, view.fee)
    admin_fees = [admin_portion(f, view.admin_fee) for f in fees]
    lp_balances = [n - a for n, a in zip(new, admin_fees, strict=True)]
    net = [n - f for n, f in zip(new, fees, strict=True)]
    return fees, admin_fees, lp_balances, view.d(net)


def plan_add_liquidity(view: PoolView, amounts: Sequence[int]) -> LiquidityPlan:
    """Plan a deposit of ``amounts``.

    The first deposit must include every asset and mints D. Later deposits
    pay the imbalance fee and mint ``supply * (D2 - D0) / D0``.
    """
    amounts = _check_amounts(amounts)
    supply = view.lp_supply
    old = view.balances
    if supply == 0 and not all(amounts):
        raise ValidationError("Initial deposit requires all assets")

    d0 = view.d(old) if supply > 0 else 0
    new = [b + a for b, a in zip(old, amounts, strict=True)]
    d1 = view.d(new)
    if d1 <= d0:
        raise ValidationError("Deposit does not increase the invariant")

    if supply == 0:
        return LiquidityPlan(
            amounts=amounts,
            lp_amount=d1,
            fees=_NO_FEES,
            admin_fees=_NO_FEES,
            new_balances=tuple(new),
        )

    fees, admin_fees, lp_balances, d2 = _charge_imbalance(view, old, new, d0, d1)
    if d2 <= d0:
        raise ValidationError("Deposit does not cover the imbalance fee")
    return LiquidityPlan(
        amounts=amounts,
        lp_amount=supply * (d2 - d0) // d0,
        fees=tuple(fees),
        admin_fees=tuple(admin_fees),
        new_balances=tuple(lp_balances),
    )


def plan_remove_liquidity(view: PoolView, lp_amount: int) -> LiquidityPlan:
    """Plan a proportional withdrawal: ``balances[i] * lp_amount / supply``, no fee."""
    _check_lp_amount(view, lp_amount)
    amounts = tuple(b * lp_amount // view.lp_supply for b in view.balances)
    return LiquidityPlan(
        amounts=amounts,
        lp_amount=lp_amount,
        fees=_NO_FEES,
        admin_fees=_NO_FEES,
        new_balances=tuple(b - a for b, a in zip(view.balances, amounts, strict=True)),
    )


def plan_remove_liquidity_imbalance(view: PoolView, amounts: Sequence[int]) -> LiquidityPlan:
    """Plan a withdrawal of exact ``amounts``.

    Burns ``(D0 - D2) * supply / D0 + 1`` shares; the extra share keeps
    rounding unfavorable for the withdrawer.
    """
    amounts = _check_amounts(amounts)
    supply = view.lp_supply
    if supply == 0:
        raise ValidationError("Pool has no liquidity")
    old = view.balances
    for i, (balance, amount) in enumerate(zip(old, amounts, strict=True)):
        if amount > balance:
            raise ValidationError(f"Withdrawal of asset {i} exceeds balance: {amount} > {balance}")

    d0 = view.d(old)
    new = [b - a for b, a in zip(old, amounts, strict=True)]
    d1 = view.d(new)
    fees, admin_fees, lp_balances, d2 = _charge_imbalance(view, old, new, d0, d1)

    burn = (d0 - d2) * supply // d0
    if burn <= 0:
        raise ValidationError("Withdrawal burns no LP shares")
    return LiquidityPlan(
        amounts=amounts,
        lp_amount=burn + 1,
        fees=tuple(fees),
        admin_fees=tuple(admin_fees),
        new_balances=tuple(lp_balances),
    )


def plan_remove_liquidity_one_coin(view: PoolView, lp_amount: int, i: int) -> LiquidityPlan:
    """Plan burning ``lp_amount`` shares for asset i only.

    Equivalent to a proportional withdrawal followed by trading the other
    asset's share into asset i; the imbalance fee is charged on the expected
    deltas of that simulated trade. The admin portion of the fee is moved to
    accrued admin fees.
    """
    _check_index(i)
    _check_lp_amount(view, lp_amount)
    supply = view.lp_supply
    xp = view.xp()
    d0 = get_d(xp, view.amp)
    d1 = d0 - lp_amount * d0 // supply
    new_y = get_y_d(view.amp, i, xp, d1)
    dy_before_fee = view.normalizer.denormalize(xp[i] - new_y, i)

    fee_fraction = imbalance_fee_fraction(view.fee)
    xp_reduced = list(xp)
    for k, x in enumerate(xp):
        if k == i:
            expected = x * d1 // d0 - new_y
        else:
            expected = x - x * d1 // d0
        xp_reduced[k] -= fee_fraction.apply(expected)

    dy_norm = xp_reduced[i] - get_y_d(view.amp, i, xp_reduced, d1)
    if dy_norm <= 1:
        raise ValidationError("Withdrawal amount too small")
    # Withdraw one unit less to account for rounding errors
    dy = view.normalizer.denormalize(dy_norm - 1, i)
    fee = dy_before_fee - dy
    admin = admin_portion(fee, view.admin_fee)

    amounts = [0] * N_COINS
    amounts[i] = dy
    fees = [0] * N_COINS
    fees[i] = fee
    admin_fees = [0] * N_COINS
    admin_fees[i] = admin
    new_balances = list(view.balances)
    new_balances[i] -= dy + admin
    return LiquidityPlan(
        amounts=tuple(amounts),
        lp_amount=lp_amount,
        fees=tuple(fees),
        admin_fees=tuple(admin_fees),
        new_balances=tuple(new_balances),
    )


def virtual_price(view: PoolView) -> int:
    """Value of one LP share in invariant units (1e18 scale)."""
    if view.lp_supply == 0:
        raise ValidationError("Pool has no liquidity")
    return view.d() * PRECISION // view.lp_supply
