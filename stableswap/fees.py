"""Fee engine.

Swap fees, the admin share of fees and the imbalance fee charged on
liquidity changes that are not proportional to the current reserves.

Scales: amounts are integers in whatever unit the caller passes (raw or
normalized); the result is in the same unit. Fee fractions are FeeFraction
(1e10 scale).
"""

from collections.abc import Sequence

from stableswap.constants import N_COINS
from stableswap.math.fixed_point import FeeFraction


def swap_fee(amount_out: int, fee: FeeFraction) -> int:
    """Fee withheld from a swap output: ``amount_out * fee / 1e10``, rounded down."""
    return fee.apply(amount_out)


def admin_portion(fee_amount: int, admin_fee: FeeFraction) -> int:
    """Part of a collected fee retained as protocol revenue (rounded down).

    The remainder stays in the LP-owned balances.
    """
    return admin_fee.apply(fee_amount)


def imbalance_fee_fraction(fee: FeeFraction, n_coins: int = N_COINS) -> FeeFraction:
    """Per-asset fee fraction for imbalanced liquidity changes.

    ``fee * n / (4 * (n - 1))`` makes an imbalanced deposit cost the same as
    a balanced deposit followed by the equivalent trade.
    """
    return FeeFraction(fee.value * n_coins // (4 * (n_coins - 1)))


def imbalance_fee(
    ideal_balances: Sequence[int],
    actual_balances: Sequence[int],
    fee: FeeFraction,
) -> list[int]:
    """Fee per asset proportional to the deviation from the proportional target.

    Args:
        ideal_balances: Balances a proportional change would have produced
        actual_balances: Balances after the requested change
        fee: Swap fee fraction (the imbalance scaling is applied here)

    Returns:
        Fee per asset, in the unit of the balances
    """
    scaled = imbalance_fee_fraction(fee, len(ideal_balances))
    return [
        scaled.apply(abs(ideal - actual))
        for ideal, actual in zip(ideal_balances, actual_balances, strict=True)
    ]
