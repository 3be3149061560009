"""Read-only quoting service for a deployed pool.

Mirrors the accountant for integrators that need fee breakdowns rather than
just the resulting amounts. Every quote is computed from the same plan the
pool would commit.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import TYPE_CHECKING

from stableswap import accountant

if TYPE_CHECKING:
    from stableswap.pool import StableSwapPool


class PoolKind(str, Enum):
    """Which asset slot, if any, holds the native currency."""

    BOTH_TOKEN = "both_token"
    ASSET0_NATIVE = "asset0_native"
    ASSET1_NATIVE = "asset1_native"


def classify(pool: StableSwapPool) -> PoolKind:
    if pool.coins(0).is_native:
        return PoolKind.ASSET0_NATIVE
    if pool.coins(1).is_native:
        return PoolKind.ASSET1_NATIVE
    return PoolKind.BOTH_TOKEN


class PoolInfo:
    """Fee and amount quotes for ``pool``."""

    def __init__(self, pool: StableSwapPool) -> None:
        self.pool = pool

    @property
    def kind(self) -> PoolKind:
        return classify(self.pool)

    def calc_coins_amount(self, lp_amount: int) -> list[int]:
        """Assets returned by a proportional withdrawal of ``lp_amount`` shares."""
        return list(accountant.plan_remove_liquidity(self.pool.view(), lp_amount).amounts)

    def get_add_liquidity_fee(self, amounts: Sequence[int]) -> list[int]:
        """Imbalance fee per asset charged on depositing ``amounts``."""
        return list(accountant.plan_add_liquidity(self.pool.view(), amounts).fees)

    def get_add_liquidity_mint_amount(self, amounts: Sequence[int]) -> int:
        return accountant.plan_add_liquidity(self.pool.view(), amounts).lp_amount

    def get_remove_liquidity_imbalance_fee(self, amounts: Sequence[int]) -> list[int]:
        """Imbalance fee per asset charged on withdrawing exact ``amounts``."""
        return list(accountant.plan_remove_liquidity_imbalance(self.pool.view(), amounts).fees)

    def get_remove_liquidity_one_coin_fee(self, lp_amount: int, i: int) -> int:
        """Fee withheld from a single-asset withdrawal, raw units of asset i."""
        return accountant.plan_remove_liquidity_one_coin(self.pool.view(), lp_amount, i).fees[i]

    def get_exchange_fee(self, i: int, j: int, dx: int) -> tuple[int, int]:
        """Swap fee and its admin portion, raw units of asset j.

        Returns:
            (fee, admin_fee)
        """
        plan = accountant.plan_exchange(self.pool.view(), i, j, dx)
        return plan.fee, plan.admin_fee
