"""Two-asset oracle-guarded stableswap pool.

StableSwapPool is the public facade. Each mutating operation:

1. takes the per-pool lock and marks the pool as entered (re-entry from a
   transfer hook raises ReentrancyError),
2. snapshots the pool, the LP-share token and every asset ledger,
3. checks roles and the pause gate, plans the change with the accountant and
   runs the price guard for trades,
4. commits ledger state, then performs outbound transfers.

Anything raised in steps 3-4 restores every snapshot, so a failed operation
leaves no partial effects.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import replace
from typing import Any

import structlog

from stableswap import accountant
from stableswap.accountant import ExchangePlan, LiquidityPlan, PoolView
from stableswap.constants import N_COINS, PRECISION
from stableswap.errors import ReentrancyError, SlippageError, ValidationError
from stableswap.execution import CallContext, Snapshottable, atomic
from stableswap.ledgers import InMemoryToken, LPShareToken, NativeLedger
from stableswap.lifecycle import (
    AccessControl,
    AmplificationRamp,
    LifecycleController,
    Role,
    validate_fees,
    validate_thresholds,
)
from stableswap.math.fixed_point import FeeFraction, Ratio
from stableswap.math.invariant import spot_price
from stableswap.models.config import PoolConfig
from stableswap.models.types import normalize_address
from stableswap.native import NativeAssetAdapter
from stableswap.oracle import PriceOracle, read_price
from stableswap.price_guard import check_price_deviation
from stableswap.rates import RateNormalizer
from stableswap.state import Asset, PoolState

logger = structlog.get_logger()


def _wall_clock() -> int:
    return int(time.time())


class StableSwapPool:
    """A two-asset stableswap pool guarded by an external price oracle."""

    def __init__(
        self,
        address: str,
        config: PoolConfig,
        lp_token: LPShareToken,
        oracle: PriceOracle,
        tokens: dict[str, InMemoryToken],
        native: NativeLedger | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self.address = normalize_address(address)
        assets = config.build_assets()
        validate_fees(config.fee, config.admin_fee)
        validate_thresholds(config.price_thresholds)

        self.state = PoolState(
            assets=assets,
            amplification=AmplificationRamp.constant(config.amplification),
            fee=config.fee,
            admin_fee=config.admin_fee,
            price_thresholds=list(config.price_thresholds),
        )
        self.clock = clock or _wall_clock
        self.access = AccessControl(config.admin, config.manager, config.pauser)
        self.lifecycle = LifecycleController(self.state, self.access, self.clock)
        self.normalizer = RateNormalizer(assets)
        self.custody = NativeAssetAdapter(
            self.address, assets, {k.lower(): v for k, v in tokens.items()}, native
        )
        self.oracle = oracle
        self.lp_token = lp_token
        lp_token.set_minter(self.address)

        self._lock = threading.RLock()
        self._entered = False

        logger.info(
            "pool_initialized",
            pool=self.address,
            assets=[asset.address for asset in assets],
            amplification=config.amplification,
            fee=config.fee,
            admin_fee=config.admin_fee,
        )

    @classmethod
    def initialize(
        cls,
        address: str,
        config: PoolConfig,
        lp_token: LPShareToken,
        oracle: PriceOracle,
        tokens: dict[str, InMemoryToken],
        native: NativeLedger | None = None,
        clock: Callable[[], int] | None = None,
    ) -> StableSwapPool:
        """One-time construction of a pool; the LP token's minter becomes the pool."""
        return cls(address, config, lp_token, oracle, tokens, native, clock)

    # ------------------------------------------------------------------
    # Atomicity
    # ------------------------------------------------------------------

    def participants(self) -> list[Snapshottable]:
        """Everything a pool operation may mutate."""
        return [self, self.lp_token, *self.custody.ledgers]

    def snapshot(self) -> tuple[PoolState, Any, PriceOracle]:
        return self.state.copy(), self.access.snapshot(), self.oracle

    def restore(self, snapshot: tuple[PoolState, Any, PriceOracle]) -> None:
        state, access, self.oracle = snapshot
        self.state = state
        self.lifecycle.state = state
        self.access.restore(access)

    @contextmanager
    def _operation(self, name: str) -> Iterator[None]:
        with self._lock:
            if self._entered:
                raise ReentrancyError(f"Pool operation {name} called while another is running")
            self._entered = True
            try:
                with atomic(self.participants(), name):
                    yield
            finally:
                self._entered = False

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def _check_index(self, i: int) -> None:
        if not 0 <= i < N_COINS:
            raise ValidationError(f"Asset index out of range: {i}")

    def coins(self, i: int) -> Asset:
        self._check_index(i)
        with self._lock:
            return self.state.assets[i]

    def balances(self, i: int) -> int:
        """LP-owned raw balance of asset i."""
        self._check_index(i)
        with self._lock:
            return self.state.balances[i]

    def admin_balances(self, i: int) -> int:
        """Accrued admin fees of asset i."""
        self._check_index(i)
        with self._lock:
            return self.state.accrued_admin_fee[i]

    @property
    def total_supply(self) -> int:
        with self._lock:
            return self.state.lp_supply

    @property
    def paused(self) -> bool:
        with self._lock:
            return self.state.paused

    def a(self) -> int:
        """Effective amplification coefficient."""
        with self._lock:
            return self.lifecycle.current_a()

    def has_role(self, role: Role, account: str) -> bool:
        with self._lock:
            return self.access.has_role(role, account)

    @contextmanager
    def reading(self) -> Iterator[PoolState]:
        """Hold the pool lock so several reads see one committed state.

        Readers on other threads wait until a running operation has either
        committed or rolled back.
        """
        with self._lock:
            yield self.state

    def view(self) -> PoolView:
        """Immutable copy of the committed state the planners work on."""
        with self.reading() as state:
            return PoolView(
                balances=tuple(state.balances),
                lp_supply=state.lp_supply,
                amp=self.lifecycle.current_a(),
                fee=FeeFraction(state.fee),
                admin_fee=FeeFraction(state.admin_fee),
                normalizer=self.normalizer,
            )

    def get_dy(self, i: int, j: int, dx: int) -> int:
        """Output of exchanging ``dx`` of asset i into asset j, after fees."""
        dy = accountant.plan_exchange(self.view(), i, j, dx).dy
        logger.debug("get_dy", i=i, j=j, dx=dx, dy=dy)
        return dy

    def calc_token_amount(self, amounts: Sequence[int], is_deposit: bool) -> int:
        """LP shares minted by depositing, or burned by withdrawing, ``amounts``.

        Includes the imbalance fee, so the result matches the mutation exactly.
        """
        view = self.view()
        if is_deposit:
            plan = accountant.plan_add_liquidity(view, amounts)
        else:
            plan = accountant.plan_remove_liquidity_imbalance(view, amounts)
        logger.debug(
            "calc_token_amount", amounts=list(amounts), is_deposit=is_deposit, lp=plan.lp_amount
        )
        return plan.lp_amount

    def calc_withdraw_one_coin(self, lp_amount: int, i: int) -> int:
        """Amount of asset i received for burning ``lp_amount`` shares."""
        return accountant.plan_remove_liquidity_one_coin(self.view(), lp_amount, i).amounts[i]

    def get_virtual_price(self) -> int:
        return accountant.virtual_price(self.view())

    def spot_price(self) -> int:
        """Marginal price of asset 1 in asset 0, normalized, 1e18 scale."""
        view = self.view()
        return spot_price(view.xp(), view.amp)

    # ------------------------------------------------------------------
    # Trading
    # ------------------------------------------------------------------

    def _guard_price(self, i: int, j: int, new_balances: Sequence[int]) -> None:
        """Check the post-trade marginal price against the oracle.

        Probes the fee-free output for one whole token of asset i on the
        post-trade balances; both amounts are expressed in whole tokens
        (1e18 scale) before comparison.
        """
        asset_in, asset_out = self.state.assets[i], self.state.assets[j]
        price_in = read_price(self.oracle, asset_in.address)
        price_out = read_price(self.oracle, asset_out.address)

        post_trade = replace(self.view(), balances=tuple(new_balances))
        probe_norm = accountant.curve_dy(post_trade, post_trade.balances, i, j, asset_in.unit)
        probe_out = self.normalizer.denormalize(probe_norm, j)

        check_price_deviation(
            asset_in.address,
            asset_out.address,
            PRECISION,
            probe_out * PRECISION // asset_out.unit,
            price_in,
            price_out,
            Ratio(self.state.price_thresholds[i]),
            Ratio(self.state.price_thresholds[j]),
        )

    def exchange(self, ctx: CallContext, i: int, j: int, dx: int, min_dy: int) -> int:
        """Trade ``dx`` of asset i for at least ``min_dy`` of asset j.

        Returns:
            Raw amount of asset j sent to the caller

        Raises:
            PausedError: If the pool is paused
            SlippageError: If the output is below ``min_dy``
            PriceDeviationError: If the post-trade price leaves the oracle band
        """
        with self._operation("exchange"):
            self.lifecycle.require_active("exchange")
            plan: ExchangePlan = accountant.plan_exchange(self.view(), i, j, dx)
            if plan.dy < min_dy:
                raise SlippageError(f"Exchange output below minimum: {plan.dy} < {min_dy}")
            self._guard_price(i, j, plan.new_balances)

            inbound = [0] * N_COINS
            inbound[i] = dx
            self.custody.collect(ctx, inbound)

            self.state.balances = list(plan.new_balances)
            self.state.accrued_admin_fee[j] += plan.admin_fee

            self.custody.pay(ctx.sender, j, plan.dy)
            logger.info(
                "exchange",
                sender=ctx.sender,
                i=i,
                j=j,
                dx=dx,
                dy=plan.dy,
                fee=plan.fee,
                admin_fee=plan.admin_fee,
            )
            return plan.dy

    # ------------------------------------------------------------------
    # Liquidity
    # ------------------------------------------------------------------

    def _commit(self, plan: LiquidityPlan) -> None:
        self.state.balances = list(plan.new_balances)
        for k, admin in enumerate(plan.admin_fees):
            self.state.accrued_admin_fee[k] += admin

    def _burn(self, owner: str, lp_amount: int) -> None:
        self.lp_token.burn_from(self.address, owner, lp_amount)
        self.state.lp_supply -= lp_amount

    def add_liquidity(self, ctx: CallContext, amounts: Sequence[int], min_mint_amount: int) -> int:
        """Deposit ``amounts`` and mint LP shares to the caller.

        Returns:
            LP shares minted
        """
        with self._operation("add_liquidity"):
            self.lifecycle.require_active("add_liquidity")
            plan = accountant.plan_add_liquidity(self.view(), amounts)
            if plan.lp_amount < min_mint_amount:
                raise SlippageError(
                    f"Minted LP amount below minimum: {plan.lp_amount} < {min_mint_amount}"
                )
            self.custody.collect(ctx, plan.amounts)

            self._commit(plan)
            self.state.lp_supply += plan.lp_amount
            self.lp_token.mint(self.address, ctx.sender, plan.lp_amount)

            logger.info(
                "add_liquidity",
                sender=ctx.sender,
                amounts=list(plan.amounts),
                fees=list(plan.fees),
                minted=plan.lp_amount,
                supply=self.state.lp_supply,
            )
            return plan.lp_amount

    def remove_liquidity(
        self, ctx: CallContext, lp_amount: int, min_amounts: Sequence[int]
    ) -> list[int]:
        """Burn ``lp_amount`` shares for a proportional share of both assets.

        Always available, including while the pool is paused.
        """
        with self._operation("remove_liquidity"):
            self.custody.reject_value(ctx)
            if len(min_amounts) != N_COINS:
                raise ValidationError(f"Expected {N_COINS} minimum amounts, got {len(min_amounts)}")
            plan = accountant.plan_remove_liquidity(self.view(), lp_amount)
            for k, (amount, minimum) in enumerate(zip(plan.amounts, min_amounts, strict=True)):
                if amount < minimum:
                    raise SlippageError(
                        f"Withdrawal of asset {k} below minimum: {amount} < {minimum}"
                    )

            self._burn(ctx.sender, plan.lp_amount)
            self._commit(plan)

            self.custody.pay_all(ctx.sender, plan.amounts)
            logger.info(
                "remove_liquidity",
                sender=ctx.sender,
                amounts=list(plan.amounts),
                burned=plan.lp_amount,
                supply=self.state.lp_supply,
            )
            return list(plan.amounts)

    def remove_liquidity_imbalance(
        self, ctx: CallContext, amounts: Sequence[int], max_burn_amount: int
    ) -> int:
        """Withdraw exact ``amounts``, burning at most ``max_burn_amount`` shares.

        Returns:
            LP shares burned
        """
        with self._operation("remove_liquidity_imbalance"):
            self.lifecycle.require_active("remove_liquidity_imbalance")
            self.custody.reject_value(ctx)
            plan = accountant.plan_remove_liquidity_imbalance(self.view(), amounts)
            if plan.lp_amount > max_burn_amount:
                raise SlippageError(
                    f"Burned LP amount above maximum: {plan.lp_amount} > {max_burn_amount}"
                )

            self._burn(ctx.sender, plan.lp_amount)
            self._commit(plan)

            self.custody.pay_all(ctx.sender, plan.amounts)
            logger.info(
                "remove_liquidity_imbalance",
                sender=ctx.sender,
                amounts=list(plan.amounts),
                fees=list(plan.fees),
                burned=plan.lp_amount,
                supply=self.state.lp_supply,
            )
            return plan.lp_amount

    def remove_liquidity_one_coin(
        self, ctx: CallContext, lp_amount: int, i: int, min_amount: int
    ) -> int:
        """Burn ``lp_amount`` shares for asset i only.

        Returns:
            Raw amount of asset i sent to the caller
        """
        with self._operation("remove_liquidity_one_coin"):
            self.lifecycle.require_active("remove_liquidity_one_coin")
            self.custody.reject_value(ctx)
            plan = accountant.plan_remove_liquidity_one_coin(self.view(), lp_amount, i)
            dy = plan.amounts[i]
            if dy < min_amount:
                raise SlippageError(f"Withdrawal output below minimum: {dy} < {min_amount}")

            self._burn(ctx.sender, plan.lp_amount)
            self._commit(plan)

            self.custody.pay(ctx.sender, i, dy)
            logger.info(
                "remove_liquidity_one_coin",
                sender=ctx.sender,
                i=i,
                dy=dy,
                fee=plan.fees[i],
                burned=plan.lp_amount,
                supply=self.state.lp_supply,
            )
            return dy

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def pause(self, ctx: CallContext) -> None:
        with self._operation("pause"):
            self.custody.reject_value(ctx)
            self.lifecycle.pause(ctx.sender)

    def unpause(self, ctx: CallContext) -> None:
        with self._operation("unpause"):
            self.custody.reject_value(ctx)
            self.lifecycle.unpause(ctx.sender)

    def set_fee(self, ctx: CallContext, fee: int, admin_fee: int) -> None:
        with self._operation("set_fee"):
            self.custody.reject_value(ctx)
            self.lifecycle.set_fee(ctx.sender, fee, admin_fee)

    def set_price_thresholds(self, ctx: CallContext, thresholds: Sequence[int]) -> None:
        with self._operation("set_price_thresholds"):
            self.custody.reject_value(ctx)
            self.lifecycle.set_price_thresholds(ctx.sender, list(thresholds))

    def ramp_a(self, ctx: CallContext, future_a: int, ramp_end: int) -> None:
        with self._operation("ramp_a"):
            self.custody.reject_value(ctx)
            self.lifecycle.ramp_a(ctx.sender, future_a, ramp_end)

    def stop_ramp_a(self, ctx: CallContext) -> None:
        with self._operation("stop_ramp_a"):
            self.custody.reject_value(ctx)
            self.lifecycle.stop_ramp_a(ctx.sender)

    def grant_role(self, ctx: CallContext, role: Role, account: str) -> None:
        with self._operation("grant_role"):
            self.custody.reject_value(ctx)
            self.lifecycle.grant_role(ctx.sender, role, account)

    def revoke_role(self, ctx: CallContext, role: Role, account: str) -> None:
        with self._operation("revoke_role"):
            self.custody.reject_value(ctx)
            self.lifecycle.revoke_role(ctx.sender, role, account)

    def set_oracle(self, ctx: CallContext, oracle: PriceOracle) -> None:
        """Replace the price feed (ADMIN)."""
        with self._operation("set_oracle"):
            self.custody.reject_value(ctx)
            self.access.require(Role.ADMIN, ctx.sender)
            self.oracle = oracle
            logger.info("oracle_updated", sender=ctx.sender, oracle=type(oracle).__name__)

    def withdraw_admin_fees(self, ctx: CallContext, recipient: str | None = None) -> list[int]:
        """Send all accrued admin fees to ``recipient`` (default: caller) (ADMIN).

        Returns:
            Raw amounts withdrawn per asset
        """
        with self._operation("withdraw_admin_fees"):
            self.custody.reject_value(ctx)
            self.access.require(Role.ADMIN, ctx.sender)
            amounts = list(self.state.accrued_admin_fee)
            self.state.accrued_admin_fee = [0] * N_COINS

            self.custody.pay_all(recipient or ctx.sender, amounts)
            logger.info("admin_fees_withdrawn", sender=ctx.sender, amounts=amounts)
            return amounts
