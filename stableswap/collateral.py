"""LP collateral wrapper.

A downstream client of the pool: users deposit pool assets through the
wrapper, which adds liquidity on their behalf, keeps the LP shares and mints
wrapped collateral 1:1 with the shares received. Releasing burns the wrapped
collateral and withdraws proportionally back to the user.

The wrapper only uses the pool's public operations and PoolInfo quotes.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from stableswap.execution import CallContext, atomic
from stableswap.ledgers import InMemoryToken, LPShareToken, NativeLedger
from stableswap.models.types import normalize_address
from stableswap.native import NativeAssetAdapter
from stableswap.pool import StableSwapPool
from stableswap.pool_info import PoolInfo

logger = structlog.get_logger()


class LPCollateral:
    """Wraps a pool's LP shares into a collateral token."""

    def __init__(
        self,
        address: str,
        pool: StableSwapPool,
        collateral_token: LPShareToken,
        tokens: dict[str, InMemoryToken],
        native: NativeLedger | None = None,
    ) -> None:
        self.address = normalize_address(address)
        self.pool = pool
        self.info = PoolInfo(pool)
        self.collateral = collateral_token
        collateral_token.set_minter(self.address)
        self.custody = NativeAssetAdapter(
            self.address,
            [pool.coins(0), pool.coins(1)],
            {k.lower(): v for k, v in tokens.items()},
            native,
        )

    def _participants(self) -> list:
        return [self.collateral, *self.pool.participants()]

    def preview_provide(self, amounts: Sequence[int]) -> int:
        """Collateral minted for providing ``amounts``."""
        return self.info.get_add_liquidity_mint_amount(amounts)

    def preview_release(self, amount: int) -> list[int]:
        """Assets returned for releasing ``amount`` collateral."""
        return self.info.calc_coins_amount(amount)

    def provide(self, ctx: CallContext, amounts: Sequence[int], min_mint: int) -> int:
        """Deposit ``amounts`` into the pool and mint collateral to the caller.

        Native value attached to ``ctx`` is forwarded to the pool.

        Returns:
            Collateral minted (equal to LP shares received)
        """
        with atomic(self._participants(), "collateral_provide"):
            self.custody.collect(ctx, amounts)
            forwarded = CallContext(self.address, ctx.value)
            minted = self.pool.add_liquidity(forwarded, amounts, min_mint)
            self.collateral.mint(self.address, ctx.sender, minted)
            logger.info(
                "collateral_provided", sender=ctx.sender, amounts=list(amounts), minted=minted
            )
            return minted

    def release(self, ctx: CallContext, amount: int, min_amounts: Sequence[int]) -> list[int]:
        """Burn ``amount`` collateral and send the withdrawn assets to the caller."""
        with atomic(self._participants(), "collateral_release"):
            self.custody.reject_value(ctx)
            self.collateral.burn_from(self.address, ctx.sender, amount)
            amounts = self.pool.remove_liquidity(CallContext(self.address), amount, min_amounts)
            self.custody.pay_all(ctx.sender, amounts)
            logger.info(
                "collateral_released", sender=ctx.sender, burned=amount, amounts=amounts
            )
            return amounts
