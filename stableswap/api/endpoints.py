"""API endpoints for the stableswap quoting service."""

import structlog
from fastapi import APIRouter, Depends, HTTPException

from stableswap import accountant
from stableswap.deployment import get_default_pool
from stableswap.models.api import (
    AssetInfo,
    ExchangeQuoteRequest,
    ExchangeQuoteResponse,
    PoolResponse,
    RemoveLiquidityRequest,
    RemoveLiquidityResponse,
    TokenAmountRequest,
    TokenAmountResponse,
    WithdrawOneCoinRequest,
    WithdrawOneCoinResponse,
)
from stableswap.pool import StableSwapPool
from stableswap.pool_info import classify

logger = structlog.get_logger()

router = APIRouter()


def get_pool() -> StableSwapPool:
    """Dependency provider for the pool instance.

    Override this in tests to inject a pool:
        app.dependency_overrides[get_pool] = lambda: pool

    Raises:
        HTTPException: 503 if no pool is configured
    """
    pool = get_default_pool()
    if pool is None:
        raise HTTPException(status_code=503, detail="No pool configured")
    return pool


@router.get("/pool")
def pool_state(pool: StableSwapPool = Depends(get_pool)) -> PoolResponse:
    """Current balances, parameters and virtual price."""
    with pool.reading() as live:
        state = live.copy()
        amplification = pool.a()
        virtual_price = None
        if state.lp_supply > 0:
            virtual_price = str(pool.get_virtual_price())
    return PoolResponse(
        address=pool.address,
        kind=classify(pool).value,
        assets=[
            AssetInfo(address=asset.address, decimals=asset.decimals, rate=str(asset.rate))
            for asset in state.assets
        ],
        balances=[str(b) for b in state.balances],
        admin_balances=[str(b) for b in state.accrued_admin_fee],
        lp_supply=str(state.lp_supply),
        amplification=amplification,
        fee=state.fee,
        admin_fee=state.admin_fee,
        price_thresholds=[str(t) for t in state.price_thresholds],
        paused=state.paused,
        virtual_price=virtual_price,
    )


@router.post("/quote/exchange")
def quote_exchange(
    request: ExchangeQuoteRequest, pool: StableSwapPool = Depends(get_pool)
) -> ExchangeQuoteResponse:
    """Quote an exchange of ``dx`` of asset i into asset j."""
    plan = accountant.plan_exchange(pool.view(), request.i, request.j, int(request.dx))
    logger.info("quote_exchange", i=request.i, j=request.j, dx=request.dx, dy=plan.dy)
    return ExchangeQuoteResponse(dy=str(plan.dy), fee=str(plan.fee), admin_fee=str(plan.admin_fee))


@router.post("/quote/token-amount")
def quote_token_amount(
    request: TokenAmountRequest, pool: StableSwapPool = Depends(get_pool)
) -> TokenAmountResponse:
    """Quote LP shares minted by a deposit or burned by an imbalanced withdrawal."""
    amounts = [int(amount) for amount in request.amounts]
    view = pool.view()
    if request.is_deposit:
        plan = accountant.plan_add_liquidity(view, amounts)
    else:
        plan = accountant.plan_remove_liquidity_imbalance(view, amounts)
    logger.info(
        "quote_token_amount",
        amounts=request.amounts,
        is_deposit=request.is_deposit,
        lp=plan.lp_amount,
    )
    return TokenAmountResponse(lp_amount=str(plan.lp_amount), fees=[str(f) for f in plan.fees])


@router.post("/quote/withdraw-one-coin")
def quote_withdraw_one_coin(
    request: WithdrawOneCoinRequest, pool: StableSwapPool = Depends(get_pool)
) -> WithdrawOneCoinResponse:
    plan = accountant.plan_remove_liquidity_one_coin(pool.view(), int(request.lp_amount), request.i)
    return WithdrawOneCoinResponse(dy=str(plan.amounts[request.i]), fee=str(plan.fees[request.i]))


@router.post("/quote/remove-liquidity")
def quote_remove_liquidity(
    request: RemoveLiquidityRequest, pool: StableSwapPool = Depends(get_pool)
) -> RemoveLiquidityResponse:
    plan = accountant.plan_remove_liquidity(pool.view(), int(request.lp_amount))
    return RemoveLiquidityResponse(amounts=[str(a) for a in plan.amounts])
