"""Oracle price-deviation circuit breaker.

A trade is only allowed to settle if the price the pool implies after the
trade stays within a per-asset threshold of the oracle price, in both
directions.
"""

import structlog

from stableswap.errors import PriceDeviationError, ValidationError
from stableswap.math.fixed_point import OraclePrice, Ratio

logger = structlog.get_logger()


def implied_price(amount_in: int, amount_out: int, price_out: OraclePrice) -> OraclePrice:
    """Price of the input asset implied by exchanging amount_in for amount_out.

    Value conservation ``amount_in * P_in == amount_out * P_out`` gives
    ``P_in = amount_out * P_out / amount_in``.

    Args:
        amount_in: Input amount in whole-asset units (1e18 scale)
        amount_out: Output amount in whole-asset units (1e18 scale)
        price_out: Oracle price of the output asset (1e8 scale)

    Returns:
        Implied price of the input asset (1e8 scale)
    """
    if amount_in <= 0:
        raise ValidationError("Implied price requires a positive input amount")
    return OraclePrice(amount_out * price_out.value // amount_in)


def check_price_deviation(
    asset_in: str,
    asset_out: str,
    amount_in: int,
    amount_out: int,
    price_in: OraclePrice,
    price_out: OraclePrice,
    threshold_in: Ratio,
    threshold_out: Ratio,
) -> None:
    """Reject an execution whose implied prices stray from the oracle.

    Checks the implied price of ``asset_in`` against ``price_in`` and the
    inverse (implied price of ``asset_out``) against ``price_out``.

    Args:
        asset_in: Address of the input asset
        asset_out: Address of the output asset
        amount_in: Input amount, whole-asset units on the 1e18 scale
        amount_out: Output amount, whole-asset units on the 1e18 scale
        price_in: Oracle price of asset_in (1e8 scale)
        price_out: Oracle price of asset_out (1e8 scale)
        threshold_in: Max relative deviation for asset_in (1e18 scale)
        threshold_out: Max relative deviation for asset_out (1e18 scale)

    Raises:
        PriceDeviationError: Naming the first asset whose threshold is exceeded
    """
    if amount_out <= 0:
        # Nothing comes out: the implied price of asset_in is zero
        raise PriceDeviationError(asset_in, Ratio.SCALE, threshold_in.value)

    checks = (
        (asset_in, implied_price(amount_in, amount_out, price_out), price_in, threshold_in),
        (asset_out, implied_price(amount_out, amount_in, price_in), price_out, threshold_out),
    )
    for asset, observed, reference, threshold in checks:
        deviation = Ratio.relative_deviation(observed, reference)
        if deviation > threshold:
            logger.warning(
                "price_deviation_exceeded",
                asset=asset,
                implied_price=observed.value,
                oracle_price=reference.value,
                deviation=deviation.value,
                threshold=threshold.value,
            )
            raise PriceDeviationError(asset, deviation.value, threshold.value)
