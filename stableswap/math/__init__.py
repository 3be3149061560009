"""Mathematical utilities for the stableswap pool.

This package provides the numeric primitives the pool is built on:
- Typed fixed-point quantities (fee fractions, oracle prices, ratios)
- SafeInt checked arithmetic
- The stableswap invariant solver
"""

from stableswap.math.fixed_point import FeeFraction, OraclePrice, Ratio
from stableswap.math.invariant import get_d, get_y, get_y_d, spot_price

__all__ = ["FeeFraction", "OraclePrice", "Ratio", "get_d", "get_y", "get_y_d", "spot_price"]
