"""StableSwap - two-asset oracle-guarded stableswap pool."""

__version__ = "0.1.0"

from stableswap.collateral import LPCollateral  # noqa: E402
from stableswap.execution import CallContext  # noqa: E402
from stableswap.lifecycle import Role  # noqa: E402
from stableswap.models.config import AssetConfig, PoolConfig  # noqa: E402
from stableswap.pool import StableSwapPool  # noqa: E402
from stableswap.pool_info import PoolInfo, PoolKind, classify  # noqa: E402

__all__ = [
    "AssetConfig",
    "CallContext",
    "LPCollateral",
    "PoolConfig",
    "PoolInfo",
    "PoolKind",
    "Role",
    "StableSwapPool",
    "classify",
    "__version__",
]
