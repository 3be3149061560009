"""Protocol constants for the stableswap pool.

Every fixed-point scale used by the pool lives here so that the unit of each
quantity can be looked up in one place.
"""

# Number of assets in the pool
N_COINS = 2

# Normalized balances and invariant D are 18-decimal integers
PRECISION = 10**18

# Fee fractions (swap fee, admin fee) are scaled by 1e10
FEE_DENOMINATOR = 10**10
MAX_FEE = 5 * 10**9  # 50%
MAX_ADMIN_FEE = 10**10  # 100%

# Oracle prices are scaled by 1e8
PRICE_SCALE = 10**8

# Deviation thresholds are scaled by 1e18 (3e16 == 3%)
THRESHOLD_SCALE = 10**18

# Amplification coefficient bounds and ramp limits
MAX_A = 10**6
MAX_A_CHANGE = 10
MIN_RAMP_TIME = 86_400

# Newton iteration cap for the invariant solver
MAX_ITERATIONS = 255

# Sentinel address marking the chain's native currency slot
NATIVE_ASSET = "0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee"

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
