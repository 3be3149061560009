"""Pool error classes.

Every error carries a stable ``kind`` string so callers (and the HTTP
surface) can branch on the failure type without parsing messages.
"""


class StableSwapError(Exception):
    """Base error for pool operations."""

    kind = "stableswap_error"


class ValidationError(StableSwapError):
    """Bad index, zero address/amount or malformed native-value pairing."""

    kind = "validation_error"


class InsufficientBalanceError(ValidationError):
    """Ledger balance too small for the requested transfer or burn."""

    kind = "insufficient_balance"


class SlippageError(StableSwapError):
    """Minted, received or burned amount violates the caller's bound."""

    kind = "slippage_error"


class PriceDeviationError(StableSwapError):
    """Implied execution price deviates from the oracle beyond the threshold.

    Attributes:
        asset: Address of the asset whose threshold was exceeded
        deviation: Observed relative deviation (1e18 scale)
        threshold: Configured threshold (1e18 scale)
    """

    kind = "price_deviation_error"

    def __init__(self, asset: str, deviation: int, threshold: int) -> None:
        self.asset = asset
        self.deviation = deviation
        self.threshold = threshold
        super().__init__(
            f"Price deviation for asset {asset} exceeds threshold: {deviation} > {threshold}"
        )


class ConvergenceError(StableSwapError):
    """Newton iteration of the invariant solver did not converge."""

    kind = "convergence_error"


class PausedError(StableSwapError):
    """Operation blocked while the pool is paused."""

    kind = "paused_error"


class AuthorizationError(StableSwapError):
    """Role-gated call by an unauthorized caller."""

    kind = "authorization_error"


class ReentrancyError(StableSwapError):
    """Pool operation entered while another one is still running."""

    kind = "reentrancy_error"


class TransferError(StableSwapError):
    """Outbound transfer rejected by the receiver."""

    kind = "transfer_error"


class ArithmeticFault(StableSwapError, ArithmeticError):
    """Checked integer arithmetic left the non-negative integers."""

    kind = "arithmetic_error"


class Underflow(ArithmeticFault):
    """Subtraction would produce a negative result."""


class DivisionByZero(ArithmeticFault):
    """Division by zero."""
