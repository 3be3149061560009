"""Field types shared by the configuration and API models."""

import re
from typing import Annotated, Any

from pydantic import AfterValidator, BeforeValidator, Field

UINT256_MAX = 2**256 - 1

_ADDRESS = re.compile(r"^0x[0-9a-f]{40}$")


def normalize_address(address: str) -> str:
    """Lowercase ``address``, adding the 0x prefix if it is missing.

    Raises:
        ValueError: If the result is not a 20-byte hex address
    """
    normalized = address.lower()
    if not normalized.startswith("0x"):
        normalized = "0x" + normalized
    if not _ADDRESS.match(normalized):
        raise ValueError(f"Invalid address: {address}")
    return normalized


def validate_uint256(value: Any) -> str:
    """Coerce an int or decimal string to a canonical uint256 decimal string.

    Raises:
        ValueError: If value is not a non-negative integer below 2^256
    """
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValueError(f"Uint256 must be string or int, got {type(value).__name__}")
    try:
        number = int(value)
    except ValueError as err:
        raise ValueError(f"Uint256 must be a decimal integer string: '{value}'") from err
    if not 0 <= number <= UINT256_MAX:
        raise ValueError(f"Uint256 out of range: {value}")
    return str(number)


# 20-byte hex address, stored lowercase
Address = Annotated[str, AfterValidator(normalize_address)]

# 256-bit unsigned integer as decimal string (amounts, supplies, 1e18 ratios)
Uint256 = Annotated[
    str,
    BeforeValidator(validate_uint256),
    Field(description="256-bit unsigned integer as decimal string"),
]
