"""Shared field types for launchpad API and record models."""

from typing import Annotated, Any

from pydantic import BeforeValidator, Field

UINT256_MAX = 2**256 - 1


def validate_uint256(value: Any) -> str:
    """Check an on-chain amount given as int or decimal string; return it as a string.

    Raises:
        ValueError: If the value is not an integer in [0, 2^256 - 1]
    """
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValueError(f"amount must be an integer or decimal string, got {type(value).__name__}")
    if isinstance(value, str):
        if not value.isdigit():
            raise ValueError(f"amount must be a non-negative decimal string, got {value!r}")
        value = int(value)
    if not 0 <= value <= UINT256_MAX:
        raise ValueError(f"amount {value} outside uint256 range")
    return str(value)


ADDRESS_PATTERN = r"^0x[a-fA-F0-9]{40}$"

# EVM address (40 hex chars after 0x prefix)
Address = Annotated[str, Field(pattern=ADDRESS_PATTERN)]

# 256-bit unsigned integer carried as a decimal string
Uint256 = Annotated[
    str,
    BeforeValidator(validate_uint256),
    Field(description="256-bit unsigned integer as decimal string"),
]

# Arbitrary hex bytes
Bytes = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]*$")]

# Transaction hash (32 bytes)
TxHash = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{64}$")]


def normalize_address(address: str) -> str:
    """Lowercase an address and make sure it carries the 0x prefix."""
    addr = address.lower()
    if not addr.startswith("0x"):
        addr = "0x" + addr
    return addr


def is_valid_address(address: str) -> bool:
    """True if the string is a 0x-prefixed, 20-byte hex address."""
    if not isinstance(address, str) or len(address) != 42 or not address.startswith("0x"):
        return False
    try:
        int(address, 16)
    except ValueError:
        return False
    return True
