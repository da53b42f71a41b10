"""Shared type definitions for tokens, accounts and amounts.

Token identifiers and accounts are 20-byte hex addresses. They are compared
in lowercase so that lookups never depend on checksum casing.
"""

from typing import Annotated, Any

from pydantic import BeforeValidator, Field

# Maximum uint256 value
UINT256_MAX = 2**256 - 1


def validate_uint256(value: Any) -> str:
    """Validate that a value is a valid uint256 decimal string.

    Args:
        value: Value to validate (string or int)

    Returns:
        Valid uint256 as decimal string

    Raises:
        ValueError: If value is not a non-negative integer within uint256 range
    """
    if isinstance(value, bool):
        raise ValueError("Uint256 must be string or int, got bool")

    if isinstance(value, int):
        int_value = value
    elif isinstance(value, str):
        try:
            int_value = int(value)
        except ValueError as err:
            raise ValueError(f"Uint256 must be a decimal integer string: '{value}'") from err
    else:
        raise ValueError(f"Uint256 must be string or int, got {type(value).__name__}")

    if int_value < 0:
        raise ValueError(f"Uint256 cannot be negative: {value}")
    if int_value > UINT256_MAX:
        raise ValueError(f"Uint256 overflow: {value} > 2^256-1")

    return str(int_value)


# Token or account address (40 hex chars after 0x prefix)
Address = Annotated[str, Field(pattern=r"^0x[a-fA-F0-9]{40}$")]

# 256-bit unsigned integer as decimal string (validated)
Uint256 = Annotated[
    str,
    BeforeValidator(validate_uint256),
    Field(description="256-bit unsigned integer as decimal string (18-decimal fixed point)"),
]


def normalize_token(token: str) -> str:
    """Normalize a token or account address to lowercase with 0x prefix.

    Malformed addresses are rejected at the HTTP boundary by the Address
    type; the core only canonicalizes.

    Args:
        token: An address (with or without 0x prefix, any case)

    Returns:
        Lowercase address with 0x prefix
    """
    addr = token.strip().lower()
    if not addr.startswith("0x"):
        addr = "0x" + addr
    return addr


def short(token: str) -> str:
    """Last 8 characters of an address, for log lines."""
    return token[-8:]
