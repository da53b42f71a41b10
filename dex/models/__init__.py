"""Shared models for the exchange core and its HTTP surface."""

from dex.models.types import (
    Address,
    Uint256,
    normalize_token,
    validate_uint256,
)

__all__ = [
    "Address",
    "Uint256",
    "normalize_token",
    "validate_uint256",
]
