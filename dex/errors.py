"""Exchange error classes.

Every rejection raised by a pool, the registry or the router derives from
DexError and belongs to exactly one category:

- ValidationError: malformed input, rejected before any state change
- EconomicGuardError: rejected to protect the caller or pool solvency
- EntitlementError: the caller lacks the claimed right
- StructuralError: current system state cannot satisfy the request

Errors are scoped to a single call; nothing here is fatal to the process.
"""


class DexError(Exception):
    """Base error for exchange operations."""

    category = "dex"


class ValidationError(DexError):
    """Input rejected before any state change."""

    category = "validation"


class EconomicGuardError(DexError):
    """Rejected to protect the caller or the pool's solvency."""

    category = "economic_guard"


class EntitlementError(DexError):
    """Caller lacks the right it is trying to exercise."""

    category = "entitlement"


class StructuralError(DexError):
    """Request cannot be satisfied by the current system state."""

    category = "structural"


class InvalidAmount(ValidationError):
    """Amount is negative, missing, or below what the pool requires."""

    pass


class ZeroAmount(ValidationError):
    """Amount must be greater than zero."""

    pass


class InvalidPair(ValidationError):
    """Tokens are identical or not served by the pool."""

    pass


class InvalidPath(ValidationError):
    """Explicit route is too short or its pools do not line up with its tokens."""

    pass


class InvalidPoolForTokens(ValidationError):
    """A pool on an explicit route does not hold the pair it must bridge."""

    pass


class SlippageExceeded(EconomicGuardError):
    """Realized amount is below the caller's minimum."""

    pass


class InsufficientLiquidity(EconomicGuardError):
    """Pool cannot pay out the requested amount without being drained."""

    pass


class FeeTooHigh(EconomicGuardError):
    """Trading fee exceeds the configured ceiling."""

    pass


class InsufficientBalance(EntitlementError):
    """Account holds fewer tokens or LP shares than requested."""

    pass


class NoStake(EntitlementError):
    """Account holds no LP shares in the pool."""

    pass


class NothingToClaim(EntitlementError):
    """Account's share of accumulated fees is zero."""

    pass


class ExceedsEntitlement(EntitlementError):
    """Requested claim is larger than the account's pro-rata share."""

    pass


class Unauthorized(EntitlementError):
    """Caller is not the pool operator."""

    pass


class PoolExists(StructuralError):
    """A pool for this token set has already been created."""

    pass


class NoPathFound(StructuralError):
    """No direct or two-hop route connects the tokens."""

    pass


class Expired(StructuralError):
    """Call executed after its deadline."""

    pass


__all__ = [
    "DexError",
    "ValidationError",
    "EconomicGuardError",
    "EntitlementError",
    "StructuralError",
    "InvalidAmount",
    "ZeroAmount",
    "InvalidPair",
    "InvalidPath",
    "InvalidPoolForTokens",
    "SlippageExceeded",
    "InsufficientLiquidity",
    "FeeTooHigh",
    "InsufficientBalance",
    "NoStake",
    "NothingToClaim",
    "ExceedsEntitlement",
    "Unauthorized",
    "PoolExists",
    "NoPathFound",
    "Expired",
]
