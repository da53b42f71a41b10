"""Records emitted by pools and the registry.

Each state-changing call returns its event and appends it to the owning
object's event log, so callers get a receipt and observers get a history.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class LiquidityAdded:
    """Tokens deposited into a pool and LP shares minted for them."""

    pool: str
    provider: str
    lp_minted: int
    # Per-token amounts actually pulled into reserves
    amounts: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class LiquidityWithdrawn:
    """LP shares burned and the reserves paid out for them."""

    pool: str
    provider: str
    lp_burned: int
    amounts: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class Swapped:
    """A single-pool swap."""

    pool: str
    trader: str
    recipient: str
    token_in: str
    amount_in: int
    token_out: str
    amount_out: int
    # Portion of amount_in set aside as LP incentive
    fee: int = 0


@dataclass(frozen=True)
class IncentivesClaimed:
    """Accumulated fees paid out to an LP."""

    pool: str
    provider: str
    token: str
    amount: int


@dataclass(frozen=True)
class TradingFeeChanged:
    """Operator changed a pool's trading fee."""

    pool: str
    old_fee_bps: int
    new_fee_bps: int


@dataclass(frozen=True)
class PoolCreated:
    """Registry created a pool for a new token set."""

    pool: str
    tokens: tuple[str, ...]


PoolEvent = LiquidityAdded | LiquidityWithdrawn | Swapped | IncentivesClaimed | TradingFeeChanged

__all__ = [
    "LiquidityAdded",
    "LiquidityWithdrawn",
    "Swapped",
    "IncentivesClaimed",
    "TradingFeeChanged",
    "PoolCreated",
    "PoolEvent",
]
