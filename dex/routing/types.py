"""Type definitions for routing module."""

from __future__ import annotations

from dataclasses import dataclass, field

from dex.pools import Pool, Swapped

# Ordered token ids from the sold token to the bought token
Path = tuple[str, ...]


@dataclass(frozen=True)
class HopResult:
    """Simulated result of a single hop in a route."""

    pool: Pool
    input_token: str
    output_token: str
    amount_in: int
    amount_out: int


@dataclass(frozen=True)
class Route:
    """A priced candidate route: one pool per consecutive token pair."""

    path: Path
    pools: tuple[Pool, ...]
    amount_in: int
    amount_out: int
    hops: tuple[HopResult, ...] = field(default_factory=tuple)

    @property
    def hop_count(self) -> int:
        return len(self.pools)


@dataclass(frozen=True)
class SwapReceipt:
    """Result of a router swap, one Swapped event per executed hop."""

    trader: str
    recipient: str
    token_in: str
    token_out: str
    amount_in: int
    amount_out: int
    path: Path
    pools: tuple[str, ...]
    hops: tuple[Swapped, ...]


__all__ = ["HopResult", "Path", "Route", "SwapReceipt"]
