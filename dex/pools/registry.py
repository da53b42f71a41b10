"""Pool registry.

The registry is the pool factory: it creates pools for unordered token
sets, guarantees at most one pool per set, and answers lookup and
supported-token queries. Pathfinding over the registered pools is
delegated to PathFinder (dex.routing.pathfinding).
"""

from __future__ import annotations

import hashlib
import threading
from collections.abc import Iterable
from typing import TYPE_CHECKING

import structlog

from dex.config import DEFAULT_POOL_CONFIG, PoolConfig
from dex.constants import MAX_POOL_TOKENS, MIN_POOL_TOKENS
from dex.errors import InvalidPair, PoolExists
from dex.ledger import TokenLedger
from dex.models.types import normalize_token, short
from dex.pools.events import PoolCreated
from dex.pools.pool import Pool

logger = structlog.get_logger()

if TYPE_CHECKING:
    from dex.routing.pathfinding import PathFinder

TokenSetKey = tuple[str, ...]

# Operator used when neither the registry nor the caller names one
DEFAULT_OWNER = "0x" + "00" * 19 + "ff"


def canonical_key(tokens: Iterable[str]) -> TokenSetKey:
    """Order-independent key for a token set.

    Raises:
        InvalidPair: If the set has duplicates or an unsupported size
    """
    normalized = [normalize_token(t) for t in tokens]
    if len(set(normalized)) != len(normalized):
        raise InvalidPair(f"Duplicate tokens in {normalized}")
    if not MIN_POOL_TOKENS <= len(normalized) <= MAX_POOL_TOKENS:
        raise InvalidPair(
            f"Pools hold {MIN_POOL_TOKENS}-{MAX_POOL_TOKENS} tokens, got {len(normalized)}"
        )
    return tuple(sorted(normalized))


def pool_address(key: TokenSetKey) -> str:
    """Deterministic pool address for a canonical token set."""
    digest = hashlib.sha256("|".join(key).encode()).hexdigest()
    return "0x" + digest[:40]


class PoolRegistry:
    """Registry and factory of liquidity pools.

    Args:
        ledger: Token ledger shared by every pool (a new one if None)
        owner: Default operator of created pools
        config: Configuration handed to every created pool
    """

    def __init__(
        self,
        ledger: TokenLedger | None = None,
        owner: str = DEFAULT_OWNER,
        config: PoolConfig = DEFAULT_POOL_CONFIG,
    ) -> None:
        self.ledger = ledger if ledger is not None else TokenLedger()
        self.owner = normalize_token(owner)
        self.config = config
        self.events: list[PoolCreated] = []

        self._pools: dict[TokenSetKey, Pool] = {}
        self._pools_by_address: dict[str, Pool] = {}
        # Secondary index: token -> pools holding it, in creation order
        self._pools_by_token: dict[str, list[Pool]] = {}
        self._supported_tokens: set[str] = set()
        self._lock = threading.RLock()
        # Lazy-initialized PathFinder for graph operations
        self._pathfinder: PathFinder | None = None

    @property
    def pathfinder(self) -> PathFinder:
        """Get the PathFinder for this registry (lazy initialization).

        It is invalidated whenever a pool is created.
        """
        with self._lock:
            if self._pathfinder is None:
                from dex.routing.pathfinding import PathFinder

                self._pathfinder = PathFinder(self)
            return self._pathfinder

    def create_pool(self, tokens: Iterable[str], owner: str | None = None) -> Pool:
        """Create a pool for a token set.

        The pool keeps the caller's token order; the first token becomes
        its anchor. Lookup stays order-independent.

        Args:
            tokens: Two or three distinct token ids
            owner: Operator of the pool (defaults to the registry owner)

        Returns:
            The new, empty pool

        Raises:
            InvalidPair: Duplicate tokens or unsupported size
            PoolExists: A pool for this token set already exists
        """
        ordered = [normalize_token(t) for t in tokens]
        key = canonical_key(ordered)

        with self._lock:
            if key in self._pools:
                raise PoolExists(f"Pool exists for {[short(t) for t in key]}")

            pool = Pool(
                address=pool_address(key),
                tokens=ordered,
                ledger=self.ledger,
                owner=owner if owner is not None else self.owner,
                config=self.config,
            )
            self._pools[key] = pool
            self._pools_by_address[pool.address] = pool
            for token in ordered:
                self._pools_by_token.setdefault(token, []).append(pool)
            self._supported_tokens.update(ordered)
            self.events.append(PoolCreated(pool=pool.address, tokens=pool.tokens))
            if self._pathfinder is not None:
                self._pathfinder.invalidate()

        logger.info(
            "pool_created",
            pool=short(pool.address),
            tokens=[short(t) for t in pool.tokens],
            fee_bps=pool.trading_fee_bps,
        )
        return pool

    def get_pool(self, tokens: Iterable[str]) -> Pool | None:
        """Get the pool for a token set (order independent).

        Returns:
            Pool if found, None otherwise (including malformed sets)
        """
        try:
            key = canonical_key(tokens)
        except InvalidPair:
            return None
        return self._pools.get(key)

    def get_pool_by_address(self, address: str) -> Pool | None:
        """Get a pool by its ledger address."""
        return self._pools_by_address.get(normalize_token(address))

    def get_supported_tokens(self) -> frozenset[str]:
        """All tokens held by at least one pool."""
        with self._lock:
            return frozenset(self._supported_tokens)

    def pools_containing(self, token: str) -> list[Pool]:
        """Pools holding a token, in creation order."""
        return list(self._pools_by_token.get(normalize_token(token), []))

    def all_pools(self) -> list[Pool]:
        """Every pool, in creation order."""
        with self._lock:
            return list(self._pools.values())

    @property
    def pool_count(self) -> int:
        """Return the number of pools in the registry."""
        return len(self._pools)


__all__ = ["PoolRegistry", "canonical_key", "pool_address", "DEFAULT_OWNER"]
