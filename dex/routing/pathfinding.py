"""Token graph and candidate path discovery.

Tokens are vertices; two tokens share an edge when at least one pool holds
both. Candidate paths are the direct path and every path through a single
intermediate token. Deeper paths are intentionally not explored: the
two-hop search bounds the cost of a quote while covering the common case
where an imbalanced direct pool is beaten by a detour.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Protocol

from dex.constants import MAX_ROUTE_HOPS
from dex.models.types import normalize_token

if TYPE_CHECKING:
    from dex.pools import Pool


class PoolSource(Protocol):
    """Anything that can list its pools (the PoolRegistry in practice)."""

    def all_pools(self) -> list[Pool]: ...


class TokenGraph:
    """Adjacency-set graph of tokens connected by pools.

    A pure data structure with no caching; PathFinder owns and caches it.
    """

    def __init__(self) -> None:
        self._adjacency: dict[str, set[str]] = {}

    @classmethod
    def from_registry(cls, registry: PoolSource) -> TokenGraph:
        """Build a TokenGraph from every pool in a registry.

        An N-token pool contributes N*(N-1)/2 edges.
        """
        graph = cls()
        for pool in registry.all_pools():
            for i, token_a in enumerate(pool.tokens):
                for token_b in pool.tokens[i + 1 :]:
                    graph._add_edge(token_a, token_b)
        return graph

    def _add_edge(self, token_a: str, token_b: str) -> None:
        self._adjacency.setdefault(token_a, set()).add(token_b)
        self._adjacency.setdefault(token_b, set()).add(token_a)

    def get_neighbors(self, token: str) -> set[str]:
        """Tokens directly tradeable with `token`."""
        return self._adjacency.get(normalize_token(token), set())


class PathFinder:
    """Cached candidate-path enumeration over a registry's token graph.

    Usage:
        finder = PathFinder(registry)
        paths = finder.find_candidate_paths(token_in, token_out)
    """

    def __init__(self, registry: PoolSource) -> None:
        self._registry = registry
        self._graph: TokenGraph | None = None
        self._path_cache: dict[tuple[str, str], list[tuple[str, ...]]] = {}
        # Bumped by invalidate(); results computed under an older generation
        # are returned to their caller but never cached.
        self._generation = 0
        self._lock = threading.Lock()

    def invalidate(self) -> None:
        """Drop the graph and cached paths; called when a pool is created."""
        with self._lock:
            self._generation += 1
            self._graph = None
            self._path_cache.clear()

    @property
    def graph(self) -> TokenGraph:
        """Get or build the token graph (lazy initialization)."""
        with self._lock:
            generation = self._generation
        return self._graph_for(generation)

    def _graph_for(self, generation: int) -> TokenGraph:
        with self._lock:
            if self._graph is not None and self._generation == generation:
                return self._graph

        # Built outside the lock: the registry takes its own lock and calls
        # invalidate() while holding it.
        graph = TokenGraph.from_registry(self._registry)
        with self._lock:
            if self._generation == generation:
                self._graph = graph
        return graph

    def find_candidate_paths(self, token_in: str, token_out: str) -> list[tuple[str, ...]]:
        """Enumerate direct and two-hop token paths.

        The direct path comes first, then two-hop paths ordered by
        intermediate token, so callers can rely on a stable order.

        Args:
            token_in: Starting token
            token_out: Target token

        Returns:
            Paths as tuples of token ids (empty if none or same token)
        """
        token_in_norm = normalize_token(token_in)
        token_out_norm = normalize_token(token_out)
        if token_in_norm == token_out_norm:
            return []

        cache_key = (token_in_norm, token_out_norm)
        with self._lock:
            generation = self._generation
            cached = self._path_cache.get(cache_key)
        if cached is not None:
            return cached

        graph = self._graph_for(generation)
        start_neighbors = graph.get_neighbors(token_in_norm)
        end_neighbors = graph.get_neighbors(token_out_norm)

        candidates: list[tuple[str, ...]] = []
        if token_out_norm in start_neighbors:
            candidates.append((token_in_norm, token_out_norm))

        if MAX_ROUTE_HOPS >= 2:
            # A two-hop path exists through every common neighbor
            for intermediate in sorted(start_neighbors & end_neighbors):
                if intermediate not in (token_in_norm, token_out_norm):
                    candidates.append((token_in_norm, intermediate, token_out_norm))

        with self._lock:
            if self._generation == generation:
                self._path_cache[cache_key] = candidates
        return candidates


__all__ = ["TokenGraph", "PathFinder", "PoolSource"]
