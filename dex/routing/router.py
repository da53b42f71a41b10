"""Swap routing across pools.

The Router is stateless: every call reads the registry and pool reserves
afresh. It prices candidate routes of at most two hops, picks the one with
the greatest output, and executes multi-hop swaps as a single atomic unit
of work: if any hop fails, no hop's effects persist.

Routes of more than two hops are not explored. This is a scope limit on
search cost, not an oversight.
"""

from __future__ import annotations

import itertools
import time
from collections.abc import Callable, Iterator, Sequence

import structlog

from dex.atomic import atomic
from dex.constants import ROUTER_ACCOUNT
from dex.errors import (
    DexError,
    Expired,
    InvalidAmount,
    InvalidPair,
    InvalidPath,
    InvalidPoolForTokens,
    NoPathFound,
    SlippageExceeded,
    ZeroAmount,
)
from dex.ledger import TokenLedger
from dex.models.types import normalize_token, short
from dex.pools import Pool, PoolRegistry, Swapped
from dex.routing.types import HopResult, Path, Route, SwapReceipt

logger = structlog.get_logger()


class Router:
    """Finds and executes the best swap route between two tokens.

    Args:
        registry: Pool registry to route through
        ledger: Token ledger (defaults to the registry's)
        clock: Returns the current time in seconds, checked against deadlines
        account: Ledger account holding amounts between hops
    """

    def __init__(
        self,
        registry: PoolRegistry,
        ledger: TokenLedger | None = None,
        clock: Callable[[], float] = time.time,
        account: str = ROUTER_ACCOUNT,
    ) -> None:
        if registry is None:
            raise ValueError("Router requires a pool registry")
        self.registry = registry
        self.ledger = ledger if ledger is not None else registry.ledger
        self.account = normalize_token(account)
        self._clock = clock

    # --- Discovery ---

    def find_direct_pools(self, token_a: str, token_b: str) -> list[Pool]:
        """Every pool holding both tokens, whatever its size.

        Returns:
            Pools in creation order (may be empty)
        """
        token_a_norm = normalize_token(token_a)
        token_b_norm = normalize_token(token_b)
        if token_a_norm == token_b_norm:
            return []
        return [
            pool
            for pool in self.registry.pools_containing(token_a_norm)
            if pool.contains(token_b_norm)
        ]

    def _candidate_routes(
        self, token_in: str, token_out: str
    ) -> Iterator[tuple[Path, tuple[Pool, ...]]]:
        """Yield every (path, pools) pair, direct routes first.

        A route through the same pool twice is skipped: its second hop
        would be priced against reserves the first hop has already moved.
        """
        for path in self.registry.pathfinder.find_candidate_paths(token_in, token_out):
            hop_pools = [self.find_direct_pools(path[i], path[i + 1]) for i in range(len(path) - 1)]
            for pools in itertools.product(*hop_pools):
                if len({pool.address for pool in pools}) == len(pools):
                    yield path, pools

    def _simulate(self, path: Path, pools: Sequence[Pool], amount_in: int) -> Route | None:
        """Price a route hop by hop against current reserves.

        Returns:
            The priced Route, or None if any hop cannot be filled
        """
        hops: list[HopResult] = []
        current = amount_in
        for i, pool in enumerate(pools):
            if current <= 0:
                return None
            amount_out = pool.get_amount_out(path[i], current, path[i + 1])
            if amount_out <= 0 or amount_out >= pool.reserve_of(path[i + 1]):
                return None
            hops.append(
                HopResult(
                    pool=pool,
                    input_token=path[i],
                    output_token=path[i + 1],
                    amount_in=current,
                    amount_out=amount_out,
                )
            )
            current = amount_out
        return Route(
            path=path,
            pools=tuple(pools),
            amount_in=amount_in,
            amount_out=current,
            hops=tuple(hops),
        )

    def best_route(self, token_in: str, token_out: str, amount_in: int) -> Route:
        """Price every candidate route and return the best one.

        Selection: strictly greatest output; on a tie the route with fewer
        hops wins, then the one discovered first.

        Raises:
            InvalidPair: token_in == token_out
            ZeroAmount: amount_in <= 0
            NoPathFound: No candidate route yields a positive output
        """
        token_in_norm = normalize_token(token_in)
        token_out_norm = normalize_token(token_out)
        if token_in_norm == token_out_norm:
            raise InvalidPair(f"Same tokens: {token_in}")
        if amount_in <= 0:
            raise ZeroAmount("Zero amount")

        best: Route | None = None
        for path, pools in self._candidate_routes(token_in_norm, token_out_norm):
            route = self._simulate(path, pools, amount_in)
            if route is None:
                continue
            logger.debug(
                "route_candidate",
                path=[short(t) for t in path],
                pools=[short(p.address) for p in pools],
                amount_out=route.amount_out,
            )
            if best is None or _score(route) > _score(best):
                best = route

        if best is None:
            raise NoPathFound(
                f"No path found from {short(token_in_norm)} to {short(token_out_norm)}"
            )

        logger.debug(
            "route_selected",
            path=[short(t) for t in best.path],
            hops=best.hop_count,
            amount_in=amount_in,
            amount_out=best.amount_out,
        )
        return best

    def find_best_path(
        self, token_in: str, token_out: str, amount_in: int
    ) -> tuple[Path, tuple[Pool, ...]]:
        """Best route as (token path, pool per hop).

        Raises:
            InvalidPair, ZeroAmount, NoPathFound: See best_route
        """
        route = self.best_route(token_in, token_out, amount_in)
        return route.path, route.pools

    def get_amounts_out(self, token_in: str, amount_in: int, token_out: str) -> tuple[int, Path]:
        """Quote the best route without executing it.

        Returns:
            Tuple of (amount_out, path)
        """
        route = self.best_route(token_in, token_out, amount_in)
        return route.amount_out, route.path

    # --- Execution ---

    def swap_exact_tokens_for_tokens(
        self,
        trader: str,
        token_in: str,
        amount_in: int,
        token_out: str,
        min_amount_out: int,
        recipient: str,
        deadline: float,
    ) -> SwapReceipt:
        """Swap along the best route.

        Args:
            trader: Account paying amount_in
            token_in: Token sold
            amount_in: Exact amount sold
            token_out: Token bought
            min_amount_out: Minimum final output, checked once after the last hop
            recipient: Account receiving the final output
            deadline: Latest acceptable execution time (clock seconds)

        Raises:
            Expired: Called after deadline
            InvalidAmount: min_amount_out < 0
            InvalidPair, ZeroAmount, NoPathFound: See best_route
            SlippageExceeded: Final output below min_amount_out
            DexError: Any hop's rejection; no hop's effects persist
        """
        self._check_deadline(deadline)
        if min_amount_out < 0:
            raise InvalidAmount(f"Minimum output cannot be negative: {min_amount_out}")
        path, pools = self.find_best_path(token_in, token_out, amount_in)
        return self._execute(trader, path, pools, amount_in, min_amount_out, recipient)

    def swap_with_path(
        self,
        trader: str,
        token_in: str,
        amount_in: int,
        min_amount_out: int,
        path: Sequence[str],
        pools: Sequence[Pool | str],
        recipient: str,
        deadline: float,
    ) -> SwapReceipt:
        """Swap along a caller-supplied route.

        Pools may be given as Pool objects or as pool addresses.

        Raises:
            Expired: Called after deadline
            InvalidPath: Path shorter than 2, pool count != hops, or path
                does not start at token_in
            InvalidPoolForTokens: A pool does not hold the pair it must bridge
            ZeroAmount, InvalidAmount, SlippageExceeded, DexError: As for
                swap_exact_tokens_for_tokens
        """
        self._check_deadline(deadline)
        normalized_path: Path = tuple(normalize_token(t) for t in path)
        if len(normalized_path) < 2 or len(pools) != len(normalized_path) - 1:
            raise InvalidPath(
                f"Invalid path: {len(normalized_path)} tokens with {len(pools)} pools"
            )
        if normalized_path[0] != normalize_token(token_in):
            raise InvalidPath(
                f"Invalid path: starts at {short(normalized_path[0])}, not {short(token_in)}"
            )
        if amount_in <= 0:
            raise ZeroAmount("Zero amount")
        if min_amount_out < 0:
            raise InvalidAmount(f"Minimum output cannot be negative: {min_amount_out}")

        resolved: list[Pool] = []
        for i, ref in enumerate(pools):
            pool = self._resolve_pool(ref)
            token_a, token_b = normalized_path[i], normalized_path[i + 1]
            if pool is None or not pool.contains(token_a) or not pool.contains(token_b):
                raise InvalidPoolForTokens(
                    f"Invalid pool for tokens at hop {i}: {short(token_a)} -> {short(token_b)}"
                )
            resolved.append(pool)

        return self._execute(
            trader, normalized_path, tuple(resolved), amount_in, min_amount_out, recipient
        )

    def _execute(
        self,
        trader: str,
        path: Path,
        pools: tuple[Pool, ...],
        amount_in: int,
        min_amount_out: int,
        recipient: str,
    ) -> SwapReceipt:
        """Run every hop inside one atomic unit of work.

        The first hop is paid by the trader; later hops are paid from the
        router account, which receives each intermediate output. The last
        hop pays the recipient directly.
        """
        trader = normalize_token(trader)
        recipient = normalize_token(recipient)
        last = len(pools) - 1

        try:
            with atomic(pools, self.ledger):
                hops: list[Swapped] = []
                current = amount_in
                for i, pool in enumerate(pools):
                    event = pool.swap(
                        trader=trader if i == 0 else self.account,
                        token_in=path[i],
                        amount_in=current,
                        token_out=path[i + 1],
                        recipient=recipient if i == last else self.account,
                    )
                    hops.append(event)
                    current = event.amount_out

                if current < min_amount_out:
                    raise SlippageExceeded(
                        f"Insufficient output amount: {current} < {min_amount_out}"
                    )
        except DexError as err:
            logger.debug(
                "router_swap_rejected",
                path=[short(t) for t in path],
                error=type(err).__name__,
                detail=str(err),
            )
            raise

        logger.info(
            "router_swap_executed",
            trader=short(trader),
            path=[short(t) for t in path],
            amount_in=amount_in,
            amount_out=current,
        )
        return SwapReceipt(
            trader=trader,
            recipient=recipient,
            token_in=path[0],
            token_out=path[-1],
            amount_in=amount_in,
            amount_out=current,
            path=path,
            pools=tuple(pool.address for pool in pools),
            hops=tuple(hops),
        )

    def _resolve_pool(self, ref: Pool | str) -> Pool | None:
        if isinstance(ref, Pool):
            return ref
        return self.registry.get_pool_by_address(ref)

    def _check_deadline(self, deadline: float) -> None:
        now = self._clock()
        if now > deadline:
            raise Expired(f"Expired: now {now} > deadline {deadline}")


def _score(route: Route) -> tuple[int, int]:
    # Greater output first, then fewer hops
    return route.amount_out, -route.hop_count


__all__ = ["Router"]
