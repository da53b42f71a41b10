"""All-or-nothing execution across several pools.

A multi-hop swap is a sequence of single-pool swaps that must either all
take effect or none. atomic() holds the locks of every participating pool
and of the ledger for the duration of the block, snapshots their state on
entry, and restores every snapshot if the block raises.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import ExitStack, contextmanager

import structlog

from dex.ledger import TokenLedger
from dex.models.types import short
from dex.pools.pool import Pool

logger = structlog.get_logger()


@contextmanager
def atomic(pools: Iterable[Pool], ledger: TokenLedger) -> Iterator[None]:
    """Run a block as one unit of work over `pools` and `ledger`.

    Pool locks are taken in address order, then the ledger lock, which is
    the same order single-pool operations use.

    Args:
        pools: Pools the block may mutate (duplicates allowed)
        ledger: Ledger the block may mutate

    Raises:
        Whatever the block raises, after state has been restored
    """
    unique = {pool.address: pool for pool in pools}
    ordered = [unique[address] for address in sorted(unique)]

    with ExitStack() as stack:
        for pool in ordered:
            stack.enter_context(pool.lock)
        stack.enter_context(ledger.lock)

        pool_snapshots = [(pool, pool.snapshot()) for pool in ordered]
        ledger_snapshot = ledger.snapshot()
        try:
            yield
        except BaseException:
            for pool, snapshot in pool_snapshots:
                pool.restore(snapshot)
            ledger.restore(ledger_snapshot)
            logger.debug("atomic_rolled_back", pools=[short(p.address) for p in ordered])
            raise


__all__ = ["atomic"]
