"""Multi-token DEX - pools, registry and router."""

from dex.ledger import TokenLedger
from dex.pools import Pool, PoolRegistry
from dex.routing import Router

__version__ = "0.1.0"
__all__ = ["Pool", "PoolRegistry", "Router", "TokenLedger", "__version__"]
