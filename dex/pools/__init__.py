"""Pool management package.

Provides Pool (reserve and LP accounting) and PoolRegistry (pool factory).
"""

from .events import (
    IncentivesClaimed,
    LiquidityAdded,
    LiquidityWithdrawn,
    PoolCreated,
    Swapped,
    TradingFeeChanged,
)
from .pool import Pool, PoolSnapshot
from .registry import PoolRegistry, canonical_key

__all__ = [
    "Pool",
    "PoolSnapshot",
    "PoolRegistry",
    "canonical_key",
    "IncentivesClaimed",
    "LiquidityAdded",
    "LiquidityWithdrawn",
    "PoolCreated",
    "Swapped",
    "TradingFeeChanged",
]
