"""Swap routing.

Module structure:
- types.py: HopResult, Route and SwapReceipt dataclasses
- pathfinding.py: TokenGraph and PathFinder for candidate path discovery
- router.py: Router facade (quotes, best path, atomic multi-hop swaps)
"""

from dex.routing.pathfinding import PathFinder, TokenGraph
from dex.routing.router import Router
from dex.routing.types import HopResult, Path, Route, SwapReceipt

__all__ = [
    "HopResult",
    "Path",
    "PathFinder",
    "Route",
    "Router",
    "SwapReceipt",
    "TokenGraph",
]
