"""HTTP API for the exchange."""

from dex.api.endpoints import Exchange, get_exchange
from dex.api.main import app

__all__ = ["Exchange", "app", "get_exchange"]
