"""External token balances.

Pools and the router move tokens between accounts through a TokenLedger.
It stands in for the token contracts of a host chain: accounts hold
balances per token, and transfers fail instead of going negative.
"""

from __future__ import annotations

import threading

import structlog

from dex.errors import InsufficientBalance, InvalidAmount
from dex.models.types import normalize_token, short

logger = structlog.get_logger()

LedgerSnapshot = dict[tuple[str, str], int]


class TokenLedger:
    """Balances of every (account, token) pair known to the exchange."""

    def __init__(self) -> None:
        self._balances: dict[tuple[str, str], int] = {}
        self._lock = threading.RLock()

    def balance_of(self, account: str, token: str) -> int:
        """Return the balance of `token` held by `account` (0 if unknown)."""
        key = (normalize_token(account), normalize_token(token))
        return self._balances.get(key, 0)

    def mint(self, account: str, token: str, amount: int) -> None:
        """Credit new tokens to an account.

        Used to fund accounts in deployments and tests; pools never mint.

        Raises:
            InvalidAmount: If amount is negative
        """
        if amount < 0:
            raise InvalidAmount(f"Cannot mint negative amount {amount}")
        key = (normalize_token(account), normalize_token(token))
        with self._lock:
            self._balances[key] = self._balances.get(key, 0) + amount
        logger.debug("tokens_minted", account=short(key[0]), token=short(key[1]), amount=amount)

    def transfer(self, sender: str, recipient: str, token: str, amount: int) -> None:
        """Move `amount` of `token` from sender to recipient.

        Raises:
            InvalidAmount: If amount is negative
            InsufficientBalance: If sender holds less than amount
        """
        if amount < 0:
            raise InvalidAmount(f"Cannot transfer negative amount {amount}")
        token_norm = normalize_token(token)
        src = (normalize_token(sender), token_norm)
        dst = (normalize_token(recipient), token_norm)

        with self._lock:
            available = self._balances.get(src, 0)
            if available < amount:
                raise InsufficientBalance(
                    f"{short(src[0])} holds {available} of {short(token_norm)}, needs {amount}"
                )
            if amount == 0 or src == dst:
                return
            self._balances[src] = available - amount
            self._balances[dst] = self._balances.get(dst, 0) + amount

    def snapshot(self) -> LedgerSnapshot:
        """Copy of all balances, for rollback."""
        with self._lock:
            return dict(self._balances)

    def restore(self, snapshot: LedgerSnapshot) -> None:
        """Replace all balances with a previous snapshot."""
        with self._lock:
            self._balances = dict(snapshot)

    @property
    def lock(self) -> threading.RLock:
        """Lock serializing balance changes."""
        return self._lock


__all__ = ["TokenLedger", "LedgerSnapshot"]
