"""Multi-token liquidity pool.

A Pool owns the reserves of two or three tokens, the LP-share ledger, and a
per-token bucket of accumulated trading fees. The first token in the pool's
order is the anchor: deposits are sized by the anchor amount and LP shares
are denominated in it.

State machine:
    Empty  (lp_supply == 0, all reserves 0) --add_liquidity--> Seeded
    Seeded --withdraw_liquidity of the whole supply--> Empty

Every operation except the first add_liquidity requires a Seeded pool.
set_trading_fee is administrative and exempt: the operator may set the
fee before the first deposit.
All public methods are serialized by the pool's lock and validate before
mutating, so a rejected call leaves no trace.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from dataclasses import dataclass

import structlog

from dex.amm.constant_product import ConstantProduct, constant_product
from dex.config import DEFAULT_POOL_CONFIG, PoolConfig
from dex.constants import MAX_POOL_TOKENS, MIN_POOL_TOKENS
from dex.errors import (
    ExceedsEntitlement,
    FeeTooHigh,
    InsufficientBalance,
    InsufficientLiquidity,
    InvalidAmount,
    InvalidPair,
    NoStake,
    NothingToClaim,
    SlippageExceeded,
    Unauthorized,
    ZeroAmount,
)
from dex.ledger import TokenLedger
from dex.models.types import normalize_token, short
from dex.pools.events import (
    IncentivesClaimed,
    LiquidityAdded,
    LiquidityWithdrawn,
    PoolEvent,
    Swapped,
    TradingFeeChanged,
)

logger = structlog.get_logger()


@dataclass
class PoolSnapshot:
    """Copy of a pool's mutable state, for rollback."""

    reserves: dict[str, int]
    lp_supply: int
    lp_balances: dict[str, int]
    accumulated_fees: dict[str, int]
    trading_fee_bps: int
    event_count: int = 0


class Pool:
    """Liquidity pool over a fixed, ordered set of two or three tokens.

    Args:
        address: Pool account on the token ledger
        tokens: Ordered token ids; tokens[0] is the anchor
        ledger: Token ledger used to move deposits, payouts and fees
        owner: Operator allowed to change the trading fee
        config: Fee and seeding parameters
        amm: Pricing math (defaults to the constant product singleton)
    """

    def __init__(
        self,
        address: str,
        tokens: list[str] | tuple[str, ...],
        ledger: TokenLedger,
        owner: str,
        config: PoolConfig = DEFAULT_POOL_CONFIG,
        amm: ConstantProduct | None = None,
    ) -> None:
        normalized = tuple(normalize_token(t) for t in tokens)
        if not MIN_POOL_TOKENS <= len(normalized) <= MAX_POOL_TOKENS:
            raise InvalidPair(
                f"Pool needs {MIN_POOL_TOKENS}-{MAX_POOL_TOKENS} tokens, got {len(normalized)}"
            )
        if len(set(normalized)) != len(normalized):
            raise InvalidPair(f"Pool tokens must be distinct: {normalized}")

        self.address = normalize_token(address)
        self.tokens: tuple[str, ...] = normalized
        self.owner = normalize_token(owner)
        self.config = config
        self.trading_fee_bps = config.default_trading_fee_bps
        self.events: list[PoolEvent] = []

        self._ledger = ledger
        self._amm = amm if amm is not None else constant_product
        self._index = {token: i for i, token in enumerate(normalized)}
        self._reserves: dict[str, int] = dict.fromkeys(normalized, 0)
        self._accumulated_fees: dict[str, int] = dict.fromkeys(normalized, 0)
        self._lp_supply = 0
        self._lp_balances: dict[str, int] = {}
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        symbols = "/".join(short(t) for t in self.tokens)
        return f"Pool({short(self.address)}, {symbols})"

    # --- Token lookup ---

    @property
    def anchor(self) -> str:
        """The first token in pool order; deposits are sized by it."""
        return self.tokens[0]

    @property
    def fee_denominator(self) -> int:
        return self.config.fee_denominator

    def contains(self, token: str) -> bool:
        """Check if the pool holds a token."""
        return normalize_token(token) in self._index

    def index_of(self, token: str) -> int:
        """Position of a token in pool order.

        Raises:
            InvalidPair: If the token is not in the pool
        """
        token_norm = normalize_token(token)
        try:
            return self._index[token_norm]
        except KeyError:
            raise InvalidPair(f"Token {token} not in pool {short(self.address)}") from None

    def _require_token(self, token: str) -> str:
        return self.tokens[self.index_of(token)]

    def _require_pair(self, token_in: str, token_out: str) -> tuple[str, str]:
        token_in_norm = self._require_token(token_in)
        token_out_norm = self._require_token(token_out)
        if token_in_norm == token_out_norm:
            raise InvalidPair(f"Same tokens: {token_in}")
        return token_in_norm, token_out_norm

    # --- Getters ---

    def get_reserves(self) -> tuple[int, ...]:
        """Reserves in pool token order."""
        with self._lock:
            return tuple(self._reserves[t] for t in self.tokens)

    def reserve_of(self, token: str) -> int:
        return self._reserves[self._require_token(token)]

    def accumulated_fee(self, token: str) -> int:
        """Unclaimed fees collected in `token` (not part of the reserve)."""
        return self._accumulated_fees[self._require_token(token)]

    def balance_of(self, account: str) -> int:
        """LP shares held by an account."""
        return self._lp_balances.get(normalize_token(account), 0)

    @property
    def total_supply(self) -> int:
        """Total LP shares outstanding."""
        return self._lp_supply

    @property
    def is_seeded(self) -> bool:
        return self._lp_supply > 0

    @property
    def lock(self) -> threading.RLock:
        """Lock serializing every operation on this pool."""
        return self._lock

    # --- Liquidity ---

    def get_required_amounts(self, anchor_amount: int) -> dict[str, int]:
        """Non-anchor amounts that must accompany an anchor deposit.

        Uses the seeding ratios while the pool is empty and the current
        reserve ratios once it is seeded.
        """
        if anchor_amount < 0:
            raise InvalidAmount(f"Anchor amount cannot be negative: {anchor_amount}")
        with self._lock:
            if self._lp_supply == 0:
                return {
                    token: anchor_amount * self.config.initial_ratio(position)
                    for position, token in enumerate(self.tokens)
                    if position > 0
                }
            reserve_anchor = self._reserves[self.anchor]
            return {
                token: self._amm.required_amount(
                    anchor_amount, self._reserves[token], reserve_anchor
                )
                for token in self.tokens[1:]
            }

    def add_liquidity(self, provider: str, amounts: Mapping[str, int]) -> LiquidityAdded:
        """Deposit tokens and mint LP shares.

        The anchor amount is mandatory. For an empty pool the minted shares
        equal the anchor amount and non-anchor amounts are taken as supplied,
        or seeded from the configured ratios when omitted. For a seeded pool
        each non-anchor token is pulled at the current reserve ratio; a
        supplied amount is a cap and must cover that requirement.

        Args:
            provider: Account funding the deposit
            amounts: Token -> amount offered

        Returns:
            LiquidityAdded with the shares minted and amounts pulled

        Raises:
            InvalidAmount: Anchor amount missing or <= 0, an amount is negative,
                or an offered amount is below the required one
            InvalidPair: A token is not in the pool
            InsufficientBalance: Provider cannot fund the deposit
        """
        provider = normalize_token(provider)
        offered = self._normalize_amounts(amounts)
        anchor_amount = offered.get(self.anchor, 0)
        if anchor_amount <= 0:
            raise InvalidAmount(f"Amount must be greater than 0 for anchor {short(self.anchor)}")

        with self._lock:
            if self._lp_supply == 0:
                pulled = self._initial_deposit(anchor_amount, offered)
                minted = anchor_amount
            else:
                pulled = self._proportional_deposit(anchor_amount, offered)
                minted = self._amm.lp_to_mint(
                    anchor_amount, self._lp_supply, self._reserves[self.anchor]
                )
                if minted == 0:
                    raise InvalidAmount(f"Deposit of {anchor_amount} mints no LP shares")

            with self._ledger.lock:
                self._require_funds(provider, pulled)
                for token, amount in pulled.items():
                    self._ledger.transfer(provider, self.address, token, amount)
                    self._reserves[token] += amount
                self._lp_supply += minted
                self._lp_balances[provider] = self._lp_balances.get(provider, 0) + minted

            event = LiquidityAdded(
                pool=self.address, provider=provider, lp_minted=minted, amounts=pulled
            )
            self.events.append(event)

        logger.info(
            "liquidity_added",
            pool=short(self.address),
            provider=short(provider),
            lp_minted=minted,
            amounts={short(t): a for t, a in pulled.items()},
        )
        return event

    def _initial_deposit(self, anchor_amount: int, offered: dict[str, int]) -> dict[str, int]:
        pulled = {self.anchor: anchor_amount}
        for position, token in enumerate(self.tokens):
            if position == 0:
                continue
            if token in offered:
                if offered[token] <= 0:
                    raise InvalidAmount(f"Initial deposit of {short(token)} must be positive")
                pulled[token] = offered[token]
            else:
                pulled[token] = anchor_amount * self.config.initial_ratio(position)
        return pulled

    def _proportional_deposit(self, anchor_amount: int, offered: dict[str, int]) -> dict[str, int]:
        pulled = {self.anchor: anchor_amount}
        reserve_anchor = self._reserves[self.anchor]
        for token in self.tokens[1:]:
            required = self._amm.required_amount(
                anchor_amount, self._reserves[token], reserve_anchor
            )
            supplied = offered.get(token)
            if supplied is not None and supplied < required:
                raise InvalidAmount(
                    f"Deposit of {short(token)} is {supplied}, at least {required} required"
                )
            pulled[token] = required
        return pulled

    def withdraw_liquidity(
        self,
        provider: str,
        lp_amount: int,
        min_amounts: Mapping[str, int] | None = None,
    ) -> LiquidityWithdrawn:
        """Burn LP shares and pay out the matching share of every reserve.

        Args:
            provider: Account burning shares
            lp_amount: Shares to burn
            min_amounts: Optional per-token minimum payouts

        Returns:
            LiquidityWithdrawn with the amounts paid out

        Raises:
            ZeroAmount: lp_amount <= 0
            InsufficientBalance: Provider holds fewer shares than lp_amount
            SlippageExceeded: A payout is below its minimum
        """
        provider = normalize_token(provider)
        if lp_amount <= 0:
            raise ZeroAmount("Withdrawal amount must be greater than 0")
        minimums = self._normalize_amounts(min_amounts or {})

        with self._lock:
            held = self._lp_balances.get(provider, 0)
            if lp_amount > held:
                raise InsufficientBalance(
                    f"{short(provider)} holds {held} LP shares, cannot burn {lp_amount}"
                )

            redeemed = {
                token: self._amm.redeem_amount(self._reserves[token], lp_amount, self._lp_supply)
                for token in self.tokens
            }
            for token, minimum in minimums.items():
                if redeemed[token] < minimum:
                    raise SlippageExceeded(
                        f"Withdrawal pays {redeemed[token]} of {short(token)}, minimum {minimum}"
                    )

            with self._ledger.lock:
                for token, amount in redeemed.items():
                    self._reserves[token] -= amount
                    self._ledger.transfer(self.address, provider, token, amount)
                self._lp_supply -= lp_amount
                if held == lp_amount:
                    del self._lp_balances[provider]
                else:
                    self._lp_balances[provider] = held - lp_amount

            event = LiquidityWithdrawn(
                pool=self.address, provider=provider, lp_burned=lp_amount, amounts=redeemed
            )
            self.events.append(event)

        logger.info(
            "liquidity_withdrawn",
            pool=short(self.address),
            provider=short(provider),
            lp_burned=lp_amount,
            amounts={short(t): a for t, a in redeemed.items()},
        )
        return event

    # --- Swaps ---

    def get_amount_out(self, token_in: str, amount_in: int, token_out: str) -> int:
        """Quote a swap without executing it.

        Applies the fee carve-out and the constant product curve to the
        traded pair. Returns 0 while the pool is empty.

        Raises:
            InvalidPair: Same token, or a token not in the pool
            ZeroAmount: amount_in <= 0
        """
        token_in, token_out = self._require_pair(token_in, token_out)
        if amount_in <= 0:
            raise ZeroAmount("Zero amount")
        with self._lock:
            return self._amm.get_amount_out(
                amount_in,
                self._reserves[token_in],
                self._reserves[token_out],
                self.trading_fee_bps,
                self.fee_denominator,
            )

    def swap(
        self,
        trader: str,
        token_in: str,
        amount_in: int,
        token_out: str,
        min_amount_out: int = 0,
        recipient: str | None = None,
    ) -> Swapped:
        """Swap an exact input amount for as much output as the curve gives.

        The fee is carved out of amount_in and added to the accumulated fee
        of token_in; only the net input enters the reserve.

        Args:
            trader: Account paying amount_in
            token_in: Token sold
            amount_in: Gross amount sold (fee included)
            token_out: Token bought
            min_amount_out: Slippage guard
            recipient: Account receiving the output (defaults to trader)

        Returns:
            Swapped with the realized amounts

        Raises:
            InvalidPair: Same token, or a token not in the pool
            ZeroAmount: amount_in <= 0
            InvalidAmount: min_amount_out < 0
            InsufficientLiquidity: Pool empty, output rounds to 0, or output
                would drain the reserve
            SlippageExceeded: Output below min_amount_out
            InsufficientBalance: Trader cannot pay amount_in
        """
        token_in, token_out = self._require_pair(token_in, token_out)
        if amount_in <= 0:
            raise ZeroAmount("Zero amount")
        if min_amount_out < 0:
            raise InvalidAmount(f"Minimum output cannot be negative: {min_amount_out}")
        trader = normalize_token(trader)
        recipient = normalize_token(recipient) if recipient is not None else trader

        with self._lock:
            if self._lp_supply == 0:
                raise InsufficientLiquidity(f"Pool {short(self.address)} has no liquidity")

            reserve_in = self._reserves[token_in]
            reserve_out = self._reserves[token_out]
            fee, net_in = self._amm.split_fee(amount_in, self.trading_fee_bps, self.fee_denominator)
            amount_out = self._amm.get_amount_out(
                amount_in, reserve_in, reserve_out, self.trading_fee_bps, self.fee_denominator
            )
            if amount_out == 0 or amount_out >= reserve_out:
                raise InsufficientLiquidity(
                    f"Swap of {amount_in} yields {amount_out} of reserve {reserve_out}"
                )
            if amount_out < min_amount_out:
                raise SlippageExceeded(
                    f"Insufficient output amount: {amount_out} < {min_amount_out}"
                )

            with self._ledger.lock:
                self._ledger.transfer(trader, self.address, token_in, amount_in)
                self._reserves[token_in] = reserve_in + net_in
                self._accumulated_fees[token_in] += fee
                self._reserves[token_out] = reserve_out - amount_out
                self._ledger.transfer(self.address, recipient, token_out, amount_out)

            event = Swapped(
                pool=self.address,
                trader=trader,
                recipient=recipient,
                token_in=token_in,
                amount_in=amount_in,
                token_out=token_out,
                amount_out=amount_out,
                fee=fee,
            )
            self.events.append(event)

        logger.info(
            "swap_executed",
            pool=short(self.address),
            token_in=short(token_in),
            token_out=short(token_out),
            amount_in=amount_in,
            amount_out=amount_out,
            fee=fee,
        )
        return event

    # --- LP incentives ---

    def claimable_incentives(self, provider: str, token: str) -> int:
        """Provider's current pro-rata share of the fees accumulated in `token`."""
        token = self._require_token(token)
        with self._lock:
            return self._amm.pro_rata_share(
                self._accumulated_fees[token],
                self._lp_balances.get(normalize_token(provider), 0),
                self._lp_supply,
            )

    def claim_lp_incentives(self, provider: str, token: str, amount: int = 0) -> IncentivesClaimed:
        """Pay out accumulated fees to an LP.

        The entitlement is computed at claim time against the current LP
        supply, not snapshotted per deposit. A provider who joins after fees
        accrued therefore shares in them, and earlier LPs see their share of
        those fees diluted. This is a known approximation of the model.

        Args:
            provider: LP claiming
            token: Fee token to claim
            amount: Amount to claim; 0 claims the full entitlement

        Returns:
            IncentivesClaimed with the amount paid

        Raises:
            InvalidPair: Token not in the pool
            InvalidAmount: amount < 0
            NoStake: Provider holds no LP shares
            NothingToClaim: Entitlement is 0
            ExceedsEntitlement: amount is larger than the entitlement
        """
        token = self._require_token(token)
        provider = normalize_token(provider)
        if amount < 0:
            raise InvalidAmount(f"Claim amount cannot be negative: {amount}")

        with self._lock:
            held = self._lp_balances.get(provider, 0)
            if held == 0:
                raise NoStake(f"No LP tokens owned by {short(provider)}")
            entitlement = self._amm.pro_rata_share(
                self._accumulated_fees[token], held, self._lp_supply
            )
            if entitlement == 0:
                raise NothingToClaim(f"No incentives to claim in {short(token)}")
            if amount > entitlement:
                raise ExceedsEntitlement(
                    f"Requested {amount} of {short(token)}, entitled to {entitlement}"
                )
            claimed = amount or entitlement

            with self._ledger.lock:
                self._accumulated_fees[token] -= claimed
                self._ledger.transfer(self.address, provider, token, claimed)

            event = IncentivesClaimed(
                pool=self.address, provider=provider, token=token, amount=claimed
            )
            self.events.append(event)

        logger.info(
            "incentives_claimed",
            pool=short(self.address),
            provider=short(provider),
            token=short(token),
            amount=claimed,
        )
        return event

    # --- Administration ---

    def set_trading_fee(self, caller: str, new_fee_bps: int) -> TradingFeeChanged:
        """Change the trading fee.

        Allowed in either state, so an operator can configure a pool before
        it is seeded.

        Raises:
            Unauthorized: Caller is not the pool owner
            InvalidAmount: new_fee_bps < 0
            FeeTooHigh: new_fee_bps above the configured ceiling
        """
        if normalize_token(caller) != self.owner:
            raise Unauthorized(f"{short(caller)} is not the operator of {short(self.address)}")
        if new_fee_bps < 0:
            raise InvalidAmount(f"Fee cannot be negative: {new_fee_bps}")
        if new_fee_bps > self.config.max_trading_fee_bps:
            raise FeeTooHigh(
                f"Fee too high: {new_fee_bps} > {self.config.max_trading_fee_bps} bps"
            )

        with self._lock:
            old_fee_bps = self.trading_fee_bps
            self.trading_fee_bps = new_fee_bps
            event = TradingFeeChanged(
                pool=self.address, old_fee_bps=old_fee_bps, new_fee_bps=new_fee_bps
            )
            self.events.append(event)

        logger.info(
            "trading_fee_changed", pool=short(self.address), old=old_fee_bps, new=new_fee_bps
        )
        return event

    # --- Rollback support ---

    def snapshot(self) -> PoolSnapshot:
        """Copy of the mutable state."""
        with self._lock:
            return PoolSnapshot(
                reserves=dict(self._reserves),
                lp_supply=self._lp_supply,
                lp_balances=dict(self._lp_balances),
                accumulated_fees=dict(self._accumulated_fees),
                trading_fee_bps=self.trading_fee_bps,
                event_count=len(self.events),
            )

    def restore(self, snapshot: PoolSnapshot) -> None:
        """Return to a previous snapshot, dropping events emitted since."""
        with self._lock:
            self._reserves = dict(snapshot.reserves)
            self._lp_supply = snapshot.lp_supply
            self._lp_balances = dict(snapshot.lp_balances)
            self._accumulated_fees = dict(snapshot.accumulated_fees)
            self.trading_fee_bps = snapshot.trading_fee_bps
            del self.events[snapshot.event_count :]

    # --- Helpers ---

    def _normalize_amounts(self, amounts: Mapping[str, int]) -> dict[str, int]:
        normalized: dict[str, int] = {}
        for token, amount in amounts.items():
            token_norm = self._require_token(token)
            if amount < 0:
                raise InvalidAmount(f"Amount of {short(token_norm)} cannot be negative: {amount}")
            normalized[token_norm] = amount
        return normalized

    def _require_funds(self, account: str, amounts: Mapping[str, int]) -> None:
        for token, amount in amounts.items():
            available = self._ledger.balance_of(account, token)
            if available < amount:
                raise InsufficientBalance(
                    f"{short(account)} holds {available} of {short(token)}, needs {amount}"
                )


__all__ = ["Pool", "PoolSnapshot"]
