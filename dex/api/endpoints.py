"""API endpoints for the exchange.

Accounts named in request bodies are trusted as given; see dex.api.main.
"""

import os
import time
from dataclasses import dataclass

import structlog
from fastapi import APIRouter, Depends, HTTPException

from dex.api.schemas import (
    AddLiquidityRequest,
    BalancesResponse,
    ClaimRequest,
    ClaimResponse,
    CreatePoolRequest,
    LiquidityResponse,
    PathSwapRequest,
    PoolResponse,
    QuoteRequest,
    QuoteResponse,
    SetFeeRequest,
    SwapRequest,
    SwapResponse,
    TokensResponse,
    WithdrawLiquidityRequest,
)
from dex.ledger import TokenLedger
from dex.models.types import normalize_token, short
from dex.pools import Pool, PoolRegistry
from dex.pools.registry import DEFAULT_OWNER
from dex.routing import Router

logger = structlog.get_logger()

router = APIRouter()

# Seconds a swap stays valid when the request carries no deadline
DEFAULT_DEADLINE_SECONDS = 300


@dataclass
class Exchange:
    """The state served by the API: one ledger, one registry, one router."""

    ledger: TokenLedger
    registry: PoolRegistry
    router: Router

    @classmethod
    def create(cls, owner: str = DEFAULT_OWNER) -> "Exchange":
        ledger = TokenLedger()
        registry = PoolRegistry(ledger=ledger, owner=owner)
        return cls(ledger=ledger, registry=registry, router=Router(registry, ledger))


def _create_default_exchange() -> Exchange:
    """Create the process-wide exchange.

    The pool operator is read from DEX_OWNER (defaults to DEFAULT_OWNER).
    """
    owner = os.environ.get("DEX_OWNER", DEFAULT_OWNER)
    logger.info("exchange_created", owner=short(owner))
    return Exchange.create(owner=owner)


_default_exchange: Exchange | None = None


def get_default_exchange() -> Exchange:
    """Return the process-wide exchange, creating it on first use."""
    global _default_exchange
    if _default_exchange is None:
        _default_exchange = _create_default_exchange()
    return _default_exchange


def get_exchange() -> Exchange:
    """Dependency provider for the exchange instance.

    Override this in tests to inject a fresh exchange:
        app.dependency_overrides[get_exchange] = lambda: exchange

    Returns:
        The exchange instance serving requests.
    """
    return get_default_exchange()


def _require_pool(exchange: Exchange, address: str) -> Pool:
    pool = exchange.registry.get_pool_by_address(address)
    if pool is None:
        raise HTTPException(status_code=404, detail=f"Pool not found: {address}")
    return pool


def _deadline(requested: float | None) -> float:
    if requested is not None:
        return requested
    return time.time() + DEFAULT_DEADLINE_SECONDS


# --- Registry ---


@router.get("/tokens")
def list_tokens(exchange: Exchange = Depends(get_exchange)) -> TokensResponse:
    """Tokens held by at least one pool."""
    return TokensResponse(tokens=sorted(exchange.registry.get_supported_tokens()))


@router.get("/pools")
def list_pools(exchange: Exchange = Depends(get_exchange)) -> list[PoolResponse]:
    return [PoolResponse.from_pool(pool) for pool in exchange.registry.all_pools()]


@router.post("/pools", status_code=201)
def create_pool(
    request: CreatePoolRequest, exchange: Exchange = Depends(get_exchange)
) -> PoolResponse:
    """Create a pool for a new token set.

    Error Handling:
        - Duplicate or malformed token set: 400
        - Pool already exists for the set: 409
    """
    pool = exchange.registry.create_pool(request.tokens, owner=request.owner)
    return PoolResponse.from_pool(pool)


@router.get("/pools/{address}")
def get_pool(address: str, exchange: Exchange = Depends(get_exchange)) -> PoolResponse:
    return PoolResponse.from_pool(_require_pool(exchange, address))


@router.get("/balances/{account}")
def get_balances(account: str, exchange: Exchange = Depends(get_exchange)) -> BalancesResponse:
    """Ledger balances of an account across every supported token."""
    tokens = sorted(exchange.registry.get_supported_tokens())
    return BalancesResponse(
        account=normalize_token(account),
        balances={token: str(exchange.ledger.balance_of(account, token)) for token in tokens},
    )


# --- Liquidity ---


@router.post("/pools/{address}/liquidity")
def add_liquidity(
    address: str,
    request: AddLiquidityRequest,
    exchange: Exchange = Depends(get_exchange),
) -> LiquidityResponse:
    pool = _require_pool(exchange, address)
    event = pool.add_liquidity(
        request.provider, {token: int(amount) for token, amount in request.amounts.items()}
    )
    return LiquidityResponse(
        pool=event.pool,
        provider=event.provider,
        lp_amount=str(event.lp_minted),
        amounts={token: str(amount) for token, amount in event.amounts.items()},
    )


@router.post("/pools/{address}/withdraw")
def withdraw_liquidity(
    address: str,
    request: WithdrawLiquidityRequest,
    exchange: Exchange = Depends(get_exchange),
) -> LiquidityResponse:
    pool = _require_pool(exchange, address)
    min_amounts = (
        {token: int(amount) for token, amount in request.min_amounts.items()}
        if request.min_amounts is not None
        else None
    )
    event = pool.withdraw_liquidity(request.provider, int(request.lp_amount), min_amounts)
    return LiquidityResponse(
        pool=event.pool,
        provider=event.provider,
        lp_amount=str(event.lp_burned),
        amounts={token: str(amount) for token, amount in event.amounts.items()},
    )


@router.post("/pools/{address}/claim")
def claim_incentives(
    address: str,
    request: ClaimRequest,
    exchange: Exchange = Depends(get_exchange),
) -> ClaimResponse:
    pool = _require_pool(exchange, address)
    event = pool.claim_lp_incentives(request.provider, request.token, int(request.amount))
    return ClaimResponse(
        pool=event.pool, provider=event.provider, token=event.token, amount=str(event.amount)
    )


@router.post("/pools/{address}/fee")
def set_trading_fee(
    address: str,
    request: SetFeeRequest,
    exchange: Exchange = Depends(get_exchange),
) -> PoolResponse:
    """Change a pool's trading fee; `caller` must be the pool operator (trusted as given)."""
    pool = _require_pool(exchange, address)
    pool.set_trading_fee(request.caller, request.fee_bps)
    return PoolResponse.from_pool(pool)


# --- Routing ---


@router.post("/quote")
def quote(request: QuoteRequest, exchange: Exchange = Depends(get_exchange)) -> QuoteResponse:
    """Best-route quote; nothing is executed."""
    amount_out, path = exchange.router.get_amounts_out(
        request.token_in, int(request.amount_in), request.token_out
    )
    return QuoteResponse(amount_out=str(amount_out), path=list(path))


@router.post("/swap")
def swap(request: SwapRequest, exchange: Exchange = Depends(get_exchange)) -> SwapResponse:
    """Swap an exact input along the best route.

    Error Handling:
        - Malformed request: 422 (Pydantic)
        - Exchange rejection: 400/403/409 by error category, nothing executed
    """
    logger.info(
        "received_swap",
        trader=short(request.trader),
        token_in=short(request.token_in),
        token_out=short(request.token_out),
        amount_in=request.amount_in,
    )
    receipt = exchange.router.swap_exact_tokens_for_tokens(
        trader=request.trader,
        token_in=request.token_in,
        amount_in=int(request.amount_in),
        token_out=request.token_out,
        min_amount_out=int(request.min_amount_out),
        recipient=request.recipient or request.trader,
        deadline=_deadline(request.deadline),
    )
    return SwapResponse.from_receipt(receipt)


@router.post("/swap/path")
def swap_with_path(
    request: PathSwapRequest, exchange: Exchange = Depends(get_exchange)
) -> SwapResponse:
    """Swap an exact input along a caller-supplied route."""
    logger.info(
        "received_path_swap",
        trader=short(request.trader),
        path=[short(t) for t in request.path],
        amount_in=request.amount_in,
    )
    receipt = exchange.router.swap_with_path(
        trader=request.trader,
        token_in=request.token_in,
        amount_in=int(request.amount_in),
        min_amount_out=int(request.min_amount_out),
        path=request.path,
        pools=request.pools,
        recipient=request.recipient or request.trader,
        deadline=_deadline(request.deadline),
    )
    return SwapResponse.from_receipt(receipt)
