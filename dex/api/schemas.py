"""Pydantic request/response models for the HTTP API.

Amounts cross JSON as decimal strings and are validated as uint256; field
names are camelCase on the wire and snake_case in Python.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from dex.models.types import Address, Uint256
from dex.pools import Pool, Swapped
from dex.routing import SwapReceipt


class CreatePoolRequest(BaseModel):
    """Create a pool for a token set; the first token becomes the anchor."""

    tokens: list[Address] = Field(min_length=2, max_length=3)
    owner: Address | None = Field(default=None, description="Operator (defaults to DEX_OWNER)")


class PoolResponse(BaseModel):
    """Current state of a pool."""

    address: Address
    tokens: list[Address]
    owner: Address
    reserves: dict[str, Uint256]
    accumulated_fees: dict[str, Uint256] = Field(alias="accumulatedFees")
    total_supply: Uint256 = Field(alias="totalSupply")
    trading_fee_bps: int = Field(alias="tradingFeeBps")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_pool(cls, pool: Pool) -> PoolResponse:
        return cls(
            address=pool.address,
            tokens=list(pool.tokens),
            owner=pool.owner,
            reserves={t: str(r) for t, r in zip(pool.tokens, pool.get_reserves(), strict=True)},
            accumulated_fees={t: str(pool.accumulated_fee(t)) for t in pool.tokens},
            total_supply=str(pool.total_supply),
            trading_fee_bps=pool.trading_fee_bps,
        )


class TokensResponse(BaseModel):
    tokens: list[Address]


class BalancesResponse(BaseModel):
    """Ledger balances of an account for every supported token."""

    account: Address
    balances: dict[str, Uint256]


class AddLiquidityRequest(BaseModel):
    provider: Address
    amounts: dict[Address, Uint256] = Field(
        description="Token -> amount offered; the anchor token is mandatory"
    )


class WithdrawLiquidityRequest(BaseModel):
    provider: Address
    lp_amount: Uint256 = Field(alias="lpAmount")
    min_amounts: dict[Address, Uint256] | None = Field(default=None, alias="minAmounts")

    model_config = {"populate_by_name": True}


class LiquidityResponse(BaseModel):
    """LP shares minted or burned and the per-token amounts moved."""

    pool: Address
    provider: Address
    lp_amount: Uint256 = Field(alias="lpAmount")
    amounts: dict[str, Uint256]

    model_config = {"populate_by_name": True}


class ClaimRequest(BaseModel):
    provider: Address
    token: Address
    amount: Uint256 = Field(default="0", description="0 claims the full entitlement")


class ClaimResponse(BaseModel):
    pool: Address
    provider: Address
    token: Address
    amount: Uint256


class SetFeeRequest(BaseModel):
    caller: Address
    fee_bps: int = Field(alias="feeBps")

    model_config = {"populate_by_name": True}


class QuoteRequest(BaseModel):
    token_in: Address = Field(alias="tokenIn")
    token_out: Address = Field(alias="tokenOut")
    amount_in: Uint256 = Field(alias="amountIn")

    model_config = {"populate_by_name": True}


class QuoteResponse(BaseModel):
    amount_out: Uint256 = Field(alias="amountOut")
    path: list[Address]

    model_config = {"populate_by_name": True}


class SwapRequest(BaseModel):
    """Swap an exact input along the best route."""

    trader: Address
    token_in: Address = Field(alias="tokenIn")
    token_out: Address = Field(alias="tokenOut")
    amount_in: Uint256 = Field(alias="amountIn")
    min_amount_out: Uint256 = Field(default="0", alias="minAmountOut")
    recipient: Address | None = Field(default=None, description="Defaults to the trader")
    deadline: float | None = Field(
        default=None, description="Unix seconds; defaults to a short window from now"
    )

    model_config = {"populate_by_name": True}


class PathSwapRequest(BaseModel):
    """Swap an exact input along a caller-supplied route (pools by address)."""

    trader: Address
    token_in: Address = Field(alias="tokenIn")
    amount_in: Uint256 = Field(alias="amountIn")
    min_amount_out: Uint256 = Field(default="0", alias="minAmountOut")
    path: list[Address]
    pools: list[Address]
    recipient: Address | None = None
    deadline: float | None = None

    model_config = {"populate_by_name": True}


class HopResponse(BaseModel):
    pool: Address
    token_in: Address = Field(alias="tokenIn")
    token_out: Address = Field(alias="tokenOut")
    amount_in: Uint256 = Field(alias="amountIn")
    amount_out: Uint256 = Field(alias="amountOut")
    fee: Uint256

    model_config = {"populate_by_name": True}

    @classmethod
    def from_event(cls, event: Swapped) -> HopResponse:
        return cls(
            pool=event.pool,
            token_in=event.token_in,
            token_out=event.token_out,
            amount_in=str(event.amount_in),
            amount_out=str(event.amount_out),
            fee=str(event.fee),
        )


class SwapResponse(BaseModel):
    trader: Address
    recipient: Address
    amount_in: Uint256 = Field(alias="amountIn")
    amount_out: Uint256 = Field(alias="amountOut")
    path: list[Address]
    pools: list[Address]
    hops: list[HopResponse]

    model_config = {"populate_by_name": True}

    @classmethod
    def from_receipt(cls, receipt: SwapReceipt) -> SwapResponse:
        return cls(
            trader=receipt.trader,
            recipient=receipt.recipient,
            amount_in=str(receipt.amount_in),
            amount_out=str(receipt.amount_out),
            path=list(receipt.path),
            pools=list(receipt.pools),
            hops=[HopResponse.from_event(hop) for hop in receipt.hops],
        )


class ErrorResponse(BaseModel):
    """Body returned for every rejected exchange call."""

    error: str = Field(description="Exception class name, e.g. SlippageExceeded")
    detail: str
    category: str = Field(description="validation, economic_guard, entitlement or structural")
