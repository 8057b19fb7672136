"""Pydantic models for the quoting HTTP API.

Amounts travel as decimal strings so 256-bit values survive JSON clients.
Field names are camelCase on the wire, snake_case in Python.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from launchpool.models.types import Address, Bytes, Uint256


class QuoteRequest(BaseModel):
    """Swap to preview. Give exactly one of amountIn (sell) or amountOut (buy)."""

    token_in: Address = Field(alias="tokenIn")
    token_out: Address = Field(alias="tokenOut")
    amount_in: Uint256 | None = Field(default=None, alias="amountIn")
    amount_out: Uint256 | None = Field(default=None, alias="amountOut")

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def _one_amount(self) -> QuoteRequest:
        if (self.amount_in is None) == (self.amount_out is None):
            raise ValueError("exactly one of amountIn or amountOut is required")
        return self

    @property
    def exact_input(self) -> bool:
        return self.amount_in is not None

    @property
    def amount(self) -> int:
        """The given amount: input for exact-input swaps, output otherwise."""
        given = self.amount_in if self.exact_input else self.amount_out
        if given is None:
            raise ValueError("exactly one of amountIn or amountOut is required")
        return int(given)


class SwapCalldataRequest(QuoteRequest):
    """Swap to prepare for submission."""

    recipient: Address
    slippage_bps: int | None = Field(default=None, alias="slippageBps", ge=0)


class QuoteResponse(BaseModel):
    """Preview of a swap. Not binding: the pool may move before execution."""

    pool: Address
    token_in: Address = Field(alias="tokenIn")
    token_out: Address = Field(alias="tokenOut")
    amount_in: Uint256 = Field(alias="amountIn")
    amount_out: Uint256 = Field(alias="amountOut")
    fee_amount: Uint256 = Field(alias="feeAmount")
    spot_price_before: Uint256 = Field(alias="spotPriceBefore")
    spot_price_after: Uint256 = Field(alias="spotPriceAfter")
    effective_price: Uint256 | None = Field(default=None, alias="effectivePrice")
    price_impact: Uint256 = Field(alias="priceImpact", description="18-decimal fraction")
    preview_only: bool = Field(default=True, alias="previewOnly")

    model_config = {"populate_by_name": True}


class SwapCalldataResponse(BaseModel):
    """Quote plus the transaction the wallet should sign."""

    quote: QuoteResponse
    exact_input: bool = Field(alias="exactInput")
    slippage_bps: int = Field(alias="slippageBps")
    min_amount_out: Uint256 | None = Field(default=None, alias="minAmountOut")
    max_amount_in: Uint256 | None = Field(default=None, alias="maxAmountIn")
    target: Address
    call_data: Bytes = Field(alias="callData")

    model_config = {"populate_by_name": True}


class PoolResponse(BaseModel):
    """Snapshot of a pool's reserves."""

    address: Address
    tokens: list[Address]
    balances: list[Uint256]
    weights: list[Uint256]
    fee_bps: int = Field(alias="feeBps")
    has_liquidity: bool = Field(alias="hasLiquidity")

    model_config = {"populate_by_name": True}


class SpotPriceResponse(BaseModel):
    """Spot price of tokenOut in units of tokenIn (18 decimals)."""

    pool: Address
    token_in: Address = Field(alias="tokenIn")
    token_out: Address = Field(alias="tokenOut")
    price: Uint256

    model_config = {"populate_by_name": True}


class ErrorResponse(BaseModel):
    """Typed pricing failure."""

    error: str = Field(description="Stable error code, e.g. insufficient_liquidity")
    detail: str
    message: str = Field(description="Message suitable for display to the trader")
