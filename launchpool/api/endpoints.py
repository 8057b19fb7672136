"""API endpoints for pool quotes."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from functools import partial
from typing import Annotated, Any, TypeVar

import structlog
from fastapi import APIRouter, Depends, Path, Query

from launchpool import config
from launchpool.models.api import (
    PoolResponse,
    QuoteRequest,
    QuoteResponse,
    SpotPriceResponse,
    SwapCalldataRequest,
    SwapCalldataResponse,
)
from launchpool.models.types import ADDRESS_PATTERN, normalize_address
from launchpool.pool.quoter import PoolQuoter, PreparedSwap, SwapQuote
from launchpool.pool.source import InMemoryPoolSource, PoolSource, RpcPoolSource

logger = structlog.get_logger()

router = APIRouter()

PoolAddress = Annotated[str, Path(pattern=ADDRESS_PATTERN)]

T = TypeVar("T")


def _create_default_source() -> PoolSource:
    """RPC-backed source if LAUNCHPOOL_RPC_URL is set, else an empty in-memory one."""
    if config.RPC_URL:
        logger.info("rpc_pool_source_enabled", rpc_url=config.RPC_URL[:50])
        return RpcPoolSource(config.RPC_URL, timeout=config.RPC_TIMEOUT)
    logger.info("in_memory_pool_source_enabled", reason="LAUNCHPOOL_RPC_URL not set")
    return InMemoryPoolSource()


_default_source: PoolSource | None = None


def get_pool_source() -> PoolSource:
    """Dependency provider for the pool source.

    Override this in tests to inject pools:
        app.dependency_overrides[get_pool_source] = lambda: InMemoryPoolSource([pool])
    """
    global _default_source
    if _default_source is None:
        _default_source = _create_default_source()
    return _default_source


def get_quoter(source: PoolSource = Depends(get_pool_source)) -> PoolQuoter:
    return PoolQuoter(source)


def _quote_response(quote: SwapQuote) -> QuoteResponse:
    return QuoteResponse(
        pool=quote.pool,
        token_in=quote.token_in,
        token_out=quote.token_out,
        amount_in=str(quote.amount_in),
        amount_out=str(quote.amount_out),
        fee_amount=str(quote.fee_amount),
        spot_price_before=str(quote.spot_price_before),
        spot_price_after=str(quote.spot_price_after),
        effective_price=None if quote.effective_price is None else str(quote.effective_price),
        price_impact=str(quote.price_impact),
        preview_only=quote.preview_only,
    )


def _calldata_response(prepared: PreparedSwap) -> SwapCalldataResponse:
    return SwapCalldataResponse(
        quote=_quote_response(prepared.quote),
        exact_input=prepared.exact_input,
        slippage_bps=prepared.slippage_bps,
        min_amount_out=str(prepared.limit) if prepared.exact_input else None,
        max_amount_in=None if prepared.exact_input else str(prepared.limit),
        target=prepared.target,
        call_data=prepared.calldata,
    )


async def _off_loop(func: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run a quoter call in the default executor; pool reads may block on RPC."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, partial(func, *args, **kwargs))


@router.get("/pools/{address}", response_model_exclude_none=True)
async def get_pool(
    address: PoolAddress,
    quoter: PoolQuoter = Depends(get_quoter),
) -> PoolResponse:
    """Current reserves, weights and fee of a pool."""
    pool = await _off_loop(quoter.snapshot, address)
    return PoolResponse(
        address=pool.address,
        tokens=list(pool.tokens),
        balances=[str(b) for b in pool.balances],
        weights=[str(w) for w in pool.weights],
        fee_bps=pool.fee_bps,
        has_liquidity=pool.has_liquidity,
    )


@router.get("/pools/{address}/spot-price")
async def get_spot_price(
    address: PoolAddress,
    token_in: str = Query(alias="tokenIn", pattern=ADDRESS_PATTERN),
    token_out: str = Query(alias="tokenOut", pattern=ADDRESS_PATTERN),
    quoter: PoolQuoter = Depends(get_quoter),
) -> SpotPriceResponse:
    """Spot price of tokenOut in units of tokenIn."""
    price = await _off_loop(quoter.spot_price, address, token_in, token_out)
    return SpotPriceResponse(
        pool=normalize_address(address),
        token_in=normalize_address(token_in),
        token_out=normalize_address(token_out),
        price=str(price),
    )


@router.post("/pools/{address}/quote", response_model_exclude_none=True)
async def post_quote(
    address: PoolAddress,
    request: QuoteRequest,
    quoter: PoolQuoter = Depends(get_quoter),
) -> QuoteResponse:
    """Preview a swap. The result is not binding.

    Error Handling:
        - Invalid request schema: 422 (Pydantic)
        - Pricing errors: 422 with a typed error code
        - Unknown pool: 404
        - Chain read failure: 502
    """
    logger.info(
        "quote_requested",
        pool=address,
        token_in=request.token_in,
        token_out=request.token_out,
        exact_input=request.exact_input,
    )
    quote_fn = quoter.quote_swap if request.exact_input else quoter.quote_swap_exact_out
    quote = await _off_loop(quote_fn, address, request.token_in, request.token_out, request.amount)
    return _quote_response(quote)


@router.post("/pools/{address}/swap-calldata", response_model_exclude_none=True)
async def post_swap_calldata(
    address: PoolAddress,
    request: SwapCalldataRequest,
    quoter: PoolQuoter = Depends(get_quoter),
) -> SwapCalldataResponse:
    """Quote a swap and return calldata carrying the slippage bound."""
    prepare_fn = quoter.prepare_swap if request.exact_input else quoter.prepare_swap_exact_out
    prepared = await _off_loop(
        prepare_fn,
        address,
        request.token_in,
        request.token_out,
        request.amount,
        recipient=request.recipient,
        slippage_bps=request.slippage_bps,
    )
    logger.info(
        "swap_calldata_prepared",
        pool=prepared.target,
        exact_input=prepared.exact_input,
        limit=prepared.limit,
    )
    return _calldata_response(prepared)
