"""Swap quoting over pool snapshots.

Quotes are previews only, never authoritative: the chain may move between the
quote and the submitted swap. Callers protect themselves with the
`min_amount_out` (or `max_amount_in`) bound that `prepare_swap` derives from
their slippage tolerance; the contract enforces it atomically.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from launchpool.math.fixed_point import ONE, ceil_div

from .config import DEFAULT_QUOTE_CONFIG, QuoteConfig
from .encoding import encode_swap, encode_swap_exact_out
from .errors import InvalidAmount, PoolError
from .pools import WeightedPool
from .source import PoolSource
from .weighted_math import (
    apply_fee,
    calc_in_given_out,
    calc_out_given_in,
    enforce_min_out,
    max_amount_in,
    min_amount_out,
    price_impact,
    spot_price,
)

logger = structlog.get_logger()


@dataclass(frozen=True)
class SwapQuote:
    """Preview of a swap against one pool snapshot.

    Attributes:
        pool: Pool address
        token_in: Token paid in
        token_out: Token received
        amount_in: Input amount, fee included
        amount_out: Output amount
        fee_amount: Part of amount_in kept by the pool as fee
        spot_price_before: token_in per token_out before the swap (18 decimals)
        spot_price_after: token_in per token_out after the swap (18 decimals)
        effective_price: amount_in / amount_out (18 decimals), None if nothing comes out
        price_impact: (effective - spot_before) / spot_before (18 decimals)
        preview_only: Always True; quotes are not binding
    """

    pool: str
    token_in: str
    token_out: str
    amount_in: int
    amount_out: int
    fee_amount: int
    spot_price_before: int
    spot_price_after: int
    effective_price: int | None
    price_impact: int
    preview_only: bool = True


@dataclass(frozen=True)
class PreparedSwap:
    """A quote plus the calldata to execute it with slippage protection.

    For exact-input swaps `limit` is the minimum output; for exact-output
    swaps it is the maximum input.
    """

    quote: SwapQuote
    exact_input: bool
    slippage_bps: int
    limit: int
    target: str
    calldata: str


def pool_spot_price(pool: WeightedPool, token_in: str, token_out: str) -> int:
    """Spot price of token_out in units of token_in (18 decimals).

    Raises:
        InvalidToken: If the pair is not traded in the pool
        PoolEmpty: If either reserve is zero
    """
    reserve_in, reserve_out = pool.reserves_for(token_in, token_out)
    return spot_price(reserve_in.balance, reserve_in.weight, reserve_out.balance, reserve_out.weight)


def _build_quote(
    pool: WeightedPool, token_in: str, token_out: str, amount_in: int, amount_out: int
) -> SwapQuote:
    reserve_in, reserve_out = pool.reserves_for(token_in, token_out)
    before = spot_price(reserve_in.balance, reserve_in.weight, reserve_out.balance, reserve_out.weight)
    after = spot_price(
        reserve_in.balance + amount_in,
        reserve_in.weight,
        reserve_out.balance - amount_out,
        reserve_out.weight,
    )
    return SwapQuote(
        pool=pool.address,
        token_in=reserve_in.token,
        token_out=reserve_out.token,
        amount_in=amount_in,
        amount_out=amount_out,
        fee_amount=amount_in - apply_fee(amount_in, pool.fee_bps),
        spot_price_before=before,
        spot_price_after=after,
        effective_price=ceil_div(amount_in * ONE, amount_out) if amount_out > 0 else None,
        price_impact=price_impact(before, amount_in, amount_out),
    )


def quote_swap(pool: WeightedPool, token_in: str, token_out: str, amount_in: int) -> SwapQuote:
    """Preview selling exactly amount_in of token_in.

    Raises:
        InvalidAmount: If amount_in is not positive
        InvalidToken: If the pair is not traded in the pool
        PoolEmpty: If either reserve is zero
        InsufficientLiquidity: If the swap would drain the output reserve
    """
    if isinstance(amount_in, bool) or not isinstance(amount_in, int) or amount_in <= 0:
        raise InvalidAmount(f"amount_in must be a positive integer, got {amount_in!r}")
    reserve_in, reserve_out = pool.reserves_for(token_in, token_out)
    amount_out = calc_out_given_in(
        reserve_in.balance,
        reserve_in.weight,
        reserve_out.balance,
        reserve_out.weight,
        amount_in,
        pool.fee_bps,
    )
    return _build_quote(pool, token_in, token_out, amount_in, amount_out)


def quote_swap_exact_out(
    pool: WeightedPool, token_in: str, token_out: str, amount_out: int
) -> SwapQuote:
    """Preview buying exactly amount_out of token_out.

    Raises:
        InvalidAmount: If amount_out is not positive
        InsufficientLiquidity: If amount_out is not below the output reserve
    """
    reserve_in, reserve_out = pool.reserves_for(token_in, token_out)
    amount_in = calc_in_given_out(
        reserve_in.balance,
        reserve_in.weight,
        reserve_out.balance,
        reserve_out.weight,
        amount_out,
        pool.fee_bps,
    )
    return _build_quote(pool, token_in, token_out, amount_in, amount_out)


def simulate_swap(
    pool: WeightedPool,
    token_in: str,
    token_out: str,
    amount_in: int,
    min_out: int = 0,
) -> tuple[int, WeightedPool]:
    """Apply an exact-input swap to a snapshot, all-or-nothing.

    The slippage bound is checked before any balance moves; on failure the
    input snapshot is untouched (it is immutable anyway).

    Returns:
        Tuple of (amount_out, pool snapshot after the swap)

    Raises:
        SlippageExceeded: If amount_out < min_out
    """
    quote = quote_swap(pool, token_in, token_out, amount_in)
    enforce_min_out(quote.amount_out, min_out)
    reserve_in, reserve_out = pool.reserves_for(token_in, token_out)
    after = pool.with_balances(
        {
            reserve_in.token: reserve_in.balance + amount_in,
            reserve_out.token: reserve_out.balance - quote.amount_out,
        }
    )
    return quote.amount_out, after


class PoolQuoter:
    """Read-only quoting service over a pool source.

    Every call takes one fresh snapshot from the source, so quotes are
    independent of each other and need no ordering.

    Args:
        source: Where pool snapshots come from
        config: Slippage defaults and limits
    """

    def __init__(self, source: PoolSource, config: QuoteConfig = DEFAULT_QUOTE_CONFIG) -> None:
        self.source = source
        self.config = config

    def snapshot(self, pool_address: str) -> WeightedPool:
        return self.source.get_pool(pool_address)

    def spot_price(self, pool_address: str, token_in: str, token_out: str) -> int:
        pool = self.snapshot(pool_address)
        return pool_spot_price(pool, token_in, token_out)

    def quote_swap(
        self, pool_address: str, token_in: str, token_out: str, amount_in: int
    ) -> SwapQuote:
        pool = self.snapshot(pool_address)
        try:
            quote = quote_swap(pool, token_in, token_out, amount_in)
        except PoolError as err:
            logger.info(
                "quote_failed",
                pool=pool_address,
                token_in=token_in,
                token_out=token_out,
                amount_in=amount_in,
                error=err.code,
            )
            raise
        logger.debug(
            "quote_computed",
            pool=quote.pool,
            amount_in=quote.amount_in,
            amount_out=quote.amount_out,
            price_impact=quote.price_impact,
        )
        return quote

    def quote_swap_exact_out(
        self, pool_address: str, token_in: str, token_out: str, amount_out: int
    ) -> SwapQuote:
        pool = self.snapshot(pool_address)
        try:
            return quote_swap_exact_out(pool, token_in, token_out, amount_out)
        except PoolError as err:
            logger.info(
                "quote_failed",
                pool=pool_address,
                token_in=token_in,
                token_out=token_out,
                amount_out=amount_out,
                error=err.code,
            )
            raise

    def _slippage(self, slippage_bps: int | None) -> int:
        if slippage_bps is None:
            return self.config.default_slippage_bps
        if not 0 <= slippage_bps <= self.config.max_slippage_bps:
            raise InvalidAmount(
                f"slippage must be in [0, {self.config.max_slippage_bps}] bps, got {slippage_bps}"
            )
        return slippage_bps

    def prepare_swap(
        self,
        pool_address: str,
        token_in: str,
        token_out: str,
        amount_in: int,
        recipient: str,
        slippage_bps: int | None = None,
    ) -> PreparedSwap:
        """Quote an exact-input swap and encode `swap` with its minimum output."""
        slippage = self._slippage(slippage_bps)
        quote = self.quote_swap(pool_address, token_in, token_out, amount_in)
        limit = min_amount_out(quote.amount_out, slippage)
        target, calldata = encode_swap(
            quote.pool, quote.token_in, quote.token_out, quote.amount_in, limit, recipient
        )
        return PreparedSwap(
            quote=quote,
            exact_input=True,
            slippage_bps=slippage,
            limit=limit,
            target=target,
            calldata=calldata,
        )

    def prepare_swap_exact_out(
        self,
        pool_address: str,
        token_in: str,
        token_out: str,
        amount_out: int,
        recipient: str,
        slippage_bps: int | None = None,
    ) -> PreparedSwap:
        """Quote an exact-output swap and encode `swapExactOut` with its maximum input."""
        slippage = self._slippage(slippage_bps)
        quote = self.quote_swap_exact_out(pool_address, token_in, token_out, amount_out)
        limit = max_amount_in(quote.amount_in, slippage)
        target, calldata = encode_swap_exact_out(
            quote.pool, quote.token_in, quote.token_out, quote.amount_out, limit, recipient
        )
        return PreparedSwap(
            quote=quote,
            exact_input=False,
            slippage_bps=slippage,
            limit=limit,
            target=target,
            calldata=calldata,
        )
