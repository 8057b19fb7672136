"""Weighted pool error classes.

These mirror the custom errors of the launchpad's WeightedPool contract.
Every error is a local, recoverable condition: callers get the typed error
and decide how to surface it; nothing here ever falls back to a default price.
"""

from __future__ import annotations


class PoolError(Exception):
    """Base error for pool pricing and quoting."""

    code = "pool_error"
    user_message = "This trade cannot be priced right now."


class PoolEmpty(PoolError):
    """A reserve is zero, so the price is undefined."""

    code = "pool_empty"
    user_message = "This pool has no liquidity yet."


class InvalidAmount(PoolError):
    """Amount is non-positive or not an integer."""

    code = "invalid_amount"
    user_message = "Enter an amount greater than zero."


class InsufficientLiquidity(PoolError):
    """Requested output would reach or exceed the available reserve."""

    code = "insufficient_liquidity"
    user_message = "Insufficient liquidity for this trade size."


class SlippageExceeded(PoolError):
    """Output fell below the caller's minimum (or input rose above the maximum)."""

    code = "slippage_exceeded"
    user_message = "Price moved beyond your slippage tolerance."


class InvalidToken(PoolError):
    """Token is not part of the pool, or the same token was given twice."""

    code = "invalid_token"
    user_message = "This token pair is not traded in this pool."


class InvalidWeight(PoolError):
    """Weights are out of range or do not sum to one."""

    code = "invalid_weight"


class InvalidFee(PoolError):
    """Swap fee is outside the allowed range."""

    code = "invalid_fee"


class InvariantViolation(PoolError):
    """The weighted product decreased across a swap beyond rounding tolerance."""

    code = "invariant_violation"


class PoolNotFound(PoolError):
    """No pool is known at the requested address."""

    code = "pool_not_found"
    user_message = "Pool not found."


class PoolSourceError(PoolError):
    """Reading pool state from the chain failed."""

    code = "pool_source_error"
    user_message = "Could not read pool state. Try again shortly."
