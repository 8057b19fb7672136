"""Weighted constant-product pool math.

Pure functions over an explicit reserve snapshot. All values are integers
in 18-decimal fixed point; fees and slippage are in basis points.

Rounding always favours the pool: the amount a trader receives is rounded
down and the amount a trader pays is rounded up, so the weighted product
    balance_a^weight_a * balance_b^weight_b
never decreases across a swap.
"""

from __future__ import annotations

from collections.abc import Sequence

from launchpool.math.fixed_point import BPS, MAX_POW_RELATIVE_ERROR, ONE, Fixed, ceil_div
from launchpool.math.log_exp import MIN_NATURAL_EXPONENT, LogExpMathError, exp, ln

from .errors import (
    InsufficientLiquidity,
    InvalidAmount,
    InvalidFee,
    InvalidWeight,
    InvariantViolation,
    PoolEmpty,
    SlippageExceeded,
)

# Slack allowed when comparing invariants: relative (1e-12, 18 decimals) plus
# absolute wei for the truncations in the final exp()
INVARIANT_TOLERANCE = 10**6
INVARIANT_ABS_TOLERANCE = 4


def _require_amount(name: str, amount: int, *, allow_zero: bool) -> None:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmount(f"{name} must be an integer, got {type(amount).__name__}")
    if amount < 0 or (amount == 0 and not allow_zero):
        raise InvalidAmount(f"{name} must be positive, got {amount}")


def _require_liquidity(balance_in: int, balance_out: int) -> None:
    if balance_in <= 0:
        raise PoolEmpty(f"balance_in is {balance_in}")
    if balance_out <= 0:
        raise PoolEmpty(f"balance_out is {balance_out}")


def _require_weights(weight_in: int, weight_out: int) -> None:
    if weight_in <= 0 or weight_out <= 0:
        raise InvalidWeight(f"weights must be positive, got {weight_in} and {weight_out}")


def apply_fee(amount_in: int, fee_bps: int) -> int:
    """Amount left after taking the swap fee, rounded down."""
    if not 0 <= fee_bps < BPS:
        raise InvalidFee(f"fee must be in [0, {BPS}) bps, got {fee_bps}")
    return amount_in * (BPS - fee_bps) // BPS


def spot_price(balance_in: int, weight_in: int, balance_out: int, weight_out: int) -> int:
    """Units of the input token paid per unit of the output token.

    price = (balance_in / weight_in) / (balance_out / weight_out)

    Evaluated as a single division so no precision is lost to intermediate
    rounding, and rounded up so that a pool with liquidity never reports a
    zero price.

    Raises:
        PoolEmpty: If either balance is zero
        InvalidWeight: If either weight is not positive
    """
    _require_liquidity(balance_in, balance_out)
    _require_weights(weight_in, weight_out)
    return ceil_div(balance_in * weight_out * ONE, balance_out * weight_in)


def calc_out_given_in(
    balance_in: int,
    weight_in: int,
    balance_out: int,
    weight_out: int,
    amount_in: int,
    fee_bps: int = 0,
) -> int:
    """Output amount for an exact input amount (sell side of a swap).

    Formula:
        after_fee = amount_in * (10000 - fee_bps) / 10000
        amount_out = balance_out * (1 - (balance_in / (balance_in + after_fee))^(weight_in / weight_out))

    A zero input yields a zero output. The result is always strictly below
    balance_out.

    Raises:
        InvalidAmount: If amount_in is negative or not an integer
        PoolEmpty: If either balance is zero
        InsufficientLiquidity: If the output would exhaust balance_out
    """
    _require_amount("amount_in", amount_in, allow_zero=True)
    _require_liquidity(balance_in, balance_out)
    _require_weights(weight_in, weight_out)

    after_fee = apply_fee(amount_in, fee_bps)
    if after_fee == 0:
        return 0

    b_in = Fixed(balance_in)
    base = b_in.div_up(b_in.add(Fixed(after_fee)))
    exponent = Fixed(weight_in).div_down(Fixed(weight_out))
    try:
        power = base.pow_up(exponent)
    except LogExpMathError as err:
        # base^exponent too small to represent: the swap would drain the pool
        raise InsufficientLiquidity(
            f"input {amount_in} too large for balance {balance_in}"
        ) from err

    amount_out = Fixed(balance_out).mul_down(power.complement()).value
    if amount_out >= balance_out:
        raise InsufficientLiquidity(f"output {amount_out} reaches balance {balance_out}")
    return amount_out


def calc_in_given_out(
    balance_in: int,
    weight_in: int,
    balance_out: int,
    weight_out: int,
    amount_out: int,
    fee_bps: int = 0,
) -> int:
    """Input amount (fee included) needed to receive an exact output amount.

    Formula:
        raw_in = balance_in * ((balance_out / (balance_out - amount_out))^(weight_out / weight_in) - 1)
        amount_in = raw_in * 10000 / (10000 - fee_bps), rounded up

    Raises:
        InvalidAmount: If amount_out is not positive
        PoolEmpty: If either balance is zero
        InsufficientLiquidity: If amount_out >= balance_out
    """
    _require_amount("amount_out", amount_out, allow_zero=False)
    _require_liquidity(balance_in, balance_out)
    _require_weights(weight_in, weight_out)
    if not 0 <= fee_bps < BPS:
        raise InvalidFee(f"fee must be in [0, {BPS}) bps, got {fee_bps}")
    if amount_out >= balance_out:
        raise InsufficientLiquidity(f"output {amount_out} not below balance {balance_out}")

    b_out = Fixed(balance_out)
    base = b_out.div_up(b_out.sub(Fixed(amount_out)))
    exponent = Fixed(weight_out).div_up(Fixed(weight_in))
    try:
        power = base.pow_up(exponent)
    except LogExpMathError as err:
        raise InsufficientLiquidity(
            f"output {amount_out} too close to balance {balance_out}"
        ) from err

    raw_in = Fixed(balance_in).mul_up(power.sub(Fixed(ONE))).value
    return ceil_div(raw_in * BPS, BPS - fee_bps)


def invariant(balances: Sequence[int], weights: Sequence[int]) -> int:
    """Weighted geometric mean of the reserves, rounded down.

    Evaluated as exp(sum(weight * ln(balance))) so that the error is relative
    to the result plus a few wei, however small one reserve is. A product of
    per-reserve powers would scale each factor's wei rounding by the other.
    """
    if len(balances) != len(weights):
        raise ValueError("balances and weights must have the same length")
    if any(balance == 0 for balance in balances):
        return 0
    exponent = sum(ln(balance) * weight for balance, weight in zip(balances, weights)) // ONE
    if exponent < MIN_NATURAL_EXPONENT:
        # below e^-41, i.e. under two wei
        return 0
    raw = exp(exponent)
    return max(0, raw - ceil_div(raw * MAX_POW_RELATIVE_ERROR, ONE) - 1)


def check_invariant(
    before: int,
    after: int,
    rel_tolerance: int = INVARIANT_TOLERANCE,
    abs_tolerance: int = INVARIANT_ABS_TOLERANCE,
) -> None:
    """Raise InvariantViolation if the invariant dropped by more than the tolerance.

    The allowed drop is before * rel_tolerance (18 decimals) plus abs_tolerance wei.
    """
    slack = Fixed(before).mul_up(Fixed(rel_tolerance)).value + abs_tolerance
    if after + slack < before:
        raise InvariantViolation(f"invariant fell from {before} to {after}")


def price_impact(spot: int, amount_in: int, amount_out: int) -> int:
    """Relative gap between execution price and spot price (18 decimals).

    The execution price is amount_in / amount_out with amount_in gross of
    fees, so the impact includes the fee. A swap yielding nothing is a
    100% impact.
    """
    if spot <= 0:
        raise PoolEmpty("spot price is zero")
    if amount_out <= 0:
        return ONE
    effective = ceil_div(amount_in * ONE, amount_out)
    if effective <= spot:
        return 0
    return (effective - spot) * ONE // spot


def min_amount_out(expected_out: int, slippage_bps: int) -> int:
    """Lowest acceptable output for a slippage tolerance in basis points."""
    if not 0 <= slippage_bps <= BPS:
        raise InvalidAmount(f"slippage must be in [0, {BPS}] bps, got {slippage_bps}")
    return expected_out * (BPS - slippage_bps) // BPS


def max_amount_in(expected_in: int, slippage_bps: int) -> int:
    """Highest acceptable input for a slippage tolerance in basis points."""
    if not 0 <= slippage_bps <= BPS:
        raise InvalidAmount(f"slippage must be in [0, {BPS}] bps, got {slippage_bps}")
    return ceil_div(expected_in * (BPS + slippage_bps), BPS)


def enforce_min_out(amount_out: int, minimum: int) -> None:
    if amount_out < minimum:
        raise SlippageExceeded(f"output {amount_out} below minimum {minimum}")


def enforce_max_in(amount_in: int, maximum: int) -> None:
    if amount_in > maximum:
        raise SlippageExceeded(f"input {amount_in} above maximum {maximum}")
