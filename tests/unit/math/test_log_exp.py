"""Tests for the LogExpMath kernels."""

from decimal import Decimal, getcontext

import pytest

from launchpool.math.log_exp import (
    MILD_EXPONENT_BOUND,
    ONE_18,
    BaseOutOfBounds,
    ExponentOutOfBounds,
    InvalidExponent,
    LogExpMathError,
    ProductOutOfBounds,
    exp,
    ln,
    pow_raw,
)

getcontext().prec = 50


def reference_pow(x: int, y: int) -> Decimal:
    """x^y evaluated in 50-digit decimal arithmetic, scaled to 18 decimals."""
    base = Decimal(x) / ONE_18
    exponent = Decimal(y) / ONE_18
    return (exponent * base.ln()).exp() * ONE_18


def assert_close(actual: int, expected: Decimal, rel: Decimal = Decimal("1e-14")) -> None:
    assert abs(Decimal(actual) - expected) <= expected * rel + 1, f"{actual} vs {expected}"


class TestLn:
    """Tests for ln()."""

    def test_ln_one_is_zero(self) -> None:
        assert ln(ONE_18) == 0

    def test_ln_two(self) -> None:
        assert abs(ln(2 * ONE_18) - 693_147_180_559_945_309) <= 10**4

    def test_ln_below_one_is_negative(self) -> None:
        assert abs(ln(ONE_18 // 2) + 693_147_180_559_945_309) <= 10**4

    def test_ln_large_value(self) -> None:
        expected = Decimal(10**30).ln() * ONE_18
        assert abs(Decimal(ln(10**30 * ONE_18)) - expected) <= 10**5

    def test_ln_non_positive_raises(self) -> None:
        with pytest.raises(LogExpMathError):
            ln(0)
        with pytest.raises(LogExpMathError):
            ln(-1)


class TestExp:
    """Tests for exp()."""

    def test_exp_zero_is_one(self) -> None:
        assert exp(0) == ONE_18

    def test_exp_one_is_e(self) -> None:
        assert abs(exp(ONE_18) - 2_718_281_828_459_045_235) <= 1

    def test_exp_negative(self) -> None:
        assert abs(exp(-ONE_18) - 367_879_441_171_442_321) <= 10

    def test_exp_large_argument(self) -> None:
        expected = Decimal(100).exp() * ONE_18
        assert_close(exp(100 * ONE_18), expected)

    def test_exp_out_of_range_raises(self) -> None:
        with pytest.raises(InvalidExponent):
            exp(131 * ONE_18)
        with pytest.raises(InvalidExponent):
            exp(-42 * ONE_18)


class TestPowRaw:
    """Tests for pow_raw()."""

    def test_zero_exponent(self) -> None:
        assert pow_raw(123 * ONE_18, 0) == ONE_18

    def test_zero_base(self) -> None:
        assert pow_raw(0, ONE_18 // 2) == 0

    @pytest.mark.parametrize(
        "x,y",
        [
            (4 * ONE_18, ONE_18 // 2),
            (ONE_18 // 2, 4 * ONE_18),
            (95 * ONE_18 // 100, ONE_18 // 4),  # near one: 36-decimal log path
            (1_000_000 * ONE_18, 8 * ONE_18 // 10),
            (ONE_18 // 1000, 2 * ONE_18 // 10),
        ],
    )
    def test_matches_decimal_reference(self, x: int, y: int) -> None:
        assert_close(pow_raw(x, y), reference_pow(x, y))

    def test_base_out_of_bounds(self) -> None:
        with pytest.raises(BaseOutOfBounds):
            pow_raw(1 << 255, ONE_18)

    def test_exponent_out_of_bounds(self) -> None:
        with pytest.raises(ExponentOutOfBounds):
            pow_raw(2 * ONE_18, MILD_EXPONENT_BOUND)

    def test_product_underflow(self) -> None:
        """1 wei to the 10th power is far below representable range."""
        with pytest.raises(ProductOutOfBounds) as exc_info:
            pow_raw(1, 10 * ONE_18)
        assert exc_info.value.underflow
        assert isinstance(exc_info.value, LogExpMathError)
