"""Fixed-point natural logarithm, exponential and power.

Integer-only implementation of Balancer's LogExpMath, the routine the pool
contract uses to raise reserve ratios to fractional weight exponents:
https://github.com/balancer-labs/balancer-v2-monorepo/blob/6c9e24e22d0c46cca6dd15861d3d33da61a60b98/pkg/solidity-utils/contracts/math/LogExpMath.sol

Inputs and outputs are integers scaled by 10^18. Intermediate results use
20 and 36 decimals where the contract does, and every division truncates
toward zero like the EVM.
"""

from __future__ import annotations

__all__ = [
    "ONE_18",
    "ONE_20",
    "ONE_36",
    "LogExpMathError",
    "BaseOutOfBounds",
    "ExponentOutOfBounds",
    "ProductOutOfBounds",
    "InvalidExponent",
    "exp",
    "ln",
    "pow_raw",
]

ONE_18 = 10**18
ONE_20 = 10**20
ONE_36 = 10**36

MAX_NATURAL_EXPONENT = 130 * ONE_18
MIN_NATURAL_EXPONENT = -41 * ONE_18

# ln(x) for x in (0.9, 1.1) goes through the 36-decimal path
LN_36_LOWER_BOUND = ONE_18 - 10**17
LN_36_UPPER_BOUND = ONE_18 + 10**17

MILD_EXPONENT_BOUND = (1 << 254) // ONE_20

# (x_n, e^x_n) at 18 decimals, x_n = 2^7 and 2^6
_LARGE_TERMS = (
    (128 * ONE_18, 38877084059945950922200000000000000000000000000000000000),
    (64 * ONE_18, 6235149080811616882910000000),
)

# (x_n, e^x_n) at 20 decimals, x_n = 2^5 down to 2^-4
_SMALL_TERMS = (
    (32 * ONE_20, 7_896_296_018_268_069_516_100_000_000_000_000),
    (16 * ONE_20, 888_611_052_050_787_263_676_000_000),
    (8 * ONE_20, 298_095_798_704_172_827_474_000),
    (4 * ONE_20, 5_459_815_003_314_423_907_810),
    (2 * ONE_20, 738_905_609_893_065_022_723),
    (1 * ONE_20, 271_828_182_845_904_523_536),
    (ONE_20 // 2, 164_872_127_070_012_814_685),
    (ONE_20 // 4, 128_402_541_668_774_148_407),
    (ONE_20 // 8, 113_314_845_306_682_631_683),
    (ONE_20 // 16, 106_449_445_891_785_942_956),
)

# exp() only reduces down to 2^-2; ln() uses all ten terms
_EXP_SMALL_TERMS = _SMALL_TERMS[:8]


class LogExpMathError(ArithmeticError):
    """Base error for fixed-point log/exp evaluation."""


class BaseOutOfBounds(LogExpMathError):
    """Base does not fit in a signed 256-bit word."""


class ExponentOutOfBounds(LogExpMathError):
    """Exponent is at or above MILD_EXPONENT_BOUND."""


class ProductOutOfBounds(LogExpMathError):
    """y * ln(x) falls outside the range exp() can evaluate."""

    def __init__(self, product: int) -> None:
        super().__init__(f"y * ln(x) = {product} outside [{MIN_NATURAL_EXPONENT}, {MAX_NATURAL_EXPONENT}]")
        self.product = product

    @property
    def underflow(self) -> bool:
        """True when the result would be too close to zero to represent."""
        return self.product < MIN_NATURAL_EXPONENT


class InvalidExponent(LogExpMathError):
    """Argument to exp() outside [MIN_NATURAL_EXPONENT, MAX_NATURAL_EXPONENT]."""


def _tdiv(a: int, b: int) -> int:
    """Divide truncating toward zero (EVM semantics, unlike Python's floor)."""
    if b == 0:
        raise ZeroDivisionError("fixed-point division by zero")
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def ln(a: int) -> int:
    """Natural log of a positive 18-decimal value, at 18 decimals."""
    if a <= 0:
        raise LogExpMathError(f"ln undefined for {a}")
    if a < ONE_18:
        return -ln(ONE_18 * ONE_18 // a)

    total = 0
    for x_n, a_n in _LARGE_TERMS:
        if a >= a_n * ONE_18:
            a //= a_n
            total += x_n

    # switch to 20 decimals for the remaining reduction
    total *= 100
    a *= 100

    for x_n, a_n in _SMALL_TERMS:
        if a >= a_n:
            a = a * ONE_20 // a_n
            total += x_n

    # ln(a) = 2 * atanh(z), z = (a - 1) / (a + 1)
    z = (a - ONE_20) * ONE_20 // (a + ONE_20)
    z_squared = z * z // ONE_20
    num = z
    series = num
    for k in (3, 5, 7, 9, 11):
        num = num * z_squared // ONE_20
        series += num // k

    return (total + 2 * series) // 100


def _ln_36(x: int) -> int:
    """Natural log of an 18-decimal value near one, at 36 decimals."""
    x *= ONE_18
    z = _tdiv((x - ONE_36) * ONE_36, x + ONE_36)
    z_squared = _tdiv(z * z, ONE_36)
    num = z
    series = num
    for k in (3, 5, 7, 9, 11, 13, 15):
        num = _tdiv(num * z_squared, ONE_36)
        series += _tdiv(num, k)
    return 2 * series


def exp(x: int) -> int:
    """e^x for an 18-decimal exponent, at 18 decimals."""
    if not MIN_NATURAL_EXPONENT <= x <= MAX_NATURAL_EXPONENT:
        raise InvalidExponent(f"exp argument {x} out of range")
    if x < 0:
        return ONE_18 * ONE_18 // exp(-x)

    first_an = 1
    for x_n, a_n in _LARGE_TERMS:
        if x >= x_n:
            x -= x_n
            first_an = a_n
            break

    x *= 100
    product = ONE_20
    for x_n, a_n in _EXP_SMALL_TERMS:
        if x >= x_n:
            x -= x_n
            product = product * a_n // ONE_20

    # Taylor series up to x^12 / 12!
    term = x
    series = ONE_20 + term
    for k in range(2, 13):
        term = term * x // ONE_20 // k
        series += term

    return product * series // ONE_20 * first_an // 100


def pow_raw(x: int, y: int) -> int:
    """x^y for non-negative 18-decimal x and y, without error margin."""
    if y == 0:
        return ONE_18
    if x == 0:
        return 0
    if x >= 1 << 255:
        raise BaseOutOfBounds(f"base {x} does not fit in int256")
    if y >= MILD_EXPONENT_BOUND:
        raise ExponentOutOfBounds(f"exponent {y} too large")

    if LN_36_LOWER_BOUND < x < LN_36_UPPER_BOUND:
        ln_36_x = _ln_36(x)
        whole = _tdiv(ln_36_x, ONE_18)
        frac = ln_36_x - whole * ONE_18
        log_times_y = whole * y + _tdiv(frac * y, ONE_18)
    else:
        log_times_y = ln(x) * y
    log_times_y = _tdiv(log_times_y, ONE_18)

    if not MIN_NATURAL_EXPONENT <= log_times_y <= MAX_NATURAL_EXPONENT:
        raise ProductOutOfBounds(log_times_y)
    return exp(log_times_y)
