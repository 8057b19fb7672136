"""18-decimal fixed-point arithmetic.

Every quantity the pool contract handles (balances, weights, prices) is an
unsigned integer scaled by 10^18. `Fixed` wraps such an integer and exposes
the directed-rounding operations the pricing formulas need, so that the
off-chain result rounds the same way as the on-chain one.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from functools import total_ordering
from typing import ClassVar

from launchpool.math.log_exp import ONE_18, pow_raw

__all__ = ["Fixed", "ONE", "BPS", "MAX_POW_RELATIVE_ERROR", "ceil_div"]

ONE = ONE_18

# Basis-point denominator for fees and slippage
BPS = 10_000

# pow() is accurate to 1e-14 relative; pow_up/pow_down widen by this much
MAX_POW_RELATIVE_ERROR = 10_000


def ceil_div(a: int, b: int) -> int:
    """Ceiling division for non-negative integers."""
    if b == 0:
        raise ZeroDivisionError("ceil_div by zero")
    if a == 0:
        return 0
    return (a - 1) // b + 1


@total_ordering
class Fixed:
    """Unsigned 18-decimal fixed-point number.

    ``Fixed(1_500_000_000_000_000_000)`` is 1.5. Results that would go
    negative are clamped to zero, matching the contract's saturating
    complement and the invariant that reserves are unsigned.
    """

    ONE: ClassVar[int] = ONE

    __slots__ = ("value",)

    def __init__(self, value: int) -> None:
        self.value = value

    @classmethod
    def from_int(cls, i: int) -> Fixed:
        """Whole units, e.g. ``Fixed.from_int(3)`` is 3.0."""
        return cls(i * ONE)

    @classmethod
    def from_decimal(cls, d: Decimal | str) -> Fixed:
        """Scale a decimal by 10^18, rounding half up."""
        d = Decimal(d)
        if d < 0:
            raise ValueError(f"Fixed requires a non-negative value, got {d}")
        return cls(int((d * ONE).quantize(Decimal(1), rounding=ROUND_HALF_UP)))

    def to_decimal(self) -> Decimal:
        return Decimal(self.value) / Decimal(ONE)

    def add(self, other: Fixed) -> Fixed:
        return Fixed(self.value + other.value)

    def sub(self, other: Fixed) -> Fixed:
        return Fixed(max(0, self.value - other.value))

    def mul_down(self, other: Fixed) -> Fixed:
        return Fixed(self.value * other.value // ONE)

    def mul_up(self, other: Fixed) -> Fixed:
        return Fixed(ceil_div(self.value * other.value, ONE))

    def div_down(self, other: Fixed) -> Fixed:
        if other.value == 0:
            raise ZeroDivisionError("Fixed division by zero")
        return Fixed(self.value * ONE // other.value)

    def div_up(self, other: Fixed) -> Fixed:
        if other.value == 0:
            raise ZeroDivisionError("Fixed division by zero")
        return Fixed(ceil_div(self.value * ONE, other.value))

    def complement(self) -> Fixed:
        """1 - self, clamped at zero."""
        return Fixed(max(0, ONE - self.value))

    def _pow_error(self, raw: int) -> int:
        return ceil_div(raw * MAX_POW_RELATIVE_ERROR, ONE) + 1

    def pow_down(self, exponent: Fixed) -> Fixed:
        """self^exponent, never above the exact value."""
        raw = pow_raw(self.value, exponent.value)
        return Fixed(max(0, raw - self._pow_error(raw)))

    def pow_up(self, exponent: Fixed) -> Fixed:
        """self^exponent, never below the exact value."""
        raw = pow_raw(self.value, exponent.value)
        return Fixed(raw + self._pow_error(raw))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Fixed):
            return NotImplemented
        return self.value == other.value

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Fixed):
            return NotImplemented
        return self.value < other.value

    def __hash__(self) -> int:
        return hash(self.value)

    def __int__(self) -> int:
        return self.value

    def __repr__(self) -> str:
        return f"Fixed({self.value})"

    def __str__(self) -> str:
        return str(self.to_decimal())
