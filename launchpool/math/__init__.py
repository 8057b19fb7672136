"""Fixed-point primitives for pool pricing.

- Fixed: 18-decimal fixed-point value with directed rounding
- pow_raw / ln / exp: LogExpMath kernels
"""

from launchpool.math.fixed_point import BPS, ONE, Fixed, ceil_div
from launchpool.math.log_exp import LogExpMathError, pow_raw

__all__ = ["BPS", "ONE", "Fixed", "LogExpMathError", "ceil_div", "pow_raw"]
