"""Weighted pool pricing, quoting and state sources.

Pool math is computed locally in 18-decimal fixed point; pool state comes
from a `PoolSource` (in memory or over JSON-RPC).
"""

# Configuration
from .config import DEFAULT_QUOTE_CONFIG, QuoteConfig

# Calldata encoding
from .encoding import encode_swap, encode_swap_exact_out

# Errors
from .errors import (
    InsufficientLiquidity,
    InvalidAmount,
    InvalidFee,
    InvalidToken,
    InvalidWeight,
    InvariantViolation,
    PoolEmpty,
    PoolError,
    PoolNotFound,
    PoolSourceError,
    SlippageExceeded,
)

# Pool snapshots
from .pools import MAX_FEE_BPS, MAX_WEIGHT, MIN_WEIGHT, PoolReserve, WeightedPool, fee_bps_from_wei

# Quoting
from .quoter import (
    PoolQuoter,
    PreparedSwap,
    SwapQuote,
    pool_spot_price,
    quote_swap,
    quote_swap_exact_out,
    simulate_swap,
)

# Sources
from .source import InMemoryPoolSource, PoolSource, RpcPoolSource

# Pricing math
from .weighted_math import (
    INVARIANT_ABS_TOLERANCE,
    INVARIANT_TOLERANCE,
    apply_fee,
    calc_in_given_out,
    calc_out_given_in,
    check_invariant,
    enforce_max_in,
    enforce_min_out,
    invariant,
    max_amount_in,
    min_amount_out,
    price_impact,
    spot_price,
)

__all__ = [
    # Pricing math
    "spot_price",
    "calc_out_given_in",
    "calc_in_given_out",
    "apply_fee",
    "invariant",
    "check_invariant",
    "price_impact",
    "min_amount_out",
    "max_amount_in",
    "enforce_min_out",
    "enforce_max_in",
    "INVARIANT_TOLERANCE",
    "INVARIANT_ABS_TOLERANCE",
    # Pools
    "PoolReserve",
    "WeightedPool",
    "fee_bps_from_wei",
    "MIN_WEIGHT",
    "MAX_WEIGHT",
    "MAX_FEE_BPS",
    # Quoting
    "PoolQuoter",
    "SwapQuote",
    "PreparedSwap",
    "pool_spot_price",
    "quote_swap",
    "quote_swap_exact_out",
    "simulate_swap",
    "QuoteConfig",
    "DEFAULT_QUOTE_CONFIG",
    # Sources
    "PoolSource",
    "InMemoryPoolSource",
    "RpcPoolSource",
    # Encoding
    "encode_swap",
    "encode_swap_exact_out",
    # Errors
    "PoolError",
    "PoolEmpty",
    "InvalidAmount",
    "InsufficientLiquidity",
    "SlippageExceeded",
    "InvalidToken",
    "InvalidWeight",
    "InvalidFee",
    "InvariantViolation",
    "PoolNotFound",
    "PoolSourceError",
]
