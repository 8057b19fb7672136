"""Test helpers module for shared test utilities.

- constants: Token, pool and account addresses, common weights
- factories: Pool and trade factory functions
"""

from tests.helpers.constants import (
    CREATOR,
    DOGE,
    MISSING_POOL,
    PEPE,
    POOL,
    POOL_2,
    TRADER,
    UNKNOWN_TOKEN,
    WBNB,
    WEIGHT_20,
    WEIGHT_50,
    WEIGHT_80,
)
from tests.helpers.factories import make_pool, make_trade

__all__ = [
    # Constants
    "WBNB",
    "PEPE",
    "DOGE",
    "UNKNOWN_TOKEN",
    "POOL",
    "POOL_2",
    "MISSING_POOL",
    "TRADER",
    "CREATOR",
    "WEIGHT_80",
    "WEIGHT_20",
    "WEIGHT_50",
    # Factories
    "make_pool",
    "make_trade",
]
