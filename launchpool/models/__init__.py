"""Pydantic models for launchpad records and the quoting API."""

from launchpool.models.api import (
    ErrorResponse,
    PoolResponse,
    QuoteRequest,
    QuoteResponse,
    SpotPriceResponse,
    SwapCalldataRequest,
    SwapCalldataResponse,
)
from launchpool.models.records import Token, Trade, TradeType
from launchpool.models.types import Address, Bytes, TxHash, Uint256

__all__ = [
    # Types
    "Address",
    "Bytes",
    "TxHash",
    "Uint256",
    # Records
    "Token",
    "Trade",
    "TradeType",
    # API
    "QuoteRequest",
    "QuoteResponse",
    "SwapCalldataRequest",
    "SwapCalldataResponse",
    "PoolResponse",
    "SpotPriceResponse",
    "ErrorResponse",
]
