"""Launchpad domain records: tokens and trades.

Both are immutable. Token metrics (price, market cap, holders) are cached
best-effort mirrors of chain state, never a source of truth. Trades are
append-only log entries.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from launchpool.models.types import Address, TxHash


class TradeType(str, Enum):
    """Direction of a trade, seen from the launched token."""

    BUY = "buy"  # quote asset in, launched token out
    SELL = "sell"  # launched token in, quote asset out


class Token(BaseModel):
    """A token launched through the factory, paired with one weighted pool."""

    address: Address
    name: str = Field(min_length=1)
    symbol: str = Field(min_length=1)
    total_supply: int = Field(alias="totalSupply", ge=0)
    creator: Address
    pool_address: Address | None = Field(default=None, alias="poolAddress")
    created_at: datetime = Field(alias="createdAt")

    # Cached metrics, refreshed off-chain
    price: int | None = Field(default=None, ge=0, description="Quote asset per token, 18 decimals")
    market_cap: int | None = Field(default=None, alias="marketCap", ge=0)
    holder_count: int | None = Field(default=None, alias="holderCount", ge=0)

    model_config = {"frozen": True, "populate_by_name": True}

    def with_metrics(
        self,
        price: int | None = None,
        holder_count: int | None = None,
    ) -> Token:
        """Copy with refreshed cached metrics; market cap follows from price and supply."""
        price = self.price if price is None else price
        market_cap = None if price is None else price * self.total_supply // 10**18
        return self.model_copy(
            update={
                "price": price,
                "market_cap": market_cap,
                "holder_count": self.holder_count if holder_count is None else holder_count,
            }
        )


class Trade(BaseModel):
    """One executed swap against a token's pool.

    Attributes:
        type: buy or sell
        token_address: The launched token
        trader: Address that sent the swap
        amount_in: Amount paid in (quote asset for buys, token for sells)
        amount_out: Amount received
        price: Spot price after the trade, quote asset per token (18 decimals)
        timestamp: Block timestamp
    """

    type: TradeType
    token_address: Address = Field(alias="tokenAddress")
    trader: Address
    amount_in: int = Field(alias="amountIn", ge=0)
    amount_out: int = Field(alias="amountOut", ge=0)
    price: int = Field(ge=0)
    timestamp: datetime
    tx_hash: TxHash | None = Field(default=None, alias="txHash")
    block_number: int | None = Field(default=None, alias="blockNumber", ge=0)
    log_index: int | None = Field(default=None, alias="logIndex", ge=0)

    model_config = {"frozen": True, "populate_by_name": True}

    @property
    def token_amount(self) -> int:
        """Launched-token side of the trade."""
        return self.amount_out if self.type == TradeType.BUY else self.amount_in

    @property
    def quote_amount(self) -> int:
        """Quote-asset side of the trade."""
        return self.amount_in if self.type == TradeType.BUY else self.amount_out
