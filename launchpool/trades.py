"""Trade log and price candles.

Trades are recorded from executed swaps. The log is append-only: there is no
way to edit or remove an entry. Candles (OHLCV) are derived from the log on
demand and are never stored.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime

import structlog

from launchpool.models.records import Trade, TradeType
from launchpool.models.types import normalize_address
from launchpool.pool.errors import InvalidToken
from launchpool.pool.pools import WeightedPool
from launchpool.pool.quoter import pool_spot_price

logger = structlog.get_logger()

# Candle intervals in seconds
CANDLE_INTERVALS = {
    "1m": 60,
    "5m": 300,
    "15m": 900,
    "1h": 3_600,
    "4h": 14_400,
    "1d": 86_400,
}


def classify_trade(token: str, token_in: str, token_out: str) -> TradeType:
    """buy if the launched token comes out of the pool, sell if it goes in."""
    token = normalize_address(token)
    if normalize_address(token_out) == token:
        return TradeType.BUY
    if normalize_address(token_in) == token:
        return TradeType.SELL
    raise InvalidToken(f"{token} is neither side of {token_in} -> {token_out}")


def trade_from_swap(
    pool_after: WeightedPool,
    token: str,
    token_in: str,
    token_out: str,
    amount_in: int,
    amount_out: int,
    trader: str,
    timestamp: datetime,
    **chain_fields: object,
) -> Trade:
    """Record a swap as a Trade priced at the pool's spot price after it.

    Args:
        pool_after: Pool snapshot including the swap's balance changes
        token: The launched token; the other pool token is the quote asset
        chain_fields: Optional tx_hash, block_number, log_index
    """
    trade_type = classify_trade(token, token_in, token_out)
    quote_token = token_in if trade_type == TradeType.BUY else token_out
    return Trade(
        type=trade_type,
        token_address=normalize_address(token),
        trader=normalize_address(trader),
        amount_in=amount_in,
        amount_out=amount_out,
        price=pool_spot_price(pool_after, quote_token, token),
        timestamp=timestamp,
        **chain_fields,
    )


class TradeLog:
    """Append-only, thread-safe in-memory trade log, newest last."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._trades: list[Trade] = []

    def append(self, trade: Trade) -> None:
        with self._lock:
            self._trades.append(trade)
        logger.debug(
            "trade_recorded",
            token=trade.token_address,
            type=trade.type.value,
            amount_in=trade.amount_in,
            amount_out=trade.amount_out,
        )

    def __len__(self) -> int:
        with self._lock:
            return len(self._trades)

    def _snapshot(self) -> list[Trade]:
        with self._lock:
            return list(self._trades)

    def for_token(self, token: str, limit: int = 50, offset: int = 0) -> list[Trade]:
        """Trades of one token, newest first."""
        token = normalize_address(token)
        matching = [t for t in reversed(self._snapshot()) if t.token_address == token]
        return matching[offset : offset + limit]

    def for_trader(self, trader: str, limit: int = 50) -> list[Trade]:
        """Trades sent by one address, newest first."""
        trader = normalize_address(trader)
        return [t for t in reversed(self._snapshot()) if t.trader == trader][:limit]

    def recent(self, limit: int = 20) -> list[Trade]:
        """Latest trades across all tokens, newest first."""
        return list(reversed(self._snapshot()))[:limit]

    def count(self, token: str) -> int:
        token = normalize_address(token)
        return sum(1 for t in self._snapshot() if t.token_address == token)


@dataclass(frozen=True)
class Candle:
    """OHLCV bucket. Prices are 18-decimal quote per token; volume is quote asset."""

    timestamp: int  # bucket start, unix seconds
    open: int
    high: int
    low: int
    close: int
    volume: int
    trade_count: int


def _epoch(ts: datetime) -> int:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=UTC)
    return int(ts.timestamp())


def build_candles(trades: Iterable[Trade], interval: str) -> list[Candle]:
    """Aggregate trades into candles, oldest first.

    Only buckets that contain trades are emitted.

    Raises:
        ValueError: If interval is not one of CANDLE_INTERVALS
    """
    if interval not in CANDLE_INTERVALS:
        raise ValueError(f"Unknown interval {interval!r}, expected one of {list(CANDLE_INTERVALS)}")
    seconds = CANDLE_INTERVALS[interval]

    candles: list[Candle] = []
    ordered = sorted(trades, key=lambda t: (_epoch(t.timestamp), t.block_number or 0, t.log_index or 0))
    for trade in ordered:
        ts = _epoch(trade.timestamp)
        bucket = ts - ts % seconds
        if candles and candles[-1].timestamp == bucket:
            last = candles[-1]
            candles[-1] = Candle(
                timestamp=bucket,
                open=last.open,
                high=max(last.high, trade.price),
                low=min(last.low, trade.price),
                close=trade.price,
                volume=last.volume + trade.quote_amount,
                trade_count=last.trade_count + 1,
            )
        else:
            candles.append(
                Candle(
                    timestamp=bucket,
                    open=trade.price,
                    high=trade.price,
                    low=trade.price,
                    close=trade.price,
                    volume=trade.quote_amount,
                    trade_count=1,
                )
            )
    return candles
