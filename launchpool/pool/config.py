"""Quoting configuration."""

from dataclasses import dataclass


@dataclass(frozen=True)
class QuoteConfig:
    """Quoting behaviour.

    Attributes:
        default_slippage_bps: Slippage used when the caller gives none (1%, the trading panel default)
        max_slippage_bps: Largest tolerance a caller may request
    """

    default_slippage_bps: int = 100
    max_slippage_bps: int = 5_000


DEFAULT_QUOTE_CONFIG = QuoteConfig()
