"""
Immutable runtime configuration assembled once at process start.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Tuple

from config import risk as risk_config
from config import settings
from config import strategy as strategy_config
from config import symbols as symbols_config


class ConfigurationError(Exception):
    """Raised at startup when required configuration is missing."""


@dataclass(frozen=True)
class EntryConfig:
    max_positions: int = risk_config.MAX_ACTIVE_POSITIONS
    position_usdt: float = risk_config.POSITION_USDT
    leverage: int = risk_config.LEVERAGE
    margin_type: str = risk_config.MARGIN_TYPE
    price_ceiling: float = strategy_config.PRICE_CEILING
    sell_threshold: float = strategy_config.SELL_RSI_THRESHOLD
    buy_threshold: float = strategy_config.BUY_RSI_THRESHOLD
    short_enabled: bool = strategy_config.SHORT_ENABLED
    long_enabled: bool = strategy_config.LONG_ENABLED
    testing_mode: bool = strategy_config.TESTING_MODE
    timeframe: str = strategy_config.TIMEFRAME
    rsi_period: int = strategy_config.RSI_PERIOD
    rsi_lookback: int = strategy_config.RSI_LOOKBACK
    ema_period: int = strategy_config.EMA_PERIOD
    klines_limit: int = settings.KLINES_LIMIT
    quote_asset: str = symbols_config.QUOTE_ASSET
    excluded_symbols: FrozenSet[str] = field(
        default_factory=lambda: frozenset(symbols_config.EXCLUDED_SYMBOLS)
    )
    symbol_delay_sec: float = 0.5
    scan_interval_sec: float = 60.0

    @classmethod
    def from_settings(cls) -> "EntryConfig":
        return cls()


@dataclass(frozen=True)
class ExitConfig:
    profit_ratio: float = risk_config.PROFIT_RATIO
    reduce_only: bool = risk_config.CLOSE_REDUCE_ONLY
    margin_top_up_enabled: bool = risk_config.MARGIN_TOP_UP_ENABLED
    support_ratio: float = risk_config.SUPPORT_RATIO
    log_position_open_time: bool = strategy_config.LOG_POSITION_OPEN_TIME
    quote_asset: str = symbols_config.QUOTE_ASSET
    excluded_symbols: FrozenSet[str] = field(
        default_factory=lambda: frozenset(symbols_config.EXIT_EXCLUDED_SYMBOLS)
    )
    position_delay_sec: float = 3.0
    idle_delay_sec: float = 10.0
    error_delay_sec: float = 5.0

    @classmethod
    def from_settings(cls) -> "ExitConfig":
        return cls()


def resolve_credentials(testnet: bool = settings.TESTNET) -> Tuple[Optional[str], Optional[str]]:
    """
    Read (api_key, api_secret) from the environment.

    Testnet keys take precedence when the testnet flag is set; API_KEY / API_SECRET
    are accepted as a last resort.
    """
    if testnet:
        key = os.getenv("BINANCE_TEST_API_KEY") or os.getenv("BINANCE_API_KEY") or os.getenv("API_KEY")
        secret = (
            os.getenv("BINANCE_TEST_API_SECRET") or os.getenv("BINANCE_API_SECRET") or os.getenv("API_SECRET")
        )
    else:
        key = os.getenv("BINANCE_API_KEY") or os.getenv("API_KEY")
        secret = os.getenv("BINANCE_API_SECRET") or os.getenv("API_SECRET")
    return key, secret


def require_credentials(testnet: bool = settings.TESTNET) -> Tuple[str, str]:
    """Return (api_key, api_secret) or raise ConfigurationError."""
    key, secret = resolve_credentials(testnet)
    if not key or not secret:
        raise ConfigurationError("Binance API credentials are not set")
    return key, secret
