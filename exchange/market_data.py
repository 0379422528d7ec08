"""
Market data fetching: tradable symbols, klines and per-symbol signal snapshots.
"""

from __future__ import annotations

import time
from typing import Any, Dict, FrozenSet, List, Optional

from config import settings
from config import symbols as symbols_config
from config.bot_config import EntryConfig
from exchange.binance_client import BinanceClient
from infra.logger import get_logger
from pnl.funding import FundingService
from strategy.indicators import ema, rsi
from strategy.types import SignalSnapshot

INTERVAL_SECONDS: Dict[str, int] = {
    "1m": 60,
    "3m": 180,
    "5m": 300,
    "15m": 900,
    "30m": 1800,
    "1h": 3600,
    "4h": 14400,
}


class MarketDataService:
    """Fetch and normalize market data via Binance REST."""

    def __init__(self, client: BinanceClient, funding: Optional[FundingService] = None) -> None:
        self.client = client
        self.funding = funding or FundingService(client)
        self.logger = get_logger("MarketData")

    def list_tradable_symbols(
        self, quote_asset: str = symbols_config.QUOTE_ASSET, excluded: FrozenSet[str] = frozenset()
    ) -> List[str]:
        """
        Perpetual contracts quoted in quote_asset that are currently trading.
        """
        info = self.client.get_exchange_info()
        symbols = [
            s["symbol"]
            for s in info.get("symbols", [])
            if s.get("contractType") == symbols_config.CONTRACT_TYPE
            and s.get("quoteAsset") == quote_asset
            and s.get("status") == symbols_config.TRADING_STATUS
            and s.get("symbol") not in excluded
        ]
        self.logger.info("Tradable %s perpetual symbols: %s", quote_asset, len(symbols))
        return symbols

    def fetch_klines(
        self, symbol: str, interval: str, limit: int = 500, strict_tail: Optional[int] = None
    ) -> Dict[str, List[Any]]:
        """
        All returned candles, the forming one included.

        A gap among the last strict_tail candles (all of them when None) raises
        ValueError; older gaps are only logged.
        """
        raw = self.client.get_klines(symbol, interval, limit)
        return self._normalize_klines(symbol, raw, interval, strict_tail)

    def build_signal_snapshot(self, symbol: str, config: EntryConfig) -> SignalSnapshot:
        """
        RSI over the most recent candles (forming one included), EMA over closed
        candles, last traded price and funding info.
        """
        candles = self.fetch_klines(
            symbol, config.timeframe, limit=config.klines_limit, strict_tail=config.rsi_lookback
        )
        closes: List[float] = candles["close"]
        closed_closes = closes[: self.closed_count(candles)]

        rsi_value = rsi(closes[-config.rsi_lookback:], config.rsi_period)
        ema_value = ema(closed_closes, config.ema_period)
        last_price = self.client.get_ticker_price(symbol)
        funding = self.funding.fetch(symbol)

        return SignalSnapshot(
            symbol=symbol,
            rsi=rsi_value if rsi_value is not None else 0.0,
            ema=ema_value,
            last_price=last_price,
            funding_rate=funding.funding_rate if funding else None,
            next_funding_time=funding.next_funding_time if funding else None,
        )

    def _normalize_klines(
        self, symbol: str, klines: Any, interval: str, strict_tail: Optional[int] = None
    ) -> Dict[str, List[Any]]:
        if not isinstance(klines, list) or not klines:
            raise ValueError("Klines response is empty or invalid")
        if interval not in INTERVAL_SECONDS:
            raise ValueError(f"Unsupported interval {interval}")

        interval_ms = INTERVAL_SECONDS[interval] * 1000

        opens: List[float] = []
        highs: List[float] = []
        lows: List[float] = []
        closes: List[float] = []
        volumes: List[float] = []
        timestamps: List[int] = []
        open_times: List[int] = []

        for entry in klines:
            if not isinstance(entry, list) or len(entry) < 7:
                raise ValueError("Unexpected kline format")
            open_times.append(int(entry[0]))
            opens.append(float(entry[1]))
            highs.append(float(entry[2]))
            lows.append(float(entry[3]))
            closes.append(float(entry[4]))
            volumes.append(float(entry[5]))
            timestamps.append(int(entry[6]))

        self._validate_sequence(symbol, open_times, interval_ms, strict_tail)

        return {
            "open": opens,
            "high": highs,
            "low": lows,
            "close": closes,
            "volume": volumes,
            "timestamp": timestamps,
        }

    def closed_count(self, candles: Dict[str, List[Any]], now_ms: Optional[int] = None) -> int:
        """Number of leading candles that are fully closed (the last one may still be forming)."""
        timestamps = candles["timestamp"]
        if not timestamps:
            return 0
        now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
        if self._is_closed(timestamps[-1], now_ms, settings.SAFETY_MARGIN_MS):
            return len(timestamps)
        return len(timestamps) - 1

    def _validate_sequence(
        self, symbol: str, open_times: List[int], interval_ms: int, strict_tail: Optional[int] = None
    ) -> None:
        strict_from = 1 if strict_tail is None else max(1, len(open_times) - strict_tail + 1)
        for i in range(1, len(open_times)):
            if open_times[i] == open_times[i - 1] + interval_ms:
                continue
            if i >= strict_from:
                raise ValueError(f"Missing or unordered candles detected for {symbol}")
            self.logger.warning("%s: gap in older candles before index %s", symbol, i)

    def _is_closed(self, last_close_time: int, now_ms: int, safety_margin_ms: int) -> bool:
        # Consider closed if close time is older than now minus safety margin.
        return last_close_time < (now_ms - safety_margin_ms)
