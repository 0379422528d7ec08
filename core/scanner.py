"""
Entry scanner: one pass over every tradable perpetual symbol per cycle.
"""

from __future__ import annotations

import time
from typing import Callable, List

from config.bot_config import EntryConfig
from exchange.account import AccountService
from exchange.market_data import MarketDataService
from execution.entry import EntryExecutor
from infra.logger import get_logger
from infra.notifier import TelegramNotifier
from pnl.funding import format_funding_time
from position.position import PositionSnapshot
from position.tracker import PositionTracker
from strategy.base import Strategy
from strategy.types import EntryDecision, SignalSnapshot


def format_signal_message(signal: SignalSnapshot) -> str:
    funding = f"{signal.funding_rate}" if signal.funding_rate is not None else "N/A"
    return (
        f"📢 {signal.symbol}: RSI={signal.rsi:.2f}, Price={signal.last_price}, "
        f"FundingRate={funding}%, NextFunding={format_funding_time(signal.next_funding_time)}"
    )


class EntryScanner:
    """Scan symbols, evaluate the entry strategy and open positions."""

    def __init__(
        self,
        market_data: MarketDataService,
        positions: PositionTracker,
        account: AccountService,
        strategy: Strategy,
        executor: EntryExecutor,
        notifier: TelegramNotifier,
        config: EntryConfig,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.market_data = market_data
        self.positions = positions
        self.account = account
        self.strategy = strategy
        self.executor = executor
        self.notifier = notifier
        self.config = config
        self.sleep = sleep
        self.logger = get_logger("EntryScanner")

    def run_cycle(self) -> float:
        """
        Scan every symbol once. Returns the delay before the next scan.
        """
        self.account.free_balance()
        symbols = self.market_data.list_tradable_symbols(self.config.quote_asset, self.config.excluded_symbols)
        open_positions = self.positions.open_positions()

        for symbol in symbols:
            try:
                if self.process_symbol(symbol, open_positions):
                    open_positions = self.positions.open_positions()
            except Exception:  # noqa: BLE001 - one bad symbol must not end the scan
                self.logger.exception("Error processing %s", symbol)
            self.sleep(self.config.symbol_delay_sec)
        return self.config.scan_interval_sec

    def process_symbol(self, symbol: str, open_positions: List[PositionSnapshot]) -> bool:
        """
        Evaluate one symbol. Returns True when an order was placed.
        """
        signal = self.market_data.build_signal_snapshot(symbol, self.config)
        self._log_signal(signal)

        if self.positions.has_open_position(symbol, open_positions):
            return False

        # Best effort: the count can go stale before the order lands.
        decision = self.strategy.evaluate(signal, len(open_positions))
        if decision is EntryDecision.NO_ACTION:
            return False
        if self.config.testing_mode:
            self.logger.info("Testing mode: %s for %s not executed", decision.value, symbol)
            return False

        self.notifier.send(format_signal_message(signal))
        return self.executor.execute(symbol, decision) is not None

    def _log_signal(self, signal: SignalSnapshot) -> None:
        self.logger.info(
            "%s: RSI=%.2f EMA%s=%s price=%s funding=%s%% next=%s",
            signal.symbol,
            signal.rsi,
            self.config.ema_period,
            f"{signal.ema:.8g}" if signal.ema is not None else "N/A",
            signal.last_price,
            f"{signal.funding_rate:.4f}" if signal.funding_rate is not None else "N/A",
            format_funding_time(signal.next_funding_time),
        )
