"""
Position manager: poll open positions, close winners, optionally support losers.
"""

from __future__ import annotations

import time
from typing import Callable, Optional

from config.bot_config import ExitConfig
from exchange.binance_client import BinanceAPIError
from execution.exit import PositionCloser
from execution.margin import MarginSupport
from infra.logger import get_logger
from pnl.funding import FundingService, is_funding_favorable
from position.position import PositionSnapshot
from position.tracker import PositionTracker
from strategy.profit_target import evaluate_exit, profit_threshold
from strategy.types import ExitDecision


class PositionManager:
    """Evaluate the exit rule for every open position once per cycle."""

    def __init__(
        self,
        positions: PositionTracker,
        funding: FundingService,
        closer: PositionCloser,
        config: ExitConfig,
        margin_support: Optional[MarginSupport] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.positions = positions
        self.funding = funding
        self.closer = closer
        self.config = config
        self.margin_support = margin_support
        self.sleep = sleep
        self.logger = get_logger("PositionManager")

    def run_cycle(self) -> float:
        """
        Process every open position. Returns the delay before the next cycle.
        """
        open_positions = self.positions.open_positions()
        self.logger.info("Open futures positions: %s", len(open_positions))
        if not open_positions:
            return self.config.idle_delay_sec

        for position in open_positions:
            try:
                self.process_position(position)
            except Exception:  # noqa: BLE001 - one bad position must not end the cycle
                self.logger.exception("Error processing %s", position.symbol)
            self.sleep(self.config.position_delay_sec)
        return 0.0

    def process_position(self, position: PositionSnapshot) -> ExitDecision:
        self._log_position(position)
        if position.symbol in self.config.excluded_symbols:
            return ExitDecision.NO_ACTION

        if not position.is_isolated:
            self.logger.warning(
                "%s has no isolated margin (cross margin); profit threshold is 0", position.symbol
            )
        decision = evaluate_exit(position, self.config.profit_ratio)
        if decision is ExitDecision.CLOSE_POSITION:
            self.closer.close(position)
            return decision

        if self.config.margin_top_up_enabled and self.margin_support is not None:
            self.margin_support.maybe_top_up(position)
        return decision

    def _log_position(self, position: PositionSnapshot) -> None:
        self.logger.info(
            "%s %s size=%s entry=%s mark=%s P/L=%.2f target=%.4f",
            position.symbol,
            position.side,
            position.size,
            position.entry_price,
            position.mark_price,
            position.unrealized_profit,
            profit_threshold(position, self.config.profit_ratio),
        )
        funding = self.funding.fetch(position.symbol)
        if funding is not None:
            self.logger.info(
                "%s funding rate=%.4f%% next=%s profitable=%s",
                position.symbol,
                funding.funding_rate,
                funding.next_funding_label,
                "YES" if is_funding_favorable(position.side, funding.funding_rate) else "NO",
            )
        if self.config.log_position_open_time:
            try:
                opening = self.positions.opening_trade(position)
            except BinanceAPIError as exc:
                self.logger.warning("Could not look up opening trade for %s: %s", position.symbol, exc)
                opening = None
            if opening is not None:
                self.logger.info(
                    "%s position opened at %s (trade %s)",
                    position.symbol,
                    opening.opened_at.strftime("%Y-%m-%d %H:%M:%S"),
                    opening.trade_id,
                )
