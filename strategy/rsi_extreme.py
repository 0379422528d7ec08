"""
RSI extreme strategy: fade overbought / oversold readings on low-priced contracts.
"""

from __future__ import annotations

from config.bot_config import EntryConfig
from infra.logger import get_logger
from strategy.base import Strategy
from strategy.types import EntryDecision, SignalSnapshot


def evaluate_entry(
    signal: SignalSnapshot,
    active_position_count: int,
    max_positions: int,
    price_ceiling: float,
    sell_threshold: float,
    buy_threshold: float,
    short_enabled: bool,
    long_enabled: bool,
) -> EntryDecision:
    """
    Rules, first match wins:
        1. position slots exhausted -> NO_ACTION
        2. rsi >= sell_threshold, price below ceiling, shorts enabled -> OPEN_SHORT
        3. 0 < rsi < buy_threshold, price below ceiling, longs enabled -> OPEN_LONG
        4. otherwise NO_ACTION

    An RSI of 0 or less means the indicator had no valid output, never "oversold".
    """
    if active_position_count >= max_positions:
        return EntryDecision.NO_ACTION
    below_ceiling = signal.last_price < price_ceiling
    if signal.rsi >= sell_threshold and below_ceiling and short_enabled:
        return EntryDecision.OPEN_SHORT
    if buy_threshold > signal.rsi > 0 and below_ceiling and long_enabled:
        return EntryDecision.OPEN_LONG
    return EntryDecision.NO_ACTION


class RsiExtremeStrategy(Strategy):
    """Stateless RSI extreme strategy bound to an immutable EntryConfig."""

    def __init__(self, config: EntryConfig) -> None:
        self.config = config
        self.logger = get_logger("RsiExtremeStrategy")

    def evaluate(self, signal: SignalSnapshot, active_position_count: int) -> EntryDecision:
        decision = evaluate_entry(
            signal,
            active_position_count,
            max_positions=self.config.max_positions,
            price_ceiling=self.config.price_ceiling,
            sell_threshold=self.config.sell_threshold,
            buy_threshold=self.config.buy_threshold,
            short_enabled=self.config.short_enabled,
            long_enabled=self.config.long_enabled,
        )
        if decision is not EntryDecision.NO_ACTION:
            self.logger.info(
                "Strategy decision: %s %s (rsi=%.2f price=%s)",
                decision.value,
                signal.symbol,
                signal.rsi,
                signal.last_price,
            )
        return decision
