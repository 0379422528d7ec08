"""
Exit rule: close once unrealized profit reaches a fraction of the isolated margin.
"""

from __future__ import annotations

from position.position import PositionSnapshot
from strategy.types import ExitDecision


def profit_threshold(position: PositionSnapshot, profit_ratio: float) -> float:
    return position.isolated_margin * profit_ratio


def evaluate_exit(position: PositionSnapshot, profit_ratio: float) -> ExitDecision:
    """
    CLOSE_POSITION when unrealized_profit >= isolated_margin * profit_ratio.

    A cross-margin position reports zero isolated margin, so its threshold is 0 and
    any non-negative unrealized profit closes it.
    """
    if position.unrealized_profit >= profit_threshold(position, profit_ratio):
        return ExitDecision.CLOSE_POSITION
    return ExitDecision.NO_ACTION
