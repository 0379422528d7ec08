"""
Strategy base interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from strategy.types import EntryDecision, SignalSnapshot


class Strategy(ABC):
    """Stateless entry strategy: a pure function of the snapshot and position count."""

    @abstractmethod
    def evaluate(self, signal: SignalSnapshot, active_position_count: int) -> EntryDecision:
        """
        Produce an entry decision based solely on the provided inputs.

        Args:
            signal: Indicator and price snapshot for one symbol.
            active_position_count: Open positions on the account right now.
        Returns:
            EntryDecision.OPEN_LONG, OPEN_SHORT or NO_ACTION.
        """
        raise NotImplementedError
