"""
Read open positions from the exchange. No local state is kept between polls.
"""

from __future__ import annotations

from typing import List, Optional

from exchange.binance_client import BinanceClient
from infra.logger import get_logger
from position.history import OpeningTrade, find_opening_trade
from position.position import PositionSnapshot


class PositionTracker:
    """Exchange-backed view of open positions, re-derived on every call."""

    def __init__(self, client: BinanceClient) -> None:
        self.client = client
        self.logger = get_logger("PositionTracker")

    def open_positions(self) -> List[PositionSnapshot]:
        """
        All non-zero positions. Raises TransientFetchError when the exchange call fails.
        """
        rows = self.client.get_position_risk()
        positions = []
        for row in rows:
            snapshot = PositionSnapshot.from_position_risk(row)
            if snapshot is not None:
                positions.append(snapshot)
        return positions

    def has_open_position(self, symbol: str, positions: Optional[List[PositionSnapshot]] = None) -> bool:
        positions = positions if positions is not None else self.open_positions()
        return any(p.symbol == symbol for p in positions)

    def opening_trade(self, position: PositionSnapshot) -> Optional[OpeningTrade]:
        """
        Replay the user's fills to find the trade that opened the current position.
        """
        trades = self.client.get_user_trades_history(position.symbol)
        if not trades:
            self.logger.info("No trades found for %s", position.symbol)
            return None
        opening = find_opening_trade(trades, position.side, position.size, position.position_side)
        if opening is None:
            self.logger.info("Could not determine opening trade for %s (%s)", position.symbol, position.side)
        return opening
