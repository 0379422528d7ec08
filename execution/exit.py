"""
Position close execution.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from exchange.binance_client import BinanceClient, OrderRejectedError
from exchange.order_manager import OrderManager
from infra.logger import get_logger
from infra.notifier import TelegramNotifier
from position.position import PositionSnapshot


class PositionCloser:
    """Close a whole position at market and report it."""

    def __init__(
        self,
        client: BinanceClient,
        order_manager: OrderManager,
        notifier: TelegramNotifier,
        reduce_only: bool = False,
    ) -> None:
        self.client = client
        self.order_manager = order_manager
        self.notifier = notifier
        self.reduce_only = reduce_only
        self.logger = get_logger("PositionCloser")

    def close(self, position: PositionSnapshot) -> Optional[Dict[str, Any]]:
        price = self.client.get_ticker_price(position.symbol)
        try:
            order = self.order_manager.close_position(position, reduce_only=self.reduce_only)
        except OrderRejectedError as exc:
            self.logger.error("Error closing position %s: %s", position.symbol, exc)
            return None

        self.logger.info(
            "Position closed: %s %s qty=%s entry=%s price=%s P/L=%.4f",
            position.symbol,
            position.side,
            position.quantity,
            position.entry_price,
            price,
            position.unrealized_profit,
        )
        self.notifier.send(
            f"❎ Position closed: {position.symbol}, Quantity: {position.quantity}, Price: {price}, "
            f"Position Side: {position.side}, P/L: {position.unrealized_profit}"
        )
        return order
