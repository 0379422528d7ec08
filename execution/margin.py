"""
Margin top-up for losing isolated positions. Dormant unless enabled in ExitConfig.
"""

from __future__ import annotations

from typing import Optional

from exchange.account import AccountService
from exchange.binance_client import OrderRejectedError
from exchange.order_manager import OrderManager
from infra.logger import get_logger
from infra.notifier import TelegramNotifier
from position.position import PositionSnapshot
from risk.margin_support import propose_top_up


class MarginSupport:
    def __init__(
        self,
        order_manager: OrderManager,
        account: AccountService,
        notifier: TelegramNotifier,
        support_ratio: float,
    ) -> None:
        self.order_manager = order_manager
        self.account = account
        self.notifier = notifier
        self.support_ratio = support_ratio
        self.logger = get_logger("MarginSupport")

    def maybe_top_up(self, position: PositionSnapshot) -> Optional[float]:
        """Add margin to a losing isolated position. Returns the amount added, if any."""
        if position.unrealized_profit >= 0:
            return None
        if not position.is_isolated:
            self.logger.info("Position for %s is not in isolated margin mode; no top-up", position.symbol)
            return None
        balance = self.account.free_balance()
        amount = propose_top_up(position, self.support_ratio, balance)
        if amount is None:
            self.logger.warning(
                "Insufficient balance to add margin to %s: %.4f available", position.symbol, balance
            )
            return None
        try:
            self.order_manager.add_margin(position, amount)
        except OrderRejectedError as exc:
            self.logger.error("Error adding margin to %s: %s", position.symbol, exc)
            return None
        self.logger.info("Added %.2f to %s %s position", amount, position.symbol, position.side)
        self.notifier.send(f"⚠️ Margin added, {amount:.2f} USDT to {position.symbol} {position.side} position")
        return amount
