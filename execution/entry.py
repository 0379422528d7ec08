"""
Entry execution: turn an OPEN_* decision into a leveraged market order.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from config.bot_config import EntryConfig
from exchange.account import AccountService
from exchange.binance_client import BinanceAPIError, BinanceClient, OrderRejectedError
from exchange.order_manager import OrderManager
from infra.logger import get_logger
from infra.notifier import TelegramNotifier
from risk.position_sizer import compute_order_quantity, has_sufficient_balance
from strategy.types import EntryDecision


class EntryExecutor:
    """Opens positions for entry decisions. Rejections are logged and dropped."""

    def __init__(
        self,
        client: BinanceClient,
        order_manager: OrderManager,
        account: AccountService,
        notifier: TelegramNotifier,
        config: EntryConfig,
    ) -> None:
        self.client = client
        self.order_manager = order_manager
        self.account = account
        self.notifier = notifier
        self.config = config
        self.logger = get_logger("EntryExecutor")

    def execute(self, symbol: str, decision: EntryDecision) -> Optional[Dict[str, Any]]:
        """
        Prepare the symbol (leverage, margin type), check balance, size and place the order.

        Returns the order response, or None when nothing was placed. Fetch failures
        propagate to the caller.
        """
        if decision is EntryDecision.NO_ACTION:
            return None
        self._prepare_symbol(symbol)

        balance = self.account.free_balance()
        if not has_sufficient_balance(balance, self.config.position_usdt):
            message = (
                f"🚨 Insufficient {self.config.quote_asset} balance: {balance} available, "
                f"{self.config.position_usdt} required."
            )
            self.logger.warning(message)
            self.notifier.send(message)
            return None

        price = self.client.get_ticker_price(symbol)
        qty = compute_order_quantity(self.config.position_usdt, self.config.leverage, price)
        if qty is None:
            self.logger.info("Computed quantity invalid for %s; skipping entry", symbol)
            return None

        side = decision.position_side
        try:
            order = self.order_manager.open_position(symbol, side, qty)
        except OrderRejectedError as exc:
            self.logger.error("Failed to open position for %s: %s", symbol, exc)
            return None

        self.logger.info("Position opened: %s %s %s at %s", decision.order_side, qty, symbol, price)
        self.notifier.send(
            f"🟢 Position opened: {symbol}, Quantity: {order.get('origQty', qty)}, Price: {price}, "
            f"Position Side: {side}"
        )
        return order

    def _prepare_symbol(self, symbol: str) -> None:
        # Failures here are logged only; the order itself decides whether the entry goes through.
        try:
            self.client.set_leverage(symbol, self.config.leverage)
            self.logger.info("Leverage set to %sx for %s", self.config.leverage, symbol)
        except BinanceAPIError as exc:
            self.logger.error("Failed to set leverage for %s: %s", symbol, exc)
        try:
            changed = self.client.set_margin_type(symbol, self.config.margin_type)
            if changed:
                self.logger.info("Margin mode set to %s for %s", self.config.margin_type, symbol)
            else:
                self.logger.info("Margin mode already %s for %s", self.config.margin_type, symbol)
        except BinanceAPIError as exc:
            self.logger.error("Failed to set margin mode for %s: %s", symbol, exc)
