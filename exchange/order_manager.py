"""
Order management for Binance Futures market orders (open, close, margin top-up).
"""

from __future__ import annotations

from decimal import Decimal, getcontext
from typing import Any, Dict, Optional

from exchange.binance_client import BinanceClient, OrderRejectedError
from infra.logger import get_logger
from position.position import PositionSnapshot


class OrderManager:
    """Place market orders using BinanceClient primitives, rounded to symbol filters."""

    def __init__(self, client: BinanceClient) -> None:
        self.client = client
        self.logger = get_logger("OrderManager")
        self._symbol_filters: Dict[str, Dict[str, Decimal]] = {}
        getcontext().prec = 28  # sufficient for futures precision

    def _load_filters(self, symbol: str) -> Dict[str, Decimal]:
        if symbol in self._symbol_filters:
            return self._symbol_filters[symbol]
        info = self.client.get_exchange_info()
        for entry in info.get("symbols", []):
            step = Decimal("0.001")
            market_step: Optional[Decimal] = None
            for f in entry.get("filters", []):
                if f.get("filterType") == "LOT_SIZE":
                    step = Decimal(str(f.get("stepSize", step)))
                if f.get("filterType") == "MARKET_LOT_SIZE":
                    market_step = Decimal(str(f.get("stepSize")))
            # Market orders are validated against MARKET_LOT_SIZE when present.
            if market_step is not None and market_step > 0:
                step = max(step, market_step)
            self._symbol_filters[entry.get("symbol")] = {"stepSize": step}
        if symbol not in self._symbol_filters:
            raise OrderRejectedError(f"Symbol info not found for {symbol}")
        return self._symbol_filters[symbol]

    def round_quantity(self, symbol: str, qty: float) -> float:
        step = self._load_filters(symbol)["stepSize"]
        return float((Decimal(str(qty)) // step) * step)

    def _position_side(self, side: str) -> Optional[str]:
        return side if self.client.is_hedge_mode() else None

    def open_position(self, symbol: str, side: str, quantity: float) -> Dict[str, Any]:
        """
        Open a position with a market order.

        Args:
            symbol: Trading pair (e.g., DOGEUSDT).
            side: "LONG" or "SHORT".
            quantity: Unrounded contract quantity.
        """
        qty = self.round_quantity(symbol, quantity)
        if qty <= 0:
            raise OrderRejectedError("Rounded quantity is zero; aborting order")
        order_side = "BUY" if side == "LONG" else "SELL"
        order = self.client.place_market_order(symbol, order_side, qty, position_side=self._position_side(side))
        self.logger.info("Submitted market order %s %s qty=%s (%s)", order_side, symbol, qty, side)
        return order

    def close_position(self, position: PositionSnapshot, reduce_only: bool = False) -> Dict[str, Any]:
        """
        Close the full position with an opposite-side market order.

        reduceOnly is only sent in one-way mode; Binance rejects it alongside positionSide.
        """
        if position.quantity == 0:
            raise OrderRejectedError("Position quantity is zero")
        position_side = self._position_side(position.side)
        order = self.client.place_market_order(
            position.symbol,
            position.close_side,
            position.quantity,
            position_side=position_side,
            reduce_only=reduce_only and position_side is None,
        )
        self.logger.info(
            "Submitted close order %s %s qty=%s (%s)",
            position.close_side,
            position.symbol,
            position.quantity,
            position.side,
        )
        return order

    def add_margin(self, position: PositionSnapshot, amount: float) -> Dict[str, Any]:
        if not position.is_isolated:
            raise OrderRejectedError(f"Position for {position.symbol} is not in isolated margin mode")
        return self.client.add_isolated_margin(
            position.symbol, amount, position_side=self._position_side(position.side)
        )
