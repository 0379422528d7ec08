import os

# Settings are read at import time; keep test runs off the filesystem and off mainnet.
os.environ["LOG_DIR"] = ""
os.environ.setdefault("BINANCE_TESTNET", "true")

import time
from typing import Any, Dict, List, Optional

import pytest

from exchange.binance_client import OrderRejectedError, TransientFetchError

MINUTE_MS = 60_000


def make_klines(closes: List[float], forming: bool = False) -> List[list]:
    """1m klines ending one minute ago (all closed) or in the current minute (last one forming)."""
    now_minute = int(time.time() * 1000) // MINUTE_MS
    last_open_minute = now_minute if forming else now_minute - 2
    start = (last_open_minute - len(closes) + 1) * MINUTE_MS
    rows = []
    for i, close in enumerate(closes):
        open_time = start + i * MINUTE_MS
        rows.append([open_time, str(close), str(close), str(close), str(close), "100", open_time + MINUTE_MS - 1])
    return rows


def symbol_info(symbol: str, step: str = "1", status: str = "TRADING", quote: str = "USDT") -> Dict[str, Any]:
    return {
        "symbol": symbol,
        "contractType": "PERPETUAL",
        "quoteAsset": quote,
        "status": status,
        "filters": [
            {"filterType": "PRICE_FILTER", "tickSize": "0.0001"},
            {"filterType": "LOT_SIZE", "stepSize": step},
        ],
    }


def position_row(
    symbol: str,
    amount: float,
    unrealized: float = 0.0,
    isolated_wallet: float = 5.0,
    position_side: str = "BOTH",
    entry: float = 0.5,
    mark: float = 0.5,
) -> Dict[str, Any]:
    return {
        "symbol": symbol,
        "positionAmt": str(amount),
        "entryPrice": str(entry),
        "markPrice": str(mark),
        "unRealizedProfit": str(unrealized),
        "isolatedWallet": str(isolated_wallet),
        "positionSide": position_side,
    }


class FakeBinanceClient:
    """In-memory stand-in for BinanceClient used by the service tests."""

    def __init__(self) -> None:
        self.use_testnet = True
        self.symbols: List[Dict[str, Any]] = []
        self.klines: Dict[str, List[list]] = {}
        self.prices: Dict[str, float] = {}
        self.premium: Dict[str, Dict[str, Any]] = {}
        self.positions: List[Dict[str, Any]] = []
        self.trades: Dict[str, List[Dict[str, Any]]] = {}
        self.balance = 100.0
        self.hedge_mode = False
        self.fail_fetch: set = set()
        self.reject_orders = False
        self.orders: List[Dict[str, Any]] = []
        self.leverage_calls: List[tuple] = []
        self.margin_type_calls: List[tuple] = []
        self.margin_additions: List[tuple] = []

    def get_exchange_info(self) -> Dict[str, Any]:
        return {"symbols": self.symbols}

    def get_klines(self, symbol: str, interval: str, limit: int = 500) -> Any:
        if symbol in self.fail_fetch:
            raise TransientFetchError(f"klines failed for {symbol}")
        return self.klines[symbol][-limit:]

    def get_ticker_price(self, symbol: str) -> float:
        if symbol in self.fail_fetch:
            raise TransientFetchError(f"ticker failed for {symbol}")
        return self.prices[symbol]

    def get_premium_index(self, symbol: str) -> Dict[str, Any]:
        if symbol not in self.premium:
            raise TransientFetchError(f"premiumIndex failed for {symbol}")
        return self.premium[symbol]

    def get_free_balance(self, asset: str = "USDT") -> float:
        return self.balance

    def get_position_risk(self, symbol: Optional[str] = None) -> List[Dict[str, Any]]:
        return list(self.positions)

    def is_hedge_mode(self) -> bool:
        return self.hedge_mode

    def get_user_trades_history(self, symbol: str, start_time_ms: Optional[int] = None, limit: int = 1000):
        return self.trades.get(symbol, [])

    def set_leverage(self, symbol: str, leverage: int) -> Dict[str, Any]:
        self.leverage_calls.append((symbol, leverage))
        return {"symbol": symbol, "leverage": leverage}

    def set_margin_type(self, symbol: str, margin_type: str) -> bool:
        self.margin_type_calls.append((symbol, margin_type))
        return True

    def place_market_order(
        self,
        symbol: str,
        side: str,
        quantity: float,
        position_side: Optional[str] = None,
        reduce_only: bool = False,
    ) -> Dict[str, Any]:
        if self.reject_orders:
            raise OrderRejectedError("Margin is insufficient.", status_code=400, code=-2019)
        order = {
            "orderId": len(self.orders) + 1,
            "symbol": symbol,
            "side": side,
            "origQty": str(quantity),
            "positionSide": position_side,
            "reduceOnly": reduce_only,
        }
        self.orders.append(order)
        return order

    def add_isolated_margin(self, symbol: str, amount: float, position_side: Optional[str] = None):
        self.margin_additions.append((symbol, amount, position_side))
        return {"code": 200, "amount": amount, "type": 1}


class FakeNotifier:
    def __init__(self) -> None:
        self.messages: List[str] = []

    def send(self, message: str) -> bool:
        self.messages.append(message)
        return True


@pytest.fixture
def client() -> FakeBinanceClient:
    return FakeBinanceClient()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()
