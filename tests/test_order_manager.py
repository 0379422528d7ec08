import pytest

from conftest import position_row, symbol_info
from exchange.binance_client import OrderRejectedError
from exchange.order_manager import OrderManager
from position.position import PositionSnapshot


def test_open_rounds_down_to_lot_step(client):
    client.symbols = [symbol_info("DOGEUSDT", step="1")]
    manager = OrderManager(client)
    manager.open_position("DOGEUSDT", "SHORT", 30.9)
    order = client.orders[-1]
    assert order["side"] == "SELL"
    assert order["origQty"] == "30.0"
    assert order["positionSide"] is None


def test_market_lot_size_overrides_finer_lot_step(client):
    info = symbol_info("XUSDT", step="0.001")
    info["filters"].append({"filterType": "MARKET_LOT_SIZE", "stepSize": "0.1"})
    client.symbols = [info]
    assert OrderManager(client).round_quantity("XUSDT", 1.2345) == pytest.approx(1.2)


def test_open_sends_position_side_in_hedge_mode(client):
    client.symbols = [symbol_info("DOGEUSDT")]
    client.hedge_mode = True
    OrderManager(client).open_position("DOGEUSDT", "LONG", 12)
    assert client.orders[-1]["side"] == "BUY"
    assert client.orders[-1]["positionSide"] == "LONG"


def test_open_rejects_quantity_below_step(client):
    client.symbols = [symbol_info("BTCUSDT", step="0.001")]
    with pytest.raises(OrderRejectedError):
        OrderManager(client).open_position("BTCUSDT", "LONG", 0.0004)
    assert client.orders == []


def test_unknown_symbol_is_rejected(client):
    with pytest.raises(OrderRejectedError):
        OrderManager(client).round_quantity("NOPEUSDT", 1)


def test_close_uses_opposite_side_and_full_size(client):
    position = PositionSnapshot.from_position_risk(position_row("DOGEUSDT", -30))
    OrderManager(client).close_position(position, reduce_only=True)
    order = client.orders[-1]
    assert order["side"] == "BUY"
    assert order["origQty"] == "30.0"
    assert order["reduceOnly"] is True


def test_close_never_sends_reduce_only_with_position_side(client):
    client.hedge_mode = True
    position = PositionSnapshot.from_position_risk(position_row("DOGEUSDT", 30, position_side="LONG"))
    OrderManager(client).close_position(position, reduce_only=True)
    order = client.orders[-1]
    assert order["side"] == "SELL"
    assert order["positionSide"] == "LONG"
    assert order["reduceOnly"] is False


def test_add_margin_requires_isolated_position(client):
    position = PositionSnapshot.from_position_risk(position_row("DOGEUSDT", -30, isolated_wallet=0))
    with pytest.raises(OrderRejectedError):
        OrderManager(client).add_margin(position, 1.0)
