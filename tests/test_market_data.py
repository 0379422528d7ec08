import pytest

from config.bot_config import EntryConfig
from conftest import make_klines, symbol_info
from exchange.market_data import MarketDataService


def test_list_tradable_symbols_filters_universe(client):
    client.symbols = [
        symbol_info("DOGEUSDT"),
        symbol_info("USDCUSDT"),
        symbol_info("OLDUSDT", status="SETTLING"),
        symbol_info("ETHBTC", quote="BTC"),
        dict(symbol_info("BTCUSDT_240628"), contractType="CURRENT_QUARTER"),
    ]
    service = MarketDataService(client)
    assert service.list_tradable_symbols("USDT", frozenset({"USDCUSDT"})) == ["DOGEUSDT"]


def test_signal_snapshot_from_rising_closes(client):
    closes = [0.4 + i * 0.001 for i in range(101)]
    client.klines["DOGEUSDT"] = make_klines(closes)
    client.prices["DOGEUSDT"] = 0.5
    client.premium["DOGEUSDT"] = {"lastFundingRate": "0.0001", "nextFundingTime": 1700006400000}

    snapshot = MarketDataService(client).build_signal_snapshot("DOGEUSDT", EntryConfig())

    assert snapshot.rsi == pytest.approx(100.0)
    assert snapshot.last_price == 0.5
    assert snapshot.ema is not None and snapshot.ema < closes[-1]
    assert snapshot.funding_rate == pytest.approx(0.01)


def test_forming_candle_counts_for_rsi_but_not_ema(client):
    closes = [1.0] * 60 + [2.0]
    client.klines["XUSDT"] = make_klines(closes, forming=True)
    client.prices["XUSDT"] = 2.0

    snapshot = MarketDataService(client).build_signal_snapshot("XUSDT", EntryConfig())

    assert snapshot.rsi == pytest.approx(100.0)
    assert snapshot.ema == pytest.approx(1.0)
    assert snapshot.funding_rate is None


def test_flat_market_yields_zero_rsi(client):
    client.klines["FLATUSDT"] = make_klines([0.3] * 50)
    client.prices["FLATUSDT"] = 0.3
    snapshot = MarketDataService(client).build_signal_snapshot("FLATUSDT", EntryConfig())
    assert snapshot.rsi == 0.0


def test_closed_count_drops_only_forming_candle(client):
    service = MarketDataService(client)
    client.klines["A"] = make_klines([1, 2, 3])
    client.klines["B"] = make_klines([1, 2, 3], forming=True)
    assert service.closed_count(service.fetch_klines("A", "1m")) == 3
    assert service.closed_count(service.fetch_klines("B", "1m")) == 2


def test_gap_in_klines_is_rejected(client):
    rows = make_klines([1, 2, 3, 4])
    del rows[1]
    client.klines["GAPUSDT"] = rows
    with pytest.raises(ValueError):
        MarketDataService(client).fetch_klines("GAPUSDT", "1m")


def test_empty_klines_rejected(client):
    client.klines["NEWUSDT"] = []
    with pytest.raises(ValueError):
        MarketDataService(client).fetch_klines("NEWUSDT", "1m")


def test_gap_in_older_candles_is_tolerated(client):
    rows = make_klines([0.4 + i * 0.001 for i in range(150)])
    del rows[10]
    client.klines["OLDGAPUSDT"] = rows
    client.prices["OLDGAPUSDT"] = 0.5

    snapshot = MarketDataService(client).build_signal_snapshot("OLDGAPUSDT", EntryConfig())
    assert snapshot.rsi == pytest.approx(100.0)


def test_gap_in_rsi_window_is_rejected(client):
    rows = make_klines([0.4 + i * 0.001 for i in range(150)])
    del rows[-10]
    client.klines["NEWGAPUSDT"] = rows
    client.prices["NEWGAPUSDT"] = 0.5

    with pytest.raises(ValueError):
        MarketDataService(client).build_signal_snapshot("NEWGAPUSDT", EntryConfig())
