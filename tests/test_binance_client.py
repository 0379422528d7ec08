import hashlib
import hmac
from urllib.parse import urlencode

import pytest
import requests

from exchange.binance_client import (
    BinanceAPIError,
    BinanceClient,
    OrderRejectedError,
    TESTNET_BASE,
    TransientFetchError,
)


class _Response:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload if payload is not None else {}
        self.text = str(payload)

    def json(self):
        return self._payload


class _Session:
    def __init__(self, *outcomes):
        self.headers = {}
        self.outcomes = list(outcomes)
        self.calls = []

    def request(self, method, url, params=None, timeout=None):
        self.calls.append((method, url, dict(params or {})))
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def _client(*outcomes):
    return BinanceClient(api_key="key", api_secret="secret", use_testnet=True, session=_Session(*outcomes))


def test_signed_request_carries_valid_signature():
    client = _client(_Response(payload=[{"asset": "USDT", "availableBalance": "12.5"}]))
    assert client.get_free_balance("USDT") == 12.5

    method, url, params = client.session.calls[0]
    assert (method, url) == ("GET", f"{TESTNET_BASE}/fapi/v2/balance")
    signature = params.pop("signature")
    expected = hmac.new(b"secret", urlencode(params).encode(), hashlib.sha256).hexdigest()
    assert signature == expected
    assert client.session.headers["X-MBX-APIKEY"] == "key"


def test_order_rejection_is_not_retried():
    client = _client(_Response(400, {"code": -2019, "msg": "Margin is insufficient."}))
    with pytest.raises(OrderRejectedError) as info:
        client.place_market_order("DOGEUSDT", "SELL", 30, position_side="SHORT")
    assert info.value.code == -2019
    assert len(client.session.calls) == 1
    _, _, params = client.session.calls[0]
    assert params["positionSide"] == "SHORT"
    assert "reduceOnly" not in params


def test_order_network_error_is_not_retried():
    client = _client(requests.ConnectionError("reset"))
    with pytest.raises(OrderRejectedError):
        client.place_market_order("DOGEUSDT", "SELL", 30)
    assert len(client.session.calls) == 1


def test_fetch_network_errors_are_retried_then_reported(monkeypatch):
    monkeypatch.setattr("infra.retry.time.sleep", lambda _: None)
    client = _client(requests.ConnectionError("down"))
    with pytest.raises(TransientFetchError):
        client.get_ticker_price("DOGEUSDT")
    assert len(client.session.calls) == 4


def test_fetch_recovers_after_transient_error(monkeypatch):
    monkeypatch.setattr("infra.retry.time.sleep", lambda _: None)
    client = _client(requests.Timeout("slow"), _Response(payload={"symbol": "DOGEUSDT", "price": "0.123"}))
    assert client.get_ticker_price("DOGEUSDT") == pytest.approx(0.123)


def test_margin_type_already_set_is_not_an_error():
    client = _client(_Response(400, {"code": -4046, "msg": "No need to change margin type."}))
    assert client.set_margin_type("DOGEUSDT", "isolated") is False
    assert client.session.calls[0][2]["marginType"] == "ISOLATED"


def test_margin_type_other_errors_propagate():
    client = _client(_Response(400, {"code": -1121, "msg": "Invalid symbol."}))
    with pytest.raises(BinanceAPIError):
        client.set_margin_type("NOPE", "ISOLATED")


def test_hedge_mode_is_cached():
    client = _client(_Response(payload={"dualSidePosition": True}))
    assert client.is_hedge_mode() is True
    assert client.is_hedge_mode() is True
    assert len(client.session.calls) == 1


def test_signed_call_without_credentials_fails(monkeypatch):
    for name in ("BINANCE_TEST_API_KEY", "BINANCE_API_KEY", "API_KEY", "BINANCE_TEST_API_SECRET",
                 "BINANCE_API_SECRET", "API_SECRET"):
        monkeypatch.delenv(name, raising=False)
    client = BinanceClient(use_testnet=True, session=_Session(_Response()))
    with pytest.raises(BinanceAPIError):
        client.get_position_risk()


def test_empty_ticker_price_is_a_fetch_error():
    client = _client(_Response(payload={"symbol": "DOGEUSDT"}))
    with pytest.raises(TransientFetchError):
        client.get_ticker_price("DOGEUSDT")
