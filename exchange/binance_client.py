"""
Binance USDT-M Futures REST client (testnet-ready).
"""

from __future__ import annotations

import hashlib
import hmac
import time
from typing import Any, Dict, List, Optional, Type
from urllib.parse import urlencode

import requests

from config import settings
from config.bot_config import resolve_credentials
from infra.logger import get_logger
from infra.retry import retry

MAINNET_BASE = "https://fapi.binance.com"
TESTNET_BASE = "https://testnet.binancefuture.com"

NO_NEED_TO_CHANGE_MARGIN_TYPE = -4046


class BinanceAPIError(Exception):
    """Raised when the Binance API returns an error response."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[int] = None,
        msg: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.msg = msg


class TransientFetchError(BinanceAPIError):
    """Market data, balance or position fetch failed; skip the item and move on."""


class OrderRejectedError(BinanceAPIError):
    """Order placement failed; never retried."""


class BinanceClient:
    """Thin REST wrapper for Binance USDT-M Futures with testnet support."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
        use_testnet: Optional[bool] = None,
        timeout: Optional[float] = None,
        session: Optional[Any] = None,
    ) -> None:
        self.use_testnet = use_testnet if use_testnet is not None else settings.TESTNET
        self.logger = get_logger("BinanceClient")
        env_key, env_secret = resolve_credentials(self.use_testnet)
        self.api_key = api_key or env_key
        self.api_secret = api_secret or env_secret
        self.base_url = TESTNET_BASE if self.use_testnet else MAINNET_BASE
        self.timeout = timeout if timeout is not None else settings.REQUEST_TIMEOUT
        self.session = session or requests.Session()
        if self.api_key:
            self.session.headers.update({"X-MBX-APIKEY": self.api_key})
        self._hedge_mode: Optional[bool] = None
        self.logger.info("Binance client initialized (testnet=%s)", self.use_testnet)

    # Market data

    def get_exchange_info(self) -> Dict[str, Any]:
        info = self._public_get("/fapi/v1/exchangeInfo")
        if not isinstance(info, dict):
            raise TransientFetchError("Invalid exchangeInfo response")
        return info

    def get_klines(self, symbol: str, interval: str, limit: int = 500) -> Any:
        params = {"symbol": symbol, "interval": interval, "limit": limit}
        return self._public_get("/fapi/v1/klines", params=params)

    def get_ticker_price(self, symbol: str) -> float:
        ticker = self._public_get("/fapi/v1/ticker/price", params={"symbol": symbol})
        price = float(ticker.get("price", 0.0)) if isinstance(ticker, dict) else 0.0
        if price <= 0:
            raise TransientFetchError(f"Price not found in ticker data for {symbol}")
        return price

    def get_premium_index(self, symbol: str) -> Dict[str, Any]:
        """
        Mark price, last funding rate and next funding time for a symbol.
        """
        data = self._public_get("/fapi/v1/premiumIndex", params={"symbol": symbol})
        if not isinstance(data, dict):
            raise TransientFetchError(f"Invalid premiumIndex response for {symbol}")
        return data

    # Account

    def get_balance(self) -> List[Dict[str, Any]]:
        balances = self._signed_get("/fapi/v2/balance")
        return balances if isinstance(balances, list) else []

    def get_free_balance(self, asset: str = "USDT") -> float:
        """
        Return the available (free) futures wallet balance for the asset.
        """
        for bal in self.get_balance():
            if bal.get("asset") == asset:
                return float(bal.get("availableBalance", 0.0))
        return 0.0

    def get_position_risk(self, symbol: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Position rows for every symbol (or one), including flat ones with positionAmt 0.
        """
        params = {"symbol": symbol} if symbol else None
        rows = self._signed_get("/fapi/v2/positionRisk", params=params)
        if not isinstance(rows, list):
            raise TransientFetchError("Invalid positionRisk response")
        return rows

    def is_hedge_mode(self) -> bool:
        """
        True when the account trades in dual-side (hedge) position mode. Cached per client.
        """
        if self._hedge_mode is None:
            data = self._signed_get("/fapi/v1/positionSide/dual")
            self._hedge_mode = bool(data.get("dualSidePosition", False)) if isinstance(data, dict) else False
            self.logger.info("Hedge mode: %s", self._hedge_mode)
        return self._hedge_mode

    def get_user_trades_history(
        self,
        symbol: str,
        start_time_ms: Optional[int] = None,
        limit: int = 1000,
    ) -> list[dict]:
        """
        Fetch user trades (fills) for a symbol, paging forward via fromId.
        """
        trades: list[dict] = []
        params: Dict[str, Any] = {"symbol": symbol, "limit": limit}
        if start_time_ms:
            params["startTime"] = start_time_ms

        while True:
            batch = self._signed_get("/fapi/v1/userTrades", params=params)
            if not isinstance(batch, list) or not batch:
                break
            trades.extend(batch)
            if len(batch) < limit:
                break
            last_id = batch[-1].get("id")
            if last_id is None:
                break
            params.pop("startTime", None)
            params["fromId"] = int(last_id) + 1

        return trades

    # Trading

    def set_leverage(self, symbol: str, leverage: int) -> Dict[str, Any]:
        params = {"symbol": symbol, "leverage": int(leverage)}
        return self._signed_post("/fapi/v1/leverage", params=params)

    def set_margin_type(self, symbol: str, margin_type: str) -> bool:
        """
        Switch margin type (ISOLATED / CROSSED). Returns False if it was already set.
        """
        params = {"symbol": symbol, "marginType": margin_type.upper()}
        try:
            self._signed_post("/fapi/v1/marginType", params=params)
        except BinanceAPIError as exc:
            if exc.code == NO_NEED_TO_CHANGE_MARGIN_TYPE:
                return False
            raise
        return True

    def place_market_order(
        self,
        symbol: str,
        side: str,
        quantity: float,
        position_side: Optional[str] = None,
        reduce_only: bool = False,
    ) -> Dict[str, Any]:
        """
        Place a market order. position_side is only sent in hedge mode by callers.
        """
        params: Dict[str, Any] = {"symbol": symbol, "side": side, "type": "MARKET", "quantity": quantity}
        if position_side:
            params["positionSide"] = position_side
        if reduce_only:
            params["reduceOnly"] = "true"
        return self._signed_post("/fapi/v1/order", params=params, error_cls=OrderRejectedError, retryable=False)

    def add_isolated_margin(
        self, symbol: str, amount: float, position_side: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Add margin to an isolated position (type=1).
        """
        params: Dict[str, Any] = {"symbol": symbol, "amount": f"{amount:.2f}", "type": 1}
        if position_side:
            params["positionSide"] = position_side
        return self._signed_post(
            "/fapi/v1/positionMargin", params=params, error_cls=OrderRejectedError, retryable=False
        )

    # Transport

    def _public_get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._request("GET", path, params, signed=False, error_cls=TransientFetchError)

    def _signed_get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._request("GET", path, params, signed=True, error_cls=TransientFetchError)

    def _signed_post(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        error_cls: Type[BinanceAPIError] = BinanceAPIError,
        retryable: bool = True,
    ) -> Any:
        return self._request("POST", path, params, signed=True, error_cls=error_cls, retryable=retryable)

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]],
        signed: bool,
        error_cls: Type[BinanceAPIError],
        retryable: bool = True,
    ) -> Any:
        if signed:
            self._ensure_credentials()
        send = self._send_with_retry if retryable else self._send
        try:
            response = send(method, path, params or {}, signed)
        except requests.RequestException as exc:
            self.logger.error("%s %s failed: %s", method, path, exc)
            raise error_cls(f"{method} {path} failed: {exc}") from exc
        return self._handle_response(response, error_cls)

    def _send(self, method: str, path: str, params: Dict[str, Any], signed: bool) -> Any:
        # Signing happens per attempt so every retry carries a fresh timestamp.
        payload = self._sign_params(params) if signed else params
        url = f"{self.base_url}{path}"
        return self.session.request(method, url, params=payload, timeout=self.timeout)

    @retry(max_retries=3, backoff_factor=0.5, retry_on=(requests.RequestException,))
    def _send_with_retry(self, method: str, path: str, params: Dict[str, Any], signed: bool) -> Any:
        return self._send(method, path, params, signed)

    def _handle_response(self, response: Any, error_cls: Type[BinanceAPIError]) -> Any:
        if response.status_code >= 400:
            try:
                payload = response.json()
            except ValueError:
                payload = response.text
            code = payload.get("code") if isinstance(payload, dict) else None
            msg = payload.get("msg") if isinstance(payload, dict) else None
            if code == NO_NEED_TO_CHANGE_MARGIN_TYPE:
                self.logger.info("Binance: %s", msg)
            else:
                self.logger.error("Binance API error (%s): %s", response.status_code, payload)
            raise error_cls(
                f"API error {response.status_code}: {payload}",
                status_code=response.status_code,
                code=code,
                msg=msg,
            )
        try:
            return response.json()
        except ValueError as exc:
            self.logger.error("Failed to decode JSON response from Binance")
            raise error_cls("Invalid JSON response", status_code=response.status_code) from exc

    def _sign_params(self, params: Dict[str, Any]) -> Dict[str, Any]:
        params = dict(params)
        params["timestamp"] = int(time.time() * 1000)
        # Sent in the same order it was signed in.
        params = dict(sorted(params.items()))
        query = urlencode(params)
        signature = hmac.new(
            self.api_secret.encode("utf-8"),
            query.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()
        params["signature"] = signature
        return params

    def _ensure_credentials(self) -> None:
        if not self.api_key or not self.api_secret:
            self.logger.error("API credentials are not set")
            raise BinanceAPIError("Missing API credentials")
