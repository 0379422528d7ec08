"""
Thin account accessor built on BinanceClient.
"""

from __future__ import annotations

from exchange.binance_client import BinanceClient
from infra.logger import get_logger


class AccountService:
    def __init__(self, client: BinanceClient, asset: str = "USDT") -> None:
        self.client = client
        self.asset = asset
        self.logger = get_logger("Account")

    def free_balance(self) -> float:
        balance = self.client.get_free_balance(self.asset)
        self.logger.info("%s balance: %.4f", self.asset, balance)
        return balance
