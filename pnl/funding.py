"""
Funding rate lookup and funding-direction classification.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from exchange.binance_client import BinanceAPIError, BinanceClient
from infra.logger import get_logger

FUNDING_TIME_FORMAT = "%H:%M:%S %d/%m/%Y"


def format_funding_time(value: Optional[datetime]) -> str:
    return value.strftime(FUNDING_TIME_FORMAT) if value is not None else "N/A"


def is_funding_favorable(position_side: str, funding_rate: float) -> bool:
    """
    True when the position receives funding: longs when the rate is negative,
    shorts when it is positive. Informational only.
    """
    return (position_side == "LONG" and funding_rate < 0) or (position_side == "SHORT" and funding_rate > 0)


@dataclass(frozen=True)
class FundingInfo:
    symbol: str
    funding_rate: float  # percent
    next_funding_time: Optional[datetime]

    @property
    def next_funding_label(self) -> str:
        return format_funding_time(self.next_funding_time)

    @classmethod
    def from_premium_index(cls, symbol: str, data: Dict[str, Any]) -> "FundingInfo":
        rate = float(data.get("lastFundingRate") or 0.0) * 100
        next_ms = int(data.get("nextFundingTime") or 0)
        next_time = datetime.fromtimestamp(next_ms / 1000.0, tz=timezone.utc) if next_ms > 0 else None
        return cls(symbol=symbol, funding_rate=rate, next_funding_time=next_time)


class FundingService:
    """Fetch funding info; failures are logged and yield None."""

    def __init__(self, client: BinanceClient) -> None:
        self.client = client
        self.logger = get_logger("FundingService")

    def fetch(self, symbol: str) -> Optional[FundingInfo]:
        try:
            data = self.client.get_premium_index(symbol)
        except BinanceAPIError as exc:
            self.logger.error("Failed to fetch funding rate for %s: %s", symbol, exc)
            return None
        return FundingInfo.from_premium_index(symbol, data)
