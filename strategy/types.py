"""
Snapshot and decision types shared by the entry and exit evaluators.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class EntryDecision(str, Enum):
    OPEN_LONG = "OPEN_LONG"
    OPEN_SHORT = "OPEN_SHORT"
    NO_ACTION = "NO_ACTION"

    @property
    def order_side(self) -> str:
        if self is EntryDecision.OPEN_LONG:
            return "BUY"
        if self is EntryDecision.OPEN_SHORT:
            return "SELL"
        raise ValueError("NO_ACTION has no order side")

    @property
    def position_side(self) -> str:
        if self is EntryDecision.OPEN_LONG:
            return "LONG"
        if self is EntryDecision.OPEN_SHORT:
            return "SHORT"
        raise ValueError("NO_ACTION has no position side")


class ExitDecision(str, Enum):
    CLOSE_POSITION = "CLOSE_POSITION"
    NO_ACTION = "NO_ACTION"


@dataclass(frozen=True)
class SignalSnapshot:
    symbol: str
    rsi: float  # 0 when the indicator had no valid output
    ema: Optional[float]
    last_price: float
    funding_rate: Optional[float] = None  # percent
    next_funding_time: Optional[datetime] = None
