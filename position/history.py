"""
Locate the fill that opened a position by replaying signed trade quantities.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, Optional


@dataclass(frozen=True)
class OpeningTrade:
    trade_id: int
    time_ms: int

    @property
    def opened_at(self) -> datetime:
        return datetime.fromtimestamp(self.time_ms / 1000.0, tz=timezone.utc)


def find_opening_trade(
    trades: Iterable[Dict[str, Any]],
    side: str,
    size: float,
    position_side: str = "BOTH",
) -> Optional[OpeningTrade]:
    """
    Walk fills oldest-first, accumulating signed quantity, and return the fill at which
    the running total first reaches the current position size.

    Args:
        trades: userTrades rows (time, id, side, qty, positionSide).
        side: "LONG" or "SHORT".
        size: Signed current position amount (negative for shorts).
        position_side: Only fills on this positionSide are counted in hedge mode.
    """
    accumulated = 0.0
    for trade in sorted(trades, key=lambda t: int(t.get("time", 0))):
        if position_side in ("LONG", "SHORT") and trade.get("positionSide") != position_side:
            continue
        qty = float(trade.get("qty", 0)) * (1 if trade.get("side") == "BUY" else -1)
        previous = accumulated
        accumulated += qty
        if side == "LONG" and previous < size <= accumulated:
            return OpeningTrade(trade_id=int(trade.get("id", 0)), time_ms=int(trade.get("time", 0)))
        if side == "SHORT" and accumulated <= size < previous:
            return OpeningTrade(trade_id=int(trade.get("id", 0)), time_ms=int(trade.get("time", 0)))
    return None
