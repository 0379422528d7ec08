"""
Position snapshot for one open futures position, as reported by positionRisk.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class PositionSnapshot:
    symbol: str
    side: str  # "LONG" or "SHORT"
    size: float  # signed quantity, negative for shorts
    entry_price: float
    mark_price: float
    unrealized_profit: float
    isolated_margin: float  # 0 for cross-margin positions
    position_side: str = "BOTH"  # exchange positionSide: LONG / SHORT in hedge mode, BOTH otherwise

    @property
    def quantity(self) -> float:
        return abs(self.size)

    @property
    def close_side(self) -> str:
        return "SELL" if self.side == "LONG" else "BUY"

    @property
    def is_isolated(self) -> bool:
        return self.isolated_margin > 0

    @classmethod
    def from_position_risk(cls, row: Dict[str, Any]) -> Optional["PositionSnapshot"]:
        """
        Build a snapshot from a positionRisk row; flat rows (positionAmt == 0) yield None.

        isolatedWallet is the margin actually allocated to the position (unrealized
        PnL excluded).
        """
        size = float(row.get("positionAmt", 0) or 0)
        if size == 0:
            return None
        position_side = str(row.get("positionSide") or "BOTH")
        if position_side in ("LONG", "SHORT"):
            side = position_side
        else:
            side = "LONG" if size > 0 else "SHORT"
        return cls(
            symbol=str(row.get("symbol", "")),
            side=side,
            size=size,
            entry_price=float(row.get("entryPrice", 0) or 0),
            mark_price=float(row.get("markPrice", 0) or 0),
            unrealized_profit=float(row.get("unRealizedProfit", 0) or 0),
            isolated_margin=float(row.get("isolatedWallet", 0) or 0),
            position_side=position_side,
        )
