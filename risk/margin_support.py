"""
Margin top-up sizing for losing isolated positions. Proposes an amount; never sends it.
"""

from __future__ import annotations

from typing import Optional

from position.position import PositionSnapshot


def size_top_up(isolated_margin: float, support_ratio: float) -> float:
    return isolated_margin * support_ratio


def propose_top_up(
    position: PositionSnapshot, support_ratio: float, available_balance: float
) -> Optional[float]:
    """
    Margin to add to a position, or None when the position is not isolated, the
    proposal is not positive, or the free balance cannot cover it.
    """
    if not position.is_isolated:
        return None
    amount = size_top_up(position.isolated_margin, support_ratio)
    if amount <= 0 or available_balance < amount:
        return None
    return amount
