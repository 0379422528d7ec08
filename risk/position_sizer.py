"""
Position sizing: fixed margin per position times leverage.
"""

from __future__ import annotations

from typing import Optional


def compute_order_quantity(position_usdt: float, leverage: int, price: float) -> Optional[float]:
    """
    Contract quantity for a fixed-margin position.

    qty = (position_usdt * leverage) / price
    """
    if position_usdt <= 0 or leverage <= 0 or price <= 0:
        return None
    qty = (position_usdt * leverage) / price
    return qty if qty > 0 else None


def has_sufficient_balance(free_balance: float, position_usdt: float) -> bool:
    return free_balance >= position_usdt
