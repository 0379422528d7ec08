"""
Minimal indicator implementations for strategy use.
"""

from __future__ import annotations

from typing import Optional, Sequence


def ema(values: Sequence[float], period: int) -> Optional[float]:
    """
    Compute the latest Exponential Moving Average value.

    Args:
        values: Price series (oldest -> newest).
        period: EMA period.
    Returns:
        Latest EMA value, or None if not enough data.
    """
    if period <= 0 or len(values) < period:
        return None

    k = 2 / (period + 1)
    ema_value = sum(values[:period]) / period  # start with SMA seed
    for price in values[period:]:
        ema_value = price * k + ema_value * (1 - k)
    return ema_value


def rsi(closes: Sequence[float], period: int) -> Optional[float]:
    """
    Compute the latest Wilder RSI value (0-100).

    The averages are seeded with the simple mean of the first `period` changes and
    smoothed with alpha = 1/period afterwards.

    Returns:
        Latest RSI, or None if there are fewer than period + 1 closes or the
        price never moved (0/0).
    """
    if period <= 0 or len(closes) < period + 1:
        return None

    avg_up = 0.0
    avg_down = 0.0
    for i in range(1, period + 1):
        change = closes[i] - closes[i - 1]
        avg_up += max(change, 0.0)
        avg_down += max(-change, 0.0)
    avg_up /= period
    avg_down /= period

    for i in range(period + 1, len(closes)):
        change = closes[i] - closes[i - 1]
        avg_up = (avg_up * (period - 1) + max(change, 0.0)) / period
        avg_down = (avg_down * (period - 1) + max(-change, 0.0)) / period

    if avg_up + avg_down <= 0:
        return None
    return 100.0 * avg_up / (avg_up + avg_down)
