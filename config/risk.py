"""
Risk configuration values are static and MUST NOT be overridden by environment.
This ensures deterministic behavior for a production-grade bot.
"""

MAX_ACTIVE_POSITIONS = 1
POSITION_USDT = 5.0   # margin committed per position
LEVERAGE = 3
MARGIN_TYPE = "ISOLATED"

PROFIT_RATIO = 0.03   # close once unrealized profit >= 3% of isolated margin
CLOSE_REDUCE_ONLY = False

# Margin top-up stays dormant unless explicitly enabled.
MARGIN_TOP_UP_ENABLED = False
SUPPORT_RATIO = 0.10  # 10% of current isolated margin
