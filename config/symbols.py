"""
Symbol universe filters.
"""

QUOTE_ASSET = "USDT"
CONTRACT_TYPE = "PERPETUAL"
TRADING_STATUS = "TRADING"

EXCLUDED_SYMBOLS = ("USDCUSDT",)
EXIT_EXCLUDED_SYMBOLS = ()
