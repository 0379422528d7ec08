"""
RSI extreme entry parameters (static).
"""

TIMEFRAME = "1m"
RSI_PERIOD = 5
RSI_LOOKBACK = 100  # candles fed to the RSI, forming candle included
EMA_PERIOD = 20

SELL_RSI_THRESHOLD = 80.0
BUY_RSI_THRESHOLD = 10.0
PRICE_CEILING = 1.0

SHORT_ENABLED = True
LONG_ENABLED = False

# Evaluate and log signals without sending orders.
TESTING_MODE = False

LOG_POSITION_OPEN_TIME = False
