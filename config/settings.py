"""
Global settings configurable via environment variables.
"""

import os

TESTNET = str(os.getenv("BINANCE_TESTNET", "true")).lower() == "true"
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "10"))
SAFETY_MARGIN_MS = int(os.getenv("SAFETY_MARGIN_MS", "1500"))
KLINES_LIMIT = int(os.getenv("KLINES_LIMIT", "500"))

LOG_DIR = os.getenv("LOG_DIR", "logs")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

TELEGRAM_TOKEN = os.getenv("TELEGRAM_TOKEN", "")
TELEGRAM_CHAT_ID = os.getenv("TELEGRAM_CHAT_ID", "")
TELEGRAM_API_BASE = "https://api.telegram.org"
