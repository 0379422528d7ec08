"""
Simple structured logger for console and file output.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from typing import Optional

from config import settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DEFAULT_LEVEL = getattr(logging, settings.LOG_LEVEL, logging.INFO)

_process_name = "bot"


def set_process_name(name: str) -> None:
    """Prefix used for log file names; call before the first get_logger()."""
    global _process_name
    _process_name = name


def get_logger(name: Optional[str] = None, level: int = DEFAULT_LEVEL) -> logging.Logger:
    """
    Return a configured logger instance.

    Ensures handlers are attached only once to avoid duplicate logs.
    """
    logger = logging.getLogger(name if name else "rsi_bot")
    if not logger.handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(console_handler)

        # File handler (daily folder: <LOG_DIR>/YYYY-MM-DD/<process>-HHMMSS-<pid>.log)
        if settings.LOG_DIR:
            now = datetime.utcnow()
            log_dir = os.path.join(settings.LOG_DIR, now.strftime("%Y-%m-%d"))
            os.makedirs(log_dir, exist_ok=True)
            file_path = os.path.join(log_dir, f"{_process_name}-{now.strftime('%H%M%S')}-{os.getpid()}.log")
            file_handler = logging.FileHandler(file_path, encoding="utf-8")
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            logger.addHandler(file_handler)

        logger.setLevel(level)
        logger.propagate = False
    return logger
