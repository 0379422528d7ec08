"""
Telegram notifier. Best effort: delivery failures are logged, never raised.
"""

from __future__ import annotations

from typing import Any, Optional

import requests

from config import settings
from infra.logger import get_logger

MESSAGE_PREFIX = ""
MESSAGE_SUFFIX = "\n- Sent from Binance"


class NotificationError(Exception):
    """Raised internally when Telegram rejects or drops a message."""


def format_message(message: str) -> str:
    """Commas become line breaks; every message carries the source suffix."""
    return f"{MESSAGE_PREFIX}{message.replace(',', chr(10))}{MESSAGE_SUFFIX}"


class TelegramNotifier:
    """Send plain-text messages to one Telegram chat via the Bot API."""

    def __init__(
        self,
        token: Optional[str] = None,
        chat_id: Optional[str] = None,
        session: Optional[Any] = None,
        timeout: float = 10.0,
    ) -> None:
        self.token = token if token is not None else settings.TELEGRAM_TOKEN
        self.chat_id = chat_id if chat_id is not None else settings.TELEGRAM_CHAT_ID
        self.session = session or requests.Session()
        self.timeout = timeout
        self.logger = get_logger("Notifier")
        if not self.enabled:
            self.logger.warning("Telegram token or chat id missing; notifications are log-only")

    @property
    def enabled(self) -> bool:
        return bool(self.token and self.chat_id)

    def send(self, message: str) -> bool:
        """Deliver a message. Returns True on success; never raises."""
        text = format_message(message)
        if not self.enabled:
            self.logger.info("[NOTIFY] %s", text)
            return False
        try:
            self._post(text)
        except (NotificationError, requests.RequestException) as exc:
            self.logger.error("Failed to send Telegram message: %s", exc)
            return False
        self.logger.info("Telegram message sent: %s", text)
        return True

    def _post(self, text: str) -> None:
        url = f"{settings.TELEGRAM_API_BASE}/bot{self.token}/sendMessage"
        response = self.session.post(url, json={"chat_id": self.chat_id, "text": text}, timeout=self.timeout)
        if response.status_code >= 400:
            raise NotificationError(f"Telegram API error {response.status_code}: {response.text}")
