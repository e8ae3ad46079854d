"""
Telegram notifier.

Posts alert text to a chat through the Bot API ``sendMessage`` method using
Markdown formatting. Delivery is best effort: missing credentials suppress
the alert with a warning, and transport failures raise NotificationError
for the orchestrator to log.
"""

import logging
from typing import Optional

import httpx

from ..point_figure.events import ChangeEvent
from ..sentinel.exceptions import NotificationError
from .base import Notifier

logger = logging.getLogger(__name__)

TELEGRAM_API_ROOT = "https://api.telegram.org"


class TelegramNotifier(Notifier):
    """Sends alerts to a Telegram chat."""

    name = "telegram"

    def __init__(
        self,
        bot_token: str,
        chat_id: str,
        timeout: float = 10.0,
        client: Optional[httpx.Client] = None,
        api_root: str = TELEGRAM_API_ROOT,
    ):
        self.bot_token = bot_token
        self.chat_id = chat_id
        self.api_root = api_root.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    @property
    def configured(self) -> bool:
        return bool(self.bot_token and self.chat_id)

    def notify(self, event: ChangeEvent, message: str) -> bool:
        if not self.configured:
            logger.warning(f"Telegram config missing. Alert suppressed: {message!r}")
            return False

        url = f"{self.api_root}/bot{self.bot_token}/sendMessage"
        body = {
            "chat_id": self.chat_id,
            "text": message,
            "parse_mode": "Markdown",
        }

        try:
            response = self._client.post(url, json=body)
        except httpx.HTTPError as e:
            raise NotificationError(f"Telegram request failed for {event.symbol}: {e}")

        if response.status_code != 200:
            raise NotificationError(
                f"Telegram rejected alert for {event.symbol}: HTTP {response.status_code} {response.text[:200]}"
            )

        logger.debug(f"Telegram alert sent for {event.symbol}")
        return True

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
