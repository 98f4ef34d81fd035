"""
Telegram Service Client.

Messages go to the moderators' chat through a relay microservice.
"""

from functools import lru_cache
from typing import Any

from newsdesk.backend.clients.base import ServiceClient
from newsdesk.backend.core.config import get_app_config, get_settings
from newsdesk.backend.core.exceptions import ValidationError
from newsdesk.backend.core.security import seal_payload


class TelegramClient(ServiceClient):
    """Client for POST /tg/send."""

    service_name = "telegram"
    error_prefix = "Telegram sending failed"

    async def send_message(self, text: str) -> dict[str, Any]:
        """
        Relay a text message.

        Raises:
            ValidationError: If the text is empty
            ExternalServiceError: If the relay rejects or cannot be reached
        """
        if not text or not text.strip():
            raise ValidationError("Message text is required")
        envelope = seal_payload({"messageToSend": text})
        return await self._send("POST", "/tg/send", {"data": envelope})


@lru_cache
def get_telegram_client() -> TelegramClient:
    return TelegramClient.from_config(
        get_app_config().services.telegram,
        get_settings().telegram_service_api_key,
    )
