import logging
from typing import Any

import httpx

from domain.exceptions.currency import NotificationDeliveryError, TelegramApiError

logger = logging.getLogger(__name__)


class TelegramBotClient:
    """Thin async client for the Telegram Bot HTTP API."""

    BASE_URL = "https://api.telegram.org"

    def __init__(self, token: str, client: httpx.AsyncClient | None = None, timeout: int = 10):
        self.token = token
        self.timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    async def _call(self, method: str, payload: dict, timeout: float | None = None) -> Any:
        url = f"{self.BASE_URL}/bot{self.token}/{method}"
        try:
            response = await self._client.post(url, json=payload, timeout=timeout or self.timeout)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise TelegramApiError(
                f"Telegram HTTP error {e.response.status_code} on {method}: {e.response.text[:200]}"
            ) from e
        except httpx.RequestError as e:
            raise TelegramApiError(f"Telegram request {method} failed: {e.__class__.__name__}") from e
        except ValueError as e:
            raise TelegramApiError(f"Telegram response parsing error on {method}: {str(e)}") from e

        if not data.get("ok", False):
            raise TelegramApiError(f"Telegram API error on {method}: {data.get('description', 'Unknown error')}")
        return data.get("result")

    async def send_message(self, chat_id: int, text: str) -> None:
        try:
            await self._call("sendMessage", {"chat_id": chat_id, "text": text})
        except TelegramApiError as e:
            raise NotificationDeliveryError(chat_id, str(e)) from e
        logger.info(f"Successfully sent message to chat ID: {chat_id}")

    async def get_updates(self, offset: int | None = None, timeout: int = 30) -> list[dict]:
        """Long-poll for new updates; the HTTP timeout outlives the poll timeout."""
        payload: dict[str, Any] = {"timeout": timeout, "allowed_updates": ["message"]}
        if offset is not None:
            payload["offset"] = offset
        return await self._call("getUpdates", payload, timeout=timeout + self.timeout) or []
