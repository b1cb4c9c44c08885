"""
Telegram Bot API client for venue-bot.

API Documentation: https://core.telegram.org/bots/api
"""

import logging
from typing import Any

import httpx

from .config import TelegramConfig
from .errors import DeliveryError

logger = logging.getLogger(__name__)


class TelegramClient:
    """Minimal Bot API client: outbound sends plus update polling."""

    def __init__(self, token: str, config: TelegramConfig | None = None):
        self.config = config or TelegramConfig()
        self.base_url = f"{self.config.api_base.rstrip('/')}/bot{token}"
        self.timeout = self.config.timeout_seconds

    async def _call(
        self,
        method: str,
        data: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """
        Call a Bot API method and return its ``result``.

        Raises DeliveryError on transport errors, HTTP errors, or ``ok: false``.
        """
        async with httpx.AsyncClient(timeout=timeout or self.timeout) as client:
            try:
                if files:
                    response = await client.post(
                        f"{self.base_url}/{method}", data=data, files=files
                    )
                else:
                    response = await client.post(f"{self.base_url}/{method}", json=data)
                response.raise_for_status()
                body = response.json()
            except httpx.HTTPError as e:
                raise DeliveryError(f"{method} failed: {e}") from e
            except ValueError as e:
                raise DeliveryError(f"{method} returned invalid JSON") from e

        if not body.get("ok"):
            raise DeliveryError(f"{method} rejected: {body.get('description', 'unknown error')}")
        return body.get("result")

    async def send_message(self, chat_id: int | str, text: str) -> Any:
        """Send a plain text message."""
        logger.debug(f"sendMessage to {chat_id}")
        return await self._call("sendMessage", {"chat_id": chat_id, "text": text})

    async def send_location(self, chat_id: int | str, latitude: float, longitude: float) -> Any:
        """Send a map pin."""
        logger.debug(f"sendLocation to {chat_id}")
        return await self._call(
            "sendLocation",
            {"chat_id": chat_id, "latitude": latitude, "longitude": longitude},
        )

    async def send_photo(
        self,
        chat_id: int | str,
        photo: bytes,
        caption: str | None = None,
    ) -> Any:
        """Upload a photo with an optional caption."""
        logger.debug(f"sendPhoto to {chat_id} ({len(photo)} bytes)")
        data: dict[str, Any] = {"chat_id": str(chat_id)}
        if caption:
            data["caption"] = caption
        return await self._call(
            "sendPhoto",
            data,
            files={"photo": ("photo.jpg", photo, "image/jpeg")},
        )

    async def get_updates(self, offset: int | None = None, timeout: int = 30) -> list[dict]:
        """Long-poll for new updates."""
        data: dict[str, Any] = {"timeout": timeout, "allowed_updates": ["message"]}
        if offset is not None:
            data["offset"] = offset
        # The HTTP timeout must outlast the long-poll window
        return await self._call("getUpdates", data, timeout=timeout + self.timeout)
