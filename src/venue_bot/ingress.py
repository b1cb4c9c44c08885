"""
Ingress: receives Telegram updates and enqueues their messages verbatim.
"""

import asyncio
import json
import logging
import sqlite3

from .errors import DeliveryError
from .store import MessageQueue
from .telegram import TelegramClient

logger = logging.getLogger(__name__)


class Ingress:
    """Long-polls getUpdates and pushes every message onto the queue."""

    def __init__(
        self,
        telegram: TelegramClient,
        queue: MessageQueue,
        long_poll_seconds: int = 30,
        retry_interval: float = 5.0,
    ):
        self.telegram = telegram
        self.queue = queue
        self.long_poll_seconds = long_poll_seconds
        self.retry_interval = retry_interval
        self.offset: int | None = None
        self._stopping = False

    def enqueue_update(self, update: dict) -> bool:
        """Push an update's message onto the queue. Returns False if it has none."""
        message = update.get("message")
        if not message:
            return False
        self.queue.push(json.dumps(message))
        return True

    async def poll_once(self) -> int:
        """Fetch one batch of updates and enqueue them. Returns messages enqueued."""
        updates = await self.telegram.get_updates(
            offset=self.offset, timeout=self.long_poll_seconds
        )
        enqueued = 0
        for update in updates:
            if self.enqueue_update(update):
                enqueued += 1
            # Acknowledge everything we've seen, including skipped update types
            self.offset = update["update_id"] + 1
        if enqueued:
            logger.info(f"Enqueued {enqueued} message(s)")
        return enqueued

    async def run(self) -> None:
        """Poll until stop() is called."""
        logger.info("Ingress started")
        while not self._stopping:
            try:
                await self.poll_once()
            except (DeliveryError, sqlite3.Error) as e:
                logger.warning(f"Polling failed, retrying in {self.retry_interval}s: {e}")
                await asyncio.sleep(self.retry_interval)
        logger.info("Ingress stopped")

    def stop(self) -> None:
        self._stopping = True
