"""
The worker loop: the single sequential consumer of the message queue.
"""

import asyncio
import contextlib
import json
import logging

from .errors import ParseError
from .models import InboundMessage
from .router import Router
from .store import MessageQueue

logger = logging.getLogger(__name__)


def parse_message(raw: str) -> InboundMessage | None:
    """
    Decode a queued payload.

    Returns None for empty payloads. Raises ParseError for invalid JSON or
    a payload that is not a chat message.
    """
    try:
        data = json.loads(raw)
    except (ValueError, RecursionError, TypeError) as e:
        raise ParseError(f"Invalid JSON payload: {e}") from e

    if not data:
        return None
    return InboundMessage.from_dict(data)


class Worker:
    """
    Drains the queue one message at a time.

    A message is fully handled, including every outbound send, before the
    next one is popped.
    """

    def __init__(self, queue: MessageQueue, router: Router):
        self.queue = queue
        self.router = router
        self._stopping = asyncio.Event()

    async def process(self, raw: str) -> bool:
        """
        Handle one payload. Returns True if it reached the router.

        Errors from handlers are logged and swallowed so the loop survives.
        """
        try:
            message = parse_message(raw)
        except ParseError as e:
            logger.debug(f"Dropping payload: {e}")
            return False

        if message is None:
            return False

        try:
            await self.router.dispatch(message)
        except Exception:
            logger.exception(f"Error handling message for {message.conversation_id}")
        return True

    async def run(self) -> None:
        """Process messages until stop() is called."""
        logger.info("Worker started")
        while not self._stopping.is_set():
            next_payload = asyncio.ensure_future(self.queue.pop_or_wait())
            stopping = asyncio.ensure_future(self._stopping.wait())
            done, _ = await asyncio.wait(
                {next_payload, stopping}, return_when=asyncio.FIRST_COMPLETED
            )

            if next_payload not in done:
                # pop_or_wait holds no popped row while it sleeps
                next_payload.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await next_payload
                break

            stopping.cancel()
            await self.process(next_payload.result())

        logger.info("Worker stopped")

    def stop(self) -> None:
        self._stopping.set()

    async def drain(self) -> int:
        """Process pending messages until the queue is empty."""
        processed = 0
        while True:
            raw = self.queue.pop()
            if raw is None:
                return processed
            await self.process(raw)
            processed += 1
