"""
Command classification and dispatch.

Each inbound message is classified exactly once into one of a closed set
of commands, then handed to the handler registered for that command.
"""

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .models import InboundMessage

if TYPE_CHECKING:
    from .handlers import CommandHandler

logger = logging.getLogger(__name__)

VENUE_PATTERN = re.compile(r"/venue(\d+)")
TIPS_PATTERN = re.compile(r"/tips(\d+)")


@dataclass(frozen=True)
class LocationQuery:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class VenueDetail:
    index: int  # 1-based


@dataclass(frozen=True)
class TipsDetail:
    index: int  # 1-based


@dataclass(frozen=True)
class Unrecognized:
    pass


Command = LocationQuery | VenueDetail | TipsDetail | Unrecognized


def classify(message: InboundMessage) -> Command:
    """
    Classify a message.

    A location always wins over text. Text is checked for ``/venueN``
    before ``/tipsN``; the index is not validated here.
    """
    if message.location is not None:
        return LocationQuery(message.location.latitude, message.location.longitude)

    if message.text:
        match = VENUE_PATTERN.search(message.text)
        if match:
            return VenueDetail(int(match.group(1)))
        match = TIPS_PATTERN.search(message.text)
        if match:
            return TipsDetail(int(match.group(1)))

    return Unrecognized()


class Router:
    """Routes classified commands to their handlers."""

    def __init__(self, handlers: dict[type, "CommandHandler"]):
        self.handlers = handlers

    async def dispatch(self, message: InboundMessage) -> Command:
        """Classify a message and run its handler. Returns the command."""
        command = classify(message)
        handler = self.handlers.get(type(command))

        if handler is None:
            logger.debug(f"Ignoring message from {message.conversation_id}: {command}")
            return command

        logger.info(f"Conversation {message.conversation_id}: {command}")
        await handler.handle(message.conversation_id, command)
        return command
