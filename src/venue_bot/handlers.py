"""
Response handlers for venue-bot.

Each handler answers one kind of command for one conversation: it reads or
writes the session store and sends zero or more Telegram messages.
"""

import logging
from abc import ABC, abstractmethod

from .errors import GatewayError, LookupFailed
from .formatting import (
    NO_SUCH_VENUE,
    NO_VENUES_FOUND,
    format_listing,
    format_reminder,
    format_venue_detail,
)
from .foursquare import FoursquareClient
from .models import Location, VenueSummary, venue_at
from .router import Command, LocationQuery, Router, TipsDetail, VenueDetail
from .store import SessionStore
from .telegram import TelegramClient

logger = logging.getLogger(__name__)


class CommandHandler(ABC):
    """Base class for command handlers."""

    name: str = "base"

    def __init__(self, sessions: SessionStore, telegram: TelegramClient):
        self.sessions = sessions
        self.telegram = telegram

    @abstractmethod
    async def handle(self, conversation_id: int | str, command: Command) -> None:
        """Answer a command for a conversation."""
        pass


class LocationSearchHandler(CommandHandler):
    """Search venues around a shared location and list them."""

    name = "location_search"

    def __init__(
        self,
        sessions: SessionStore,
        telegram: TelegramClient,
        foursquare: FoursquareClient,
    ):
        super().__init__(sessions, telegram)
        self.foursquare = foursquare

    async def handle(self, conversation_id: int | str, command: LocationQuery) -> None:
        """
        Run the search, cache the results, then send the listing.

        The session is written before the listing goes out so that any
        ``/venueN`` the user sends back resolves against the same order.
        A gateway failure is reported to the user and leaves the session as is.
        """
        location = Location(command.latitude, command.longitude)
        try:
            venues = await self.foursquare.search(location)
        except GatewayError as e:
            logger.warning(f"Search failed for {conversation_id}: {e}")
            await self.telegram.send_message(conversation_id, str(e))
            return

        self.sessions.save_results(conversation_id, venues)
        logger.info(f"Cached {len(venues)} venue(s) for {conversation_id}")

        text = format_listing(venues) if venues else NO_VENUES_FOUND
        await self.telegram.send_message(conversation_id, text)


class CachedVenueHandler(CommandHandler):
    """Shared lookup for commands that reference a cached venue."""

    async def handle(self, conversation_id: int | str, command: Command) -> None:
        try:
            venues = self.sessions.load_results(conversation_id)
            venue = venue_at(venues, command.index)
        except LookupFailed as e:
            logger.info(f"{self.name} lookup failed for {conversation_id}: {e}")
            await self.telegram.send_message(conversation_id, NO_SUCH_VENUE)
            return

        await self.respond(conversation_id, venue, command.index)
        await self.telegram.send_message(conversation_id, format_reminder(venues))

    @abstractmethod
    async def respond(self, conversation_id: int | str, venue: VenueSummary, index: int) -> None:
        """Send the command-specific messages, before the reminder list."""
        pass


class VenueDetailHandler(CachedVenueHandler):
    """Send a venue's pin and details."""

    name = "venue_detail"

    async def respond(self, conversation_id: int | str, venue: VenueSummary, index: int) -> None:
        await self.telegram.send_location(conversation_id, venue.latitude, venue.longitude)
        await self.telegram.send_message(conversation_id, format_venue_detail(venue, index))


class TipsDetailHandler(CachedVenueHandler):
    """Send a venue's tips, one message per tip, in order."""

    name = "tips_detail"

    def __init__(
        self,
        sessions: SessionStore,
        telegram: TelegramClient,
        foursquare: FoursquareClient,
    ):
        super().__init__(sessions, telegram)
        self.foursquare = foursquare

    async def respond(self, conversation_id: int | str, venue: VenueSummary, index: int) -> None:
        for tip in venue.tips:
            if tip.photo_url:
                photo = await self.foursquare.fetch_photo(tip.photo_url)
                await self.telegram.send_photo(conversation_id, photo, caption=tip.text)
            elif tip.text:
                await self.telegram.send_message(conversation_id, tip.text)


def build_router(
    sessions: SessionStore,
    telegram: TelegramClient,
    foursquare: FoursquareClient,
) -> Router:
    """Wire the handlers into a router."""
    return Router(
        {
            LocationQuery: LocationSearchHandler(sessions, telegram, foursquare),
            VenueDetail: VenueDetailHandler(sessions, telegram),
            TipsDetail: TipsDetailHandler(sessions, telegram, foursquare),
        }
    )
