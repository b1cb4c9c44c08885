"""Tests for the location, venue and tips handlers."""

from unittest.mock import AsyncMock, MagicMock, call, patch

import pytest

from venue_bot.config import FoursquareConfig
from venue_bot.errors import DeliveryError, GatewayError
from venue_bot.foursquare import FoursquareClient
from venue_bot.formatting import NO_SUCH_VENUE, format_reminder
from venue_bot.handlers import (
    LocationSearchHandler,
    TipsDetailHandler,
    VenueDetailHandler,
    build_router,
)
from venue_bot.models import Location, Tip, VenueSummary
from venue_bot.router import LocationQuery, TipsDetail, VenueDetail

CHAT = 42


class TestLocationSearchHandler:
    """Test LocationSearchHandler."""

    @pytest.fixture
    def handler(self, sessions, telegram, foursquare):
        return LocationSearchHandler(sessions, telegram, foursquare)

    @pytest.mark.asyncio
    async def test_lists_venues(self, handler, foursquare, telegram, sessions, venues):
        foursquare.search.return_value = venues

        await handler.handle(CHAT, LocationQuery(40.7, -74.0))

        foursquare.search.assert_awaited_once_with(Location(40.7, -74.0))
        telegram.send_message.assert_awaited_once_with(
            CHAT,
            "/venue1 Joe's Pizza, 123 Main St\n/venue2 Deli Corner, Exact address unspecified",
        )
        assert sessions.load_results(CHAT) == venues

    @pytest.mark.asyncio
    async def test_session_written_before_listing(
        self, handler, foursquare, telegram, sessions, venues
    ):
        """The cached results must already match the listing when it is sent."""
        foursquare.search.return_value = venues
        seen = []

        async def record(chat_id, text):
            seen.append([v.name for v in sessions.load_results(chat_id)])

        telegram.send_message.side_effect = record

        await handler.handle(CHAT, LocationQuery(40.7, -74.0))

        assert seen == [["Joe's Pizza", "Deli Corner"]]

    @pytest.mark.asyncio
    async def test_gateway_error_is_reported(self, handler, foursquare, telegram, sessions, venues):
        sessions.save_results(CHAT, venues)
        foursquare.search.side_effect = GatewayError("Venue search failed: timed out")

        await handler.handle(CHAT, LocationQuery(1, 2))

        telegram.send_message.assert_awaited_once_with(CHAT, "Venue search failed: timed out")
        # Previous results stay cached
        assert sessions.load_results(CHAT) == venues

    @pytest.mark.asyncio
    async def test_gateway_error_does_not_create_session(self, handler, foursquare, sessions):
        foursquare.search.side_effect = GatewayError("boom")

        await handler.handle(CHAT, LocationQuery(1, 2))

        assert sessions.read(CHAT, "answers") is None

    @pytest.mark.asyncio
    async def test_malformed_venue_entry_is_reported(self, sessions, telegram, venues):
        """A bad entry inside the venue list reaches the user as the error text."""
        sessions.save_results(CHAT, venues)
        handler = LocationSearchHandler(sessions, telegram, FoursquareClient(FoursquareConfig()))
        response = MagicMock()
        response.json.return_value = {
            "response": {"groups": [{"items": [{"venue": {"name": "A", "categories": ["Pizza"]}}]}]}
        }

        with patch("httpx.AsyncClient") as MockClient:
            mock_client = AsyncMock()
            mock_client.get.return_value = response
            mock_client.__aenter__.return_value = mock_client
            mock_client.__aexit__.return_value = None
            MockClient.return_value = mock_client

            await handler.handle(CHAT, LocationQuery(40.7, -74.0))

        telegram.send_message.assert_awaited_once_with(
            CHAT, "Venue search returned an unexpected response"
        )
        assert sessions.load_results(CHAT) == venues

    @pytest.mark.asyncio
    async def test_no_venues(self, handler, foursquare, telegram, sessions):
        foursquare.search.return_value = []

        await handler.handle(CHAT, LocationQuery(1, 2))

        telegram.send_message.assert_awaited_once_with(CHAT, "No venues found nearby.")
        assert sessions.load_results(CHAT) == []

    @pytest.mark.asyncio
    async def test_repeat_search_overwrites_with_equal_content(
        self, handler, foursquare, telegram, sessions, venues
    ):
        foursquare.search.return_value = venues

        await handler.handle(CHAT, LocationQuery(40.7, -74.0))
        first = sessions.read(CHAT, "answers")
        await handler.handle(CHAT, LocationQuery(40.7, -74.0))

        assert telegram.send_message.await_count == 2
        assert telegram.send_message.call_args_list[0] == telegram.send_message.call_args_list[1]
        assert sessions.read(CHAT, "answers") == first


class TestVenueDetailHandler:
    """Test VenueDetailHandler."""

    @pytest.fixture
    def handler(self, sessions, telegram):
        return VenueDetailHandler(sessions, telegram)

    @pytest.mark.asyncio
    async def test_sends_pin_detail_then_reminder(self, handler, sessions, telegram, venues):
        sessions.save_results(CHAT, venues)

        await handler.handle(CHAT, VenueDetail(1))

        assert telegram.mock_calls == [
            call.send_location(CHAT, 40.7306, -73.9866),
            call.send_message(
                CHAT,
                "Joe's Pizza,\n"
                "Phone: +1 212-555-0100\n"
                "Category: Pizza Place\n"
                "Open hours: Open until 11:00 PM\n"
                "123 Main St (120m)\n"
                "More: /tips1",
            ),
            call.send_message(CHAT, format_reminder(venues)),
        ]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("index", [1, 2])
    async def test_index_matches_listing_position(self, handler, sessions, telegram, venues, index):
        sessions.save_results(CHAT, venues)

        await handler.handle(CHAT, VenueDetail(index))

        venue = venues[index - 1]
        telegram.send_location.assert_awaited_once_with(CHAT, venue.latitude, venue.longitude)
        detail = telegram.send_message.call_args_list[0].args[1]
        assert detail.startswith(f"{venue.name},\n")
        assert detail.endswith(f"More: /tips{index}")

    @pytest.mark.asyncio
    async def test_out_of_range_replies_with_error(self, handler, sessions, telegram, venues):
        sessions.save_results(CHAT, venues[:1])

        await handler.handle(CHAT, VenueDetail(2))

        assert telegram.mock_calls == [call.send_message(CHAT, NO_SUCH_VENUE)]

    @pytest.mark.asyncio
    async def test_index_zero_replies_with_error(self, handler, sessions, telegram, venues):
        sessions.save_results(CHAT, venues)

        await handler.handle(CHAT, VenueDetail(0))

        assert telegram.mock_calls == [call.send_message(CHAT, NO_SUCH_VENUE)]

    @pytest.mark.asyncio
    async def test_no_session_replies_with_error(self, handler, telegram):
        await handler.handle(CHAT, VenueDetail(1))

        assert telegram.mock_calls == [call.send_message(CHAT, NO_SUCH_VENUE)]

    @pytest.mark.asyncio
    async def test_delivery_error_propagates(self, handler, sessions, telegram, venues):
        sessions.save_results(CHAT, venues)
        telegram.send_location.side_effect = DeliveryError("sendLocation failed")

        with pytest.raises(DeliveryError):
            await handler.handle(CHAT, VenueDetail(1))

    @pytest.mark.asyncio
    async def test_does_not_modify_session(self, handler, sessions, venues):
        sessions.save_results(CHAT, venues)
        before = sessions.read(CHAT, "answers")

        await handler.handle(CHAT, VenueDetail(2))

        assert sessions.read(CHAT, "answers") == before


class TestTipsDetailHandler:
    """Test TipsDetailHandler."""

    @pytest.fixture
    def handler(self, sessions, telegram, foursquare):
        return TipsDetailHandler(sessions, telegram, foursquare)

    @pytest.mark.asyncio
    async def test_tips_in_order_photo_iff_url(
        self, handler, sessions, telegram, foursquare, venues
    ):
        sessions.save_results(CHAT, venues)

        await handler.handle(CHAT, TipsDetail(1))

        foursquare.fetch_photo.assert_awaited_once_with("https://img.example/line.jpg")
        assert telegram.mock_calls == [
            call.send_message(CHAT, "Get the plain slice"),
            call.send_photo(CHAT, b"\xff\xd8jpeg", caption="Line moves fast"),
            call.send_message(CHAT, "Cash only"),
            call.send_message(CHAT, format_reminder(venues)),
        ]

    @pytest.mark.asyncio
    async def test_venue_without_tips_sends_only_reminder(
        self, handler, sessions, telegram, venues
    ):
        sessions.save_results(CHAT, venues)

        await handler.handle(CHAT, TipsDetail(2))

        assert telegram.mock_calls == [call.send_message(CHAT, format_reminder(venues))]

    @pytest.mark.asyncio
    async def test_empty_tip_without_photo_is_skipped(
        self, handler, sessions, telegram, foursquare
    ):
        cached = [
            VenueSummary(
                name="Quiet Cafe",
                latitude=40.7,
                longitude=-74.0,
                tips=(Tip(text=""), Tip(text="Cash only")),
            )
        ]
        sessions.save_results(CHAT, cached)

        await handler.handle(CHAT, TipsDetail(1))

        foursquare.fetch_photo.assert_not_awaited()
        assert telegram.mock_calls == [
            call.send_message(CHAT, "Cash only"),
            call.send_message(CHAT, format_reminder(cached)),
        ]

    @pytest.mark.asyncio
    async def test_out_of_range_replies_with_error(self, handler, sessions, telegram, venues):
        sessions.save_results(CHAT, venues)

        await handler.handle(CHAT, TipsDetail(5))

        assert telegram.mock_calls == [call.send_message(CHAT, NO_SUCH_VENUE)]

    @pytest.mark.asyncio
    async def test_photo_failure_aborts_command(
        self, handler, sessions, telegram, foursquare, venues
    ):
        sessions.save_results(CHAT, venues)
        foursquare.fetch_photo.side_effect = GatewayError("Photo download failed")

        with pytest.raises(GatewayError):
            await handler.handle(CHAT, TipsDetail(1))

        # Tips before the failing one were already delivered
        assert telegram.mock_calls == [call.send_message(CHAT, "Get the plain slice")]


class TestBuildRouter:
    """Test handler wiring."""

    def test_registers_every_command(self, sessions, telegram, foursquare):
        router = build_router(sessions, telegram, foursquare)

        assert isinstance(router.handlers[LocationQuery], LocationSearchHandler)
        assert isinstance(router.handlers[VenueDetail], VenueDetailHandler)
        assert isinstance(router.handlers[TipsDetail], TipsDetailHandler)
