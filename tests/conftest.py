"""Shared pytest fixtures for venue-bot tests."""

from unittest.mock import AsyncMock

import pytest

from venue_bot.foursquare import FoursquareClient
from venue_bot.migrations import run_migrations
from venue_bot.models import Tip, VenueSummary
from venue_bot.store import MessageQueue, SessionStore
from venue_bot.telegram import TelegramClient


@pytest.fixture
def db_path(tmp_path):
    """Create a temporary database with full schema via migrations.

    This is the canonical way to get a test database - uses the same
    migration system as production.
    """
    db_file = tmp_path / "test_venue_bot.db"
    run_migrations(db_file, verbose=False)
    return db_file


@pytest.fixture
def queue(db_path):
    return MessageQueue(db_path, poll_interval=0.01)


@pytest.fixture
def sessions(db_path):
    return SessionStore(db_path)


@pytest.fixture
def telegram():
    """A Telegram client double that records every send in order."""
    return AsyncMock(spec=TelegramClient)


@pytest.fixture
def foursquare():
    mock = AsyncMock(spec=FoursquareClient)
    mock.fetch_photo.return_value = b"\xff\xd8jpeg"
    return mock


@pytest.fixture
def venues():
    """Two cached venues: one fully populated, one with only required fields."""
    return [
        VenueSummary(
            name="Joe's Pizza",
            latitude=40.7306,
            longitude=-73.9866,
            address="123 Main St",
            phone="+1 212-555-0100",
            category="Pizza Place",
            hours_status="Open until 11:00 PM",
            distance="120",
            tips=(
                Tip(text="Get the plain slice"),
                Tip(text="Line moves fast", photo_url="https://img.example/line.jpg"),
                Tip(text="Cash only"),
            ),
        ),
        VenueSummary(name="Deli Corner", latitude=40.7012, longitude=-74.0021),
    ]
