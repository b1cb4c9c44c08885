"""
Data models for venue-bot.

Inbound Telegram messages and the normalized venue records cached per chat.
"""

from dataclasses import dataclass, field
from typing import Any

from .errors import IndexOutOfRange, ParseError

# Fallback labels for optional venue fields
NO_PHONE = "no phone"
NO_CATEGORY = "no category"
NO_HOURS = "no info"
NO_DISTANCE = "000"
LISTING_NO_ADDRESS = "Exact address unspecified"
DETAIL_NO_ADDRESS = "No address"


@dataclass(frozen=True)
class Location:
    """A geographic point."""

    latitude: float
    longitude: float

    @property
    def ll(self) -> str:
        """Format as the "lat,lng" pair used by the venue API."""
        return f"{self.latitude},{self.longitude}"


@dataclass(frozen=True)
class InboundMessage:
    """A single message received from a Telegram chat."""

    conversation_id: int | str
    text: str | None = None
    location: Location | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InboundMessage":
        """Build from a Telegram ``Message`` object."""
        if not isinstance(data, dict):
            raise ParseError(f"Expected a JSON object, got {type(data).__name__}")

        chat = data.get("chat") or {}
        conversation_id = chat.get("id") if isinstance(chat, dict) else None
        if conversation_id is None:
            raise ParseError("Message has no chat id")

        location = None
        loc = data.get("location")
        if loc:
            try:
                location = Location(
                    latitude=float(loc["latitude"]),
                    longitude=float(loc["longitude"]),
                )
            except (KeyError, TypeError, ValueError, OverflowError) as e:
                raise ParseError(f"Malformed location: {loc!r}") from e

        text = data.get("text")
        return cls(
            conversation_id=conversation_id,
            text=text if isinstance(text, str) else None,
            location=location,
        )


@dataclass(frozen=True)
class Tip:
    """A user tip attached to a venue."""

    text: str
    photo_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        result: dict[str, Any] = {"text": self.text}
        if self.photo_url:
            result["photo_url"] = self.photo_url
        return result


@dataclass(frozen=True)
class VenueSummary:
    """
    A venue as presented to the user.

    Optional fields carry their display fallback once mapped, except the
    address: listing and detail views use different labels for it.
    """

    name: str
    latitude: float
    longitude: float
    address: str | None = None
    phone: str = NO_PHONE
    category: str = NO_CATEGORY
    hours_status: str = NO_HOURS
    distance: str = NO_DISTANCE  # meters
    tips: tuple[Tip, ...] = field(default_factory=tuple)

    @property
    def listing_address(self) -> str:
        return self.address or LISTING_NO_ADDRESS

    @property
    def detail_address(self) -> str:
        return self.address or DETAIL_NO_ADDRESS

    @classmethod
    def from_api(cls, item: dict[str, Any]) -> "VenueSummary":
        """
        Map one Foursquare explore item (``{"venue": ..., "tips": [...]}``).

        Missing optional fields fall back to their placeholder labels.
        """
        venue = item.get("venue") or {}
        location = venue.get("location") or {}
        contact = venue.get("contact") or {}
        hours = venue.get("hours") or {}
        categories = venue.get("categories") or []

        category = NO_CATEGORY
        if categories and categories[0].get("name"):
            category = categories[0]["name"]

        distance = location.get("distance")

        return cls(
            name=venue.get("name", ""),
            latitude=location.get("lat", 0.0),
            longitude=location.get("lng", 0.0),
            address=location.get("address") or None,
            phone=contact.get("phone") or NO_PHONE,
            category=category,
            hours_status=hours.get("status") or NO_HOURS,
            distance=str(distance) if distance is not None else NO_DISTANCE,
            tips=tuple(
                Tip(text=t.get("text", ""), photo_url=t.get("photourl") or None)
                for t in item.get("tips") or []
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for the session store."""
        return {
            "name": self.name,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "address": self.address,
            "phone": self.phone,
            "category": self.category,
            "hours_status": self.hours_status,
            "distance": self.distance,
            "tips": [t.to_dict() for t in self.tips],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VenueSummary":
        """Create from dictionary."""
        return cls(
            name=data["name"],
            latitude=data["latitude"],
            longitude=data["longitude"],
            address=data.get("address"),
            phone=data.get("phone", NO_PHONE),
            category=data.get("category", NO_CATEGORY),
            hours_status=data.get("hours_status", NO_HOURS),
            distance=data.get("distance", NO_DISTANCE),
            tips=tuple(
                Tip(text=t["text"], photo_url=t.get("photo_url"))
                for t in data.get("tips", [])
            ),
        )


def venue_at(results: list[VenueSummary], index: int) -> VenueSummary:
    """Resolve a 1-based display index into the cached results."""
    if index < 1 or index > len(results):
        raise IndexOutOfRange(f"No venue {index} among {len(results)} result(s)")
    return results[index - 1]
