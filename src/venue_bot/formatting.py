"""
Text rendering for venue listings and venue details.
"""

from .models import VenueSummary

OTHER_VENUES_HEADER = "Other venues:"
NO_VENUES_FOUND = "No venues found nearby."
NO_SUCH_VENUE = "No such venue, please search again."


def format_listing_line(venue: VenueSummary, index: int) -> str:
    """Render one listing entry; ``index`` is the 1-based display position."""
    return f"/venue{index} {venue.name}, {venue.listing_address}"


def format_listing(venues: list[VenueSummary]) -> str:
    return "\n".join(format_listing_line(v, i) for i, v in enumerate(venues, start=1))


def format_reminder(venues: list[VenueSummary]) -> str:
    """The trailing list sent after venue details and tips."""
    return f"{OTHER_VENUES_HEADER}\n{format_listing(venues)}"


def format_venue_detail(venue: VenueSummary, index: int) -> str:
    return (
        f"{venue.name},\n"
        f"Phone: {venue.phone}\n"
        f"Category: {venue.category}\n"
        f"Open hours: {venue.hours_status}\n"
        f"{venue.detail_address} ({venue.distance}m)\n"
        f"More: /tips{index}"
    )
