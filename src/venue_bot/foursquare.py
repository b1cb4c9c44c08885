"""
Foursquare API client for venue-bot.

Wraps the v2 ``venues/explore`` endpoint and normalizes its payload into
VenueSummary records.

API Documentation: https://developer.foursquare.com/docs/api-reference/venues/explore
"""

import logging
from typing import Any

import httpx

from .config import FoursquareConfig
from .errors import GatewayError
from .models import Location, VenueSummary

logger = logging.getLogger(__name__)


class FoursquareClient:
    """
    Client for the Foursquare venue API.

    Provides venue search around a point and photo download for tips.
    """

    def __init__(self, config: FoursquareConfig):
        """
        Initialize the Foursquare client.

        Args:
            config: API base, credentials, pinned version and timeouts
        """
        self.config = config
        self.timeout = config.timeout_seconds

    def build_params(
        self,
        location: Location,
        section: str | None = None,
        limit: int | None = None,
    ) -> dict[str, Any]:
        """Merge query options with credential parameters."""
        params: dict[str, Any] = {
            "limit": limit if limit is not None else self.config.limit,
            "ll": location.ll,
            "section": section or self.config.section,
            "v": self.config.version,
        }
        params.update(self.config.get_credentials())
        return params

    async def search(
        self,
        location: Location,
        section: str | None = None,
        limit: int | None = None,
    ) -> list[VenueSummary]:
        """
        Search for venues near a location.

        Args:
            location: Point to search around
            section: Explore section (defaults to config, "food")
            limit: Maximum venues to return (defaults to config, 3)

        Returns:
            Venues in the order the API ranked them

        Raises:
            GatewayError: on transport/HTTP errors, invalid JSON, or a
                response without ``response.groups[0].items``
        """
        url = f"{self.config.api_base.rstrip('/')}/venues/explore"
        params = self.build_params(location, section, limit)

        logger.debug(f"Exploring venues near {location.ll}")

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.get(url, params=params)
                response.raise_for_status()
                data = response.json()
            except httpx.HTTPError as e:
                logger.warning(f"Foursquare request failed: {e}")
                raise GatewayError(f"Venue search failed: {e}") from e
            except (ValueError, RecursionError) as e:
                raise GatewayError("Venue search returned invalid JSON") from e

        return self._parse_venues(data)

    def _parse_venues(self, data: Any) -> list[VenueSummary]:
        """Extract venues from ``response.groups[0].items``."""
        try:
            items = data["response"]["groups"][0]["items"]
        except (KeyError, IndexError, TypeError) as e:
            raise GatewayError("Venue search returned an unexpected response") from e

        if not isinstance(items, list):
            raise GatewayError("Venue search returned an unexpected response")

        try:
            return [VenueSummary.from_api(item) for item in items]
        except (AttributeError, TypeError) as e:
            raise GatewayError("Venue search returned an unexpected response") from e

    async def fetch_photo(self, url: str) -> bytes:
        """Download a tip photo."""
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.get(url, follow_redirects=True)
                response.raise_for_status()
            except httpx.HTTPError as e:
                logger.warning(f"Could not fetch photo {url}: {e}")
                raise GatewayError(f"Photo download failed: {e}") from e
            return response.content
