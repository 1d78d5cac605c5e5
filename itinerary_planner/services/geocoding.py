"""
TomTom geocoding and routing client.

Resolves free-text locations to coordinates and computes road routes between
them for a given travel mode.
"""

import asyncio
from urllib.parse import quote

from itinerary_planner.config import config
from itinerary_planner.data.models import Coordinates, RouteSummary
from itinerary_planner.utils.error_handling import (
    ItineraryPlannerError,
    LocationNotFoundError,
)
from itinerary_planner.utils.logging import get_logger
from itinerary_planner.utils.rate_limiting import APIClient

logger = get_logger(__name__)

TOMTOM_BASE_URL = "https://api.tomtom.com"


class TomTomClient:
    """Client for the TomTom Search and Routing APIs."""

    def __init__(self, api_key: str | None = None, base_url: str = TOMTOM_BASE_URL):
        self.api_key = api_key if api_key is not None else config.api.tomtom_api_key
        self.client = APIClient(
            "tomtom",
            base_url,
            api_key=self.api_key,
            auth_param="key",
            timeout=config.system.http_timeout,
        )

    def _require_key(self) -> None:
        if not self.api_key:
            raise ItineraryPlannerError("TomTom API key is missing")

    async def geocode(self, location: str) -> Coordinates:
        """
        Resolve a location to coordinates using the best geocoder match.

        Args:
            location: Free-text place name

        Returns:
            Coordinates of the first result

        Raises:
            ItineraryPlannerError: If the API key is missing or the request fails
            LocationNotFoundError: If the geocoder has no match
        """
        self._require_key()
        try:
            data = await self.client.get_json(
                f"search/2/geocode/{quote(location, safe='')}.json",
                params={"limit": 1},
            )
            results = data.get("results") or []
            if not results:
                raise LocationNotFoundError(location)
            position = results[0]["position"]
            return Coordinates(lat=position["lat"], lon=position["lon"])
        except Exception as e:
            logger.error(f"TomTom Geocode Error: {e!s}")
            raise

    async def route(
        self, origin: Coordinates, destination: Coordinates, travel_mode: str
    ) -> RouteSummary | None:
        """
        Compute a route between two points.

        Args:
            origin: Start point
            destination: End point
            travel_mode: TomTom travel mode, e.g. "car" or "bus"

        Returns:
            Summary of the first route, or None if no route was found
        """
        self._require_key()
        locations = f"{origin.lat},{origin.lon}:{destination.lat},{destination.lon}"
        data = await self.client.get_json(
            f"routing/1/calculateRoute/{locations}/json",
            params={"travelMode": travel_mode},
        )
        routes = data.get("routes") or []
        if not routes:
            return None
        summary = routes[0]["summary"]
        return RouteSummary(
            length_in_meters=summary["lengthInMeters"],
            travel_time_in_seconds=summary["travelTimeInSeconds"],
        )

    async def geocode_pair(
        self, origin: str, destination: str
    ) -> tuple[Coordinates, Coordinates]:
        """Geocode both ends of a trip concurrently."""
        from_coords, dest_coords = await asyncio.gather(
            self.geocode(origin), self.geocode(destination)
        )
        return from_coords, dest_coords
