"""
Travel option aggregation.

Combines TomTom road routing, SerpApi flight-time answers and a great-circle
fallback into the travel options and overall distance shown to the model.
Every source is optional: failures are logged and the next fallback is tried.
"""

import asyncio

from itinerary_planner.data.models import (
    Coordinates,
    RouteSummary,
    TravelData,
    TravelModeName,
    TravelOption,
)
from itinerary_planner.services.geocoding import TomTomClient
from itinerary_planner.services.search import SerpApiClient, answer_box
from itinerary_planner.utils.helpers import (
    format_km,
    format_travel_time,
    haversine_km,
)
from itinerary_planner.utils.logging import get_logger

logger = get_logger(__name__)

# Beyond this straight-line distance a flight is assumed to be needed
FLIGHT_GUESS_THRESHOLD_KM = 1000
FLIGHT_TIME_UNKNOWN = "Varies (check airlines)"


class TravelDataService:
    """Collects travel options between an origin and a destination."""

    def __init__(
        self,
        tomtom: TomTomClient | None = None,
        serpapi: SerpApiClient | None = None,
    ):
        self.tomtom = tomtom or TomTomClient()
        self.serpapi = serpapi or SerpApiClient()

    async def get_travel_data(
        self,
        origin: str,
        destination: str,
        from_coords: Coordinates | None = None,
        dest_coords: Coordinates | None = None,
    ) -> TravelData:
        """
        Gather travel options and the overall distance.

        Args:
            origin: Origin place name
            destination: Destination place name
            from_coords: Pre-fetched origin coordinates (optional)
            dest_coords: Pre-fetched destination coordinates (optional)

        Returns:
            TravelData; its distance stays "N/A" if every source failed
        """
        data = TravelData()

        if from_coords is None or dest_coords is None:
            logger.warning(
                "Coordinates not pre-fetched for travel data, fetching now..."
            )
            try:
                from_coords, dest_coords = await self.tomtom.geocode_pair(
                    origin, destination
                )
            except Exception as e:
                logger.error(f"Coordinate fetching error within travel data: {e!s}")
                await self._search_only_fallback(origin, destination, data)
                return data

        await self._add_road_routes(from_coords, dest_coords, data)
        await self._add_flight_option(origin, destination, from_coords, dest_coords, data)

        if not data.has_distance:
            await self._fill_distance(origin, destination, from_coords, dest_coords, data)

        return data

    async def _search_only_fallback(
        self, origin: str, destination: str, data: TravelData
    ) -> None:
        """Without coordinates only the search answers are available."""
        if not self.serpapi.configured:
            return

        try:
            result = await self.serpapi.search(f"distance from {origin} to {destination}")
            answer = answer_box(result).get("answer")
            if answer:
                data.distance = answer
        except Exception as e:
            logger.error(f"SerpApi distance fallback failed: {e!s}")

        try:
            option = await self._search_flight_time(origin, destination)
            if option:
                data.options.append(option)
        except Exception as e:
            logger.error(f"SerpApi flight fallback failed: {e!s}")

    async def _add_road_routes(
        self, from_coords: Coordinates, dest_coords: Coordinates, data: TravelData
    ) -> None:
        car, bus = await asyncio.gather(
            self.tomtom.route(from_coords, dest_coords, "car"),
            self.tomtom.route(from_coords, dest_coords, "bus"),
            return_exceptions=True,
        )

        for label, result in (("car", car), ("bus", bus)):
            if isinstance(result, BaseException):
                logger.error(f"TomTom Routing Error ({label}): {result!s}")

        if isinstance(car, RouteSummary):
            distance = format_km(car.length_in_meters / 1000)
            data.options.append(
                TravelOption(
                    mode=TravelModeName.CAR.value,
                    time=format_travel_time(car.travel_time_in_seconds),
                    distance=distance,
                )
            )
            data.distance = distance

        if isinstance(bus, RouteSummary):
            distance = format_km(bus.length_in_meters / 1000)
            data.options.append(
                TravelOption(
                    mode=TravelModeName.PUBLIC.value,
                    time=format_travel_time(bus.travel_time_in_seconds),
                    distance=distance,
                )
            )
            if not data.has_distance:
                data.distance = distance

    async def _search_flight_time(
        self, origin: str, destination: str
    ) -> TravelOption | None:
        result = await self.serpapi.search(f"flight time from {origin} to {destination}")
        box = answer_box(result)
        flight_time = box.get("duration") or box.get("snippet")
        if flight_time:
            return TravelOption(mode=TravelModeName.FLIGHT.value, time=flight_time)
        return None

    async def _add_flight_option(
        self,
        origin: str,
        destination: str,
        from_coords: Coordinates,
        dest_coords: Coordinates,
        data: TravelData,
    ) -> None:
        try:
            option = await self._search_flight_time(origin, destination)
        except Exception as e:
            logger.error(f"SerpApi Flight Error: {e!s}")
            return

        if option:
            data.options.append(option)
            return

        if not data.options:
            distance = haversine_km(from_coords, dest_coords)
            if distance is not None and round(distance) > FLIGHT_GUESS_THRESHOLD_KM:
                data.options.append(
                    TravelOption(
                        mode=TravelModeName.FLIGHT.value, time=FLIGHT_TIME_UNKNOWN
                    )
                )

    async def _fill_distance(
        self,
        origin: str,
        destination: str,
        from_coords: Coordinates,
        dest_coords: Coordinates,
        data: TravelData,
    ) -> None:
        try:
            result = await self.serpapi.search(
                f"distance between {origin} and {destination}"
            )
            answer = answer_box(result).get("answer")
            if answer:
                data.distance = answer
                return
        except Exception as e:
            logger.error(f"Distance Fallback Error: {e!s}")

        direct = haversine_km(from_coords, dest_coords)
        if direct is not None:
            data.distance = f"{format_km(direct)} (direct)"


async def get_travel_data(
    origin: str,
    destination: str,
    from_coords: Coordinates | None = None,
    dest_coords: Coordinates | None = None,
) -> TravelData:
    """Gather travel data with default clients."""
    return await TravelDataService().get_travel_data(
        origin, destination, from_coords, dest_coords
    )
