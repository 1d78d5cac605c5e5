"""
Itinerary generation service.

Orchestrates one itinerary request end to end: policy guard rail, parallel
data gathering, prompt construction and the opening of the model stream.
Everything that can fail before the first generated byte is raised as an
ItineraryPlannerError carrying the HTTP status to answer with.
"""

import asyncio
from collections.abc import AsyncIterator

from itinerary_planner.config import ItineraryPlannerConfig, LLMProvider, config
from itinerary_planner.data.models import ItineraryRequest, TripDates
from itinerary_planner.llm import StreamingLLMClient, get_llm_client
from itinerary_planner.prompts.itinerary import build_itinerary_prompt
from itinerary_planner.services.destination_info import DestinationInfoService
from itinerary_planner.services.geocoding import TomTomClient
from itinerary_planner.services.search import SerpApiClient
from itinerary_planner.services.travel_data import TravelDataService
from itinerary_planner.utils.error_handling import (
    GuardRailError,
    ItineraryPlannerError,
    LLMError,
    LocationNotFoundError,
    ValidationError,
)
from itinerary_planner.utils.helpers import trip_dates
from itinerary_planner.utils.logging import get_logger

logger = get_logger(__name__)

RESTRICTED_DESTINATIONS = {
    "antarctica": (
        "Travel to Antarctica requires a specialized expedition and cannot be "
        "planned this way."
    ),
}

PROVIDER_KEYS = {
    LLMProvider.GROQ: ("Groq", "GROQ_API_KEY"),
    LLMProvider.GEMINI: ("Gemini", "GEMINI_API_KEY"),
}


def check_guard_rails(destination: str) -> None:
    """
    Refuse destinations that cannot be planned automatically.

    Raises:
        GuardRailError: If the destination is restricted
    """
    lowered = destination.lower()
    for keyword, message in RESTRICTED_DESTINATIONS.items():
        if keyword in lowered:
            raise GuardRailError(message)


def describe_fetch_error(error: Exception) -> str:
    """User-facing message for a failed data fetch."""
    if isinstance(error, LocationNotFoundError):
        return f"Could not find location: {error.location}"
    message = str(error)
    if "Location not found" in message:
        return f"Could not find location: {message.split(': ', 1)[-1]}"
    return f"Failed to fetch required API data: {message}"


class ItineraryStream:
    """
    The generated itinerary as an async iterator of UTF-8 chunks.

    The first chunk has already been received when the stream is handed
    out, so the upstream request is known to have succeeded. A failure
    later in the stream is logged and ends the output.
    """

    def __init__(self, first_chunk: bytes | None, rest: AsyncIterator[bytes]):
        self.first_chunk = first_chunk
        self._rest = rest

    async def __aiter__(self) -> AsyncIterator[bytes]:
        try:
            if self.first_chunk:
                yield self.first_chunk
            async for chunk in self._rest:
                yield chunk
        except Exception as e:
            logger.error(f"Stream processing error: {e!s}")
        finally:
            await self._rest.aclose()

    async def read_text(self) -> str:
        """Consume the whole stream and return the decoded text."""
        data = b"".join([chunk async for chunk in self])
        return data.decode("utf-8", errors="replace")


class ItineraryService:
    """Plans itineraries from real-world travel data and a language model."""

    def __init__(
        self,
        cfg: ItineraryPlannerConfig | None = None,
        tomtom: TomTomClient | None = None,
        serpapi: SerpApiClient | None = None,
        llm: StreamingLLMClient | None = None,
    ):
        self.config = cfg or config
        self.tomtom = tomtom or TomTomClient()
        serpapi = serpapi or SerpApiClient()
        self.travel_data = TravelDataService(self.tomtom, serpapi)
        self.destination_info = DestinationInfoService(serpapi)
        self.llm = llm or get_llm_client(self.config)

    async def gather_data(self, request: ItineraryRequest):
        """
        Geocode both ends, then fetch travel and destination data concurrently.

        Raises:
            ItineraryPlannerError: With a user-facing message if any step fails
        """
        try:
            from_coords, dest_coords = await self.tomtom.geocode_pair(
                request.from_location, request.destination
            )
            travel_data, destination_info = await asyncio.gather(
                self.travel_data.get_travel_data(
                    request.from_location, request.destination, from_coords, dest_coords
                ),
                self.destination_info.get_destination_info(
                    request.destination, request.budget
                ),
            )
        except Exception as e:
            logger.error(f"API data fetching error: {e!s}")
            raise ItineraryPlannerError(describe_fetch_error(e), e) from e

        return from_coords, dest_coords, travel_data, destination_info

    def build_prompt(self, request: ItineraryRequest, data) -> str:
        from_coords, dest_coords, travel_data, destination_info = data

        dates: TripDates | None = None
        try:
            dates = trip_dates(request.start_date, request.end_date)
        except ValidationError as e:
            logger.error(f"Error calculating trip dates: {e!s}")

        return build_itinerary_prompt(
            request, travel_data, destination_info, from_coords, dest_coords, dates
        )

    def _require_llm_key(self) -> None:
        provider = self.config.llm.provider
        label, env_var = PROVIDER_KEYS[provider]
        if not getattr(self.llm, "api_key", None):
            raise LLMError(
                f"Missing {env_var}. Please configure your {label} API key in .env."
            )

    async def open_stream(self, prompt: str) -> ItineraryStream:
        """
        Start generation and wait for the first chunk.

        Raises:
            LLMError: If the model request fails before producing output
        """
        label, env_var = PROVIDER_KEYS[self.config.llm.provider]
        chunks = self.llm.stream_completion(prompt)
        try:
            first_chunk = await anext(chunks, None)
        except LLMError:
            await chunks.aclose()
            raise
        except Exception as e:
            await chunks.aclose()
            logger.error(f"Itinerary generation error ({label}): {e!s}")
            raise LLMError(
                f"Failed to generate itinerary using {label} API. Check your "
                f"{env_var} and network connectivity.",
                original_error=e,
            ) from e

        return ItineraryStream(first_chunk, chunks)

    async def plan(self, request: ItineraryRequest) -> ItineraryStream:
        """
        Generate an itinerary for a request.

        Args:
            request: Traveller preferences

        Returns:
            The itinerary text stream

        Raises:
            GuardRailError: If the destination is restricted
            ItineraryPlannerError: If the travel data could not be fetched
            LLMError: If the model request could not be started
        """
        check_guard_rails(request.destination)

        logger.info(
            f"Planning itinerary {request.from_location} -> {request.destination} "
            f"({request.start_date} to {request.end_date})"
        )
        data = await self.gather_data(request)
        prompt = self.build_prompt(request, data)

        self._require_llm_key()
        return await self.open_stream(prompt)
