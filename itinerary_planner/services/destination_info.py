"""
Destination research via SerpApi.

Looks up top attractions, hotels in the traveller's budget tier and the best
season to visit. Hotel lookup walks a chain of progressively looser searches
until one of them yields named results.
"""

import asyncio
from typing import Any

from itinerary_planner.data.models import MAX_HOTELS, BudgetTier, DestinationInfo, Hotel
from itinerary_planner.services.search import (
    SerpApiClient,
    answer_box,
    first_organic_snippet,
)
from itinerary_planner.utils.error_handling import safe_execute
from itinerary_planner.utils.logging import get_logger

logger = get_logger(__name__)

BEST_TIME_DEFAULT = "Varies by season."
BEST_TIME_UNAVAILABLE = "N/A (Error fetching details)"


def _section(result: dict[str, Any], name: str, key: str) -> list[Any]:
    section = result.get(name)
    entries = section.get(key) if isinstance(section, dict) else None
    return entries if isinstance(entries, list) else []


def extract_highlights(result: dict[str, Any] | None) -> list[str]:
    """Attraction names from the knowledge graph, else from top sights."""
    result = result or {}
    attractions = _section(result, "knowledge_graph", "tourist_attractions")
    if attractions:
        return [a["name"] for a in attractions if isinstance(a, dict) and a.get("name")]

    sights = _section(result, "top_sights", "sights")
    if sights:
        return [s["title"] for s in sights if isinstance(s, dict) and s.get("title")]

    return []


def extract_best_time(result: dict[str, Any] | None) -> str:
    """Best-time answer, falling back to the first organic snippet."""
    box = answer_box(result)
    return (
        box.get("snippet")
        or box.get("answer")
        or first_organic_snippet(result)
        or BEST_TIME_DEFAULT
    )


class DestinationInfoService:
    """Collects highlights, hotels and seasonality for a destination."""

    def __init__(self, serpapi: SerpApiClient | None = None):
        self.serpapi = serpapi or SerpApiClient()

    async def get_destination_info(self, destination: str, budget: str) -> DestinationInfo:
        """
        Research a destination.

        Args:
            destination: Destination place name
            budget: Budget label, e.g. "luxury" or "mid-range"

        Returns:
            DestinationInfo; empty with an "N/A" best time if the lookups failed
        """
        search_term = BudgetTier.parse(budget).hotel_search_term
        try:
            attractions, hotels_result, best_time = await asyncio.gather(
                self.serpapi.search(f"top attractions in {destination}"),
                # Local results depend on geo context; pin the location
                self.serpapi.search(
                    f"{search_term} in {destination}",
                    location=destination,
                    num=MAX_HOTELS,
                    tbm="lcl",
                ),
                self.serpapi.search(f"when is the best time to visit {destination}"),
            )
        except Exception as e:
            logger.error(f"SerpApi Error: {e!s}")
            return DestinationInfo(best_time=BEST_TIME_UNAVAILABLE)

        hotels = Hotel.from_local_results(hotels_result.get("local_results"))
        if not hotels:
            hotels = await self._maps_hotels(destination, search_term)
        if not hotels:
            hotels = await self._simple_hotels(destination)

        if hotels:
            logger.info(
                f"Found {len(hotels)} hotels for {destination}: "
                + ", ".join(
                    f"{h.name} (photo={bool(h.photo)}, link={bool(h.link)})"
                    for h in hotels
                )
            )
        else:
            logger.warning(
                f"No hotels found for {destination} - tried multiple search methods"
            )

        return DestinationInfo(
            highlights=extract_highlights(attractions),
            hotels=hotels,
            best_time=extract_best_time(best_time),
        )

    async def _maps_hotels(self, destination: str, search_term: str) -> list[Hotel]:
        logger.warning(f"No local hotel results for {destination}, trying Google Maps")
        result = await safe_execute(
            self.serpapi.search,
            f"{search_term} {destination}",
            engine="google_maps",
            type="search",
            default={},
        )
        return Hotel.from_local_results(result.get("local_results"))

    async def _simple_hotels(self, destination: str) -> list[Hotel]:
        logger.warning(f"No Google Maps hotel results for {destination}, trying a plain search")
        result = await safe_execute(
            self.serpapi.search,
            f"hotels in {destination}",
            location=destination,
            num=MAX_HOTELS,
            default={},
        )
        return Hotel.from_local_results(result.get("local_results"))


async def get_destination_info(destination: str, budget: str) -> DestinationInfo:
    """Research a destination with the default client."""
    return await DestinationInfoService().get_destination_info(destination, budget)
