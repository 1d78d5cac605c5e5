"""
SerpApi search client.

Thin wrapper over the SerpApi JSON endpoint used for flight times, distances,
attractions, hotels and seasonality lookups.
"""

from typing import Any

from itinerary_planner.config import config
from itinerary_planner.utils.error_handling import ItineraryPlannerError
from itinerary_planner.utils.rate_limiting import APIClient

SERPAPI_BASE_URL = "https://serpapi.com"


class SerpApiClient:
    """Client for SerpApi Google search results."""

    default_params = {"gl": "us", "hl": "en"}

    def __init__(self, api_key: str | None = None, base_url: str = SERPAPI_BASE_URL):
        self.api_key = api_key if api_key is not None else config.api.serpapi_api_key
        self.client = APIClient(
            "serpapi",
            base_url,
            api_key=self.api_key,
            auth_param="api_key",
            timeout=config.system.http_timeout,
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def search(self, q: str, engine: str | None = None, **params: Any) -> dict[str, Any]:
        """
        Run a search and return the raw SerpApi result.

        Google searches get ``gl=us`` and ``hl=en`` unless overridden; other
        engines only receive the parameters given.

        Args:
            q: Query text
            engine: SerpApi engine, e.g. "google_maps" (optional)
            **params: Extra SerpApi parameters

        Raises:
            ItineraryPlannerError: If the API key is missing
            APIError: If the request fails
        """
        if not self.api_key:
            raise ItineraryPlannerError("SerpApi key is missing")

        query: dict[str, Any] = {"q": q}
        if engine:
            query["engine"] = engine
        else:
            query.update(self.default_params)
        query.update({k: v for k, v in params.items() if v is not None})
        return await self.client.get_json("search.json", params=query)


def answer_box(result: dict[str, Any] | None) -> dict[str, Any]:
    """The ``answer_box`` of a search result, or an empty dict."""
    box = (result or {}).get("answer_box")
    return box if isinstance(box, dict) else {}


def first_organic_snippet(result: dict[str, Any] | None) -> str | None:
    """Snippet of the first organic result, if any."""
    organic = (result or {}).get("organic_results") or []
    if organic and isinstance(organic[0], dict):
        return organic[0].get("snippet")
    return None
