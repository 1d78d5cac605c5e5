"""
Tests for the TomTom and SerpApi clients.
"""

from unittest.mock import AsyncMock, patch

import pytest

from itinerary_planner.data.models import Coordinates, RouteSummary
from itinerary_planner.services.geocoding import TomTomClient
from itinerary_planner.services.search import SerpApiClient
from itinerary_planner.utils import APIError, ItineraryPlannerError, LocationNotFoundError


@pytest.fixture
def tomtom():
    return TomTomClient(api_key="tt-key")


@pytest.fixture
def serpapi():
    return SerpApiClient(api_key="sp-key")


class TestTomTomClient:
    """Geocoding and routing requests."""

    @pytest.mark.asyncio
    async def test_geocode_returns_first_position(self, tomtom):
        payload = {
            "results": [
                {"position": {"lat": 48.85, "lon": 2.35}},
                {"position": {"lat": 33.66, "lon": -95.55}},
            ]
        }
        with patch.object(tomtom.client, "get_json", AsyncMock(return_value=payload)) as get:
            coords = await tomtom.geocode("Paris")

        assert coords == Coordinates(lat=48.85, lon=2.35)
        get.assert_awaited_once_with("search/2/geocode/Paris.json", params={"limit": 1})

    @pytest.mark.asyncio
    async def test_geocode_quotes_location(self, tomtom):
        payload = {"results": [{"position": {"lat": 45.5, "lon": -73.6}}]}
        with patch.object(tomtom.client, "get_json", AsyncMock(return_value=payload)) as get:
            await tomtom.geocode("Montréal, QC/Canada")

        endpoint = get.await_args.args[0]
        assert endpoint == "search/2/geocode/Montr%C3%A9al%2C%20QC%2FCanada.json"

    @pytest.mark.asyncio
    async def test_geocode_no_results(self, tomtom):
        with patch.object(tomtom.client, "get_json", AsyncMock(return_value={"results": []})):
            with pytest.raises(LocationNotFoundError) as exc_info:
                await tomtom.geocode("Atlantis")

        assert exc_info.value.location == "Atlantis"

    @pytest.mark.asyncio
    async def test_geocode_propagates_api_errors(self, tomtom):
        error = APIError("forbidden", "tomtom", status_code=403)
        with patch.object(tomtom.client, "get_json", AsyncMock(side_effect=error)):
            with pytest.raises(APIError):
                await tomtom.geocode("Paris")

    @pytest.mark.asyncio
    async def test_missing_key(self):
        client = TomTomClient(api_key="")
        with patch.object(client.client, "get_json", AsyncMock()) as get:
            with pytest.raises(ItineraryPlannerError, match="TomTom API key is missing"):
                await client.geocode("Paris")
            with pytest.raises(ItineraryPlannerError):
                await client.route(
                    Coordinates(lat=0, lon=0), Coordinates(lat=1, lon=1), "car"
                )
        get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_route_summary(self, tomtom, london, paris):
        payload = {
            "routes": [
                {"summary": {"lengthInMeters": 459000, "travelTimeInSeconds": 18000}}
            ]
        }
        with patch.object(tomtom.client, "get_json", AsyncMock(return_value=payload)) as get:
            summary = await tomtom.route(london, paris, "bus")

        assert summary == RouteSummary(
            length_in_meters=459000, travel_time_in_seconds=18000
        )
        get.assert_awaited_once_with(
            "routing/1/calculateRoute/51.5074,-0.1278:48.8566,2.3522/json",
            params={"travelMode": "bus"},
        )

    @pytest.mark.asyncio
    async def test_route_not_found(self, tomtom, london, tokyo):
        with patch.object(tomtom.client, "get_json", AsyncMock(return_value={"routes": []})):
            assert await tomtom.route(london, tokyo, "car") is None

    @pytest.mark.asyncio
    async def test_geocode_pair(self, tomtom):
        positions = {
            "search/2/geocode/London.json": {"results": [{"position": {"lat": 51.5, "lon": -0.1}}]},
            "search/2/geocode/Paris.json": {"results": [{"position": {"lat": 48.9, "lon": 2.4}}]},
        }

        async def get_json(endpoint, params=None):
            return positions[endpoint]

        with patch.object(tomtom.client, "get_json", side_effect=get_json):
            origin, destination = await tomtom.geocode_pair("London", "Paris")

        assert origin.lat == 51.5
        assert destination.lon == 2.4


class TestSerpApiClient:
    """Search parameter assembly."""

    @pytest.mark.asyncio
    async def test_google_search_adds_locale(self, serpapi):
        with patch.object(serpapi.client, "get_json", AsyncMock(return_value={})) as get:
            await serpapi.search("hotels in Paris", location="Paris", num=6, tbm=None)

        get.assert_awaited_once_with(
            "search.json",
            params={
                "q": "hotels in Paris",
                "gl": "us",
                "hl": "en",
                "location": "Paris",
                "num": 6,
            },
        )

    @pytest.mark.asyncio
    async def test_other_engines_skip_locale(self, serpapi):
        with patch.object(serpapi.client, "get_json", AsyncMock(return_value={})) as get:
            await serpapi.search("hotels Paris", engine="google_maps", type="search")

        assert get.await_args.kwargs["params"] == {
            "q": "hotels Paris",
            "engine": "google_maps",
            "type": "search",
        }

    @pytest.mark.asyncio
    async def test_explicit_locale_wins(self, serpapi):
        with patch.object(serpapi.client, "get_json", AsyncMock(return_value={})) as get:
            await serpapi.search("ramen", hl="ja")

        assert get.await_args.kwargs["params"]["hl"] == "ja"
        assert get.await_args.kwargs["params"]["gl"] == "us"

    @pytest.mark.asyncio
    async def test_returns_raw_result(self, serpapi):
        result = {"answer_box": {"answer": "Spring"}}
        with patch.object(serpapi.client, "get_json", AsyncMock(return_value=result)):
            assert await serpapi.search("best time to visit Kyoto") == result

    @pytest.mark.asyncio
    async def test_missing_key(self):
        client = SerpApiClient(api_key="")
        assert not client.configured
        with patch.object(client.client, "get_json", AsyncMock()) as get:
            with pytest.raises(ItineraryPlannerError, match="SerpApi key is missing"):
                await client.search("anything")
        get.assert_not_awaited()
