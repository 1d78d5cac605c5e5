"""
Test fixtures for unit tests.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from itinerary_planner.data.models import Coordinates, ItineraryRequest
from itinerary_planner.services.geocoding import TomTomClient
from itinerary_planner.services.search import SerpApiClient


@pytest.fixture
def paris():
    return Coordinates(lat=48.8566, lon=2.3522)


@pytest.fixture
def london():
    return Coordinates(lat=51.5074, lon=-0.1278)


@pytest.fixture
def tokyo():
    return Coordinates(lat=35.6762, lon=139.6503)


@pytest.fixture
def itinerary_request():
    """A typical request as posted by the web client."""
    return ItineraryRequest.model_validate(
        {
            "from": "London",
            "destination": "Paris",
            "startDate": "2025-06-01",
            "endDate": "2025-06-03",
            "budget": "mid-range",
            "transportMode": "Train",
            "interests": ["museums", "food"],
        }
    )


@pytest.fixture
def mock_tomtom():
    """TomTom client with no network access."""
    client = MagicMock(spec=TomTomClient)
    client.geocode = AsyncMock()
    client.geocode_pair = AsyncMock()
    client.route = AsyncMock(return_value=None)
    return client


@pytest.fixture
def mock_serpapi():
    """SerpApi client returning empty results by default."""
    client = MagicMock(spec=SerpApiClient)
    client.configured = True
    client.search = AsyncMock(return_value={})
    return client

