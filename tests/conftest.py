"""
Pytest configuration for the Itinerary Planner tests.
"""

import pytest

# Register asyncio marker
pytest.importorskip("pytest_asyncio")

# Import project modules after configuring pytest
from itinerary_planner.config import (  # noqa: E402
    APIConfig,
    ItineraryPlannerConfig,
    LLMConfig,
    ServerConfig,
    SystemConfig,
)
from itinerary_planner.utils import LogLevel, setup_logging  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def setup_test_logging():
    """Set up logging for tests."""
    setup_logging(LogLevel.DEBUG)


@pytest.fixture
def test_config():
    """Test application configuration."""
    return ItineraryPlannerConfig(
        api=APIConfig(
            groq_api_key="test-key",
            tomtom_api_key="test-key",
            serpapi_api_key="test-key",
        ),
        llm=LLMConfig(temperature=0.7),
        server=ServerConfig(cors_origins=["*"]),
        system=SystemConfig(log_level=LogLevel.DEBUG, environment="test"),
    )
