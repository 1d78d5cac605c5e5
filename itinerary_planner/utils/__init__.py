"""
Utility modules for the Itinerary Planner service.
"""

from itinerary_planner.config import LogLevel
from itinerary_planner.utils.error_handling import (
    APIError,
    GuardRailError,
    ItineraryPlannerError,
    LLMError,
    LocationNotFoundError,
    ValidationError,
)
from itinerary_planner.utils.helpers import (
    format_km,
    format_travel_time,
    google_search_url,
    haversine_distance,
    haversine_km,
    parse_date,
    trip_dates,
)
from itinerary_planner.utils.logging import ServiceLogger, get_logger, setup_logging

__all__ = [
    "APIError",
    "GuardRailError",
    "ItineraryPlannerError",
    "LLMError",
    "LocationNotFoundError",
    "LogLevel",
    "ServiceLogger",
    "ValidationError",
    "format_km",
    "format_travel_time",
    "get_logger",
    "google_search_url",
    "haversine_distance",
    "haversine_km",
    "parse_date",
    "setup_logging",
    "trip_dates",
]
