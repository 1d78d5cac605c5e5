"""
Helper utilities for the Itinerary Planner service.

This module provides general utility functions used across the application:
travel time and distance formatting, great-circle distance, and trip date
expansion.
"""

import math
from datetime import date, datetime, timedelta
from urllib.parse import quote

from itinerary_planner.data.models import Coordinates, TripDates
from itinerary_planner.utils.error_handling import ValidationError

EARTH_RADIUS_KM = 6371
SECONDS_PER_HOUR = 3600
SECONDS_PER_MINUTE = 60
# Unreserved marks kept literal in URI components
URI_COMPONENT_SAFE = "-_.!~*'()"


def format_travel_time(seconds: float) -> str:
    """
    Format a duration in seconds as hours and minutes.

    Args:
        seconds: Duration in seconds

    Returns:
        A string such as "3 hours 25 mins"
    """
    hours = int(seconds // SECONDS_PER_HOUR)
    minutes = int((seconds % SECONDS_PER_HOUR) // SECONDS_PER_MINUTE)
    return f"{hours} hours {minutes} mins"


def format_km(value_km: float) -> str:
    """Format a kilometre value with no decimals, e.g. ``"1234 km"``."""
    return f"{value_km:.0f} km"


def haversine_km(
    coords1: Coordinates | None, coords2: Coordinates | None
) -> float | None:
    """
    Calculate the great-circle distance between two points.

    Args:
        coords1: First point
        coords2: Second point

    Returns:
        Distance in kilometres, or None if either point is missing
    """
    if coords1 is None or coords2 is None:
        return None

    d_lat = math.radians(coords2.lat - coords1.lat)
    d_lon = math.radians(coords2.lon - coords1.lon)
    lat1 = math.radians(coords1.lat)
    lat2 = math.radians(coords2.lat)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.sin(d_lon / 2) ** 2 * math.cos(lat1) * math.cos(lat2)
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def haversine_distance(
    coords1: Coordinates | None, coords2: Coordinates | None
) -> str | None:
    """Great-circle distance formatted as ``"N km"``, or None."""
    distance = haversine_km(coords1, coords2)
    if distance is None:
        return None
    return format_km(distance)


def parse_date(value: str | date) -> date:
    """
    Parse a trip date.

    Accepts a date, an ISO ``YYYY-MM-DD`` string or a full ISO timestamp.

    Raises:
        ValidationError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError as e:
        raise ValidationError(f"Invalid date format: {value!r}", e) from e


def trip_dates(start: str | date, end: str | date) -> TripDates:
    """
    Expand a trip into its inclusive list of calendar dates.

    Args:
        start: First day of the trip
        end: Last day of the trip

    Returns:
        TripDates with the day count and ``YYYY-MM-DD`` strings

    Raises:
        ValidationError: If either date is invalid or start is after end
    """
    start_date = parse_date(start)
    end_date = parse_date(end)
    if start_date > end_date:
        raise ValidationError("Start date must be before end date")

    days = (end_date - start_date).days + 1
    dates = [(start_date + timedelta(days=i)).isoformat() for i in range(days)]
    return TripDates(days=days, dates=dates)


def google_search_url(*terms: str) -> str:
    """Build a Google search URL for the given terms."""
    query = " ".join(t for t in terms if t)
    return f"https://www.google.com/search?q={quote(query, safe=URI_COMPONENT_SAFE)}"
