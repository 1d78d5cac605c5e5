"""
Data models for the itinerary planner.

This module defines the structures passed between the data clients, the
prompt builder and the HTTP layer: the incoming itinerary request, the
real-world travel data gathered for it, and the trip calendar.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

MAX_HOTELS = 6
PLACEHOLDER_HOTEL_NAME = "Hotel"


class BudgetTier(str, Enum):
    """Budget levels understood by the hotel search."""

    LUXURY = "luxury"
    MID_RANGE = "mid-range"
    BUDGET = "budget"

    @classmethod
    def parse(cls, value: str | None) -> "BudgetTier":
        """Map free-form budget text to a tier; unknown values are budget."""
        normalized = (value or "").strip().lower()
        for tier in cls:
            if tier.value == normalized:
                return tier
        return cls.BUDGET

    @property
    def hotel_search_term(self) -> str:
        """Search phrase used to find hotels in this tier."""
        if self is BudgetTier.LUXURY:
            return "luxury 5 star hotels"
        if self is BudgetTier.MID_RANGE:
            return "best 3 star and 4 star hotels"
        return "low cost 3 star hotels"


class TravelModeName(str, Enum):
    """Labels of the travel options offered to the model."""

    CAR = "Car"
    PUBLIC = "Bus/Train (Public)"
    FLIGHT = "Flight"


class Coordinates(BaseModel):
    """A geocoded position."""

    lat: float
    lon: float


class RouteSummary(BaseModel):
    """Length and duration of a computed route."""

    length_in_meters: float
    travel_time_in_seconds: float


class TravelOption(BaseModel):
    """One way of getting from origin to destination."""

    mode: str
    time: str
    distance: str | None = None


class TravelData(BaseModel):
    """Travel options between origin and destination."""

    options: list[TravelOption] = Field(default_factory=list)
    distance: str = "N/A"

    @property
    def has_distance(self) -> bool:
        return self.distance != "N/A"


class Hotel(BaseModel):
    """A hotel suggestion taken from local search results."""

    name: str
    address: str = ""
    photo: str | None = None
    rating: float | None = None
    link: str | None = None

    @classmethod
    def from_search_result(cls, raw: dict[str, Any]) -> "Hotel":
        """
        Normalise a local search result into a Hotel.

        Args:
            raw: One entry of a ``local_results`` list

        Returns:
            The hotel; its name is "Hotel" when the result had none
        """
        rating = raw.get("rating")
        if isinstance(rating, bool) or not isinstance(rating, int | float):
            rating = None
        return cls(
            name=str(raw.get("title") or raw.get("name") or PLACEHOLDER_HOTEL_NAME).strip(),
            address=str(raw.get("address") or raw.get("vicinity") or "").strip(),
            photo=raw.get("thumbnail") or raw.get("thumbnail_image") or raw.get("image"),
            rating=rating,
            link=raw.get("website") or raw.get("link"),
        )

    @classmethod
    def from_local_results(cls, results: Any) -> list["Hotel"]:
        """
        Normalise up to six results, dropping ones without a real name.

        Plain Google searches return ``local_results`` as an object of
        ``places`` rather than a list; anything but a list yields no hotels.
        """
        if not isinstance(results, list):
            return []
        hotels = [
            cls.from_search_result(r)
            for r in results[:MAX_HOTELS]
            if isinstance(r, dict)
        ]
        return [h for h in hotels if h.name and h.name != PLACEHOLDER_HOTEL_NAME]


class DestinationInfo(BaseModel):
    """Highlights, hotels and seasonality for a destination."""

    highlights: list[str] = Field(default_factory=list)
    hotels: list[Hotel] = Field(default_factory=list)
    best_time: str = "Varies by season."


class TripDates(BaseModel):
    """The calendar of a trip, one ``YYYY-MM-DD`` string per day."""

    days: int
    dates: list[str]

    @model_validator(mode="after")
    def _days_match_dates(self) -> "TripDates":
        if self.days != len(self.dates):
            raise ValueError("days must equal the number of dates")
        return self


class ItineraryRequest(BaseModel):
    """Traveller preferences submitted to the itinerary endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    from_location: str = Field(..., alias="from", min_length=1)
    destination: str = Field(..., min_length=1)
    start_date: str = Field(..., alias="startDate")
    end_date: str = Field(..., alias="endDate")
    budget: str = "mid-range"
    transport_mode: str = Field(default="Any", alias="transportMode")
    interests: list[str] = Field(default_factory=list)

    @field_validator("from_location", "destination", "budget", "transport_mode", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _date_text(cls, value: Any) -> str:
        return str(value).strip() if value is not None else ""

    @field_validator("interests", mode="before")
    @classmethod
    def _split_interests(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        return [str(v).strip() for v in value if str(v).strip()]

    @property
    def budget_tier(self) -> BudgetTier:
        return BudgetTier.parse(self.budget)

    @property
    def interests_text(self) -> str:
        return ", ".join(self.interests)
