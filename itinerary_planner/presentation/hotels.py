"""
View models for the hotel suggestion panel.

Turns hotel suggestions into display-ready cards: every card gets a name,
a link and an image even when the search result lacked them, plus a
five-star rating strip.
"""

import math

from pydantic import BaseModel

from itinerary_planner.data.models import PLACEHOLDER_HOTEL_NAME, Hotel
from itinerary_planner.utils.helpers import google_search_url

EMPTY_MESSAGE = "No hotel suggestions available."
PANEL_TITLE = "Hotel Suggestions"
MAX_STARS = 5

PLACEHOLDER_PHOTO = (
    'data:image/svg+xml,%3Csvg xmlns="http://www.w3.org/2000/svg" width="96" '
    'height="96"%3E%3Crect width="96" height="96" fill="%23e5e7eb"/%3E%3Ctext '
    'x="50%25" y="50%25" text-anchor="middle" dy=".3em" fill="%239ca3af" '
    'font-size="12"%3EHotel%3C/text%3E%3C/svg%3E'
)


def _non_blank(value: str | None) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def star_rating(rating: float | None) -> list[str]:
    """
    Star states for a rating, e.g. ``4.5 -> full x4 + half``.

    Returns:
        Five entries of "full", "half" or "empty"; an empty list when there
        is no rating to show
    """
    if not rating:
        return []

    full_stars = math.floor(rating)
    has_half_star = rating % 1 >= 0.5
    stars = []
    for i in range(MAX_STARS):
        if i < full_stars:
            stars.append("full")
        elif i == full_stars and has_half_star:
            stars.append("half")
        else:
            stars.append("empty")
    return stars


class HotelCard(BaseModel):
    """A hotel suggestion ready for display."""

    name: str
    address: str
    url: str
    photo: str
    alt: str
    rating: float | None = None
    stars: list[str] = []

    @classmethod
    def from_hotel(cls, hotel: Hotel) -> "HotelCard":
        name = _non_blank(hotel.name) or PLACEHOLDER_HOTEL_NAME
        address = hotel.address if isinstance(hotel.address, str) else ""
        url = _non_blank(hotel.link) or google_search_url(name, address)
        return cls(
            name=name,
            address=address,
            url=url,
            photo=_non_blank(hotel.photo) or PLACEHOLDER_PHOTO,
            alt=f"{name} hotel",
            rating=hotel.rating,
            stars=star_rating(hotel.rating),
        )


def hotel_cards(hotels: list[Hotel] | None) -> list[HotelCard]:
    """Cards for every suggestion, in order."""
    return [HotelCard.from_hotel(h) for h in hotels or []]
