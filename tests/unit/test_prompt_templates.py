"""Tests for prompt templates."""

import json

from itinerary_planner.data.models import (
    DestinationInfo,
    Hotel,
    TravelData,
    TravelOption,
)
from itinerary_planner.prompts.itinerary import build_itinerary_prompt, to_json
from itinerary_planner.prompts.templates import render_template
from itinerary_planner.utils.helpers import trip_dates


def test_render_template_basic():
    result = render_template("Hello {name}, welcome to {place}!", name="Ana", place="Lisbon")
    assert result == "Hello Ana, welcome to Lisbon!"


def test_render_template_leaves_literal_braces():
    template = '{ "destination": "{destination}", "days": [] }'
    assert render_template(template, destination="Oslo") == (
        '{ "destination": "Oslo", "days": [] }'
    )


def test_render_template_unresolved_vars():
    assert render_template("Trip to {city} in {month}", city="Rome") == (
        "Trip to Rome in {month}"
    )


def test_render_template_does_not_expand_inserted_values():
    result = render_template(
        "From {from} to {destination} on a {budget} budget",
        **{"from": "{destination} Springs", "destination": "Oslo", "budget": "{budget}"},
    )
    assert result == "From {destination} Springs to Oslo on a {budget} budget"


def test_prompt_keeps_braces_in_user_text(itinerary_request):
    request = itinerary_request.model_copy(update={"interests": ["{budget}"]})
    prompt = build_itinerary_prompt(
        request, TravelData(), DestinationInfo(), None, None, None
    )
    assert "{budget}" in prompt


def test_to_json_is_compact_and_unicode():
    assert to_json({"name": "Zürich", "n": [1, 2]}) == '{"name":"Zürich","n":[1,2]}'


def make_data():
    travel_data = TravelData(
        options=[
            TravelOption(mode="Car", time="5 hours 30 mins", distance="459 km"),
            TravelOption(mode="Flight", time="1h 15m"),
        ],
        distance="459 km",
    )
    destination_info = DestinationInfo(
        highlights=["Louvre", "Eiffel Tower"],
        hotels=[Hotel(name="Hotel Lutetia", address="45 Bd Raspail", rating=4.6)],
        best_time="April to June",
    )
    return travel_data, destination_info


def test_prompt_with_dates(itinerary_request, london, paris):
    travel_data, destination_info = make_data()
    prompt = build_itinerary_prompt(
        itinerary_request,
        travel_data,
        destination_info,
        london,
        paris,
        trip_dates(itinerary_request.start_date, itinerary_request.end_date),
    )

    assert "- From: London" in prompt
    assert "- Dates: 2025-06-01 to 2025-06-03 (Total: 3 days)" in prompt
    assert "- Interests: museums, food" in prompt
    assert "- Top Highlights: Louvre, Eiffel Tower" in prompt
    assert "- Best Time to Visit: April to June" in prompt
    assert (
        'Specific Dates To Plan For: ["2025-06-01","2025-06-02","2025-06-03"]'
        in prompt
    )
    assert '{"mode":"Flight","time":"1h 15m"}' in prompt
    assert "Suggestion: Hotel Lutetia" in prompt
    assert to_json(paris.model_dump()) in prompt
    assert "{destination}" not in prompt
    assert "{number_of_days}" not in prompt
    assert prompt.lstrip().startswith("CRITICAL")


def test_prompt_hotels_are_embedded_as_json(itinerary_request, london, paris):
    travel_data, destination_info = make_data()
    prompt = build_itinerary_prompt(
        itinerary_request, travel_data, destination_info, london, paris
    )
    hotels_json = to_json([h.model_dump() for h in destination_info.hotels])
    assert f"Suggested mid-range Hotels: {hotels_json}" in prompt
    assert json.loads(hotels_json)[0]["name"] == "Hotel Lutetia"


def test_prompt_without_dates(itinerary_request):
    prompt = build_itinerary_prompt(
        itinerary_request, TravelData(), DestinationInfo(), None, None, None
    )

    assert "(Total: the specified date range)" in prompt
    assert "Specific Dates To Plan For:" not in prompt.split("--- YOUR TASK")[0]
    assert "Suggestion: a mid-range hotel" in prompt
    assert "- Distance: N/A" in prompt
    assert "- Top Highlights: N/A" in prompt
    assert "[Calculate YYYY-MM-DD for Day 2]" in prompt
