"""
Itinerary generation prompt.

Embeds the gathered real-world data into a JSON-only instruction prompt that
asks the model for a complete day-by-day plan covering every trip date.
"""

import json
from typing import Any

from itinerary_planner.data.models import (
    Coordinates,
    DestinationInfo,
    ItineraryRequest,
    TravelData,
    TripDates,
)
from itinerary_planner.prompts.templates import render_template

ITINERARY_PROMPT_TEMPLATE = """
CRITICAL: Your response must be PURE JSON only. Do NOT write any text like "Here is the itinerary" or any explanations before or after the JSON. Start immediately with { and end with }. Nothing else.

You are an expert travel planner. You MUST use the provided REAL-WORLD DATA to create a detailed, practical, and inspiring itinerary. Do not invent information.

--- USER PREFERENCES ---
- From: {from}
- Destination: {destination}
- Dates: {start_date} to {end_date} (Total: {number_of_days})
- Budget: {budget}
- Preferred Transport: {transport_mode}
- Interests: {interests}

--- REAL-WORLD DATA ---
1. Travel Options:
   - Distance: {distance}
   - Options: {options_json}
2. Destination Info:
   - Top Highlights: {highlights}
   - Best Time to Visit: {best_time}
   - Suggested {budget} Hotels: {hotels_json}
3. Coordinates:
   - Origin ({from}): {from_coords_json}
   - Destination ({destination}): {dest_coords_json}
{specific_dates}

--- YOUR TASK ---
1. Create "travelAnalysis". Use "Travel Options" data.
2. Create "destinationSummary". Pass "bestTimeToVisit" and "hotelSuggestions" data.
3. Create "thoughtProcess".
4. **MANDATORY REQUIREMENT: Create a complete day-by-day "days" array covering THE ENTIRE DURATION from {start_date} to {end_date}. This means you MUST generate exactly {number_of_days} objects in the "days" array, one for each date provided in the 'Specific Dates To Plan For' data. Do not stop early. Use the provided dates.**
5. For each day object, include a unique 'day' number (1, 2, 3,... up to {last_day_label}), the corresponding 'date' string from the 'Specific Dates To Plan For' data (if available, otherwise calculate it), a 'title', and an 'activities' array.
6. Each 'activities' array MUST include detailed entries for "Morning", "Afternoon", and "Evening".
7. Add 1-2 sentence "description" for each activity explaining relevance to interests: {interests}.
8. Weave in "Top Highlights" naturally.

--- JSON-ONLY RESPONSE ---
Respond ONLY with a valid JSON object. No text before or after the JSON. Do NOT include any comments in the JSON output. Ensure ALL string values are in double quotes (""). Check your final JSON for validity before outputting.

CRITICAL RULES:
1. The JSON must NOT contain any comments like // or /* */
2. Pure JSON only - nothing before the opening { and nothing after the closing }
3. Do NOT add any explanations, notes, or text after the JSON ends
4. Your response should start with { and end with } - nothing else

{
  "destinationName": "{destination}",
  "fromName": "{from}",
  "fromCoords": {from_coords_json},
  "destinationCoords": {dest_coords_json},
  "travelAnalysis": {
    "summary": "Based on real data, here are the travel options...",
    "distance": "{distance}",
    "options": {options_json}
  },
  "destinationSummary": {
    "bestTimeToVisit": "{best_time}",
    "hotelSuggestions": {hotels_json}
  },
  "thoughtProcess": "Comprehensive analysis of the travel requirements and itinerary planning considerations",
  "days": [
    {
      "day": 1,
      "date": "{day_one_date}",
      "title": "Travel and Arrival",
      "activities": [
        { "time": "Morning/Afternoon", "description": "Travel from {from} to {destination} via [Logical Mode from data]. Estimated time: [Time string]." },
        { "time": "Evening", "description": "Arrive in {destination}, check into hotel (Suggestion: {hotel_suggestion}) and have dinner." }
      ]
    },
    {
       "day": 2,
       "date": "{day_two_date}",
       "title": "Exploring {destination}",
       "activities": [
         { "time": "Morning", "description": "Visit [specific attraction from Top Highlights]. Detailed description of why this fits the {interests} interests." },
         { "time": "Afternoon", "description": "Explore [another attraction]. Full description of activities and relevance to traveler interests." },
         { "time": "Evening", "description": "Dinner at local restaurant and evening activity. Complete details about the experience." }
       ]
     }
  ]
}

IMPORTANT INSTRUCTIONS FOR DAYS ARRAY:
- Generate EXACTLY {number_of_days} day objects (Day 1 through Day {last_day_short})
- Use the exact dates from 'Specific Dates To Plan For' data for each day's "date" field
- Each day MUST have 3 activities: Morning, Afternoon, and Evening
- NEVER use "..." or placeholder text - write full, detailed descriptions for EVERY activity
- Each activity description must be 2-3 complete sentences explaining what to do and why it matches the traveler's interests
- Incorporate the Top Highlights naturally across different days
- Continue generating ALL days until you reach {end_date} - do not stop early

FINAL REMINDER: Output ONLY the JSON object. Do NOT add any text, explanations, or commentary before { or after }. Your entire response must be valid JSON that can be parsed directly.
"""


def to_json(value: Any) -> str:
    """Compact JSON with non-ASCII text kept as-is."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _coords_json(coords: Coordinates | None) -> str:
    return to_json(coords.model_dump() if coords else None)


def build_itinerary_prompt(
    request: ItineraryRequest,
    travel_data: TravelData,
    destination_info: DestinationInfo,
    from_coords: Coordinates | None,
    dest_coords: Coordinates | None,
    dates: TripDates | None = None,
) -> str:
    """
    Build the itinerary generation prompt.

    Args:
        request: Traveller preferences
        travel_data: Travel options and distance
        destination_info: Highlights, hotels and best time to visit
        from_coords: Origin coordinates
        dest_coords: Destination coordinates
        dates: Trip calendar, or None when the dates could not be expanded

    Returns:
        The prompt text
    """
    days = dates.days if dates else 0
    all_dates = dates.dates if dates else []
    number_of_days = f"{days} days" if days > 0 else "the specified date range"

    options_json = to_json(
        [o.model_dump(exclude_none=True) for o in travel_data.options]
    )
    hotels_json = to_json([h.model_dump() for h in destination_info.hotels])
    hotels = destination_info.hotels
    hotel_suggestion = hotels[0].name if hotels else f"a {request.budget} hotel"

    specific_dates = (
        f"4. Specific Dates To Plan For: {to_json(all_dates)}" if days > 0 else ""
    )

    return render_template(
        ITINERARY_PROMPT_TEMPLATE,
        **{
            "from": request.from_location,
            "destination": request.destination,
            "start_date": request.start_date,
            "end_date": request.end_date,
            "number_of_days": number_of_days,
            "budget": request.budget,
            "transport_mode": request.transport_mode,
            "interests": request.interests_text,
            "distance": travel_data.distance,
            "options_json": options_json,
            "highlights": ", ".join(destination_info.highlights) or "N/A",
            "best_time": destination_info.best_time,
            "hotels_json": hotels_json,
            "from_coords_json": _coords_json(from_coords),
            "dest_coords_json": _coords_json(dest_coords),
            "specific_dates": specific_dates,
            "last_day_label": str(days) if days > 0 else "the end date",
            "last_day_short": str(days) if days > 0 else "N",
            "day_one_date": all_dates[0] if days > 0 else request.start_date,
            "day_two_date": (
                all_dates[1] if days > 1 else "[Calculate YYYY-MM-DD for Day 2]"
            ),
            "hotel_suggestion": hotel_suggestion,
        },
    )
