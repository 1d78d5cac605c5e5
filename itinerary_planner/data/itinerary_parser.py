"""
Parsing of generated itineraries.
"""

import json
import re
from typing import Any

from itinerary_planner.utils.error_handling import ValidationError

_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")


def parse_itinerary(text: str) -> dict[str, Any]:
    """
    Extract and parse the itinerary JSON object from model output.

    Anything before the first ``{`` or after the last ``}`` (stray prose,
    Markdown fences) is ignored.

    Args:
        text: The accumulated model output

    Returns:
        The itinerary object

    Raises:
        ValidationError: If no JSON object can be parsed
    """
    if not text:
        raise ValidationError("Empty itinerary output")

    match = _JSON_BLOCK.search(text)
    if not match:
        raise ValidationError("No JSON object found in itinerary output")

    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise ValidationError(f"Itinerary output is not valid JSON: {e.msg}", e) from e

    if not isinstance(parsed, dict):
        raise ValidationError("Itinerary output is not a JSON object")
    return parsed
