"""
AI itinerary planner grounded in real travel data.

This package gathers geocoding, routing, flight and hotel data for a trip,
feeds it to a language model and streams the resulting day-by-day itinerary
back to the client.
"""

__version__ = "0.1.0"
