"""
Data models and parsers for the itinerary planner.
"""
