"""
HTTP interface of the itinerary planner.
"""
