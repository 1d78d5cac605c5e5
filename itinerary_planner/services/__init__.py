"""
Upstream data clients and the itinerary orchestration service.
"""
