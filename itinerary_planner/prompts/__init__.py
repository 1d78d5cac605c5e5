"""
Prompt construction for itinerary generation.
"""
