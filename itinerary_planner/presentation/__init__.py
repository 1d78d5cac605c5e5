"""
Display helpers for generated itineraries.
"""
