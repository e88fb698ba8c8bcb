"""
Gym records as consumed by the map clustering engine.
"""
