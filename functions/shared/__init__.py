"""
Shared types and constants for the floorplan backend and cloud functions.
"""
