"""
Backend package for the floorplan API.

This package provides a FastAPI application with storage and database
abstractions so the floorplan export and vendor upload flows can run as a
long-lived service as well as behind the Firebase callable functions.
"""
