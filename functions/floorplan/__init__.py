"""
Floorplan geometry, rasterization and export.
"""
