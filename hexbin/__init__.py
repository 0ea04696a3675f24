"""
Hexagonal binning toolkit for geographic point data.

This package filters point sets to a user-selected region, aggregates the
survivors into H3 hexagons, classifies cell counts into ordered bins and
produces GeoJSON features with distribution statistics for rendering.
"""

__version__ = "1.0.0"
__description__ = "Point to hexagon aggregation with count binning"

# Note: Submodules are imported explicitly by callers so that importing the
# package does not pull in h3, shapely or matplotlib.

__all__ = [
    '__version__',
    '__description__',
]
