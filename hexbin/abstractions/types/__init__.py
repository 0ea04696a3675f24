# hexbin/abstractions/types/__init__.py
"""Type definitions for the abstractions layer."""

from .point_types import Point
from .region_types import BoundingBox, PolygonRegion, Region
from .bin_types import Bin, BinSpec, RawBucket, BinnedCount, Histograms
from .bundle_types import Feature, Bundle

__all__ = [
    'Point',
    'BoundingBox',
    'PolygonRegion',
    'Region',
    'Bin',
    'BinSpec',
    'RawBucket',
    'BinnedCount',
    'Histograms',
    'Feature',
    'Bundle'
]
