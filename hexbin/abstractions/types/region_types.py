# hexbin/abstractions/types/region_types.py
"""Region type definitions (bounding box or polygon)."""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

import numpy as np

# A ring is an (N, 2) float array of (lon, lat) vertices, closed or open
Ring = np.ndarray
# A polygon is its outer ring followed by zero or more holes
PolygonRings = Tuple[Ring, ...]


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned geographic box, inclusive on all four edges."""
    north: float
    south: float
    east: float
    west: float

    kind = 'bounding_box'

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        """(minx, miny, maxx, maxy) ordering used by shapely."""
        return (self.west, self.south, self.east, self.north)

    def contains(self, latitude: float, longitude: float) -> bool:
        return (self.south <= latitude <= self.north and
                self.west <= longitude <= self.east)

    def contains_mask(self, latitudes: np.ndarray, longitudes: np.ndarray) -> np.ndarray:
        """Vectorised inclusive membership test; NaN coordinates are outside."""
        return ((latitudes >= self.south) & (latitudes <= self.north) &
                (longitudes >= self.west) & (longitudes <= self.east))

    def to_dict(self) -> Dict[str, float]:
        return {'north': self.north, 'south': self.south,
                'east': self.east, 'west': self.west}


@dataclass(frozen=True, eq=False)
class PolygonRegion:
    """One or more polygons (with holes) parsed from GeoJSON."""
    polygons: Tuple[PolygonRings, ...]
    geojson: Optional[Dict[str, Any]] = None

    kind = 'polygon'

    @property
    def ring_count(self) -> int:
        return sum(len(rings) for rings in self.polygons)

    @property
    def vertex_count(self) -> int:
        return sum(len(ring) for rings in self.polygons for ring in rings)


Region = Union[BoundingBox, PolygonRegion]
