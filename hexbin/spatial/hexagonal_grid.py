"""Hexagonal cell assignment using H3."""

from collections import Counter
from typing import Dict, Iterable, Optional, Tuple

import h3  # type: ignore
import numpy as np

from ..config import config
from ..exceptions import ValidationError
from ..infrastructure.logging import get_logger
from .points import PointsLike, as_point_frame, coordinate_arrays

logger = get_logger(__name__)

# Approximate H3 hexagon edge length per resolution
H3_EDGE_LENGTH_METERS = {
    0: 1107712,   # ~1107 km
    1: 418676,    # ~418 km
    2: 158244,    # ~158 km
    3: 59810,     # ~59 km
    4: 22606,     # ~22 km
    5: 8544,      # ~8.5 km
    6: 3229,      # ~3.2 km
    7: 1220,      # ~1.2 km
    8: 461,       # ~461 m
    9: 174,       # ~174 m
    10: 66,       # ~66 m
    11: 25,       # ~25 m
    12: 9,        # ~9 m
    13: 3,        # ~3 m
    14: 1,        # ~1 m
    15: 0.5       # ~0.5 m
}


def validate_resolution(resolution) -> int:
    """Ensure ``resolution`` is an integer H3 resolution."""
    min_res = config.get('hexagons.min_resolution', 0)
    max_res = config.get('hexagons.max_resolution', 15)
    if isinstance(resolution, bool) or not isinstance(resolution, (int, np.integer)):
        raise ValidationError(f"Resolution must be an integer, got {resolution!r}",
                              field='resolution', value=resolution)
    if not min_res <= resolution <= max_res:
        raise ValidationError(
            f"Resolution must be between {min_res} and {max_res}, got {resolution}",
            field='resolution', value=int(resolution)
        )
    return int(resolution)


def cell_for_coordinate(latitude: float, longitude: float, resolution: int) -> str:
    """H3 cell containing a coordinate."""
    return h3.latlng_to_cell(latitude, longitude, resolution)


def cell_to_boundary_ring(cell_id: str) -> Tuple[Tuple[float, float], ...]:
    """Closed ring of ``(lon, lat)`` vertices for a cell."""
    coords = [(lng, lat) for lat, lng in h3.cell_to_boundary(cell_id)]
    coords.append(coords[0])
    return tuple(coords)


def index_coordinates(latitudes: Iterable[float], longitudes: Iterable[float],
                      resolution: int) -> Dict[str, int]:
    """Count points per cell; NaN coordinates are skipped."""
    resolution = validate_resolution(resolution)
    counts: Counter = Counter()
    for lat, lng in zip(latitudes, longitudes):
        if lat != lat or lng != lng:  # NaN
            continue
        counts[h3.latlng_to_cell(float(lat), float(lng), resolution)] += 1
    return dict(counts)


def index_points(points: PointsLike, resolution: int, *,
                 latitude_column: Optional[str] = None,
                 longitude_column: Optional[str] = None) -> Dict[str, int]:
    """Map each occupied cell to its point count."""
    frame = as_point_frame(points, latitude_column, longitude_column)
    latitudes, longitudes = coordinate_arrays(frame, latitude_column, longitude_column)
    counts = index_coordinates(latitudes, longitudes, resolution)
    logger.info(f"Hexagon assignment: {len(frame):,} points -> {len(counts):,} cells "
                f"at resolution {resolution}")
    return counts


class HexagonalIndexer:
    """Resolution-bound helper around the H3 functions.

    Efficient for spatial aggregation with uniform neighbour distances.
    """

    def __init__(self, resolution: Optional[int] = None):
        if resolution is None:
            resolution = config.get('hexagons.default_resolution', 8)
        self.resolution = validate_resolution(resolution)

    @classmethod
    def select_resolution(cls, target_edge_meters: float) -> int:
        """Coarsest resolution whose edge length does not exceed the target."""
        numeric = isinstance(target_edge_meters, (int, float)) and not isinstance(target_edge_meters, bool)
        if not numeric or not target_edge_meters > 0:
            raise ValidationError(f"Target edge length must be positive, got {target_edge_meters}",
                                  field='target_edge_meters', value=target_edge_meters)
        for res, meters in H3_EDGE_LENGTH_METERS.items():
            if meters <= target_edge_meters:
                return res
        return 15

    @property
    def edge_length_km(self) -> float:
        return h3.average_hexagon_edge_length(self.resolution, unit='km')

    def index(self, points: PointsLike, **columns) -> Dict[str, int]:
        """Cell counts for ``points`` at this indexer's resolution."""
        return index_points(points, self.resolution, **columns)
