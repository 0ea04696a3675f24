"""Two-stage spatial filtering of points against a region.

Boxes are tested inclusively on all four edges. Polygons are first reduced
with their enclosing box, then tested exactly with even-odd ray casting using
the half-open edge rule: an edge participates only when
``(y_i > y) != (y_j > y)``, so a point on a shared vertex is counted by
exactly one of the two edges meeting there.
"""

from typing import Optional

import numpy as np
import pandas as pd

from ..abstractions.types import BoundingBox, PolygonRegion, Region
from ..exceptions import EmptyRegionError
from ..infrastructure.logging import get_logger
from .points import PointsLike, as_point_frame, coordinate_arrays
from .region import bounding_box_of, parse_region

logger = get_logger(__name__)


def _ring_crossings(longitudes: np.ndarray, latitudes: np.ndarray, ring: np.ndarray) -> np.ndarray:
    """Parity of ray crossings between each point and one ring."""
    parity = np.zeros(longitudes.shape, dtype=bool)
    xi, yi = ring[:, 0], ring[:, 1]
    xj, yj = np.roll(xi, 1), np.roll(yi, 1)

    with np.errstate(divide='ignore', invalid='ignore'):
        for k in range(len(ring)):
            straddles = (yi[k] > latitudes) != (yj[k] > latitudes)
            if not straddles.any():
                continue
            x_cross = (xj[k] - xi[k]) * (latitudes - yi[k]) / (yj[k] - yi[k]) + xi[k]
            parity ^= straddles & (longitudes < x_cross)
    return parity


def points_in_polygon_mask(longitudes: np.ndarray, latitudes: np.ndarray,
                           region: PolygonRegion) -> np.ndarray:
    """Exact membership mask for a polygon region (holes and multipolygons)."""
    inside = np.zeros(longitudes.shape, dtype=bool)
    for rings in region.polygons:
        polygon_parity = np.zeros(longitudes.shape, dtype=bool)
        for ring in rings:
            polygon_parity ^= _ring_crossings(longitudes, latitudes, ring)
        inside |= polygon_parity
    return inside


def select_positions(latitudes: np.ndarray, longitudes: np.ndarray, region: Region) -> np.ndarray:
    """Positions (row numbers) of the points inside ``region``.

    The returned positions are ascending and refer to the input arrays, so
    callers correlate survivors by position rather than by coordinates.
    """
    valid = ~(np.isnan(latitudes) | np.isnan(longitudes))
    skipped = int((~valid).sum())
    if skipped:
        logger.debug(f"Skipping {skipped} point(s) with missing coordinates")

    if isinstance(region, BoundingBox):
        positions = np.flatnonzero(valid & region.contains_mask(latitudes, longitudes))
        logger.debug(f"Bounding box filter: {len(latitudes)} -> {len(positions)} points")
        return positions

    # Stage 1: bounding box pre-filter
    bbox = bounding_box_of(region)
    candidates = np.flatnonzero(valid & bbox.contains_mask(latitudes, longitudes))
    logger.debug(f"Stage 1 - bounding box filter: {len(latitudes)} -> {len(candidates)} points")

    # Stage 2: exact polygon test on survivors only
    if candidates.size == 0:
        return candidates
    inside = points_in_polygon_mask(longitudes[candidates], latitudes[candidates], region)
    positions = candidates[inside]
    logger.debug(f"Stage 2 - point in polygon: {len(candidates)} -> {len(positions)} points")
    return positions


def filter_points(points: PointsLike, region, *,
                  latitude_column: Optional[str] = None,
                  longitude_column: Optional[str] = None) -> pd.DataFrame:
    """Return the rows of ``points`` that fall inside ``region``.

    Raises:
        EmptyRegionError: if no point survives. Callers should discard the
            selection rather than render an empty map.
    """
    region = parse_region(region)
    frame = as_point_frame(points, latitude_column, longitude_column)
    latitudes, longitudes = coordinate_arrays(frame, latitude_column, longitude_column)

    positions = select_positions(latitudes, longitudes, region)
    if positions.size == 0:
        raise EmptyRegionError(points_in=len(frame), region_kind=region.kind)

    logger.info(f"Spatial filter ({region.kind}): {len(frame):,} -> {len(positions):,} points")
    return frame.iloc[positions]
