"""Spatial filtering and hexagonal indexing."""

from .points import as_point_frame, coordinate_arrays
from .region import parse_region, load_region, bounding_box_of, validate_bounding_box
from .spatial_filter import filter_points, select_positions, points_in_polygon_mask
from .hexagonal_grid import (
    HexagonalIndexer,
    cell_for_coordinate,
    cell_to_boundary_ring,
    index_points,
    index_coordinates,
    validate_resolution
)

__all__ = [
    'as_point_frame',
    'coordinate_arrays',
    'parse_region',
    'load_region',
    'bounding_box_of',
    'validate_bounding_box',
    'filter_points',
    'select_positions',
    'points_in_polygon_mask',
    'HexagonalIndexer',
    'cell_for_coordinate',
    'cell_to_boundary_ring',
    'index_points',
    'index_coordinates',
    'validate_resolution'
]
