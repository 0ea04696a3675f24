"""Conversion of caller-supplied rows into a point table."""

from typing import Any, Iterable, Mapping, Optional, Tuple, Union

import numpy as np
import pandas as pd

from ..abstractions.types import Point
from ..config import config
from ..exceptions import ValidationError

PointsLike = Union[pd.DataFrame, Iterable[Point], Iterable[Mapping[str, Any]]]


def resolve_columns(latitude_column: Optional[str] = None,
                    longitude_column: Optional[str] = None) -> Tuple[str, str]:
    """Fill in column names from configuration."""
    return (
        latitude_column or config.get('input.latitude_column', 'latitude'),
        longitude_column or config.get('input.longitude_column', 'longitude')
    )


def as_point_frame(points: PointsLike,
                   latitude_column: Optional[str] = None,
                   longitude_column: Optional[str] = None) -> pd.DataFrame:
    """Return the points as a DataFrame with latitude and longitude columns.

    DataFrames are returned as-is (no copy); their index is preserved so
    filtered subsets can be traced back to the caller's rows.
    """
    lat_col, lon_col = resolve_columns(latitude_column, longitude_column)

    if isinstance(points, pd.DataFrame):
        frame = points
    else:
        rows = [
            p.to_row(lat_col, lon_col) if isinstance(p, Point) else dict(p)
            for p in points
        ]
        frame = pd.DataFrame(rows) if rows else pd.DataFrame(columns=[lat_col, lon_col])

    missing = [c for c in (lat_col, lon_col) if c not in frame.columns]
    if missing:
        raise ValidationError(
            f"Point table is missing required column(s): {', '.join(missing)}",
            field='columns',
            value=list(frame.columns)
        )
    return frame


def coordinate_arrays(frame: pd.DataFrame,
                      latitude_column: Optional[str] = None,
                      longitude_column: Optional[str] = None) -> Tuple[np.ndarray, np.ndarray]:
    """Extract float latitude/longitude arrays; unparseable values become NaN."""
    lat_col, lon_col = resolve_columns(latitude_column, longitude_column)
    latitudes = pd.to_numeric(frame[lat_col], errors='coerce').to_numpy(dtype=float)
    longitudes = pd.to_numeric(frame[lon_col], errors='coerce').to_numpy(dtype=float)
    return latitudes, longitudes
