"""Region parsing: bounding boxes and GeoJSON polygons."""

import json
import math
from pathlib import Path
from typing import Any, List, Mapping, Sequence, Union

import numpy as np
from shapely.errors import GEOSException
from shapely.geometry import MultiPolygon, Polygon, shape

from ..abstractions.types import BoundingBox, PolygonRegion, Region
from ..exceptions import InvalidRegionError
from ..infrastructure.logging import get_logger

logger = get_logger(__name__)

BOX_KEYS = ('north', 'south', 'east', 'west')
POLYGONAL_TYPES = {'Polygon', 'MultiPolygon'}


def validate_bounding_box(box: BoundingBox) -> BoundingBox:
    """Check ordering and geographic range of a box."""
    values = box.to_dict()
    for name, value in values.items():
        if not isinstance(value, (int, float)) or math.isnan(value):
            raise InvalidRegionError(f"Bounding box {name} must be a number", field=name, value=value)

    if not -90 <= box.south <= box.north <= 90:
        raise InvalidRegionError(
            f"Bounding box latitudes must satisfy -90 <= south <= north <= 90, "
            f"got south={box.south}, north={box.north}",
            field='south', value=box.south
        )
    if not -180 <= box.west <= box.east <= 180:
        raise InvalidRegionError(
            f"Bounding box longitudes must satisfy -180 <= west <= east <= 180, "
            f"got west={box.west}, east={box.east}",
            field='west', value=box.west
        )
    return box


def _box_from_mapping(data: Mapping[str, Any]) -> BoundingBox:
    try:
        box = BoundingBox(**{k: float(data[k]) for k in BOX_KEYS})
    except (TypeError, ValueError) as e:
        raise InvalidRegionError(f"Bounding box values must be numeric: {e}",
                                 field='bounding_box', value=dict(data)) from e
    return validate_bounding_box(box)


def _collect_geometries(geojson: Mapping[str, Any]) -> List[Mapping[str, Any]]:
    """Flatten Feature/FeatureCollection/GeometryCollection into geometries."""
    geo_type = geojson.get('type')

    if geo_type == 'FeatureCollection':
        geometries = []
        for feature in geojson.get('features') or []:
            geometries.extend(_collect_geometries(feature))
        return geometries
    if geo_type == 'Feature':
        geometry = geojson.get('geometry')
        return _collect_geometries(geometry) if geometry else []
    if geo_type == 'GeometryCollection':
        geometries = []
        for geometry in geojson.get('geometries') or []:
            geometries.extend(_collect_geometries(geometry))
        return geometries
    if geo_type in POLYGONAL_TYPES:
        return [geojson]

    raise InvalidRegionError(
        f"Unsupported region geometry type: {geo_type!r} (expected Polygon or MultiPolygon)",
        field='type', value=geo_type
    )


def _rings_of(polygon: Polygon):
    rings = [np.asarray(polygon.exterior.coords, dtype=float)[:, :2]]
    rings.extend(np.asarray(interior.coords, dtype=float)[:, :2] for interior in polygon.interiors)
    for ring in rings:
        if len(np.unique(ring, axis=0)) < 3:
            raise InvalidRegionError("Polygon rings need at least 3 distinct vertices",
                                     field='coordinates', value=ring.tolist())
    return tuple(rings)


def polygon_region_from_geojson(geojson: Mapping[str, Any]) -> PolygonRegion:
    """Build a PolygonRegion from any polygonal GeoJSON object."""
    polygons = []
    for geometry in _collect_geometries(geojson):
        try:
            geom = shape(geometry)
        except (GEOSException, ValueError, TypeError, KeyError, IndexError, AttributeError) as e:
            raise InvalidRegionError(f"Malformed {geometry.get('type')} coordinates: {e}",
                                     field='coordinates', value=geometry.get('type')) from e

        members = geom.geoms if isinstance(geom, MultiPolygon) else [geom]
        for member in members:
            if member.is_empty:
                continue
            polygons.append(_rings_of(member))

    if not polygons:
        raise InvalidRegionError("Region contains no polygons", field='geojson',
                                 value=geojson.get('type'))

    region = PolygonRegion(polygons=tuple(polygons), geojson=dict(geojson))
    logger.debug(f"Parsed polygon region: {len(region.polygons)} polygon(s), "
                 f"{region.ring_count} ring(s), {region.vertex_count} vertices")
    return region


def parse_region(region: Union[Region, Mapping[str, Any], Sequence[float]]) -> Region:
    """Interpret a caller-supplied region.

    Accepts a BoundingBox or PolygonRegion, a mapping with
    ``north/south/east/west``, a GeoJSON mapping, or a 4-sequence
    ``(west, south, east, north)``.
    """
    if isinstance(region, BoundingBox):
        return validate_bounding_box(region)
    if isinstance(region, PolygonRegion):
        return region
    if isinstance(region, Mapping):
        if all(k in region for k in BOX_KEYS):
            return _box_from_mapping(region)
        if 'type' in region:
            return polygon_region_from_geojson(region)
        raise InvalidRegionError(
            "Region mapping must have north/south/east/west keys or a GeoJSON 'type'",
            field='region', value=sorted(region.keys())
        )
    if isinstance(region, Sequence) and not isinstance(region, (str, bytes)) and len(region) == 4:
        west, south, east, north = region
        return _box_from_mapping({'north': north, 'south': south, 'east': east, 'west': west})

    raise InvalidRegionError(f"Cannot interpret region of type {type(region).__name__}",
                             field='region', value=type(region).__name__)


def load_region(path: Union[str, Path]) -> Region:
    """Read a GeoJSON (or box JSON) file and parse it."""
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidRegionError(f"{path.name} is not valid JSON: {e}",
                                 field='path', value=str(path)) from e
    return parse_region(data)


def bounding_box_of(region: Region) -> BoundingBox:
    """Smallest box enclosing every ring of the region."""
    if isinstance(region, BoundingBox):
        return region

    all_vertices = np.concatenate([ring for rings in region.polygons for ring in rings])
    west, south = all_vertices.min(axis=0)
    east, north = all_vertices.max(axis=0)
    return BoundingBox(north=float(north), south=float(south), east=float(east), west=float(west))
