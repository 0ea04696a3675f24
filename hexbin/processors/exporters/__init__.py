"""Bundle exporters and export size estimation."""

from .base_exporter import BaseExporter, ExportConfig
from .geojson_exporter import (
    GeoJSONExporter,
    bin_filename,
    build_bin_collections,
    build_feature_collection,
    encode_document
)
from .size_estimator import SizeEstimate, estimate_sizes

__all__ = [
    'BaseExporter',
    'ExportConfig',
    'GeoJSONExporter',
    'bin_filename',
    'build_bin_collections',
    'build_feature_collection',
    'encode_document',
    'SizeEstimate',
    'estimate_sizes'
]
