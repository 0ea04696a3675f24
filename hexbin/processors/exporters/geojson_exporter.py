# hexbin/processors/exporters/geojson_exporter.py
"""GeoJSON documents for hexbin bundles."""

import json
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from ...abstractions.types import Bundle, Feature
from ...config import config
from ...infrastructure.logging import get_logger, log_operation
from .base_exporter import BaseExporter, ExportConfig

logger = get_logger(__name__)


def encode_document(document: Dict[str, Any], indent: Optional[int] = None) -> str:
    """Serialise a document exactly as it is written to disk."""
    if indent is None:
        indent = config.get('export.indent', 2)
    return json.dumps(document, indent=indent, ensure_ascii=False)


def _timestamp(generated_at: Optional[datetime]) -> str:
    generated_at = generated_at or datetime.now(timezone.utc)
    return generated_at.isoformat()


def _collection(features: Iterable[Feature], metadata: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'type': 'FeatureCollection',
        'features': [f.to_geojson() for f in features],
        'properties': {'metadata': metadata}
    }


def _base_metadata(bundle: Bundle, generated_at: Optional[datetime]) -> Dict[str, Any]:
    return {
        'title': config.get('export.title', 'Hexagon Map'),
        'description': config.get('export.description', ''),
        'generated': _timestamp(generated_at),
        'parameters': {
            'resolution': bundle.resolution,
            'bin_step': bundle.bin_spec.step,
            'bin_count': bundle.bin_spec.count,
            'total_points_in': bundle.total_points_in,
            'total_points_out': bundle.total_points_out,
            'cell_count': bundle.cell_count
        }
    }


def build_feature_collection(bundle: Bundle,
                             features: Optional[Iterable[Feature]] = None,
                             generated_at: Optional[datetime] = None) -> Dict[str, Any]:
    """Combined FeatureCollection for a bundle (or a subset of its features)."""
    metadata = _base_metadata(bundle, generated_at)
    metadata['bin_labels'] = bundle.bin_labels
    metadata['bin_edges'] = bundle.bin_spec.edges_for_json()
    return _collection(bundle.features if features is None else features, metadata)


def build_bin_collections(bundle: Bundle,
                          generated_at: Optional[datetime] = None) -> Dict[str, Dict[str, Any]]:
    """One FeatureCollection per bin label that has features, in bin order."""
    collections = {}
    for label, features in bundle.features_by_bin().items():
        metadata = _base_metadata(bundle, generated_at)
        metadata['bin_label'] = label
        metadata['feature_count'] = len(features)
        collections[label] = _collection(features, metadata)
    return collections


def bin_filename(label: str) -> str:
    """Filesystem-safe name for a bin's document, e.g. ``hexbin_11_20.geojson``."""
    safe = re.sub(r'[^0-9A-Za-z]+', '_', label.replace('+', 'plus')).strip('_')
    return f"hexbin_{safe}.geojson"


class GeoJSONExporter(BaseExporter):
    """Write bundles as GeoJSON, either combined or one file per bin."""

    @log_operation("geojson_export")
    def export(self, bundle: Bundle, export_config: ExportConfig) -> List[Path]:
        self._start()
        output_path = export_config.output_path

        if export_config.split_by_bin:
            output_path.mkdir(parents=True, exist_ok=True)
            documents = {
                output_path / bin_filename(label): doc
                for label, doc in build_bin_collections(bundle).items()
            }
        else:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            documents = {output_path: build_feature_collection(bundle)}

        written = []
        for path, document in documents.items():
            if not export_config.include_metadata:
                document.pop('properties', None)
            text = encode_document(document, export_config.indent)
            with open(path, 'w', encoding='utf-8') as f:
                f.write(text)
            self.export_stats['files_written'] += 1
            self.export_stats['bytes_written'] += len(text.encode('utf-8'))
            self.export_stats['features_exported'] += len(document['features'])
            written.append(path)
            logger.debug(f"Wrote {path}")

        self._finish()
        return written

    def validate_export(self, output_path: Path) -> bool:
        """Check that a written file is a FeatureCollection of polygons."""
        try:
            with open(output_path, 'r', encoding='utf-8') as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Export validation failed for {output_path}: {e}")
            return False

        if document.get('type') != 'FeatureCollection':
            return False
        return all(
            feature.get('geometry', {}).get('type') == 'Polygon'
            for feature in document.get('features', [])
        )
