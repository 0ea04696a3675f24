"""Serialized-size estimates for export warnings."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Union

from ...abstractions.types import Bundle, Feature
from ...config import config
from ...exceptions import ValidationError
from ...infrastructure.logging import get_logger, log_operation
from .geojson_exporter import build_bin_collections, build_feature_collection, encode_document

logger = get_logger(__name__)

GROUP_BY_OPTIONS = ('none', 'bin')


@dataclass(frozen=True)
class SizeEstimate:
    """Byte sizes of the documents an export would produce."""
    single_file_bytes: int
    per_group_bytes: Dict[str, int] = field(default_factory=dict)
    total_archive_bytes: int = 0
    warnings: List[str] = field(default_factory=list)

    @property
    def single_file_mb(self) -> float:
        return self.single_file_bytes / (1024 * 1024)

    @property
    def total_archive_mb(self) -> float:
        return self.total_archive_bytes / (1024 * 1024)


def _byte_length(document) -> int:
    return len(encode_document(document).encode('utf-8'))


def _plain_collections(features: List[Feature]):
    combined = {'type': 'FeatureCollection', 'features': [f.to_geojson() for f in features]}
    grouped: Dict[str, List[Feature]] = {}
    for feature in features:
        grouped.setdefault(feature.bin_label, []).append(feature)
    per_bin = {
        label: {'type': 'FeatureCollection', 'features': [f.to_geojson() for f in items]}
        for label, items in grouped.items()
    }
    return combined, per_bin


def _format_mb(size: int) -> str:
    return f"{size / (1024 * 1024):.1f} MB"


@log_operation("estimate_sizes")
def estimate_sizes(source: Union[Bundle, Iterable[Feature]],
                   group_by: str = 'none',
                   generated_at: Optional[datetime] = None) -> SizeEstimate:
    """Measure the combined document and, for ``group_by='bin'``, one per bin.

    Documents are encoded with the exporter's encoder so the estimate matches
    what would be written. The grouped total adds a fixed per-entry archive
    overhead. Nothing is written.
    """
    if group_by not in GROUP_BY_OPTIONS:
        raise ValidationError(f"group_by must be one of {GROUP_BY_OPTIONS}, got {group_by!r}",
                              field='group_by', value=group_by)

    if isinstance(source, Bundle):
        feature_count = source.cell_count
        combined = build_feature_collection(source, generated_at=generated_at)
        per_bin = build_bin_collections(source, generated_at=generated_at) if group_by == 'bin' else {}
    else:
        features = list(source)
        feature_count = len(features)
        combined, per_bin = _plain_collections(features)
        if group_by == 'none':
            per_bin = {}

    single = _byte_length(combined)
    warnings = []
    single_limit = config.get('export.single_file_warn_bytes', 2 * 1024 * 1024)
    if single > single_limit:
        warnings.append(f"Combined GeoJSON is {_format_mb(single)}, above the "
                        f"{_format_mb(single_limit)} warning threshold")

    hexagon_limit = config.get('export.hexagon_warn_count', 10000)
    if feature_count > hexagon_limit:
        warnings.append(f"{feature_count:,} hexagons may render slowly (more than {hexagon_limit:,}); "
                        f"consider a lower resolution")

    if group_by == 'none':
        estimate = SizeEstimate(single_file_bytes=single, per_group_bytes={},
                                total_archive_bytes=single, warnings=warnings)
    else:
        overhead = config.get('export.zip_entry_overhead', 100)
        per_group = {label: _byte_length(doc) for label, doc in per_bin.items()}
        total = sum(size + overhead for size in per_group.values())
        archive_limit = config.get('export.archive_warn_bytes', 5 * 1024 * 1024)
        if total > archive_limit:
            warnings.append(f"Per-bin archive is {_format_mb(total)}, above the "
                            f"{_format_mb(archive_limit)} warning threshold")
        estimate = SizeEstimate(single_file_bytes=single, per_group_bytes=per_group,
                                total_archive_bytes=total, warnings=warnings)

    for warning in warnings:
        logger.warning(warning)
    return estimate
