# hexbin/abstractions/types/bundle_types.py
"""Output feature and bundle type definitions."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .bin_types import BinSpec, Histograms

Coordinate = Tuple[float, float]  # (lon, lat)


@dataclass(frozen=True)
class Feature:
    """One non-empty hexagon ready for rendering or export."""
    cell_id: str
    count: int
    bin_label: str
    bin_index: int
    boundary: Tuple[Coordinate, ...]

    def to_geojson(self) -> Dict[str, Any]:
        return {
            'type': 'Feature',
            'geometry': {
                'type': 'Polygon',
                'coordinates': [[list(c) for c in self.boundary]]
            },
            'properties': {
                'cell_id': self.cell_id,
                'count': self.count,
                'bin_label': self.bin_label
            }
        }


@dataclass(frozen=True)
class Bundle:
    """Complete, immutable result of one pipeline run."""
    features: Tuple[Feature, ...]
    bin_spec: BinSpec
    resolution: int
    total_points_in: int
    total_points_out: int
    histograms: Histograms
    palette: Dict[str, str] = field(default_factory=dict)
    advisories: Tuple[Any, ...] = ()
    generation: int = 0
    run_id: Optional[str] = None
    timings: Dict[str, float] = field(default_factory=dict)

    @property
    def cell_count(self) -> int:
        return len(self.features)

    @property
    def bin_labels(self) -> List[str]:
        return self.bin_spec.labels

    def features_by_bin(self) -> Dict[str, List[Feature]]:
        """Group features by bin label in bin order, skipping empty bins."""
        grouped: Dict[str, List[Feature]] = {label: [] for label in self.bin_spec.labels}
        for feature in self.features:
            grouped[feature.bin_label].append(feature)
        return {label: items for label, items in grouped.items() if items}

    def metadata(self) -> Dict[str, Any]:
        return {
            'resolution': self.resolution,
            'bin_step': self.bin_spec.step,
            'bin_count': self.bin_spec.count,
            'bin_edges': self.bin_spec.edges_for_json(),
            'bin_labels': self.bin_spec.labels,
            'total_points_in': self.total_points_in,
            'total_points_out': self.total_points_out,
            'cell_count': self.cell_count
        }
