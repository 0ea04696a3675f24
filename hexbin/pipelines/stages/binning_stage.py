# hexbin/pipelines/stages/binning_stage.py
"""Bin classification and feature assembly stage."""

from typing import List

import numpy as np

from ...abstractions.types import Feature
from ...binning.bin_classifier import build_bins, classify_many
from ...config import config
from ...infrastructure.logging import get_logger
from ...spatial.hexagonal_grid import cell_to_boundary_ring
from .base_stage import PipelineStage, StageResult

logger = get_logger(__name__)


class BinClassificationStage(PipelineStage):
    """Classify each occupied cell and build its output feature."""

    @property
    def name(self) -> str:
        return "bin_classification"

    @property
    def dependencies(self) -> List[str]:
        return ["hexagon_index"]

    def validate(self, context):
        request = context.request
        step = config.get('binning.default_step', 10) if request.bin_step is None else request.bin_step
        count = config.get('binning.default_count', 5) if request.bin_count is None else request.bin_count
        context.set('bin_spec', build_bins(step, count))

    def execute(self, context) -> StageResult:
        counts = context.get('cell_counts')
        spec = context.get('bin_spec')

        cell_ids = sorted(counts)
        indices = classify_many(np.array([counts[c] for c in cell_ids], dtype=np.int64), spec)
        features = tuple(
            Feature(
                cell_id=cell_id,
                count=counts[cell_id],
                bin_label=spec.bins[int(index)].label,
                bin_index=int(index),
                boundary=cell_to_boundary_ring(cell_id)
            )
            for cell_id, index in zip(cell_ids, indices)
        )
        context.set('features', features)

        per_bin = np.bincount(indices, minlength=spec.count) if len(indices) else np.zeros(spec.count, int)
        return StageResult(
            success=True,
            data={'feature_count': len(features)},
            metrics={
                'items_processed': len(features),
                'cells_per_bin': {b.label: int(per_bin[b.index]) for b in spec.bins}
            }
        )
