# hexbin/pipelines/stages/index_stage.py
"""Hexagon indexing stage."""

from typing import List

from ...config import config
from ...exceptions import LimitExceededError
from ...infrastructure.logging import get_logger
from ...spatial.hexagonal_grid import HexagonalIndexer
from .base_stage import PipelineStage, StageResult

logger = get_logger(__name__)


class HexagonIndexStage(PipelineStage):
    """Count filtered points per H3 cell."""

    @property
    def name(self) -> str:
        return "hexagon_index"

    @property
    def dependencies(self) -> List[str]:
        return ["spatial_filter"]

    def validate(self, context):
        request = context.request
        resolution = request.resolution
        if resolution is None and request.target_edge_meters is not None:
            resolution = HexagonalIndexer.select_resolution(request.target_edge_meters)
        indexer = HexagonalIndexer(resolution)
        context.set('indexer', indexer)
        context.set('resolution', indexer.resolution)

    def execute(self, context) -> StageResult:
        request = context.request
        indexer = context.get('indexer')
        counts = indexer.index(
            context.get('filtered_points'),
            latitude_column=request.latitude_column,
            longitude_column=request.longitude_column
        )
        context.set('cell_counts', counts)

        warnings = []
        max_hexagons = config.get('limits.max_hexagons', 5000)
        if len(counts) > max_hexagons:
            advisory = LimitExceededError(
                'hexagons', max_hexagons, len(counts),
                hint="Consider a lower resolution or a smaller region"
            )
            context.add_advisory(advisory)
            warnings.append(advisory.message)
            logger.warning(advisory.message)

        return StageResult(
            success=True,
            data={'cell_count': len(counts)},
            metrics={
                'items_processed': len(context.get('filtered_points')),
                'cell_count': len(counts),
                'resolution': indexer.resolution,
                'edge_length_km': indexer.edge_length_km
            },
            warnings=warnings
        )
