# hexbin/pipelines/stages/filter_stage.py
"""Spatial filtering stage."""

from typing import List

from ...infrastructure.logging import get_logger
from ...spatial.points import as_point_frame
from ...spatial.region import parse_region
from ...spatial.spatial_filter import filter_points
from .base_stage import PipelineStage, StageResult

logger = get_logger(__name__)


class SpatialFilterStage(PipelineStage):
    """Keep the points inside the requested region."""

    @property
    def name(self) -> str:
        return "spatial_filter"

    @property
    def dependencies(self) -> List[str]:
        return []

    def validate(self, context):
        context.set('region', parse_region(context.request.region))

    def execute(self, context) -> StageResult:
        request = context.request
        columns = {
            'latitude_column': request.latitude_column,
            'longitude_column': request.longitude_column
        }
        points = as_point_frame(request.points, **columns)
        filtered = filter_points(points, context.get('region'), **columns)
        context.set('filtered_points', filtered)
        context.update_metadata(total_points_in=len(points), total_points_out=len(filtered))

        return StageResult(
            success=True,
            data={'points_out': len(filtered)},
            metrics={
                'items_processed': len(points),
                'points_out': len(filtered),
                'region_kind': context.get('region').kind
            }
        )
