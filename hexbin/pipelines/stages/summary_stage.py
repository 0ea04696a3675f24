# hexbin/pipelines/stages/summary_stage.py
"""Histogram and palette stages."""

from typing import List

from ...binning.histogram_builder import build_histograms
from ...binning.palette import PaletteOverrides, assign_palette, validate_hex_color
from ...infrastructure.logging import get_logger
from .base_stage import PipelineStage, StageResult

logger = get_logger(__name__)


class HistogramStage(PipelineStage):
    """Raw and binned count distributions."""

    @property
    def name(self) -> str:
        return "histogram"

    @property
    def dependencies(self) -> List[str]:
        return ["bin_classification"]

    def execute(self, context) -> StageResult:
        histograms = build_histograms(context.get('cell_counts'), context.get('bin_spec'))
        context.set('histograms', histograms)
        return StageResult(
            success=True,
            data={},
            metrics={'max_count': histograms.max_count, 'total_binned': histograms.total_binned}
        )


class PaletteStage(PipelineStage):
    """Colour per bin label, honouring caller overrides."""

    @property
    def name(self) -> str:
        return "palette"

    @property
    def dependencies(self) -> List[str]:
        return ["bin_classification"]

    def validate(self, context):
        request = context.request
        if request.start_color is not None:
            validate_hex_color(request.start_color, 'start_color')
        if request.end_color is not None:
            validate_hex_color(request.end_color, 'end_color')

    def execute(self, context) -> StageResult:
        request = context.request
        spec = context.get('bin_spec')
        overrides = request.palette_overrides

        if isinstance(overrides, PaletteOverrides):
            palette, dropped = overrides.preview(spec, request.start_color, request.end_color)
            if dropped:
                logger.debug(f"Overrides for {sorted(dropped)} do not apply to this bin layout")
        else:
            palette = assign_palette(spec.labels, overrides, request.start_color, request.end_color)
        context.set('palette', palette)

        return StageResult(success=True, data={}, metrics={'colours': len(palette)})
