"""Pipeline stages."""

from .base_stage import PipelineStage, StageResult, StageStatus
from .filter_stage import SpatialFilterStage
from .index_stage import HexagonIndexStage
from .binning_stage import BinClassificationStage
from .summary_stage import HistogramStage, PaletteStage

DEFAULT_STAGES = [
    SpatialFilterStage,
    HexagonIndexStage,
    BinClassificationStage,
    HistogramStage,
    PaletteStage
]

__all__ = [
    'PipelineStage',
    'StageResult',
    'StageStatus',
    'SpatialFilterStage',
    'HexagonIndexStage',
    'BinClassificationStage',
    'HistogramStage',
    'PaletteStage',
    'DEFAULT_STAGES'
]
