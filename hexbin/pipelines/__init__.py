"""Pipeline orchestration."""

from .orchestrator import (
    CancellationToken,
    HexbinPipeline,
    PipelineContext,
    PipelineRequest,
    commit_palette_overrides,
    run_pipeline
)
from .session import PipelineSession

__all__ = [
    'CancellationToken',
    'HexbinPipeline',
    'PipelineContext',
    'PipelineRequest',
    'PipelineSession',
    'commit_palette_overrides',
    'run_pipeline'
]
