# hexbin/pipelines/orchestrator.py
"""Pipeline orchestrator: rows + region + parameters -> Bundle."""

import threading
import time
from collections import defaultdict, deque
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Type, Union

import psutil

from ..abstractions.types import Bundle
from ..binning.palette import PaletteOverrides
from ..exceptions import (
    ComputationError, EmptyRegionError, HexbinError, PipelineCancelledError,
    handle_computation_error
)
from ..infrastructure.logging import LoggingContext, get_logger
from ..spatial.points import PointsLike
from .stages import DEFAULT_STAGES, PipelineStage, StageResult, StageStatus

logger = get_logger(__name__)


class CancellationToken:
    """Cooperative cancellation flag checked between stages."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()


@dataclass(frozen=True)
class PipelineRequest:
    """Everything one run needs. ``None`` parameters fall back to config."""
    points: PointsLike
    region: Any
    resolution: Optional[int] = None
    target_edge_meters: Optional[float] = None  # used when resolution is None
    bin_step: Optional[int] = None
    bin_count: Optional[int] = None
    palette_overrides: Optional[Union[PaletteOverrides, Mapping[str, str]]] = None
    start_color: Optional[str] = None
    end_color: Optional[str] = None
    latitude_column: Optional[str] = None
    longitude_column: Optional[str] = None


@dataclass
class PipelineContext:
    """Shared context for one pipeline run."""
    request: PipelineRequest
    run_id: str
    generation: int = 0
    cancel_token: Optional[CancellationToken] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    shared_data: Dict[str, Any] = field(default_factory=dict)
    advisories: List[HexbinError] = field(default_factory=list)

    def get(self, key: str, default: Any = None) -> Any:
        """Get value from shared data."""
        return self.shared_data.get(key, default)

    def set(self, key: str, value: Any):
        """Set value in shared data."""
        self.shared_data[key] = value

    def update_metadata(self, **kwargs):
        self.metadata.update(kwargs)

    def add_advisory(self, advisory: HexbinError):
        self.advisories.append(advisory)

    def check_cancelled(self, stage: Optional[str] = None):
        if self.cancel_token is not None and self.cancel_token.is_cancelled:
            raise PipelineCancelledError(self.generation, stage)


class HexbinPipeline:
    """
    Stage-based pipeline producing one immutable Bundle per run.

    Features:
    - Stages run in dependency order
    - All parameters are validated before any stage executes
    - Cooperative cancellation between stages
    - Per-stage timing and memory metrics

    A run either returns a complete bundle or raises; nothing from a failed
    run is kept.
    """

    def __init__(self, stages: Optional[List[Type[PipelineStage]]] = None):
        self.stages: List[PipelineStage] = []
        self.stage_registry: Dict[str, PipelineStage] = {}
        self._lock = threading.Lock()
        for stage_class in stages or DEFAULT_STAGES:
            self.register_stage(stage_class())

    def register_stage(self, stage: PipelineStage):
        """Register a pipeline stage."""
        if stage.name in self.stage_registry:
            raise ValueError(f"Stage '{stage.name}' already registered")
        for dep in stage.dependencies:
            if dep not in self.stage_registry:
                raise ValueError(f"Stage '{stage.name}' depends on unknown stage '{dep}'")

        self.stages.append(stage)
        self.stage_registry[stage.name] = stage
        logger.debug(f"Registered stage: {stage.name}")

    def run(self, request: PipelineRequest,
            cancel_token: Optional[CancellationToken] = None,
            generation: int = 0,
            session_id: Optional[str] = None,
            commit_overrides: bool = True) -> Bundle:
        """Run every stage and assemble the bundle.

        With ``commit_overrides`` the request's ``PaletteOverrides`` adopt the
        new bin layout once the bundle is assembled. Callers that may still
        discard the bundle pass False and call ``commit_palette_overrides``
        themselves when they publish it.
        """
        # Stage objects hold per-run status, so runs on one instance are serialised
        with self._lock:
            bundle = self._run(request, cancel_token, generation, session_id)
        if commit_overrides:
            commit_palette_overrides(request, bundle)
        return bundle

    @handle_computation_error("hexbin pipeline")
    def _run(self, request, cancel_token, generation, session_id) -> Bundle:
        logging_context = LoggingContext(session_id=session_id)
        context = PipelineContext(request=request, run_id=logging_context.run_id,
                                  generation=generation, cancel_token=cancel_token)
        execution_order = self._get_execution_order()

        with logging_context.pipeline('hexbin', generation=generation):
            for stage in execution_order:
                stage.reset()

            context.check_cancelled('validation')
            for stage in execution_order:
                stage.validate(context)

            for stage in execution_order:
                context.check_cancelled(stage.name)
                with logging_context.stage(stage.name):
                    self._execute_stage(stage, context)

            context.check_cancelled('assemble')
            bundle = self._assemble(context, dict(logging_context.timings))

        logger.info(f"Run {generation} complete: {bundle.total_points_out:,} points, "
                    f"{bundle.cell_count:,} cells, {len(bundle.advisories)} advisory(ies)")
        return bundle

    def _execute_stage(self, stage: PipelineStage, context: PipelineContext) -> StageResult:
        stage.status = StageStatus.RUNNING
        start_time = time.perf_counter()
        try:
            with self._memory_monitoring_context() as memory:
                result = stage.execute(context)
        except PipelineCancelledError:
            stage.status = StageStatus.CANCELLED
            raise
        except EmptyRegionError as e:
            stage.status = StageStatus.FAILED
            stage.error = str(e)
            logger.warning(str(e), extra={'context': e.details})
            raise
        except Exception as e:
            stage.status = StageStatus.FAILED
            stage.error = str(e)
            logger.log_error_with_context(e, operation=stage.name)
            raise

        if not result.success:
            stage.status = StageStatus.FAILED
            raise ComputationError(f"Stage '{stage.name}' reported failure: {result.warnings}")

        result.execution_time = time.perf_counter() - start_time
        result.memory_delta_mb = memory['delta_mb']
        stage.status = StageStatus.COMPLETED
        stage.result = result
        return result

    @contextmanager
    def _memory_monitoring_context(self):
        process = psutil.Process()
        memory = {'delta_mb': 0.0}
        start_memory = process.memory_info().rss / 1024 / 1024
        yield memory
        memory['delta_mb'] = process.memory_info().rss / 1024 / 1024 - start_memory

    def _assemble(self, context: PipelineContext, timings: Dict[str, float]) -> Bundle:
        features = context.get('features')
        histograms = context.get('histograms')
        if histograms.total_binned != len(features):
            raise ComputationError(
                f"Binned histogram covers {histograms.total_binned} cells "
                f"but {len(features)} features were built"
            )

        return Bundle(
            features=features,
            bin_spec=context.get('bin_spec'),
            resolution=context.get('resolution'),
            total_points_in=context.metadata['total_points_in'],
            total_points_out=context.metadata['total_points_out'],
            histograms=histograms,
            palette=context.get('palette'),
            advisories=tuple(context.advisories),
            generation=context.generation,
            run_id=context.run_id,
            timings=timings
        )

    def _get_execution_order(self) -> List[PipelineStage]:
        """Get stages in execution order respecting dependencies."""
        in_degree = defaultdict(int)
        adjacency = defaultdict(list)

        for stage in self.stages:
            for dep in stage.dependencies:
                adjacency[dep].append(stage.name)
                in_degree[stage.name] += 1

        execution_order = []
        queue = deque(s.name for s in self.stages if in_degree[s.name] == 0)
        while queue:
            stage_name = queue.popleft()
            execution_order.append(self.stage_registry[stage_name])
            for dependent in adjacency[stage_name]:
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    queue.append(dependent)

        return execution_order

    def get_status(self) -> Dict[str, Any]:
        """Status of each stage from the most recent run."""
        return {
            stage.name: {
                'status': stage.status.value,
                'error': stage.error,
                'execution_time': stage.result.execution_time if stage.result else None
            }
            for stage in self.stages
        }


def commit_palette_overrides(request: PipelineRequest, bundle: Bundle) -> Dict[str, str]:
    """Reconcile the request's override object against a published bundle."""
    overrides = request.palette_overrides
    if isinstance(overrides, PaletteOverrides):
        return overrides.reconcile(bundle.bin_spec)
    return {}


def run_pipeline(request: PipelineRequest,
                 cancel_token: Optional[CancellationToken] = None,
                 generation: int = 0) -> Bundle:
    """Run the default pipeline once.

    Raises:
        ValidationError: malformed region, resolution, bins or colours
        EmptyRegionError: no point inside the region
        ComputationError: unexpected internal failure
        PipelineCancelledError: ``cancel_token`` was cancelled mid-run
    """
    return HexbinPipeline().run(request, cancel_token=cancel_token, generation=generation)
