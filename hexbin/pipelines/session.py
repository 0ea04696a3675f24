# hexbin/pipelines/session.py
"""Single-flight, last-request-wins execution of pipeline runs."""

import threading
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import replace
from typing import Callable, Optional

from ..abstractions.types import Bundle
from ..binning.palette import PaletteOverrides
from ..config import config
from ..exceptions import HexbinError, PipelineCancelledError
from ..infrastructure.logging import get_logger
from .orchestrator import (
    CancellationToken, HexbinPipeline, PipelineRequest, commit_palette_overrides
)

logger = get_logger(__name__)


class PipelineSession:
    """Runs pipeline requests on a background worker.

    Each submission supersedes the previous one: the older run's token is
    cancelled, and even if it completes its bundle is discarded. A failed
    run leaves the previous bundle in place. The session owns the palette
    overrides shared by all of its runs.

    Example:
        session = PipelineSession()
        future = session.submit(PipelineRequest(points=df, region=box))
        bundle = future.result()
    """

    def __init__(self, on_result: Optional[Callable[[Bundle], None]] = None,
                 on_error: Optional[Callable[[HexbinError], None]] = None,
                 overrides: Optional[PaletteOverrides] = None):
        self.session_id = str(uuid.uuid4())
        self.overrides = overrides or PaletteOverrides()
        self._on_result = on_result
        self._on_error = on_error
        self._executor = ThreadPoolExecutor(
            max_workers=config.get('pipeline.worker_threads', 1),
            thread_name_prefix='hexbin-session'
        )
        self._pipeline = HexbinPipeline()
        self._lock = threading.Lock()
        self._delivery_lock = threading.Lock()
        self._generation = 0
        self._token: Optional[CancellationToken] = None
        self._timer: Optional[threading.Timer] = None
        self._latest: Optional[Bundle] = None
        self._last_error: Optional[HexbinError] = None

    @property
    def latest(self) -> Optional[Bundle]:
        """Most recent bundle from a run that was current when it finished."""
        with self._lock:
            return self._latest

    @property
    def last_error(self) -> Optional[HexbinError]:
        with self._lock:
            return self._last_error

    @property
    def generation(self) -> int:
        with self._lock:
            return self._generation

    def submit(self, request: PipelineRequest) -> Future:
        """Schedule a run, superseding any earlier one.

        The returned future resolves to the run's bundle, or raises its
        error (``PipelineCancelledError`` if it was superseded mid-run).
        """
        if request.palette_overrides is None:
            request = replace(request, palette_overrides=self.overrides)

        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            if self._token is not None:
                self._token.cancel()
            self._generation += 1
            generation = self._generation
            token = CancellationToken()
            self._token = token

        logger.debug(f"Submitted run {generation}")
        return self._executor.submit(self._run, request, token, generation)

    def submit_debounced(self, request: PipelineRequest, wait: Optional[float] = None) -> threading.Timer:
        """Submit after ``wait`` seconds unless another request arrives first."""
        if wait is None:
            wait = config.get('pipeline.debounce_seconds', 0.3)

        timer = threading.Timer(wait, self._fire_debounced, args=(request,))
        timer.daemon = True
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = timer
        timer.start()
        return timer

    def _fire_debounced(self, request: PipelineRequest):
        with self._lock:
            if self._timer is not threading.current_thread():
                return
            self._timer = None
        self.submit(request)

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _run(self, request: PipelineRequest, token: CancellationToken, generation: int) -> Bundle:
        try:
            bundle = self._pipeline.run(request, cancel_token=token, generation=generation,
                                        session_id=self.session_id, commit_overrides=False)
        except PipelineCancelledError:
            logger.debug(f"Run {generation} cancelled")
            raise
        except HexbinError as e:
            with self._lock:
                current = self._is_current(generation)
                if current:
                    self._last_error = e
            if current:
                self._deliver_error(e)
            raise

        with self._lock:
            current = self._is_current(generation)
            if current:
                commit_palette_overrides(request, bundle)
                self._latest = bundle
                self._last_error = None
        if not current:
            logger.debug(f"Discarding result of superseded run {generation}")
        else:
            self._deliver_result(bundle)
        return bundle

    def _deliver_result(self, bundle: Bundle):
        # A newer bundle may have been published since this one
        with self._delivery_lock:
            if self._on_result is None or self.latest is not bundle:
                return
            self._on_result(bundle)

    def _deliver_error(self, error: HexbinError):
        with self._delivery_lock:
            if self._on_error is None or self.last_error is not error:
                return
            self._on_error(error)

    def close(self, wait: bool = True):
        """Cancel pending work and stop the worker."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            if self._token is not None:
                self._token.cancel()
        self._executor.shutdown(wait=wait)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
