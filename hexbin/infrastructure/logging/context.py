"""Logging context management for pipeline runs."""

import time
import uuid
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from .structured_logger import get_logger, run_context, session_context, stage_context


class LoggingContext:
    """Scopes run and stage identifiers for every log line inside a run.

    Timings for each stage are collected in ``timings`` so the orchestrator
    can report them on the bundle.
    """

    def __init__(self, run_id: Optional[str] = None, session_id: Optional[str] = None):
        self.run_id = run_id or str(uuid.uuid4())
        self.session_id = session_id
        self.stage_stack: List[str] = []
        self.timings: Dict[str, float] = {}
        self.logger = get_logger(__name__)

    @contextmanager
    def pipeline(self, name: str, **metadata):
        """Context for one full pipeline run."""
        run_token = run_context.set(self.run_id)
        session_token = session_context.set(self.session_id) if self.session_id else None
        start_time = time.perf_counter()

        self.logger.info(
            f"Pipeline started: {name}",
            extra={'context': {'pipeline_name': name, **metadata}}
        )
        status = 'failed'
        try:
            yield self
            status = 'completed'
        finally:
            duration = time.perf_counter() - start_time
            self.timings[f"pipeline_{name}"] = duration
            self.logger.log_performance(f"pipeline_{name}", duration, status=status)
            run_context.reset(run_token)
            if session_token is not None:
                session_context.reset(session_token)

    @contextmanager
    def stage(self, name: str, **metadata):
        """Context for a single stage."""
        token = stage_context.set(name)
        self.stage_stack.append(name)
        start_time = time.perf_counter()

        self.logger.debug(
            f"Stage started: {name}",
            extra={'context': {'stage_name': name, **metadata}}
        )
        status = 'failed'
        try:
            yield self
            status = 'completed'
        finally:
            duration = time.perf_counter() - start_time
            self.timings[name] = duration
            self.logger.log_performance(f"stage_{name}", duration, status=status)
            self.stage_stack.pop()
            stage_context.reset(token)
