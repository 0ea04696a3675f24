"""Structured logging with context propagation for pipeline runs."""

import logging
import sys
import traceback
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Dict, Optional

# Context variables for correlating log lines across the session worker thread
session_context: ContextVar[Optional[str]] = ContextVar('session_id', default=None)
run_context: ContextVar[Optional[str]] = ContextVar('run_id', default=None)
stage_context: ContextVar[Optional[str]] = ContextVar('stage', default=None)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


class StructuredLogger(logging.Logger):
    """Logger that attaches run context and performance data to records.

    Every record gets a ``context`` dict (session, run and stage ids plus any
    ``extra["context"]`` fields), an optional ``performance`` dict and an optional
    ``traceback`` string, which the formatters render.
    """

    def _log(self, level, msg, args, exc_info=None, extra=None, stack_info=False, **kwargs):
        context = {
            'session_id': session_context.get(),
            'run_id': run_context.get(),
            'stage': stage_context.get(),
            'logger_name': self.name,
            'timestamp': _utc_now()
        }
        context = {k: v for k, v in context.items() if v is not None}

        performance = None
        traceback_str = None
        if extra and isinstance(extra, dict):
            extra = dict(extra)
            performance = extra.pop('performance', None)
            context.update(extra.pop('context', {}) or {})
            traceback_str = extra.pop('traceback', None)

        if not traceback_str and exc_info:
            if isinstance(exc_info, bool):
                exc_info = sys.exc_info()
            elif isinstance(exc_info, BaseException):
                exc_info = (type(exc_info), exc_info, exc_info.__traceback__)
            if exc_info[0] is not None:
                traceback_str = ''.join(traceback.format_exception(*exc_info))

        if extra is None:
            extra = {}
        extra.update({
            'context': context,
            'performance': performance,
            'traceback': traceback_str
        })

        super()._log(level, msg, args, exc_info=False, extra=extra,
                     stack_info=stack_info, **kwargs)

    def log_performance(self, operation: str, duration: float, **metrics):
        """Log performance metrics for an operation.

        Example:
            logger.log_performance('spatial_filter', 0.42, items_processed=250000)
        """
        performance_data = {
            'operation': operation,
            'duration_seconds': round(duration, 3),
            **metrics
        }

        if 'items_processed' in metrics and duration > 0:
            performance_data['items_per_second'] = round(
                metrics['items_processed'] / duration, 2
            )

        self.info(
            f"Performance: {operation} completed in {duration:.3f}s",
            extra={'performance': performance_data}
        )

    def log_error_with_context(self, error: Exception, operation: Optional[str] = None, **context):
        """Log an error with its structured details and traceback."""
        error_context = {
            'error_type': type(error).__name__,
            **getattr(error, 'details', {}),
            **context
        }
        if operation:
            error_context['operation'] = operation

        self.error(
            f"{type(error).__name__}: {error}",
            exc_info=error,
            extra={'context': error_context}
        )


_logger_cache: Dict[str, StructuredLogger] = {}


def get_logger(name: str) -> StructuredLogger:
    """Get or create a structured logger instance.

    Example:
        from hexbin.infrastructure.logging import get_logger
        logger = get_logger(__name__)
    """
    if name in _logger_cache:
        return _logger_cache[name]

    original_class = logging.getLoggerClass()
    logging.setLoggerClass(StructuredLogger)
    try:
        logger = logging.getLogger(name)
    finally:
        logging.setLoggerClass(original_class)

    if not isinstance(logger, StructuredLogger):
        # Name was already claimed by a plain logger; keep the hierarchy intact
        structured = StructuredLogger(name)
        structured.parent = logger.parent
        structured.propagate = True
        logger = structured

    _logger_cache[name] = logger
    return logger
