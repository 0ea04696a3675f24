"""Structured logging infrastructure for pipeline monitoring."""

from .structured_logger import (
    StructuredLogger, get_logger, run_context, session_context, stage_context
)
from .context import LoggingContext
from .decorators import log_operation
from .setup import setup_logging, setup_simple_logging

__all__ = [
    'StructuredLogger',
    'get_logger',
    'run_context',
    'session_context',
    'stage_context',
    'LoggingContext',
    'log_operation',
    'setup_logging',
    'setup_simple_logging'
]
