"""Setup and configuration for the structured logging system."""

import logging
import sys
from pathlib import Path
from typing import Optional

from .handlers import ConsoleHandler, FileHandler
from .structured_logger import get_logger


def setup_logging(config,
                  log_file: Optional[str] = None,
                  console: bool = True,
                  log_level: Optional[str] = None):
    """Configure console and file logging for the ``hexbin`` logger tree.

    Args:
        config: Config instance (reads ``logging.*`` and ``paths.logs_dir``)
        log_file: Log file path; defaults to ``<logs_dir>/hexbin.log``
        console: Whether to enable console logging
        log_level: Minimum level; defaults to ``logging.level`` from config
    """
    log_level = log_level or config.get('logging.level', 'INFO')
    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger('hexbin')
    root_logger.setLevel(min(level, logging.DEBUG) if config.get('logging.file', True) else level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    if console:
        console_handler = ConsoleHandler(use_colors=sys.stderr.isatty(), show_context=True)
        console_handler.setLevel(level)
        root_logger.addHandler(console_handler)

    if log_file is None and config.get('logging.file', True):
        log_file = str(Path(config.get('paths.logs_dir', 'logs')) / 'hexbin.log')

    if log_file:
        file_handler = FileHandler(
            filename=str(log_file),
            max_bytes=config.get('logging.max_file_size', 10 * 1024 * 1024),
            backup_count=config.get('logging.backup_count', 3)
        )
        root_logger.addHandler(file_handler)

    get_logger(__name__).debug(
        "Structured logging initialized",
        extra={'context': {'log_level': log_level, 'log_file': str(log_file) if log_file else None}}
    )


def setup_simple_logging(log_level: str = 'INFO'):
    """Console-only logging for scripts and debugging."""
    level = getattr(logging, log_level.upper(), logging.INFO)
    root_logger = logging.getLogger('hexbin')
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = ConsoleHandler(show_context=True)
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)
