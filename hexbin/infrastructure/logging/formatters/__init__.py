"""Log formatters for console and file output."""

from .human_formatter import HumanFormatter
from .json_formatter import JsonFormatter

__all__ = ['HumanFormatter', 'JsonFormatter']
