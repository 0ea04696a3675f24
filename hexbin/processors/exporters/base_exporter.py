# hexbin/processors/exporters/base_exporter.py
"""Base exporter for bundle export operations."""

from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from ...abstractions.types import Bundle
from ...config import config
from ...infrastructure.logging import get_logger

logger = get_logger(__name__)


class ExportConfig:
    """Configuration for export operations."""

    def __init__(self,
                 output_path: Path,
                 split_by_bin: bool = False,
                 include_metadata: bool = True,
                 indent: Optional[int] = None,
                 **kwargs):
        self.output_path = Path(output_path)
        self.split_by_bin = split_by_bin
        self.include_metadata = include_metadata
        self.indent = config.get('export.indent', 2) if indent is None else indent
        self.additional_options = kwargs


class BaseExporter(ABC):
    """Abstract base class for bundle exporters."""

    def __init__(self):
        self.export_stats = {
            'features_exported': 0,
            'files_written': 0,
            'bytes_written': 0,
            'start_time': None,
            'end_time': None
        }

    @abstractmethod
    def export(self, bundle: Bundle, export_config: ExportConfig) -> List[Path]:
        """
        Export a bundle.

        Args:
            bundle: Completed pipeline result
            export_config: Export configuration

        Returns:
            Paths of the files written
        """
        pass

    @abstractmethod
    def validate_export(self, output_path: Path) -> bool:
        """Validate an exported file."""
        pass

    def _start(self):
        self.export_stats.update(features_exported=0, files_written=0, bytes_written=0,
                                 start_time=datetime.now(), end_time=None)

    def _finish(self):
        self.export_stats['end_time'] = datetime.now()
        logger.info(f"Export complete: {self.export_stats['files_written']} file(s), "
                    f"{self.export_stats['bytes_written']:,} bytes")

    def get_export_stats(self) -> Dict[str, Any]:
        """Get export statistics."""
        stats = self.export_stats.copy()
        if stats['start_time'] and stats['end_time']:
            stats['duration_seconds'] = (
                stats['end_time'] - stats['start_time']
            ).total_seconds()
        return stats
