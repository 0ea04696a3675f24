# hexbin/config/config.py
"""Configuration manager with YAML override support."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from . import defaults

logger = logging.getLogger(__name__)


class Config:
    """Configuration manager with YAML override support."""

    def __init__(self, config_file: Optional[Path] = None):
        self.settings = self.load_defaults()

        # Explicit files always apply; auto-discovery is skipped under test
        if config_file is None and not self._is_test_mode():
            config_file = self._find_config_file()

        if config_file is not None:
            config_file = Path(config_file)
            if config_file.exists():
                self._load_yaml_config(config_file)
                self.source = config_file
                logger.debug(f"Loaded configuration from {config_file}")
            else:
                self.source = None
                logger.warning(f"Config file {config_file} not found - using defaults")
        else:
            self.source = None
            logger.debug("No config.yml found - using defaults only")

    def _find_config_file(self) -> Optional[Path]:
        """Find config.yml with multiple fallback locations."""
        project_root = Path(defaults.PROJECT_ROOT)

        potential_locations = [
            project_root / 'config.yml',
            Path.cwd() / 'config.yml',
            Path.home() / '.hexbin' / 'config.yml',
        ]

        for location in potential_locations:
            if location.exists() and location.is_file():
                return location

        return None

    def _is_test_mode(self) -> bool:
        """Detect if we're running under pytest or forced test mode."""
        return (
            os.environ.get('FORCE_TEST_MODE', 'false').lower() == 'true' or
            os.environ.get('PYTEST_CURRENT_TEST') is not None
        )

    def load_defaults(self) -> Dict[str, Any]:
        """Load default configuration settings."""
        return {
            'paths': defaults.PATHS.copy(),
            'hexagons': defaults.HEXAGONS.copy(),
            'binning': defaults.BINNING.copy(),
            'histogram': defaults.HISTOGRAM.copy(),
            'palette': defaults.PALETTE.copy(),
            'limits': defaults.LIMITS.copy(),
            'export': defaults.EXPORT.copy(),
            'input': defaults.INPUT.copy(),
            'pipeline': defaults.PIPELINE.copy(),
            'logging': defaults.LOGGING.copy(),
        }

    def _load_yaml_config(self, config_file: Path):
        """Load and merge configuration from a YAML file."""
        with open(config_file, 'r') as file:
            yaml_config = yaml.safe_load(file)
        if yaml_config:
            if not isinstance(yaml_config, dict):
                raise ValueError(f"{config_file} must contain a mapping at the top level")
            self._deep_merge(self.settings, yaml_config)

    def _deep_merge(self, base: dict, override: dict):
        """Deep merge override into base dictionary."""
        for key, value in override.items():
            if isinstance(value, dict) and key in base and isinstance(base[key], dict):
                self._deep_merge(base[key], value)
            else:
                base[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation."""
        keys = key.split(".")
        value = self.settings

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    @property
    def hexagons(self) -> Dict[str, Any]:
        return self.settings.get('hexagons', {})

    @property
    def binning(self) -> Dict[str, Any]:
        return self.settings.get('binning', {})

    @property
    def palette(self) -> Dict[str, Any]:
        return self.settings.get('palette', {})

    @property
    def limits(self) -> Dict[str, Any]:
        return self.settings.get('limits', {})

    @property
    def export(self) -> Dict[str, Any]:
        return self.settings.get('export', {})

    @property
    def paths(self) -> Dict[str, Any]:
        return self.settings.get('paths', {})


# Global instance
config = Config()
