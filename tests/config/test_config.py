"""Tests for configuration loading."""

import pytest
import yaml

from hexbin.config import Config, config


class TestConfig:

    def test_defaults(self):
        cfg = Config()

        assert cfg.get('hexagons.default_resolution') == 8
        assert cfg.get('binning.default_step') == 10
        assert cfg.get('limits.max_hexagons') == 5000
        assert cfg.get('export.zip_entry_overhead') == 100
        assert cfg.source is None

    def test_missing_key_returns_default(self):
        assert Config().get('hexagons.nope', 'fallback') == 'fallback'
        assert Config().get('nope.deeper') is None

    def test_yaml_is_deep_merged(self, tmp_path):
        path = tmp_path / 'config.yml'
        path.write_text(yaml.safe_dump({'binning': {'default_step': 25}, 'limits': {'max_rows': 10}}))

        cfg = Config(path)

        assert cfg.source == path
        assert cfg.binning['default_step'] == 25
        assert cfg.binning['default_count'] == 5
        assert cfg.limits['max_rows'] == 10
        assert cfg.limits['max_hexagons'] == 5000

    def test_missing_file_uses_defaults(self, tmp_path):
        cfg = Config(tmp_path / 'absent.yml')

        assert cfg.source is None
        assert cfg.get('palette.start_color') == '#ffffff'

    def test_non_mapping_yaml_rejected(self, tmp_path):
        path = tmp_path / 'config.yml'
        path.write_text('- just\n- a list\n')

        with pytest.raises(ValueError):
            Config(path)

    def test_instances_do_not_share_settings(self):
        cfg = Config()
        cfg.settings['hexagons']['default_resolution'] = 3

        assert config.get('hexagons.default_resolution') == 8

    def test_section_properties(self):
        cfg = Config()

        assert cfg.hexagons['max_resolution'] == 15
        assert cfg.palette['end_color'] == '#5e3c99'
        assert cfg.export['indent'] == 2
        assert 'logs_dir' in cfg.paths
