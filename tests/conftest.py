"""Shared fixtures for hexbin tests."""

import os

# Must be set before hexbin.config builds its global instance
os.environ.setdefault('FORCE_TEST_MODE', 'true')

import numpy as np
import pandas as pd
import pytest

from hexbin.config import config


@pytest.fixture
def scenario_points():
    """Two nearby points inside the 0..20 box and two far outside it."""
    return pd.DataFrame({
        'latitude': [10.0, 10.0001, 50.0, -10.0],
        'longitude': [10.0, 10.0001, 50.0, -10.0],
        'name': ['a', 'b', 'c', 'd']
    })


@pytest.fixture
def scenario_box():
    return {'north': 20, 'south': 0, 'east': 20, 'west': 0}


@pytest.fixture
def random_points():
    """Reproducible scatter over a 10x10 degree area."""
    rng = np.random.default_rng(42)
    return pd.DataFrame({
        'latitude': rng.uniform(0, 10, 2000),
        'longitude': rng.uniform(0, 10, 2000),
        'value': rng.integers(0, 100, 2000)
    })


@pytest.fixture
def square_geojson():
    return {
        'type': 'Polygon',
        'coordinates': [[[2, 2], [8, 2], [8, 8], [2, 8], [2, 2]]]
    }


@pytest.fixture
def holed_geojson():
    return {
        'type': 'Polygon',
        'coordinates': [
            [[0, 0], [10, 0], [10, 10], [0, 10], [0, 0]],
            [[4, 4], [6, 4], [6, 6], [4, 6], [4, 4]]
        ]
    }


@pytest.fixture
def override_config(monkeypatch):
    """Temporarily override a dotted config key."""
    def _override(key, value):
        section, name = key.split('.')
        monkeypatch.setitem(config.settings[section], name, value)
    return _override


@pytest.fixture
def scenario_bundle(scenario_points, scenario_box):
    from hexbin.pipelines import PipelineRequest, run_pipeline
    return run_pipeline(PipelineRequest(
        points=scenario_points, region=scenario_box, resolution=0, bin_step=1, bin_count=1
    ))


@pytest.fixture
def random_bundle(random_points):
    from hexbin.pipelines import PipelineRequest, run_pipeline
    return run_pipeline(PipelineRequest(
        points=random_points, region=[0, 0, 10, 10], resolution=3, bin_step=10, bin_count=3
    ))
