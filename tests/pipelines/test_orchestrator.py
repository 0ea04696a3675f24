"""Tests for the pipeline orchestrator."""

import pandas as pd
import pytest

from hexbin.binning import PaletteOverrides
from hexbin.exceptions import (
    ComputationError, EmptyRegionError, InvalidBinParametersError, InvalidRegionError,
    LimitExceededError, PipelineCancelledError, ValidationError
)
from hexbin.pipelines import (
    CancellationToken, HexbinPipeline, PipelineRequest, commit_palette_overrides, run_pipeline
)
from hexbin.pipelines.stages import DEFAULT_STAGES, PipelineStage, StageResult, StageStatus


class BrokenStage(PipelineStage):

    @property
    def name(self):
        return "broken"

    @property
    def dependencies(self):
        return ["palette"]

    def execute(self, context):
        raise RuntimeError("boom")


class CancelAfterPaletteStage(PipelineStage):
    """Cancels the run once the palette is built, before the bundle is assembled."""

    @property
    def name(self):
        return "cancel_after_palette"

    @property
    def dependencies(self):
        return ["palette"]

    def execute(self, context):
        context.cancel_token.cancel()
        return StageResult(success=True, data={}, metrics={})


class TestEndToEnd:
    """Full runs from rows to bundle."""

    def test_scenario(self, scenario_bundle):
        bundle = scenario_bundle

        assert bundle.total_points_in == 4
        assert bundle.total_points_out == 2
        assert bundle.cell_count == 1
        feature = bundle.features[0]
        assert feature.count == 2
        assert feature.bin_label == '1+'
        assert feature.bin_index == 0
        assert bundle.bin_labels == ['1+']
        assert set(bundle.palette) == {'1+'}
        assert bundle.advisories == ()

    def test_metadata(self, scenario_bundle):
        assert scenario_bundle.metadata() == {
            'resolution': 0,
            'bin_step': 1,
            'bin_count': 1,
            'bin_edges': [0.0, None],
            'bin_labels': ['1+'],
            'total_points_in': 4,
            'total_points_out': 2,
            'cell_count': 1
        }

    def test_histograms_agree_with_features(self, random_bundle):
        assert random_bundle.histograms.total_binned == random_bundle.cell_count
        for binned in random_bundle.histograms.binned:
            in_bin = [f for f in random_bundle.features if f.bin_label == binned.label]
            assert len(in_bin) == binned.hexagon_count

    def test_counts_sum_to_points_out(self, random_bundle):
        assert sum(f.count for f in random_bundle.features) == random_bundle.total_points_out

    def test_features_sorted_by_cell_id(self, random_bundle):
        ids = [f.cell_id for f in random_bundle.features]
        assert ids == sorted(ids)

    def test_stage_timings_recorded(self, scenario_bundle):
        for stage in ('spatial_filter', 'hexagon_index', 'bin_classification', 'histogram', 'palette'):
            assert stage in scenario_bundle.timings
        assert scenario_bundle.run_id

    def test_defaults_from_config(self, scenario_points, scenario_box):
        bundle = run_pipeline(PipelineRequest(points=scenario_points, region=scenario_box))

        assert bundle.resolution == 8
        assert bundle.bin_spec.generation == (10, 5)

    def test_resolution_from_target_edge_length(self, random_points):
        bundle = run_pipeline(PipelineRequest(points=random_points, region=[0, 0, 10, 10],
                                              target_edge_meters=100000))

        assert bundle.resolution == 3

    def test_explicit_resolution_beats_edge_length(self, random_points):
        bundle = run_pipeline(PipelineRequest(points=random_points, region=[0, 0, 10, 10],
                                              resolution=2, target_edge_meters=100000))

        assert bundle.resolution == 2

    def test_palette_overrides_object(self, scenario_points, scenario_box):
        overrides = PaletteOverrides({'1+': '#123456'})
        bundle = run_pipeline(PipelineRequest(
            points=scenario_points, region=scenario_box, resolution=0,
            bin_step=1, bin_count=1, palette_overrides=overrides
        ))

        assert bundle.palette == {'1+': '#123456'}
        assert overrides.generation == (1, 1)

    def test_polygon_region(self, random_points, holed_geojson):
        bundle = run_pipeline(PipelineRequest(points=random_points, region=holed_geojson, resolution=4))

        lat, lon = random_points['latitude'], random_points['longitude']
        in_hole = ((lat > 4) & (lat < 6) & (lon > 4) & (lon < 6)).sum()
        assert bundle.total_points_out == len(random_points) - in_hole


class TestFailures:
    """A run returns a complete bundle or raises."""

    def test_invalid_bins_rejected(self, scenario_points, scenario_box):
        with pytest.raises(InvalidBinParametersError):
            run_pipeline(PipelineRequest(points=scenario_points, region=scenario_box, bin_step=0))

    def test_invalid_resolution_rejected(self, scenario_points, scenario_box):
        with pytest.raises(ValidationError) as exc_info:
            run_pipeline(PipelineRequest(points=scenario_points, region=scenario_box, resolution=16))

        assert exc_info.value.field == 'resolution'

    def test_invalid_region_rejected(self, scenario_points):
        with pytest.raises(InvalidRegionError):
            run_pipeline(PipelineRequest(points=scenario_points, region={'type': 'LineString'}))

    def test_invalid_colour_rejected(self, scenario_points, scenario_box):
        with pytest.raises(ValidationError):
            run_pipeline(PipelineRequest(points=scenario_points, region=scenario_box, end_color='purple'))

    def test_empty_region(self, scenario_points):
        with pytest.raises(EmptyRegionError) as exc_info:
            run_pipeline(PipelineRequest(points=scenario_points, region=[100, 60, 110, 70]))

        assert exc_info.value.points_in == 4

    def test_cancelled_token(self, scenario_points, scenario_box):
        token = CancellationToken()
        token.cancel()

        with pytest.raises(PipelineCancelledError) as exc_info:
            run_pipeline(PipelineRequest(points=scenario_points, region=scenario_box),
                         cancel_token=token, generation=3)

        assert exc_info.value.generation == 3

    def test_cancelled_run_keeps_caller_overrides(self, random_points):
        overrides = PaletteOverrides({'11–20': '#ff0000'}, generation=(10, 3))
        pipeline = HexbinPipeline(DEFAULT_STAGES + [CancelAfterPaletteStage])

        with pytest.raises(PipelineCancelledError):
            pipeline.run(PipelineRequest(points=random_points, region=[0, 0, 10, 10], resolution=3,
                                         bin_step=5, bin_count=3, palette_overrides=overrides),
                         cancel_token=CancellationToken())

        assert overrides.snapshot() == {'11–20': '#ff0000'}
        assert overrides.generation == (10, 3)

    def test_failed_run_keeps_caller_overrides(self, scenario_points, scenario_box):
        overrides = PaletteOverrides({'11–20': '#ff0000'}, generation=(10, 3))
        pipeline = HexbinPipeline(DEFAULT_STAGES + [BrokenStage])

        with pytest.raises(ComputationError):
            pipeline.run(PipelineRequest(points=scenario_points, region=scenario_box,
                                         bin_step=5, bin_count=3, palette_overrides=overrides))

        assert overrides.snapshot() == {'11–20': '#ff0000'}

    def test_uncommitted_run_leaves_overrides_to_caller(self, scenario_points, scenario_box):
        overrides = PaletteOverrides({'11–20': '#ff0000'}, generation=(10, 3))
        request = PipelineRequest(points=scenario_points, region=scenario_box, resolution=0,
                                  bin_step=5, bin_count=3, palette_overrides=overrides)

        bundle = HexbinPipeline().run(request, commit_overrides=False)
        assert overrides.snapshot() == {'11–20': '#ff0000'}

        assert commit_palette_overrides(request, bundle) == {'11–20': '#ff0000'}
        assert overrides.snapshot() == {}
        assert overrides.generation == (5, 3)

    def test_unexpected_error_wrapped(self, scenario_points, scenario_box):
        pipeline = HexbinPipeline(DEFAULT_STAGES + [BrokenStage])

        with pytest.raises(ComputationError) as exc_info:
            pipeline.run(PipelineRequest(points=scenario_points, region=scenario_box))

        assert isinstance(exc_info.value.original_exception, RuntimeError)
        assert pipeline.get_status()['broken']['status'] == 'failed'


class TestLimits:

    def test_cell_cap_is_advisory(self, random_points, override_config):
        override_config('limits.max_hexagons', 5)

        bundle = run_pipeline(PipelineRequest(points=random_points, region=[0, 0, 10, 10], resolution=4))

        assert bundle.cell_count > 5
        assert len(bundle.advisories) == 1
        advisory = bundle.advisories[0]
        assert isinstance(advisory, LimitExceededError)
        assert advisory.limit == 5
        assert advisory.actual == bundle.cell_count


class TestPipelineStructure:

    def test_execution_order(self):
        pipeline = HexbinPipeline()

        assert [s.name for s in pipeline._get_execution_order()] == [
            'spatial_filter', 'hexagon_index', 'bin_classification', 'histogram', 'palette'
        ]

    def test_unknown_dependency_rejected(self):
        with pytest.raises(ValueError):
            HexbinPipeline([BrokenStage])

    def test_duplicate_stage_rejected(self):
        with pytest.raises(ValueError):
            HexbinPipeline(DEFAULT_STAGES + DEFAULT_STAGES[:1])

    def test_status_after_run(self, scenario_points, scenario_box):
        pipeline = HexbinPipeline()
        pipeline.run(PipelineRequest(points=scenario_points, region=scenario_box, resolution=0))

        assert all(s['status'] == StageStatus.COMPLETED.value for s in pipeline.get_status().values())

    def test_accepts_row_mappings(self):
        rows = [{'latitude': 1.0, 'longitude': 1.0}, {'latitude': 1.0, 'longitude': 1.0}]
        bundle = run_pipeline(PipelineRequest(points=rows, region=[0, 0, 5, 5], resolution=2))

        assert bundle.features[0].count == 2
