"""Tests for histogram building."""

import numpy as np

from hexbin.binning import build_bins, build_histograms


class TestBuildHistograms:

    def test_binned_sum_equals_cells(self):
        rng = np.random.default_rng(3)
        counts = {f"cell{i}": int(c) for i, c in enumerate(rng.integers(1, 80, 500))}
        histograms = build_histograms(counts, build_bins(10, 5))

        assert histograms.total_binned == len(counts)

    def test_binned_uses_typed_bounds(self):
        spec = build_bins(10, 3)
        histograms = build_histograms([1, 5, 10, 11, 20, 21, 400], spec)

        assert [(b.label, b.lower_bound, b.upper_bound, b.hexagon_count) for b in histograms.binned] == [
            ('1–10', 1, 11, 3),
            ('11–20', 11, 21, 2),
            ('21+', 21, None, 2),
        ]

    def test_raw_buckets_span_zero_to_max(self):
        histograms = build_histograms([1, 2, 3, 60], build_bins(10, 3))

        assert len(histograms.raw) == 30
        assert histograms.raw[0].lower == 0.0
        assert histograms.raw[-1].upper == 60.0
        assert sum(b.frequency for b in histograms.raw) == 4
        assert histograms.raw[-1].frequency == 1
        assert histograms.max_count == 60

    def test_custom_bucket_count(self):
        histograms = build_histograms([1, 2, 3], build_bins(1, 1), raw_buckets=3)

        assert len(histograms.raw) == 3

    def test_count_frequencies(self):
        histograms = build_histograms({'a': 2, 'b': 2, 'c': 7}, build_bins(5, 2))

        assert histograms.count_frequencies == {2: 2, 7: 1}

    def test_empty_counts(self):
        histograms = build_histograms({}, build_bins(10, 3))

        assert histograms.raw == ()
        assert [b.hexagon_count for b in histograms.binned] == [0, 0, 0]
        assert histograms.max_count == 0

    def test_to_dict_is_json_ready(self):
        data = build_histograms([1, 3], build_bins(2, 2)).to_dict()

        assert data['binned'][-1]['upper_bound'] is None
        assert data['count_frequencies'] == {'1': 1, '3': 1}
