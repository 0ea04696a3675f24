"""Tests for GeoJSON document building and export."""

import json
from datetime import datetime, timezone

import pytest

from hexbin.processors.exporters import (
    ExportConfig, GeoJSONExporter, bin_filename, build_bin_collections, build_feature_collection
)

GENERATED_AT = datetime(2024, 1, 1, tzinfo=timezone.utc)


class TestBuildFeatureCollection:

    def test_features_and_metadata(self, scenario_bundle):
        document = build_feature_collection(scenario_bundle, generated_at=GENERATED_AT)

        assert document['type'] == 'FeatureCollection'
        assert len(document['features']) == 1
        feature = document['features'][0]
        assert feature['properties']['count'] == 2
        assert feature['properties']['bin_label'] == '1+'
        assert feature['geometry']['type'] == 'Polygon'
        ring = feature['geometry']['coordinates'][0]
        assert ring[0] == ring[-1]

        metadata = document['properties']['metadata']
        assert metadata['generated'] == '2024-01-01T00:00:00+00:00'
        assert metadata['bin_labels'] == ['1+']
        assert metadata['bin_edges'] == [0.0, None]
        assert metadata['parameters'] == {
            'resolution': 0,
            'bin_step': 1,
            'bin_count': 1,
            'total_points_in': 4,
            'total_points_out': 2,
            'cell_count': 1
        }

    def test_document_is_strict_json(self, random_bundle):
        text = json.dumps(build_feature_collection(random_bundle), allow_nan=False)

        assert json.loads(text)['properties']['metadata']['bin_edges'][-1] is None


class TestBuildBinCollections:

    def test_one_collection_per_populated_bin(self, random_bundle):
        collections = build_bin_collections(random_bundle, generated_at=GENERATED_AT)
        by_bin = random_bundle.features_by_bin()

        assert list(collections) == list(by_bin)
        assert list(collections) == [label for label in random_bundle.bin_labels if label in by_bin]
        for label, document in collections.items():
            assert document['properties']['metadata']['bin_label'] == label
            assert len(document['features']) == len(by_bin[label])
            assert all(f['properties']['bin_label'] == label for f in document['features'])

    def test_feature_totals(self, random_bundle):
        collections = build_bin_collections(random_bundle)

        assert sum(len(d['features']) for d in collections.values()) == random_bundle.cell_count


class TestBinFilename:

    @pytest.mark.parametrize('label,expected', [
        ('1–10', 'hexbin_1_10.geojson'),
        ('21+', 'hexbin_21plus.geojson'),
    ])
    def test_safe_names(self, label, expected):
        assert bin_filename(label) == expected


class TestGeoJSONExporter:

    def test_single_file(self, tmp_path, scenario_bundle):
        exporter = GeoJSONExporter()
        output = tmp_path / 'out' / 'hexbins.geojson'

        written = exporter.export(scenario_bundle, ExportConfig(output))

        assert written == [output]
        assert exporter.validate_export(output)
        assert json.loads(output.read_text(encoding='utf-8'))['features'][0]['properties']['count'] == 2
        stats = exporter.get_export_stats()
        assert stats['files_written'] == 1
        assert stats['features_exported'] == 1
        assert 'duration_seconds' in stats

    def test_split_by_bin(self, tmp_path, random_bundle):
        exporter = GeoJSONExporter()

        written = exporter.export(random_bundle, ExportConfig(tmp_path / 'bins', split_by_bin=True))

        assert len(written) == len(random_bundle.features_by_bin())
        assert {p.name for p in written} == {bin_filename(l) for l in random_bundle.features_by_bin()}
        assert all(exporter.validate_export(p) for p in written)
        assert exporter.get_export_stats()['features_exported'] == random_bundle.cell_count

    def test_without_metadata(self, tmp_path, scenario_bundle):
        output = tmp_path / 'plain.geojson'
        GeoJSONExporter().export(scenario_bundle, ExportConfig(output, include_metadata=False))

        assert 'properties' not in json.loads(output.read_text(encoding='utf-8'))

    def test_validate_rejects_other_documents(self, tmp_path):
        path = tmp_path / 'other.json'
        path.write_text('{"type": "Feature"}')
        broken = tmp_path / 'broken.json'
        broken.write_text('{')

        exporter = GeoJSONExporter()
        assert not exporter.validate_export(path)
        assert not exporter.validate_export(broken)
