#!/usr/bin/env python3
"""
Hexbin command-line tool.

Reads a CSV of points and a region, aggregates the points into H3 hexagons
and writes GeoJSON, either as one combined file or one file per bin.
"""

from pathlib import Path
from typing import Optional

import click
import pandas as pd

from .config import config
from .exceptions import EmptyRegionError, HexbinError, ValidationError
from .binning.bin_classifier import build_bins
from .infrastructure.logging import get_logger, setup_logging, setup_simple_logging
from .pipelines.orchestrator import PipelineRequest, run_pipeline
from .processors.exporters import ExportConfig, GeoJSONExporter, estimate_sizes
from .spatial.hexagonal_grid import HexagonalIndexer
from .spatial.region import load_region, parse_region

logger = get_logger(__name__)


def read_points(csv_path: Path) -> pd.DataFrame:
    """Load a point CSV, enforcing the hard size and row caps."""
    max_size = config.get('limits.max_file_size', 100 * 1024 * 1024)
    size = csv_path.stat().st_size
    if size > max_size:
        raise ValidationError(
            f"{csv_path.name} is {size / (1024 * 1024):.1f} MB; the limit is "
            f"{max_size / (1024 * 1024):.0f} MB",
            field='file_size', value=size
        )

    try:
        points = pd.read_csv(csv_path)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise ValidationError(f"{csv_path.name} is not a readable CSV file: {e}",
                              field='csv', value=csv_path.name) from e
    max_rows = config.get('limits.max_rows', 500_000)
    if len(points) > max_rows:
        raise ValidationError(f"{csv_path.name} has {len(points):,} rows; the limit is {max_rows:,}",
                              field='rows', value=len(points))
    logger.info(f"Loaded {len(points):,} rows from {csv_path.name}")
    return points


def resolve_region(region_file: Optional[str], bbox: Optional[tuple]):
    if region_file and bbox:
        raise click.UsageError("Use either --region or --bbox, not both")
    if region_file:
        return load_region(region_file)
    if bbox:
        return parse_region(bbox)
    raise click.UsageError("A region is required: pass --region FILE or --bbox W S E N")


def _build_request(csv_file, region_file, bbox, resolution, edge_meters, step, count, lat_col, lon_col):
    if resolution is not None and edge_meters is not None:
        raise click.UsageError("Use either --resolution or --edge-meters, not both")
    points = read_points(Path(csv_file))
    region = resolve_region(region_file, bbox)
    return PipelineRequest(
        points=points,
        region=region,
        resolution=resolution,
        target_edge_meters=edge_meters,
        bin_step=step,
        bin_count=count,
        latitude_column=lat_col,
        longitude_column=lon_col
    )


def _report_bundle(bundle):
    click.echo(f"Points in region: {bundle.total_points_out:,} of {bundle.total_points_in:,}")
    edge_km = HexagonalIndexer(bundle.resolution).edge_length_km
    click.echo(f"Hexagons: {bundle.cell_count:,} at resolution {bundle.resolution} "
               f"(~{edge_km:,.2f} km edge)")
    click.echo(f"{'Bin':<12} {'Hexagons':<10} {'Colour':<8}")
    click.echo("-" * 32)
    for binned in bundle.histograms.binned:
        click.echo(f"{binned.label:<12} {binned.hexagon_count:<10} {bundle.palette[binned.label]:<8}")
    for advisory in bundle.advisories:
        click.echo(f"⚠️  {advisory}")


region_options = [
    click.argument('csv_file', type=click.Path(exists=True, dir_okay=False)),
    click.option('--region', 'region_file', type=click.Path(exists=True, dir_okay=False),
                 help='GeoJSON file with the selection polygon(s)'),
    click.option('--bbox', type=float, nargs=4, default=None,
                 help='Bounding box as WEST SOUTH EAST NORTH'),
    click.option('--resolution', '-r', type=int, default=None, help='H3 resolution (0-15)'),
    click.option('--edge-meters', type=float, default=None,
                 help='Pick the coarsest resolution with hexagon edges at most this long'),
    click.option('--step', type=int, default=None, help='Bin width in points per hexagon'),
    click.option('--count', type=int, default=None, help='Number of bins'),
    click.option('--lat-col', default=None, help='Latitude column name'),
    click.option('--lon-col', default=None, help='Longitude column name'),
]


def with_region_options(func):
    for option in reversed(region_options):
        func = option(func)
    return func


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
@click.option('--log-file', type=click.Path(dir_okay=False), default=None,
              help='Also write JSON logs to this file')
def cli(verbose, log_file):
    """Hexagon binning of geographic points."""
    level = 'DEBUG' if verbose else 'WARNING'
    if log_file:
        setup_logging(config, log_file=log_file, console=True, log_level=level)
    else:
        setup_simple_logging(level)


@cli.command()
@with_region_options
@click.option('--output', '-o', type=click.Path(), required=True,
              help='Output .geojson file, or a directory with --split-by-bin')
@click.option('--split-by-bin', is_flag=True, help='Write one GeoJSON file per bin')
def run(csv_file, region_file, bbox, resolution, edge_meters, step, count, lat_col, lon_col,
        output, split_by_bin):
    """Aggregate CSV_FILE into hexagons and write GeoJSON."""
    try:
        request = _build_request(csv_file, region_file, bbox, resolution, edge_meters, step, count,
                                 lat_col, lon_col)
        bundle = run_pipeline(request)

        estimate = estimate_sizes(bundle, group_by='bin' if split_by_bin else 'none')
        for warning in estimate.warnings:
            click.echo(f"⚠️  {warning}")

        exporter = GeoJSONExporter()
        written = exporter.export(bundle, ExportConfig(Path(output), split_by_bin=split_by_bin))
        _report_bundle(bundle)
        for path in written:
            click.echo(f"✅ Wrote {path}")

    except EmptyRegionError as e:
        click.echo(f"❌ {e}. Try a larger region.", err=True)
        raise click.Abort()
    except HexbinError as e:
        click.echo(f"❌ {e}", err=True)
        raise click.Abort()


@cli.command()
@with_region_options
@click.option('--group-by', type=click.Choice(['none', 'bin']), default='none',
              help='Estimate a single file or one file per bin')
def estimate(csv_file, region_file, bbox, resolution, edge_meters, step, count, lat_col, lon_col,
             group_by):
    """Estimate GeoJSON export sizes without writing anything."""
    try:
        request = _build_request(csv_file, region_file, bbox, resolution, edge_meters, step, count,
                                 lat_col, lon_col)
        bundle = run_pipeline(request)
        result = estimate_sizes(bundle, group_by=group_by)
    except HexbinError as e:
        click.echo(f"❌ {e}", err=True)
        raise click.Abort()

    click.echo(f"Single file: {result.single_file_mb:.2f} MB ({result.single_file_bytes:,} bytes)")
    for label, size in result.per_group_bytes.items():
        click.echo(f"  {label:<12} {size:,} bytes")
    if group_by == 'bin':
        click.echo(f"Archive total: {result.total_archive_mb:.2f} MB ({result.total_archive_bytes:,} bytes)")
    for warning in result.warnings:
        click.echo(f"⚠️  {warning}")


@cli.command()
@click.option('--step', type=int, default=None, help='Bin width in points per hexagon')
@click.option('--count', type=int, default=None, help='Number of bins')
def bins(step, count):
    """Show the bin labels and edges for STEP and COUNT."""
    step = config.get('binning.default_step', 10) if step is None else step
    count = config.get('binning.default_count', 5) if count is None else count
    try:
        spec = build_bins(step, count)
    except HexbinError as e:
        click.echo(f"❌ {e}", err=True)
        raise click.Abort()

    for b in spec.bins:
        upper = '∞' if b.upper_bound is None else b.upper_bound - 1
        click.echo(f"{b.index:<4} {b.label:<12} {b.lower_bound} .. {upper}")


if __name__ == '__main__':
    cli()
