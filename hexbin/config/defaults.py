# hexbin/config/defaults.py
"""Default configuration values for the hexbin pipeline."""

import os
from pathlib import Path

# Project path
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
LOGS_DIR = PROJECT_ROOT / 'logs'

PATHS = {
    'project_root': str(PROJECT_ROOT),
    'logs_dir': os.getenv('HEXBIN_LOGS_DIR', str(LOGS_DIR)),
    'output_dir': str(PROJECT_ROOT / 'outputs')
}

# Hexagon tessellation (H3 resolutions)
HEXAGONS = {
    'default_resolution': 8,
    'min_resolution': 0,
    'max_resolution': 15
}

# Count bins
BINNING = {
    'default_step': 10,
    'default_count': 5,
    'label_separator': '–'  # en dash, e.g. "11–20"
}

# Diagnostic histograms
HISTOGRAM = {
    'raw_buckets': 30
}

# Legend gradient (white to purple)
PALETTE = {
    'start_color': '#ffffff',
    'end_color': '#5e3c99'
}

# Input and output limits
LIMITS = {
    'max_rows': 500_000,                      # hard cap, enforced before the core
    'max_file_size': 100 * 1024 * 1024,       # 100MB hard cap on input payload
    'max_hexagons': 5_000                     # soft cap, advisory only
}

# GeoJSON export
EXPORT = {
    'indent': 2,
    'zip_entry_overhead': 100,                # bytes per archive entry
    'single_file_warn_bytes': 2 * 1024 * 1024,
    'archive_warn_bytes': 5 * 1024 * 1024,
    'hexagon_warn_count': 10000,              # features slow to render above this
    'title': 'Hexagon Map Generated by Hexbin Maker',
    'description': 'H3 hexagon aggregation of point data'
}

# Input column names
INPUT = {
    'latitude_column': 'latitude',
    'longitude_column': 'longitude'
}

# Pipeline execution
PIPELINE = {
    'debounce_seconds': 0.3,
    'worker_threads': 1
}

LOGGING = {
    'level': os.getenv('HEXBIN_LOG_LEVEL', 'INFO'),
    'console': True,
    'file': True,
    'max_file_size': 10 * 1024 * 1024,
    'backup_count': 3
}
