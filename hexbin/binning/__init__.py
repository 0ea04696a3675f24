"""Count binning, histograms and palettes."""

from .bin_classifier import build_bins, classify, classify_many
from .histogram_builder import build_histograms
from .palette import PaletteOverrides, assign_palette, interpolate_lab, validate_hex_color

__all__ = [
    'build_bins',
    'classify',
    'classify_many',
    'build_histograms',
    'PaletteOverrides',
    'assign_palette',
    'interpolate_lab',
    'validate_hex_color'
]
