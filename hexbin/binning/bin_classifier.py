"""Frequency bins over per-cell point counts."""

import math
from bisect import bisect_left
from typing import Iterable, List

import numpy as np

from ..abstractions.types import Bin, BinSpec
from ..config import config
from ..exceptions import InvalidBinParametersError, ValidationError
from ..infrastructure.logging import get_logger

logger = get_logger(__name__)


def _require_positive_int(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
        raise InvalidBinParametersError(f"{name} must be an integer, got {value!r}",
                                        field=name, value=value)
    if value < 1:
        raise InvalidBinParametersError(f"{name} must be at least 1, got {value}",
                                        field=name, value=int(value))
    return int(value)


def _label(lower: int, upper: int, is_last: bool) -> str:
    if is_last:
        return f"{lower}+"
    separator = config.get('binning.label_separator', '–')
    return f"{lower}{separator}{upper}"


def build_bins(step: int, count: int) -> BinSpec:
    """Create ``count`` bins of width ``step``; the last bin is open-ended.

    Example:
        >>> build_bins(10, 3).labels
        ['1–10', '11–20', '21+']
    """
    step = _require_positive_int('bin_step', step)
    count = _require_positive_int('bin_count', count)

    edges = tuple(float(i * step) for i in range(count)) + (math.inf,)
    bins: List[Bin] = []
    for i in range(count):
        lower = i * step + 1
        is_last = i == count - 1
        upper = None if is_last else (i + 1) * step + 1
        bins.append(Bin(index=i, lower_bound=lower, upper_bound=upper,
                        label=_label(lower, (i + 1) * step, is_last)))

    spec = BinSpec(step=step, count=count, edges=edges, bins=tuple(bins))
    logger.debug(f"Built {count} bins of width {step}: {spec.labels}")
    return spec


def classify(value: int, spec: BinSpec) -> int:
    """Index of the bin holding ``value``.

    Values above the last finite edge go to the last bin; 0 goes to bin 0.
    """
    if value < 0:
        raise ValidationError(f"Cannot classify a negative count: {value}",
                              field='value', value=value)
    if value > spec.last_finite_edge:
        return spec.count - 1
    index = bisect_left(spec.edges, value) - 1
    return min(max(index, 0), spec.count - 1)


def classify_many(values: Iterable[int], spec: BinSpec) -> np.ndarray:
    """Vectorised ``classify`` over an array of counts."""
    values = np.asarray(list(values) if not isinstance(values, np.ndarray) else values)
    if values.size and values.min() < 0:
        raise ValidationError("Cannot classify negative counts",
                              field='values', value=int(values.min()))
    indices = np.searchsorted(np.asarray(spec.edges), values, side='left') - 1
    return np.clip(indices, 0, spec.count - 1)
