"""Raw and binned distributions of per-cell counts."""

from typing import Iterable, Mapping, Optional, Union

import numpy as np

from ..abstractions.types import BinnedCount, BinSpec, Histograms, RawBucket
from ..config import config
from ..infrastructure.logging import get_logger
from .bin_classifier import classify_many

logger = get_logger(__name__)


def build_histograms(counts: Union[Mapping[str, int], Iterable[int]],
                     bin_spec: BinSpec,
                     raw_buckets: Optional[int] = None) -> Histograms:
    """Summarise the count distribution for charting.

    ``counts`` may be the cell->count mapping or the counts themselves. Both
    histograms are computed from one sorted array so they always agree, and
    the binned histogram uses the same classification as feature assembly.
    """
    if raw_buckets is None:
        raw_buckets = config.get('histogram.raw_buckets', 30)
    if isinstance(counts, Mapping):
        counts = counts.values()
    values = np.sort(np.fromiter(counts, dtype=np.int64))

    if values.size == 0:
        binned = tuple(
            BinnedCount(b.label, b.lower_bound, b.upper_bound, 0) for b in bin_spec.bins
        )
        return Histograms(raw=(), binned=binned, count_frequencies={}, max_count=0)

    max_count = int(values[-1])
    frequencies, edges = np.histogram(values, bins=raw_buckets, range=(0, max(max_count, 1)))
    raw = tuple(
        RawBucket(lower=float(edges[i]), upper=float(edges[i + 1]), frequency=int(frequencies[i]))
        for i in range(raw_buckets)
    )

    per_bin = np.bincount(classify_many(values, bin_spec), minlength=bin_spec.count)
    binned = tuple(
        BinnedCount(label=b.label, lower_bound=b.lower_bound, upper_bound=b.upper_bound,
                    hexagon_count=int(per_bin[b.index]))
        for b in bin_spec.bins
    )

    unique, occurrences = np.unique(values, return_counts=True)
    count_frequencies = {int(k): int(v) for k, v in zip(unique, occurrences)}

    logger.debug(f"Histograms built for {values.size} cells (max count {max_count})")
    return Histograms(raw=raw, binned=binned,
                      count_frequencies=count_frequencies, max_count=max_count)
