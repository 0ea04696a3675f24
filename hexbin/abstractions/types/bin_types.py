# hexbin/abstractions/types/bin_types.py
"""Bin and histogram type definitions."""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Bin:
    """One count range.

    ``lower_bound`` is inclusive and ``upper_bound`` exclusive; the last bin
    of a spec is open-ended and has ``upper_bound=None``.
    """
    index: int
    lower_bound: int
    upper_bound: Optional[int]
    label: str

    @property
    def is_open_ended(self) -> bool:
        return self.upper_bound is None

    def contains(self, value: int) -> bool:
        if value < self.lower_bound:
            return False
        return self.upper_bound is None or value < self.upper_bound


@dataclass(frozen=True)
class BinSpec:
    """Ordered bins derived from ``(step, count)``.

    ``edges`` has ``count + 1`` entries: ``0, step, 2*step, ...`` with the
    final entry set to infinity. Bin ``i`` holds values in
    ``(edges[i], edges[i + 1]]``.
    """
    step: int
    count: int
    edges: Tuple[float, ...]
    bins: Tuple[Bin, ...]

    @property
    def labels(self) -> List[str]:
        return [b.label for b in self.bins]

    @property
    def generation(self) -> Tuple[int, int]:
        """Identity of this bin layout, used to detect label-set changes."""
        return (self.step, self.count)

    @property
    def last_finite_edge(self) -> float:
        return self.edges[-2]

    def edges_for_json(self) -> List[Optional[float]]:
        """Edges with infinity rendered as ``None`` (JSON ``null``)."""
        return [None if math.isinf(e) else e for e in self.edges]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'bin_step': self.step,
            'bin_count': self.count,
            'bin_edges': self.edges_for_json(),
            'bin_labels': self.labels
        }


@dataclass(frozen=True)
class RawBucket:
    """Equal-width bucket of the raw count distribution."""
    lower: float
    upper: float
    frequency: int


@dataclass(frozen=True)
class BinnedCount:
    """Number of hexagons whose count falls in ``[lower_bound, upper_bound)``."""
    label: str
    lower_bound: int
    upper_bound: Optional[int]
    hexagon_count: int


@dataclass(frozen=True)
class Histograms:
    """Raw and binned distributions computed from the same counts."""
    raw: Tuple[RawBucket, ...]
    binned: Tuple[BinnedCount, ...]
    count_frequencies: Dict[int, int] = field(default_factory=dict)
    max_count: int = 0

    @property
    def total_binned(self) -> int:
        return sum(b.hexagon_count for b in self.binned)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'raw': [
                {'lower': b.lower, 'upper': b.upper, 'frequency': b.frequency}
                for b in self.raw
            ],
            'binned': [
                {'label': b.label, 'lower_bound': b.lower_bound,
                 'upper_bound': b.upper_bound, 'hexagon_count': b.hexagon_count}
                for b in self.binned
            ],
            'count_frequencies': {str(k): v for k, v in self.count_frequencies.items()},
            'max_count': self.max_count
        }
