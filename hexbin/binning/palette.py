"""Bin colour assignment with perceptual (CIE Lab) interpolation."""

import re
import threading
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np
from matplotlib.colors import to_hex, to_rgb
from skimage import color

from ..abstractions.types import BinSpec
from ..config import config
from ..exceptions import ValidationError
from ..infrastructure.logging import get_logger

logger = get_logger(__name__)

HEX_COLOR_PATTERN = re.compile(r'^#[0-9a-fA-F]{6}$')


def validate_hex_color(value: str, field: str = 'color') -> str:
    """Return ``value`` lower-cased if it is a ``#rrggbb`` colour."""
    if not isinstance(value, str) or not HEX_COLOR_PATTERN.match(value):
        raise ValidationError(f"Invalid hex colour {value!r}; expected #rrggbb",
                              field=field, value=value)
    return value.lower()


def interpolate_lab(start: str, end: str, n: int) -> List[str]:
    """``n`` colours from ``start`` to ``end`` evenly spaced in Lab space.

    With a single colour the result is ``end``.
    """
    start = validate_hex_color(start, 'start')
    end = validate_hex_color(end, 'end')
    if n <= 0:
        return []

    lab = color.rgb2lab(np.array([[to_rgb(start), to_rgb(end)]]))[0]
    t = np.linspace(0.0, 1.0, n) if n > 1 else np.array([1.0])
    steps = lab[0] + t[:, None] * (lab[1] - lab[0])
    rgb = np.clip(color.lab2rgb(steps[None, :, :])[0], 0.0, 1.0)
    return [to_hex(c) for c in rgb]


def assign_palette(labels: Sequence[str],
                   overrides: Optional[Mapping[str, str]] = None,
                   start: Optional[str] = None,
                   end: Optional[str] = None) -> Dict[str, str]:
    """Colour per label; overrides win for labels that are present."""
    start = start or config.get('palette.start_color', '#ffffff')
    end = end or config.get('palette.end_color', '#5e3c99')
    overrides = {
        label: validate_hex_color(value, f"override[{label}]")
        for label, value in (overrides or {}).items()
    }

    palette = dict(zip(labels, interpolate_lab(start, end, len(labels))))
    for label in palette:
        if label in overrides:
            palette[label] = overrides[label]

    ignored = set(overrides) - set(palette)
    if ignored:
        logger.debug(f"Ignoring overrides for absent labels: {sorted(ignored)}")
    return palette


class PaletteOverrides:
    """User colour choices that outlive a single pipeline run.

    Overrides are remembered together with the bin layout they were made
    under. When the layout changes, ``reconcile`` keeps overrides whose label
    text still exists and drops the rest.
    """

    def __init__(self, overrides: Optional[Mapping[str, str]] = None,
                 generation: Optional[Tuple[int, int]] = None):
        self._lock = threading.Lock()
        self._overrides: Dict[str, str] = {}
        self._generation = generation
        for label, value in (overrides or {}).items():
            self.set(label, value)

    @property
    def generation(self) -> Optional[Tuple[int, int]]:
        return self._generation

    def set(self, label: str, value: str):
        value = validate_hex_color(value, f"override[{label}]")
        with self._lock:
            self._overrides[label] = value

    def remove(self, label: str):
        with self._lock:
            self._overrides.pop(label, None)

    def clear(self):
        with self._lock:
            self._overrides.clear()

    def snapshot(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._overrides)

    def _split(self, spec: BinSpec) -> Tuple[Dict[str, str], Dict[str, str]]:
        # caller holds the lock
        if self._generation == spec.generation:
            return dict(self._overrides), {}
        valid = set(spec.labels)
        kept = {k: v for k, v in self._overrides.items() if k in valid}
        dropped = {k: v for k, v in self._overrides.items() if k not in valid}
        return kept, dropped

    def preview(self, spec: BinSpec, start: Optional[str] = None,
                end: Optional[str] = None) -> Tuple[Dict[str, str], Dict[str, str]]:
        """Palette for ``spec`` and the overrides ``reconcile`` would drop.

        Nothing is changed; a run uses this so that a cancelled or superseded
        run leaves the caller's overrides as they were.
        """
        with self._lock:
            kept, dropped = self._split(spec)
        return assign_palette(spec.labels, kept, start, end), dropped

    def reconcile(self, spec: BinSpec) -> Dict[str, str]:
        """Adopt ``spec``'s layout, returning the overrides that were dropped."""
        with self._lock:
            if self._generation == spec.generation:
                return {}
            self._overrides, dropped = self._split(spec)
            previous, self._generation = self._generation, spec.generation

        if dropped:
            logger.info(f"Bin layout changed {previous} -> {spec.generation}; "
                        f"dropped colour overrides for {sorted(dropped)}")
        return dropped

    def __len__(self) -> int:
        with self._lock:
            return len(self._overrides)
