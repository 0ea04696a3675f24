# hexbin/abstractions/types/point_types.py
"""Point type definitions."""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping


@dataclass(frozen=True)
class Point:
    """A single geographic observation with its untyped row attributes."""
    latitude: float
    longitude: float
    attributes: Mapping[str, Any] = field(default_factory=dict)

    def to_row(self, latitude_column: str = 'latitude',
               longitude_column: str = 'longitude') -> Dict[str, Any]:
        """Flatten into a table row."""
        row = dict(self.attributes)
        row[latitude_column] = self.latitude
        row[longitude_column] = self.longitude
        return row
