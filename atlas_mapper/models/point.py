from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

"""Point models for the coordinate normalization pipeline.

CoordinatePair is the normalizer's result for one ``lat/lon`` token.
NormalizedPoint is one output record of a materialization pass; a source row
with N parseable coordinate pairs yields N of them sharing ``row_data``.
"""

__all__ = [
    "CoordinatePair",
    "NormalizedPoint",
]


@dataclass(frozen=True)
class CoordinatePair:
    """Validated WGS84 decimal degrees.

    Invariant: -90 <= latitude <= 90 and -180 <= longitude <= 180
    (enforced by the normalizer, not here).
    """
    latitude: float
    longitude: float


@dataclass(frozen=True)
class NormalizedPoint:
    """One geographic record derived from one coordinate pair substring."""
    id: str  # point-<N>, unique within one pass only
    latitude: float
    longitude: float
    original_name: str  # "N/A" when unresolved
    category: str  # "Unknown" when unresolved or blank, never empty
    original_coords: str  # the segment after '+' split, before parsing
    row_data: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the camelCase keys consumed by the map/table layer."""
        return {
            "id": self.id,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "originalName": self.original_name,
            "category": self.category,
            "originalCoords": self.original_coords,
            "rowData": dict(self.row_data),
        }

