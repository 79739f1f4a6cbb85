from __future__ import annotations

from dataclasses import dataclass

"""Header models: which source columns carry the canonical fields.

HeaderCandidates lists the marker strings tried against the header keys;
HeaderMapping is the outcome of trying them.

Resolved once per materialization pass from the first row's keys. All rows
are assumed to share that key set; a row with different keys simply has no
value under the resolved key.
"""

__all__ = [
    "HeaderCandidates",
    "HeaderMapping",
]


@dataclass(frozen=True)
class HeaderMapping:
    """Resolved canonical columns for one pass.

    coordinates is mandatory; name and category may be None, in which case
    every record falls back to the configured default.
    """
    coordinates: str
    name: str | None = None
    category: str | None = None
    headers: tuple[str, ...] = ()  # full key set the mapping was resolved against

    @property
    def missing_optional(self) -> list[str]:
        missing = []
        if self.name is None:
            missing.append("name")
        if self.category is None:
            missing.append("category")
        return missing


@dataclass(frozen=True)
class HeaderCandidates:
    """Marker strings for header resolution, compared against lowercased keys.

    Defaults cover the Dutch/English bilingual atlas index headers, joined by
    '/', by a newline, or truncated to one language. The coordinate markers
    include the forms "coördinaten" takes when its UTF-8 bytes were decoded
    as Latin-1 or replaced.
    """
    coordinates: tuple[str, ...] = (
        "coördinaten",
        "coã¶rdinaten",
        "co?rdinaten",
        "co�rdinaten",
        "coordinaten",
        "coordinates",
    )
    name: tuple[str, ...] = (
        "oorspr. naam op de kaart",
        "original name on the map",
    )
    category_exact: tuple[str, ...] = (
        "soortnaam/category",
        "soortnaam\ncategory",
        "soortnaam",
        "category",
    )
    category_contains: tuple[str, ...] = (
        "soortnaam",
        "category",
    )
