from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

from pyuca import Collator

from ..models.point import NormalizedPoint

"""Filter/sort utility over materialized points.

Pure functions with no shared mutable state: safe to call again on every
keystroke, from any thread. Order of operations is fixed:
category filter, then search filter, then sort.
"""

__all__ = [
    "ALL_CATEGORIES",
    "COMPUTED_LATITUDE",
    "COMPUTED_LONGITUDE",
    "PARSED_SEGMENT",
    "VIRTUAL_FIELDS",
    "SortSpec",
    "filter_and_sort",
    "matches_search",
    "sort_points",
    "table_columns",
    "unique_categories",
]

# "No category filter". None and "" mean the same.
ALL_CATEGORIES = "all"

COMPUTED_LATITUDE = "Computed Latitude"
COMPUTED_LONGITUDE = "Computed Longitude"
PARSED_SEGMENT = "Parsed Coordinate Segment"
VIRTUAL_FIELDS: tuple[str, ...] = (COMPUTED_LATITUDE, COMPUTED_LONGITUDE, PARSED_SEGMENT)

_NUMERIC_FIELDS = frozenset({COMPUTED_LATITUDE, COMPUTED_LONGITUDE})


@dataclass(frozen=True)
class SortSpec:
    """Sort field (raw column name or one of VIRTUAL_FIELDS) and direction."""
    key: str
    direction: Literal["asc", "desc"] = "asc"

    def __post_init__(self) -> None:
        if self.direction not in ("asc", "desc"):
            raise ValueError(f"direction must be 'asc' or 'desc': {self.direction!r}")

    @property
    def descending(self) -> bool:
        return self.direction == "desc"


@lru_cache(maxsize=1)
def _collator() -> Collator:
    # loads the full DUCET table; built once per process
    return Collator()


def _text_key(value: str) -> tuple[int, ...]:
    # Unicode collation on casefolded text: "Émile" sorts between "Alkmaar" and "Zeeland"
    return _collator().sort_key(value.casefold())


def _is_all(category_filter: str | None) -> bool:
    return category_filter is None or category_filter == "" or category_filter == ALL_CATEGORIES


def matches_search(point: NormalizedPoint, query: str) -> bool:
    """Case-insensitive substring match over name, category, segment, then every row value.

    ``query`` must already be casefolded.
    """
    if query in point.original_name.casefold():
        return True
    if query in point.category.casefold():
        return True
    if query in point.original_coords.casefold():
        return True
    return any(query in str(value).casefold() for value in point.row_data.values())


def sort_points(points: Iterable[NormalizedPoint], sort: SortSpec) -> list[NormalizedPoint]:
    """Return a new list sorted by ``sort``; ties keep their input order."""
    if sort.key in _NUMERIC_FIELDS:
        attr = "latitude" if sort.key == COMPUTED_LATITUDE else "longitude"
        return sorted(points, key=lambda p: getattr(p, attr), reverse=sort.descending)
    if sort.key == PARSED_SEGMENT:
        return sorted(points, key=lambda p: _text_key(p.original_coords), reverse=sort.descending)
    return sorted(
        points,
        key=lambda p: _text_key(p.row_data.get(sort.key) or ""),
        reverse=sort.descending,
    )


def filter_and_sort(
    points: Sequence[NormalizedPoint],
    category_filter: str | None = ALL_CATEGORIES,
    search_query: str | None = "",
    sort: SortSpec | None = None,
) -> list[NormalizedPoint]:
    """Apply category filter, search filter and sort, in that order.

    Args:
        points: Materialized points (not modified)
        category_filter: Exact category to keep; ALL_CATEGORIES, "" or None keep all
        search_query: Case-insensitive substring; blank keeps all
        sort: Optional sort specification

    Returns:
        A new list; calling again on the result with the same arguments
        returns an equal list.
    """
    current: list[NormalizedPoint] = list(points)

    if not _is_all(category_filter):
        current = [p for p in current if p.category == category_filter]

    query = search_query or ""
    if query.strip():
        folded = query.casefold()
        current = [p for p in current if matches_search(p, folded)]

    if sort is not None:
        current = sort_points(current, sort)

    return current


def unique_categories(points: Iterable[NormalizedPoint], unknown_label: str = "Unknown") -> list[str]:
    """Distinct categories, sorted case-insensitively, with ``unknown_label`` last."""
    categories = {p.category for p in points}
    has_unknown = unknown_label in categories
    categories.discard(unknown_label)
    ordered = sorted(categories, key=_text_key)
    if has_unknown:
        ordered.append(unknown_label)
    return ordered


def table_columns(points: Sequence[NormalizedPoint]) -> list[str]:
    """Original row headers (from the first point) followed by the virtual fields."""
    if not points:
        return []
    return [*points[0].row_data.keys(), *VIRTUAL_FIELDS]
