from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass

from ..models.header_mapping import HeaderCandidates, HeaderMapping

"""Tolerant header resolution for atlas index exports.

Each canonical field is resolved by an explicit, ordered list of matching
strategies evaluated against the header keys of the first row. The first
strategy that selects a key wins. Keeping the strategies as data makes it
possible to test each one independently of any particular source encoding.
"""

__all__ = [
    "HeaderResolutionError",
    "MatchStrategy",
    "contains_marker",
    "contains_marker_non_numeric",
    "exact_literal",
    "resolve_headers",
]

logger = logging.getLogger(__name__)


class HeaderResolutionError(Exception):
    """Raised when the mandatory coordinate column cannot be found."""


def _normalize(key: str) -> str:
    return key.strip().lower()


def _is_numeric(value: object) -> bool:
    if value is None:
        return False
    text = str(value).strip()
    if text == "":
        # blank counts as numeric: it cannot prove this is a text column
        return True
    try:
        float(text)
    except ValueError:
        return False
    return True


@dataclass(frozen=True)
class MatchStrategy:
    """One named way of picking a header key.

    ``select`` receives the header keys and the representative first row and
    returns the chosen key or None.
    """
    name: str
    select: Callable[[Sequence[str], Mapping[str, object]], str | None]


def exact_literal(literals: Sequence[str]) -> MatchStrategy:
    """Pick the first key whose lowercased form equals one of ``literals``."""
    wanted = {lit.lower() for lit in literals}

    def _select(keys: Sequence[str], first_row: Mapping[str, object]) -> str | None:
        for key in keys:
            if _normalize(key) in wanted:
                return key
        return None

    return MatchStrategy(name="exact", select=_select)


def contains_marker(markers: Sequence[str]) -> MatchStrategy:
    """Pick the first key whose lowercased form contains one of ``markers``."""
    lowered = [m.lower() for m in markers]

    def _select(keys: Sequence[str], first_row: Mapping[str, object]) -> str | None:
        for key in keys:
            norm = _normalize(key)
            if any(m in norm for m in lowered):
                return key
        return None

    return MatchStrategy(name="contains", select=_select)


def contains_marker_non_numeric(markers: Sequence[str]) -> MatchStrategy:
    """Like ``contains_marker`` but skip keys whose first-row value is numeric.

    Guards against an index column such as "Category no." being taken for the
    category text column.
    """
    lowered = [m.lower() for m in markers]

    def _select(keys: Sequence[str], first_row: Mapping[str, object]) -> str | None:
        for key in keys:
            norm = _normalize(key)
            if not any(m in norm for m in lowered):
                continue
            if _is_numeric(first_row.get(key)):
                continue
            return key
        return None

    return MatchStrategy(name="contains_non_numeric", select=_select)


def _first_match(
    strategies: Sequence[MatchStrategy],
    keys: Sequence[str],
    first_row: Mapping[str, object],
    field: str,
) -> str | None:
    for strategy in strategies:
        key = strategy.select(keys, first_row)
        if key is not None:
            logger.debug("header field=%s key=%r strategy=%s", field, key, strategy.name)
            return key
    return None


def resolve_headers(
    first_row: Mapping[str, object],
    candidates: HeaderCandidates | None = None,
) -> HeaderMapping:
    """Resolve the canonical columns from a representative row.

    Precondition: every row of the pass shares this row's key set.

    Args:
        first_row: The first input row; its keys are the header set and its
            values feed the numeric guard of the category fallback
        candidates: Marker strings to match (defaults to the atlas variants)

    Returns:
        HeaderMapping with ``name``/``category`` set to None when unresolved

    Raises:
        HeaderResolutionError: If no coordinate column is present
    """
    candidates = candidates or HeaderCandidates()
    keys = [str(k) for k in first_row.keys()]

    coordinates = _first_match(
        [contains_marker(candidates.coordinates)], keys, first_row, "coordinates"
    )
    if coordinates is None:
        raise HeaderResolutionError(
            "Required 'Coordinates' column not found. Detected headers: " + ", ".join(keys)
        )

    name = _first_match([contains_marker(candidates.name)], keys, first_row, "name")
    category = _first_match(
        [
            exact_literal(candidates.category_exact),
            contains_marker_non_numeric(candidates.category_contains),
        ],
        keys,
        first_row,
        "category",
    )
    return HeaderMapping(
        coordinates=coordinates,
        name=name,
        category=category,
        headers=tuple(keys),
    )
