from __future__ import annotations

from collections import Counter
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from ..coords.normalizer import PLACEHOLDERS, CoordinateCache, is_placeholder, parse_coordinate_pair
from ..models.header_mapping import HeaderCandidates
from .headers import resolve_headers

"""Data analysis report for an atlas index export.

Answers "how parseable is this file?" before anyone looks at a map: how many
rows carry a coordinate value, how many '+'-split segments parse, and which
categories dominate.
"""

__all__ = [
    "AnalysisReport",
    "analyze_rows",
    "render_report",
]

TOP_CATEGORIES = 10


@dataclass(frozen=True)
class AnalysisReport:
    total_rows: int
    rows_with_coords: int
    valid_segments: int
    failed_segments: int
    top_categories: list[tuple[str, int]] = field(default_factory=list)
    headers: list[str] = field(default_factory=list)

    @property
    def success_rate(self) -> float:
        """Percentage of attempted segments that parsed (0.0 when none were attempted)."""
        attempted = self.valid_segments + self.failed_segments
        if attempted == 0:
            return 0.0
        return self.valid_segments / attempted * 100


def analyze_rows(
    rows: Sequence[Mapping[str, Any]],
    candidates: HeaderCandidates | None = None,
    placeholders: frozenset[str] = PLACEHOLDERS,
    default_category: str = "Unknown",
) -> AnalysisReport:
    """Count parseable coordinates and categories.

    Raises:
        HeaderResolutionError: If no coordinate column is present
    """
    if not rows:
        return AnalysisReport(total_rows=0, rows_with_coords=0, valid_segments=0, failed_segments=0)

    mapping = resolve_headers(rows[0], candidates)
    cache = CoordinateCache()
    categories: Counter[str] = Counter()
    rows_with_coords = 0
    valid = 0
    failed = 0

    for row in rows:
        value = row.get(mapping.coordinates)
        if not isinstance(value, str) or is_placeholder(value, placeholders):
            continue
        rows_with_coords += 1
        category = ""
        if mapping.category is not None:
            category = str(row.get(mapping.category) or "").strip()
        categories[category or default_category] += 1

        for segment in (s.strip() for s in value.split("+")):
            if is_placeholder(segment, placeholders):
                continue
            if parse_coordinate_pair(segment, cache, placeholders) is None:
                failed += 1
            else:
                valid += 1

    return AnalysisReport(
        total_rows=len(rows),
        rows_with_coords=rows_with_coords,
        valid_segments=valid,
        failed_segments=failed,
        top_categories=categories.most_common(TOP_CATEGORIES),
        headers=list(mapping.headers),
    )


def render_report(report: AnalysisReport) -> list[str]:
    lines = [
        "=== Data Analysis Report ===",
        f"Total records: {report.total_rows}",
        f"Records with coordinates: {report.rows_with_coords}",
        f"Valid coordinates parsed: {report.valid_segments}",
        f"Coordinate parsing errors: {report.failed_segments}",
        f"Success rate: {report.success_rate:.1f}%",
        "=== Categories ===",
    ]
    lines.extend(f"{name}: {count}" for name, count in report.top_categories)
    lines.append("=== Headers ===")
    lines.extend(f"- {header}" for header in report.headers)
    return lines
