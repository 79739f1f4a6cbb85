from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from ..coords.normalizer import PLACEHOLDERS, CoordinateCache, is_placeholder, parse_coordinate_pair
from ..models.drop_record import DropRecord
from ..models.header_mapping import HeaderCandidates, HeaderMapping
from ..models.materialize_result import ChunkStatsAccumulator, MaterializeResult, MaterializeStats
from ..models.point import NormalizedPoint
from .headers import HeaderResolutionError, resolve_headers
from .progress import ChunkProgress, ProgressCallback

"""Record materializer: raw atlas rows -> NormalizedPoint records.

One pass:
1. Resolves the canonical columns once, from the first row's keys
2. Walks the rows in fixed-size chunks, reporting fractional progress after
   each chunk (and yielding control between chunks in the async variant)
3. Splits each coordinate value on '+' and emits one record per parseable
   segment, numbered point-0, point-1, ... by a counter owned by the pass

Unparseable rows and segments are dropped and counted, never raised. Only a
structural problem (missing coordinate column, unusable input) fails the pass.
"""

__all__ = [
    "DropSink",
    "MaterializeOptions",
    "PointIdCounter",
    "materialize",
    "materialize_async",
]

logger = logging.getLogger(__name__)

DropSink = Callable[[DropRecord], None]

DEFAULT_CHUNK_SIZE = 100


@dataclass(frozen=True)
class MaterializeOptions:
    """Tunables for a materialization pass."""
    chunk_size: int = DEFAULT_CHUNK_SIZE
    default_name: str = "N/A"
    default_category: str = "Unknown"
    placeholders: frozenset[str] = PLACEHOLDERS
    candidates: HeaderCandidates = field(default_factory=HeaderCandidates)
    show_progress: bool = True

    def __post_init__(self) -> None:
        if self.chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive: {self.chunk_size}")
        if not self.default_category.strip():
            raise ValueError("default_category must be a non-empty string")


class PointIdCounter:
    """Issues point-0, point-1, ... for exactly one pass."""

    def __init__(self, prefix: str = "point") -> None:
        self.prefix = prefix
        self._next = 0

    def next_id(self) -> str:
        value = f"{self.prefix}-{self._next}"
        self._next += 1
        return value

    @property
    def issued(self) -> int:
        return self._next


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _cell(row: Mapping[str, Any], key: str | None) -> str:
    if key is None:
        return ""
    return _as_text(row.get(key))


class _Pass:
    """State of one materialization pass. Never shared between passes."""

    def __init__(
        self,
        rows: Sequence[Mapping[str, Any]],
        mapping: HeaderMapping,
        options: MaterializeOptions,
        cache: CoordinateCache,
        on_progress: ProgressCallback | None,
        drop_sink: DropSink | None,
    ) -> None:
        self.rows = rows
        self.mapping = mapping
        self.options = options
        self.cache = cache
        self.drop_sink = drop_sink
        self.ids = PointIdCounter()
        self.points: list[NormalizedPoint] = []
        self.rows_skipped = 0
        self.segments_dropped = 0
        self.chunk_stats = ChunkStatsAccumulator()
        self.progress = ChunkProgress(
            len(rows), on_progress=on_progress, show_bar=options.show_progress
        )
        self.start = time.perf_counter()

    def _drop(self, row_index: int, segment: str, reason: str) -> None:
        if self.drop_sink is not None:
            self.drop_sink(DropRecord.create(row_index, self.mapping.coordinates, segment, reason))

    def chunks(self) -> Iterable[range]:
        size = self.options.chunk_size
        for start in range(0, len(self.rows), size):
            yield range(start, min(start + size, len(self.rows)))

    def process_chunk(self, indexes: range) -> None:
        chunk_start = time.perf_counter()
        for index in indexes:
            self._expand_row(index, self.rows[index])
        self.chunk_stats.add_chunk_time(time.perf_counter() - chunk_start)
        self.progress.set_postfix(points=len(self.points))
        self.progress.advance(len(indexes))

    def _expand_row(self, index: int, row: Mapping[str, Any]) -> None:
        placeholders = self.options.placeholders
        coord_value = _cell(row, self.mapping.coordinates)
        if is_placeholder(coord_value, placeholders):
            self.rows_skipped += 1
            self._drop(index, coord_value, "EMPTY_COORDINATES")
            return

        name = _cell(row, self.mapping.name)
        if not name.strip():
            name = self.options.default_name
        category = _cell(row, self.mapping.category).strip() or self.options.default_category
        row_data = {str(k): _as_text(v) for k, v in row.items()}

        for segment in (s.strip() for s in coord_value.split("+")):
            if is_placeholder(segment, placeholders):
                continue
            pair = parse_coordinate_pair(segment, self.cache, placeholders)
            if pair is None:
                self.segments_dropped += 1
                self._drop(index, segment, "UNPARSEABLE_SEGMENT")
                continue
            self.points.append(
                NormalizedPoint(
                    id=self.ids.next_id(),
                    latitude=pair.latitude,
                    longitude=pair.longitude,
                    original_name=name,
                    category=category,
                    original_coords=segment,
                    row_data=row_data,
                )
            )

    def finish(self, warnings: list[str]) -> MaterializeResult:
        total_chunks, avg_chunk, p95_chunk = self.chunk_stats.get_stats()
        stats = MaterializeStats(
            rows_total=len(self.rows),
            rows_skipped=self.rows_skipped,
            segments_parsed=len(self.points),
            segments_dropped=self.segments_dropped,
            chunks=total_chunks,
            avg_chunk_seconds=avg_chunk,
            p95_chunk_seconds=p95_chunk,
            elapsed_seconds=time.perf_counter() - self.start,
        )
        logger.info(
            "materialized rows=%d points=%d skipped_rows=%d dropped_segments=%d",
            stats.rows_total,
            stats.segments_parsed,
            stats.rows_skipped,
            stats.segments_dropped,
        )
        logger.debug(
            "cache entries=%d hits=%d misses=%d", len(self.cache), self.cache.hits, self.cache.misses
        )
        return MaterializeResult(
            points=self.points,
            error=None,
            warnings=warnings,
            mapping=self.mapping,
            stats=stats,
        )


def _prepare(
    rows: Iterable[Mapping[str, Any]],
    options: MaterializeOptions | None,
    cache: CoordinateCache | None,
    on_progress: ProgressCallback | None,
    drop_sink: DropSink | None,
) -> _Pass | MaterializeResult:
    """Validate input structure and resolve headers; a MaterializeResult means failure."""
    options = options or MaterializeOptions()
    row_list = rows if isinstance(rows, Sequence) else list(rows)

    if len(row_list) == 0:
        logger.error("materialize: input is empty or has no data rows")
        return MaterializeResult.failure("input is empty or has no data rows")

    for index, row in enumerate(row_list):
        if not isinstance(row, Mapping):
            message = f"unreadable input structure: row {index} is {type(row).__name__}, expected a mapping"
            logger.error("materialize: %s", message)
            return MaterializeResult.failure(message, rows_total=len(row_list))

    try:
        mapping = resolve_headers(row_list[0], options.candidates)
    except HeaderResolutionError as e:
        logger.error("materialize: %s", e)
        if drop_sink is not None:
            drop_sink(DropRecord.create(-1, "", "", "MISSING_COORDINATE_COLUMN"))
        return MaterializeResult.failure(str(e), rows_total=len(row_list))

    return _Pass(
        row_list,
        mapping,
        options,
        cache if cache is not None else CoordinateCache(),
        on_progress,
        drop_sink,
    )


def _optional_column_warnings(mapping: HeaderMapping, options: MaterializeOptions) -> list[str]:
    warnings: list[str] = []
    if mapping.name is None:
        warnings.append(
            f"Optional 'Original Name' column not found; names default to {options.default_name!r}"
        )
    if mapping.category is None:
        warnings.append(
            "Could not reliably identify the 'Soortnaam/Category' column; categories default to "
            f"{options.default_category!r}. Detected headers: {', '.join(mapping.headers)}"
        )
    for message in warnings:
        logger.warning(message)
    return warnings


def materialize(
    rows: Iterable[Mapping[str, Any]],
    *,
    options: MaterializeOptions | None = None,
    cache: CoordinateCache | None = None,
    on_progress: ProgressCallback | None = None,
    drop_sink: DropSink | None = None,
) -> MaterializeResult:
    """Materialize raw rows into NormalizedPoint records.

    Precondition: all rows share the first row's key set.

    Args:
        rows: Raw rows (header -> string value), already concatenated if the
            dataset was transported in parts
        options: Chunk size, defaults, placeholders and header candidates
        cache: Coordinate parse cache; a fresh one is used when omitted
        on_progress: Receives the completed fraction after every chunk
        drop_sink: Receives a DropRecord for every skipped row/segment

    Returns:
        MaterializeResult; check ``ok`` before using ``points``
    """
    prepared = _prepare(rows, options, cache, on_progress, drop_sink)
    if isinstance(prepared, MaterializeResult):
        return prepared

    run = prepared
    warnings = _optional_column_warnings(run.mapping, run.options)
    try:
        for indexes in run.chunks():
            run.process_chunk(indexes)
    finally:
        run.progress.close()
    return run.finish(warnings)


async def materialize_async(
    rows: Iterable[Mapping[str, Any]],
    *,
    options: MaterializeOptions | None = None,
    cache: CoordinateCache | None = None,
    on_progress: ProgressCallback | None = None,
    drop_sink: DropSink | None = None,
) -> MaterializeResult:
    """Coroutine variant of ``materialize`` that yields to the event loop between chunks.

    Produces exactly the same result as ``materialize`` for the same input.
    Cancellation mid-pass is not supported; callers discard stale results.
    """
    prepared = _prepare(rows, options, cache, on_progress, drop_sink)
    if isinstance(prepared, MaterializeResult):
        return prepared

    run = prepared
    warnings = _optional_column_warnings(run.mapping, run.options)
    try:
        for indexes in run.chunks():
            run.process_chunk(indexes)
            await asyncio.sleep(0)
    finally:
        run.progress.close()
    return run.finish(warnings)
