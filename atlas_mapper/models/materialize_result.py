from __future__ import annotations

import statistics
from dataclasses import dataclass, field

from .header_mapping import HeaderMapping
from .point import NormalizedPoint

"""Materialization result models.

MaterializeResult is what one pass hands back to its caller: either the full
record set with statistics, or a structural failure carrying a message and
zero records. Per-item unparseability never shows up as a failure here, only
as counts in MaterializeStats.
"""

__all__ = [
    "ChunkStatsAccumulator",
    "MaterializeResult",
    "MaterializeStats",
]


@dataclass(frozen=True)
class MaterializeStats:
    """Aggregate counts and timings for one pass."""
    rows_total: int = 0  # input rows seen
    rows_skipped: int = 0  # rows with empty/placeholder coordinate value
    segments_parsed: int = 0  # == number of emitted records
    segments_dropped: int = 0  # '+'-split segments that failed to parse
    chunks: int = 0
    avg_chunk_seconds: float = 0.0
    p95_chunk_seconds: float = 0.0
    elapsed_seconds: float = 0.0

    @property
    def throughput_rows_per_sec(self) -> float:
        if self.elapsed_seconds <= 0:
            return 0.0
        return self.rows_total / self.elapsed_seconds


@dataclass(frozen=True)
class MaterializeResult:
    """Outcome of one materialization pass.

    On structural failure (no coordinate column, unusable input) ``error`` is
    set, ``points`` is empty and the caller must show the message instead of
    partial data.
    """
    points: list[NormalizedPoint] = field(default_factory=list)
    error: str | None = None
    warnings: list[str] = field(default_factory=list)
    mapping: HeaderMapping | None = None
    stats: MaterializeStats = field(default_factory=MaterializeStats)

    @property
    def ok(self) -> bool:
        return self.error is None

    @staticmethod
    def failure(message: str, rows_total: int = 0) -> MaterializeResult:
        return MaterializeResult(
            points=[],
            error=message,
            stats=MaterializeStats(rows_total=rows_total),
        )


class ChunkStatsAccumulator:
    """Collects per-chunk timings and summarizes them as (count, avg, p95)."""

    def __init__(self) -> None:
        self.chunk_times: list[float] = []

    def add_chunk_time(self, elapsed_seconds: float) -> None:
        self.chunk_times.append(elapsed_seconds)

    def get_stats(self) -> tuple[int, float, float]:
        """Calculate chunk statistics.

        Returns:
            tuple: (total_chunks, avg_chunk_seconds, p95_chunk_seconds)
        """
        if not self.chunk_times:
            return (0, 0.0, 0.0)

        total_chunks = len(self.chunk_times)
        avg_chunk_seconds = statistics.mean(self.chunk_times)

        if total_chunks == 1:
            p95_chunk_seconds = self.chunk_times[0]
        else:
            # 19th of 20 inclusive quantiles is the 95th percentile
            p95_chunk_seconds = statistics.quantiles(
                self.chunk_times, n=20, method='inclusive'
            )[18]

        return (total_chunks, avg_chunk_seconds, p95_chunk_seconds)
