from __future__ import annotations

from ..models.materialize_result import MaterializeStats

"""SUMMARY line rendering for a materialization pass.

Format:
SUMMARY rows={rows} points={points} skipped_rows={skipped} dropped_segments={dropped}
chunks={chunks} elapsed_sec={elapsed} throughput_rps={throughput}
(one line, single spaces)
"""


def _format_number(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # avoid scientific notation for very small numbers
        return f"{value:.6f}".rstrip('0').rstrip('.')
    return f"{value:.3f}".rstrip('0').rstrip('.')


def render_summary_line(stats: MaterializeStats) -> str:
    """Render a SUMMARY line from MaterializeStats.

    Examples:
        >>> stats = MaterializeStats(
        ...     rows_total=3, rows_skipped=1, segments_parsed=3,
        ...     segments_dropped=0, chunks=1, elapsed_seconds=0.5,
        ... )
        >>> render_summary_line(stats)
        'SUMMARY rows=3 points=3 skipped_rows=1 dropped_segments=0 chunks=1 elapsed_sec=0.5 throughput_rps=6'
    """
    return (
        f"SUMMARY rows={stats.rows_total} "
        f"points={stats.segments_parsed} "
        f"skipped_rows={stats.rows_skipped} "
        f"dropped_segments={stats.segments_dropped} "
        f"chunks={stats.chunks} "
        f"elapsed_sec={_format_number(stats.elapsed_seconds)} "
        f"throughput_rps={_format_number(stats.throughput_rows_per_sec)}"
    )
