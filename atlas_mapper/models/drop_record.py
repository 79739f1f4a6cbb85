from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""DropRecord model for the drop log.

One record per row or segment excluded from a materialization pass. Drops are
expected for historical atlas data and never fail the pass; the log exists
for auditing the source transcription.

row is the 0-based index into the input row sequence. Use -1 for pass-level
failures where no single row is responsible.
"""

__all__ = [
    "DropRecord",
]


@dataclass(frozen=True)
class DropRecord:
    """Structured drop record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        row: Source row index (0-based). -1 for pass-level failures
        column: Coordinate column the value was read from ("" if unresolved)
        segment: The raw value or '+'-split segment that was dropped
        reason: Drop classification in UPPER_SNAKE_CASE format
    """
    timestamp: str  # ISO8601 UTC
    row: int
    column: str
    segment: str
    reason: str  # UPPER_SNAKE

    @staticmethod
    def create(row: int, column: str, segment: str, reason: str) -> DropRecord:
        """Create a new DropRecord with current UTC timestamp."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return DropRecord(
            timestamp=ts,
            row=row,
            column=column,
            segment=segment,
            reason=reason,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
