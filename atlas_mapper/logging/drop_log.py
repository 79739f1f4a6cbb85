from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..models.drop_record import DropRecord

"""Drop log buffering.

- JSON Lines, fixed schema (timestamp, row, column, segment, reason)
- One file per run: ``logs/drops-YYYYMMDD-HHMMSS.log`` (UTC), created on first flush
- Records are buffered in memory and appended in one go on flush()
"""

__all__ = [
    "DropLogBuffer",
    "DropRecord",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class DropLogBuffer:
    """In-memory buffer of drop records. Usable directly as a materializer drop sink."""

    def __init__(self, logs_dir: Path | None = None) -> None:
        self.logs_dir = logs_dir or LOGS_DIR
        self._records: list[DropRecord] = []
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self.logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self.logs_dir / f"drops-{stamp}.log"
        return self._file_path

    def append(self, record: DropRecord) -> None:
        self._records.append(record)

    __call__ = append

    def count(self, reason: str) -> int:
        return sum(1 for r in self._records if r.reason == reason)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        """Append buffered records to the log file.

        Returns:
            The file path, or None when nothing was buffered (no file created)
        """
        if not self._records:
            return None
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
