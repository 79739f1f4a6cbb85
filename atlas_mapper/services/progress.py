from __future__ import annotations

import sys
from collections.abc import Callable
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Chunk progress display with tqdm (TTY only).

Materialization processes rows in fixed-size chunks. After every chunk the
tracker:
- advances a single tqdm bar when stdout is a TTY (disabled otherwise, so CI
  logs stay free of ANSI control sequences)
- forwards the completed fraction in [0, 1] to an optional callback

The fraction is monotonically non-decreasing and reaches exactly 1.0 when the
last chunk finishes.
"""

__all__ = [
    "ChunkProgress",
    "ProgressCallback",
    "is_tty_enabled",
]

ProgressCallback = Callable[[float], None]


def is_tty_enabled() -> bool:
    """Check if TTY output is enabled.

    Returns:
        True if stdout is a TTY and progress should be displayed, False otherwise
    """
    return sys.stdout.isatty()


class ChunkProgress:
    """Progress tracker for chunked row processing.

    Args:
        total_rows: Number of input rows in the pass
        on_progress: Called with the completed fraction after each chunk
        show_bar: Set False to suppress the tqdm bar even on a TTY
        description: Description for the progress bar
    """

    def __init__(
        self,
        total_rows: int,
        *,
        on_progress: ProgressCallback | None = None,
        show_bar: bool = True,
        description: str = "Materializing rows",
    ) -> None:
        self.total_rows = total_rows
        self.description = description
        self.on_progress = on_progress
        self.processed_rows = 0
        self.fraction = 0.0

        self.enabled = show_bar and is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_rows,
                desc=description,
                unit="row",
                disable=False,
                leave=False,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def advance(self, rows: int) -> float:
        """Record ``rows`` more processed rows and report the new fraction.

        Returns:
            The completed fraction in [0, 1]
        """
        self.processed_rows = min(self.processed_rows + rows, self.total_rows)
        if self.total_rows <= 0:
            fraction = 1.0
        else:
            fraction = self.processed_rows / self.total_rows
        # never report going backwards
        self.fraction = max(self.fraction, min(fraction, 1.0))

        if self.enabled and self.pbar is not None:
            self.pbar.update(rows)
        if self.on_progress is not None:
            self.on_progress(self.fraction)
        return self.fraction

    def set_postfix(self, **kwargs: Any) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.set_postfix(**kwargs)

    def close(self) -> None:
        """Close the progress bar."""
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ChunkProgress:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
