from __future__ import annotations

import csv
from collections.abc import Iterable
from pathlib import Path

import pandas as pd

from ..models.point import NormalizedPoint

"""CSV export of the currently visible points.

Format: header row ``Name,Category,Latitude,Longitude,Original Coordinates``,
one row per point, every field (header included) double-quote-enclosed.
"""

__all__ = [
    "EXPORT_COLUMNS",
    "export_csv",
    "points_to_frame",
]

EXPORT_COLUMNS: list[str] = ["Name", "Category", "Latitude", "Longitude", "Original Coordinates"]


def points_to_frame(points: Iterable[NormalizedPoint]) -> pd.DataFrame:
    records = [
        {
            "Name": p.original_name,
            "Category": p.category,
            "Latitude": p.latitude,
            "Longitude": p.longitude,
            "Original Coordinates": p.original_coords,
        }
        for p in points
    ]
    return pd.DataFrame.from_records(records, columns=EXPORT_COLUMNS)


def export_csv(points: Iterable[NormalizedPoint], path: Path | None = None) -> str:
    """Render points as quoted CSV, writing to ``path`` when given.

    Returns:
        The CSV text (also when written to a file)
    """
    text = points_to_frame(points).to_csv(
        index=False,
        quoting=csv.QUOTE_ALL,
        lineterminator="\n",
    )
    if path is not None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return text
