from __future__ import annotations

import json
import re
from collections.abc import Iterable, Sequence
from pathlib import Path

import pandas as pd

"""Atlas index reader: CSV / XLSX / JSON files -> RawRow sequence.

Every cell is read as a string and pandas' NA coercion is disabled, so the
source placeholders ("-", "??") and literal strings like "NA" reach the
materializer untouched. Headers are whitespace-trimmed; fully empty rows are
skipped.

A dataset transported in parts (points-1.json, points-2.json, ...) is
concatenated in natural order before materialization.
"""

__all__ = [
    "ReaderError",
    "RawRow",
    "read_rows",
    "read_rows_from_parts",
    "split_rows",
    "strip_translation_header",
]

RawRow = dict[str, str]

SUPPORTED_SUFFIXES = (".csv", ".xlsx", ".json")


class ReaderError(Exception):
    """Raised when an input file is missing, unsupported or unreadable."""


def strip_translation_header(header: str) -> str:
    """Drop the translation half of a bilingual header: 'Soortnaam/Category' -> 'Soortnaam'."""
    return re.sub(r"\s*/.*", "", header, flags=re.DOTALL).strip()


def _frame_to_rows(df: pd.DataFrame, strip_translation: bool) -> list[RawRow]:
    columns = [str(c).strip() for c in df.columns]
    if strip_translation:
        columns = [strip_translation_header(c) for c in columns]
    rows: list[RawRow] = []
    for values in df.itertuples(index=False, name=None):
        texts = ["" if v is None else str(v) for v in values]
        if all(t.strip() == "" for t in texts):
            continue
        rows.append(dict(zip(columns, texts, strict=False)))
    return rows


def _read_json(path: Path) -> pd.DataFrame:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ReaderError(f"invalid json in {path.name}: {e}") from e
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise ReaderError(f"{path.name}: expected a JSON array of objects")
    df = pd.DataFrame.from_records(data)
    return df.astype(object).where(df.notna(), "").astype(str)


def read_rows(path: Path, *, strip_translation: bool = False, sheet: str | int = 0) -> list[RawRow]:
    """Read one atlas index file.

    Parameters
    ----------
    path: .csv, .xlsx or .json (array of objects) file
    strip_translation: truncate bilingual headers at the first '/'
    sheet: sheet name or index for .xlsx files

    Raises
    ------
    ReaderError: missing file, unsupported suffix, or unparseable content
    """
    if not path.exists():
        raise ReaderError(f"input file not found: {path}")
    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ReaderError(f"unsupported input type {suffix!r} (expected one of {', '.join(SUPPORTED_SUFFIXES)})")

    try:
        if suffix == ".csv":
            df = pd.read_csv(
                path,
                dtype=str,
                keep_default_na=False,
                na_filter=False,
                skip_blank_lines=True,
                encoding="utf-8",
            )
        elif suffix == ".xlsx":
            df = pd.read_excel(path, sheet_name=sheet, dtype=str, keep_default_na=False, na_filter=False)
        else:
            df = _read_json(path)
    except ReaderError:
        raise
    except (ValueError, OSError, UnicodeDecodeError, pd.errors.ParserError) as e:
        raise ReaderError(f"could not read {path.name}: {e}") from e

    return _frame_to_rows(df, strip_translation)


def _natural_key(path: Path) -> list[object]:
    return [int(part) if part.isdigit() else part.lower() for part in re.split(r"(\d+)", path.name)]


def read_rows_from_parts(paths: Iterable[Path], *, strip_translation: bool = False) -> list[RawRow]:
    """Read and concatenate transport parts in natural filename order (points-2 before points-10)."""
    ordered = sorted(paths, key=_natural_key)
    if not ordered:
        raise ReaderError("no input files given")
    rows: list[RawRow] = []
    for path in ordered:
        rows.extend(read_rows(path, strip_translation=strip_translation))
    return rows


def split_rows(rows: Sequence[RawRow], chunk_size: int) -> list[list[RawRow]]:
    """Split rows into transport parts of at most ``chunk_size`` rows."""
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive: {chunk_size}")
    return [list(rows[i:i + chunk_size]) for i in range(0, len(rows), chunk_size)]
