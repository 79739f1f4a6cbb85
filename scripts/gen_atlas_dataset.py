#!/usr/bin/env python3
"""Synthetic atlas index generator for performance and robustness testing.

Writes a CSV (or XLSX) shaped like a bilingual historical atlas index:
- Dutch/English headers joined by '/'
- DMS coordinate pairs such as ``6-10S/106-49E``
- A share of rows with several '+'-joined pairs
- Placeholder rows ("-", "??") and malformed tokens, as found in transcribed sources
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np
import pandas as pd

NAME_HEADER = "Oorspr. naam op de kaart/Original name on the map"
CATEGORY_HEADER = "Soortnaam/Category"
COORD_HEADER = "Coördinaten/Coordinates"

CATEGORIES = ["Stad/Town", "Eiland/Island", "Kaap/Cape", "Rivier/River", "Fort", "Baai/Bay"]
MALFORMED = ["12-30N", "6-10X/106-49E", "abc/def", "95-00N/10-00E", "6-10S/", "1-2-3-4N/5E"]


def _dms(rng: np.random.Generator, max_degrees: int, positive: str, negative: str) -> str:
    degrees = rng.integers(0, max_degrees)
    minutes = rng.integers(0, 60)
    hemisphere = positive if rng.random() < 0.5 else negative
    if rng.random() < 0.3:
        seconds = rng.integers(0, 60)
        return f"{degrees}-{minutes}-{seconds}{hemisphere}"
    return f"{degrees}-{minutes}{hemisphere}"


def _pair(rng: np.random.Generator) -> str:
    return f"{_dms(rng, 90, 'N', 'S')}/{_dms(rng, 180, 'E', 'W')}"


def generate_atlas_rows(
    rows: int,
    seed: int = 42,
    placeholder_ratio: float = 0.05,
    malformed_ratio: float = 0.01,
    multi_ratio: float = 0.1,
) -> pd.DataFrame:
    """Generate synthetic atlas index rows.

    Args:
        rows: Number of data rows
        seed: Random seed for reproducible data
        placeholder_ratio: Share of rows whose coordinate value is "-" or "??"
        malformed_ratio: Share of rows carrying one unparseable segment
        multi_ratio: Share of rows with two or three '+'-joined pairs

    Returns:
        DataFrame with string cells only
    """
    rng = np.random.default_rng(seed)
    names: list[str] = []
    categories: list[str] = []
    coords: list[str] = []

    for i in range(rows):
        names.append(f"Plaats {i} / Place {i}")
        categories.append(str(rng.choice(CATEGORIES)) if rng.random() > 0.03 else "")

        roll = rng.random()
        if roll < placeholder_ratio:
            coords.append(str(rng.choice(["-", "??"])))
            continue
        segments = [_pair(rng)]
        if roll < placeholder_ratio + multi_ratio:
            segments.extend(_pair(rng) for _ in range(rng.integers(1, 3)))
        if rng.random() < malformed_ratio:
            segments.append(str(rng.choice(MALFORMED)))
        coords.append(" + ".join(segments))

    return pd.DataFrame({NAME_HEADER: names, CATEGORY_HEADER: categories, COORD_HEADER: coords})


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate a synthetic bilingual atlas index",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # 20k rows as CSV
  %(prog)s data/atlas.csv

  # Larger XLSX with more placeholders
  %(prog)s data/atlas.xlsx --rows 100000 --placeholder-ratio 0.2
        """,
    )
    parser.add_argument("output", type=Path, help="Output .csv or .xlsx path")
    parser.add_argument("--rows", type=int, default=20_000, help="Number of data rows (default: 20,000)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument("--placeholder-ratio", type=float, default=0.05)
    parser.add_argument("--malformed-ratio", type=float, default=0.01)
    parser.add_argument("--multi-ratio", type=float, default=0.1)
    args = parser.parse_args()

    if args.rows <= 0:
        print("Error: --rows must be positive", file=sys.stderr)
        return 1
    if args.output.suffix.lower() not in (".csv", ".xlsx"):
        print("Error: output must end in .csv or .xlsx", file=sys.stderr)
        return 1

    df = generate_atlas_rows(
        args.rows,
        seed=args.seed,
        placeholder_ratio=args.placeholder_ratio,
        malformed_ratio=args.malformed_ratio,
        multi_ratio=args.multi_ratio,
    )
    args.output.parent.mkdir(parents=True, exist_ok=True)
    if args.output.suffix.lower() == ".csv":
        df.to_csv(args.output, index=False, encoding="utf-8")
    else:
        df.to_excel(args.output, index=False, engine="openpyxl")

    print(f"Created atlas index: {args.output}")
    print(f"  Rows: {len(df):,}")
    print(f"  Seed: {args.seed}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
