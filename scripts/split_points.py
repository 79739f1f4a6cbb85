#!/usr/bin/env python3
"""Split an atlas index into JSON transport parts (points-1.json, points-2.json, ...).

The parts are read back in natural order by ``atlas-mapper points-*.json``.
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from atlas_mapper.reader.table_reader import ReaderError, read_rows, split_rows


def main() -> int:
    parser = argparse.ArgumentParser(description="Split an atlas index into JSON parts")
    parser.add_argument("input", type=Path, help="Source .csv, .xlsx or .json file")
    parser.add_argument("--out-dir", type=Path, default=Path("data/parts"), help="Output directory (default: data/parts)")
    parser.add_argument("--rows-per-part", type=int, default=5_000, help="Rows per part (default: 5,000)")
    parser.add_argument("--strip-translation", action="store_true", help="Truncate bilingual headers at '/'")
    args = parser.parse_args()

    if args.rows_per_part <= 0:
        print("Error: --rows-per-part must be positive", file=sys.stderr)
        return 1
    try:
        rows = read_rows(args.input, strip_translation=args.strip_translation)
    except ReaderError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    args.out_dir.mkdir(parents=True, exist_ok=True)
    parts = split_rows(rows, args.rows_per_part)
    for number, part in enumerate(parts, start=1):
        target = args.out_dir / f"points-{number}.json"
        target.write_text(json.dumps(part, ensure_ascii=False), encoding="utf-8")
    print(f"Wrote {len(parts)} part(s) of up to {args.rows_per_part:,} rows to {args.out_dir}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
