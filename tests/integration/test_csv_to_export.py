from __future__ import annotations
import csv
from pathlib import Path

from atlas_mapper.config.loader import load_config
from atlas_mapper.logging.drop_log import DropLogBuffer
from atlas_mapper.reader.table_reader import read_rows
from atlas_mapper.services.export import export_csv
from atlas_mapper.services.filtering import ALL_CATEGORIES, filter_and_sort, unique_categories
from atlas_mapper.services.materializer import materialize


def test_csv_file_to_quoted_export(write_config, sample_csv: Path, temp_workdir: Path):
    cfg = load_config()
    rows = read_rows(sample_csv)
    drops = DropLogBuffer()
    result = materialize(rows, options=cfg.materialize_options(), drop_sink=drops)
    assert result.ok
    assert len(result.points) == 4
    assert drops.count("EMPTY_COORDINATES") == 1

    visible = filter_and_sort(result.points, ALL_CATEGORIES, "", None)
    assert unique_categories(visible) == ["Cape", "Island", "Town"]

    target = temp_workdir / "export.csv"
    export_csv(visible, target)
    lines = target.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 5
    assert all(line.startswith('"') and line.endswith('"') for line in lines)
    with target.open(encoding="utf-8", newline="") as f:
        parsed = list(csv.DictReader(f))
    batavia = parsed[0]
    assert batavia["Name"] == "Batavia"
    assert float(batavia["Latitude"]) < 0 < float(batavia["Longitude"])


def test_placeholder_only_file_yields_no_points(temp_workdir: Path, write_csv):
    path = write_csv([
        {"Coördinaten/Coordinates": "-", "Soortnaam/Category": "Town"},
        {"Coördinaten/Coordinates": "??", "Soortnaam/Category": "Town"},
    ])
    result = materialize(read_rows(path))
    assert result.ok
    assert result.points == []
    assert result.stats.rows_skipped == 2


def test_numeric_category_index_column_is_not_used(temp_workdir: Path, write_csv):
    path = write_csv([
        {"Category no.": "12", "Soortnaam (NL) / Category (EN)": "Rivier", "Coordinates": "1N/1E"},
        {"Category no.": "13", "Soortnaam (NL) / Category (EN)": "", "Coordinates": "2N/2E"},
    ])
    result = materialize(read_rows(path))
    assert result.mapping is not None
    assert result.mapping.category == "Soortnaam (NL) / Category (EN)"
    assert [p.category for p in result.points] == ["Rivier", "Unknown"]


def test_parts_round_trip_through_json(temp_workdir: Path, sample_rows):
    import json

    from atlas_mapper.reader.table_reader import read_rows_from_parts, split_rows

    paths = []
    for i, part in enumerate(split_rows(sample_rows, 3), start=1):
        path = temp_workdir / "data" / f"points-{i}.json"
        path.write_text(json.dumps(part, ensure_ascii=False), encoding="utf-8")
        paths.append(path)
    rows = read_rows_from_parts(reversed(paths))
    assert rows == sample_rows
    assert len(materialize(rows).points) == 4
