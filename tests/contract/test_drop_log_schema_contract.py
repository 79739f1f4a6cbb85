from __future__ import annotations
import json
from pathlib import Path

from atlas_mapper.logging.drop_log import DropLogBuffer
from atlas_mapper.services.materializer import MaterializeOptions, materialize

"""Drop log contract: JSON Lines with keys timestamp,row,column,segment,reason."""

REQUIRED_KEYS = {"timestamp", "row", "column", "segment", "reason"}
REASONS = {"EMPTY_COORDINATES", "UNPARSEABLE_SEGMENT", "MISSING_COORDINATE_COLUMN"}


def test_drop_log_lines_follow_schema(temp_workdir: Path):
    buf = DropLogBuffer()
    rows = [
        {"Coordinates": "??"},
        {"Coordinates": "1N/1E + nonsense"},
    ]
    materialize(rows, options=MaterializeOptions(show_progress=False), drop_sink=buf)
    materialize([{"Name": "x"}], options=MaterializeOptions(show_progress=False), drop_sink=buf)
    path = buf.flush()
    assert path is not None
    records = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert len(records) == 3
    for rec in records:
        assert set(rec.keys()) == REQUIRED_KEYS
        assert rec["reason"] in REASONS
        assert isinstance(rec["row"], int)
        assert rec["timestamp"].endswith("Z")
    assert [r["reason"] for r in records] == [
        "EMPTY_COORDINATES",
        "UNPARSEABLE_SEGMENT",
        "MISSING_COORDINATE_COLUMN",
    ]
