# Shared pytest fixtures
from __future__ import annotations
import csv
import tempfile
from pathlib import Path

import pytest

from atlas_mapper.logging.init import reset_logging

COORD_HEADER = "Coördinaten/Coordinates"
NAME_HEADER = "Oorspr. naam op de kaart/Original name on the map"
CATEGORY_HEADER = "Soortnaam/Category"


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("ATLAS_MAPPER_CONFIG", raising=False)
        yield p


@pytest.fixture(autouse=True)
def _fresh_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def sample_rows() -> list[dict[str, str]]:
    return [
        {NAME_HEADER: "Batavia", CATEGORY_HEADER: "Town", COORD_HEADER: "6-10S/106-49E"},
        {NAME_HEADER: "Onrust", CATEGORY_HEADER: "Island", COORD_HEADER: "6-2S/106-44E + 6-3S/106-45E"},
        {NAME_HEADER: "Unknown bay", CATEGORY_HEADER: "", COORD_HEADER: "??"},
        {NAME_HEADER: "Kaap", CATEGORY_HEADER: "Cape", COORD_HEADER: "34-21S/18-28E"},
    ]


@pytest.fixture()
def sample_config_yaml() -> str:
    return """chunk_size: 2
default_name: N/A
default_category: Unknown
placeholders: ["-", "??"]
progress: false
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "atlas.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def write_csv(temp_workdir: Path):
    def _write(rows: list[dict[str, str]], name: str = "atlas.csv") -> Path:
        path = temp_workdir / "data" / name
        with path.open("w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
            writer.writeheader()
            writer.writerows(rows)
        return path
    return _write


@pytest.fixture()
def sample_csv(write_csv, sample_rows) -> Path:
    return write_csv(sample_rows)
