from __future__ import annotations
from pathlib import Path

import pytest

from atlas_mapper.config.loader import AppConfig, ConfigError, load_config
from atlas_mapper.models.header_mapping import HeaderCandidates


def test_defaults_when_no_config_file(temp_workdir: Path):
    cfg = load_config()
    assert cfg == AppConfig()
    assert cfg.chunk_size == 100
    assert cfg.placeholders == frozenset({"-", "??"})


def test_default_path_is_picked_up(write_config: Path):
    cfg = load_config()
    assert cfg.chunk_size == 2
    assert cfg.progress is False


def test_explicit_missing_file(temp_workdir: Path):
    with pytest.raises(ConfigError, match="config file not found"):
        load_config(temp_workdir / "config" / "nope.yml")


def test_empty_file_gives_defaults(temp_workdir: Path):
    path = temp_workdir / "config" / "empty.yml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == AppConfig()


def test_invalid_yaml(temp_workdir: Path):
    path = temp_workdir / "config" / "bad.yml"
    path.write_text("chunk_size: [1, 2\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_config(path)


def test_root_must_be_mapping(temp_workdir: Path):
    path = temp_workdir / "config" / "list.yml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="config root must be a mapping"):
        load_config(path)


def test_headers_override_only_given_fields(temp_workdir: Path):
    path = temp_workdir / "config" / "headers.yml"
    path.write_text("headers:\n  coordinates: [ligging]\n", encoding="utf-8")
    cfg = load_config(path)
    assert cfg.headers.coordinates == ("ligging",)
    assert cfg.headers.name == HeaderCandidates().name


def test_materialize_options_mirror_config(temp_workdir: Path):
    path = temp_workdir / "config" / "opts.yml"
    path.write_text(
        "chunk_size: 25\ndefault_name: '?'\ndefault_category: Overig\nplaceholders: ['-', '??', 'onbekend']\n",
        encoding="utf-8",
    )
    options = load_config(path).materialize_options()
    assert options.chunk_size == 25
    assert options.default_name == "?"
    assert options.default_category == "Overig"
    assert "onbekend" in options.placeholders


@pytest.mark.parametrize(
    "text",
    [
        "chunk_size: 0\n",
        "chunk_size: ten\n",
        "default_category: '  '\n",
        "unknown_key: 1\n",
        "headers:\n  coordinates: []\n",
        "headers:\n  lat: [x]\n",
        "progress: maybe\n",
    ],
)
def test_schema_violations(temp_workdir: Path, text: str):
    path = temp_workdir / "config" / "invalid.yml"
    path.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError, match="config validation failed"):
        load_config(path)
