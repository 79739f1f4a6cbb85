from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..coords.normalizer import PLACEHOLDERS
from ..models.header_mapping import HeaderCandidates
from ..services.materializer import DEFAULT_CHUNK_SIZE, MaterializeOptions

"""Config loader for the atlas mapper.

Responsibilities:
- Load YAML (default config/atlas.yml)
- Validate against the bundled JSON schema (unknown keys rejected)
- Apply defaults for every missing key
"""

__all__ = [
    "AppConfig",
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "load_config",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/atlas.yml")


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class AppConfig:
    chunk_size: int = DEFAULT_CHUNK_SIZE
    default_name: str = "N/A"
    default_category: str = "Unknown"
    placeholders: frozenset[str] = PLACEHOLDERS
    headers: HeaderCandidates = field(default_factory=HeaderCandidates)
    export_path: str | None = None
    progress: bool = True

    def materialize_options(self) -> MaterializeOptions:
        return MaterializeOptions(
            chunk_size=self.chunk_size,
            default_name=self.default_name,
            default_category=self.default_category,
            placeholders=self.placeholders,
            candidates=self.headers,
            show_progress=self.progress,
        )


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the bundled JSON schema.

    Raises:
        ConfigError: If the schema file is missing or invalid, or the config
            data fails validation (wrong types, unknown keys, ...)
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _header_candidates(raw: dict[str, list[str]]) -> HeaderCandidates:
    defaults = HeaderCandidates()
    return HeaderCandidates(
        coordinates=tuple(raw.get("coordinates", defaults.coordinates)),
        name=tuple(raw.get("name", defaults.name)),
        category_exact=tuple(raw.get("category_exact", defaults.category_exact)),
        category_contains=tuple(raw.get("category_contains", defaults.category_contains)),
    )


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration.

    Args:
        path: Explicit config file; must exist. When None, DEFAULT_CONFIG_PATH
            is used if present, otherwise all defaults apply.

    Raises:
        ConfigError: Missing explicit file, invalid YAML, or schema violation
    """
    if path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return AppConfig()
        path = DEFAULT_CONFIG_PATH
    elif not path.exists():
        raise ConfigError(f"config file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    defaults = AppConfig()
    return AppConfig(
        chunk_size=data.get("chunk_size", defaults.chunk_size),
        default_name=data.get("default_name", defaults.default_name),
        default_category=data.get("default_category", defaults.default_category),
        placeholders=frozenset(data.get("placeholders", defaults.placeholders)),
        headers=_header_candidates(data.get("headers", {})),
        export_path=data.get("export_path", defaults.export_path),
        progress=data.get("progress", defaults.progress),
    )
