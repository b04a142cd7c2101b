from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import DEFAULT_SHEET_NAME, DatabaseConfig
from ..models.schema import HeaderPolicy

"""Config loader.

Responsibilities:
- Load the YAML config (default: config/excel_db.yml)
- Validate it against the packaged config_schema.json
- Apply defaults (sheet=Sheet1, header_policy=schema, atomic_save=true)
- Apply environment overrides (EXCEL_DB_FILE / EXCEL_DB_SHEET)
"""

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/excel_db.yml")

ENV_FILE = "EXCEL_DB_FILE"
ENV_SHEET = "EXCEL_DB_SHEET"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: the schema file is missing or not valid JSON, or the
            config data violates it (missing keys, wrong types, unknown keys).
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


def config_from_dict(data: dict[str, Any]) -> DatabaseConfig:
    """Validate a parsed config mapping and build a DatabaseConfig."""
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")
    _validate_config_schema(data)
    return DatabaseConfig(
        file=Path(data["file"]),
        sheet=data.get("sheet", DEFAULT_SHEET_NAME),
        header_policy=HeaderPolicy(data.get("header_policy", HeaderPolicy.SCHEMA.value)),
        atomic_save=data.get("atomic_save", True),
        show_progress=data.get("show_progress", False),
    )


def load_config(path: Path) -> DatabaseConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    return config_from_dict(data)


def apply_env_overrides(config: DatabaseConfig) -> DatabaseConfig:
    """Environment variables take precedence over the config file."""
    return config.with_overrides(file=os.getenv(ENV_FILE), sheet=os.getenv(ENV_SHEET))
