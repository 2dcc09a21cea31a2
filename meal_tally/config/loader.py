from __future__ import annotations

import json
import os
from dataclasses import replace
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..excel.columns import parse_column_list
from ..models.config_models import (
    DEFAULT_BANNER_THRESHOLD,
    DEFAULT_MEAL_COLUMNS,
    DEFAULT_NAME_COLUMN,
    DEFAULT_STOP_WORDS,
    ColumnConfig,
    TallyConfig,
    TemplateConfig,
)

"""Config loader.

Responsibilities:
- Locate the YAML config (explicit path, MEAL_TALLY_CONFIG, config/meal_tally.yml)
- Validate it against config_schema.json
- Apply defaults for every missing key
- Apply command line overrides on top of the file values
"""

__all__ = [
    "CONFIG_ENV_VAR",
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "apply_overrides",
    "build_config",
    "load_config",
    "resolve_config_path",
]

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/meal_tally.yml")
CONFIG_ENV_VAR = "MEAL_TALLY_CONFIG"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the bundled JSON schema.

    Raises:
        ConfigError: the schema file is missing or invalid, or the data
            violates it (unknown keys, wrong types, bad column letters)
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


def build_config(data: dict[str, Any]) -> TallyConfig:
    """Build a TallyConfig from already validated raw data, applying defaults."""
    cols_raw = data.get("columns") or {}
    meal_columns = parse_column_list(cols_raw.get("meals")) or list(DEFAULT_MEAL_COLUMNS)
    columns = ColumnConfig(
        name_column=str(cols_raw.get("name", DEFAULT_NAME_COLUMN)).strip().upper(),
        meal_columns=tuple(meal_columns),
        first_row=int(cols_raw.get("first_row", 0)),
        banner_threshold=int((data.get("start_row") or {}).get("banner_threshold", DEFAULT_BANNER_THRESHOLD)),
    )

    tpl_raw = data.get("template") or {}
    defaults = TemplateConfig()
    template = TemplateConfig(
        sheet_marker=tpl_raw.get("sheet_marker", defaults.sheet_marker),
        header_phrase=tpl_raw.get("header_phrase", defaults.header_phrase),
        name_column=tpl_raw.get("name_column", defaults.name_column).upper(),
        aux_column=tpl_raw.get("aux_column", defaults.aux_column).upper(),
        target_column=tpl_raw.get("target_column", defaults.target_column).upper(),
        aux_value=tpl_raw.get("aux_value", defaults.aux_value),
        header_scan_rows=tpl_raw.get("header_scan_rows", defaults.header_scan_rows),
        default_data_row=tpl_raw.get("default_data_row", defaults.default_data_row),
    )

    stop_words = data.get("stop_words")
    return TallyConfig(
        columns=columns,
        template=template,
        stop_words=frozenset(stop_words) if stop_words is not None else DEFAULT_STOP_WORDS,
    )


def resolve_config_path(explicit: Path | None = None) -> tuple[Path | None, bool]:
    """Pick the config file to load.

    Returns:
        (path or None, required) where required means a missing file is an error
    """
    if explicit is not None:
        return explicit, True
    env_value = os.getenv(CONFIG_ENV_VAR)
    if env_value:
        return Path(env_value), True
    if DEFAULT_CONFIG_PATH.exists():
        return DEFAULT_CONFIG_PATH, False
    return None, False


def load_config(path: Path | None = None) -> TallyConfig:
    """Load configuration; built-in defaults when no config file applies."""
    resolved, required = resolve_config_path(path)
    if resolved is None:
        return TallyConfig()
    if not resolved.exists():
        if required:
            raise ConfigError(f"config file not found: {resolved}")
        return TallyConfig()
    try:
        data = yaml.safe_load(resolved.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {resolved}")

    _validate_config_schema(data)
    return build_config(data)


def apply_overrides(
    config: TallyConfig,
    *,
    name_column: str | None = None,
    meal_columns: str | None = None,
    first_row: int | None = None,
) -> TallyConfig:
    """Return config with command line column settings applied."""
    columns = config.columns
    if name_column:
        columns = replace(columns, name_column=name_column.strip().upper())
    if meal_columns:
        letters = parse_column_list(meal_columns)
        if not letters:
            raise ConfigError(f"no meal columns in '{meal_columns}'")
        columns = replace(columns, meal_columns=tuple(letters))
    if first_row is not None:
        if first_row < 0:
            raise ConfigError(f"first row must be >= 0, got {first_row}")
        columns = replace(columns, first_row=first_row)
    return replace(config, columns=columns)
