from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from file_arrival.models.config_models import (
    AppConfig,
    ColumnLayout,
    NormalizeConfig,
    ScanConfig,
)

"""Config loader.

Responsibilities:
- Load the YAML config (``config/file_arrival.yml`` by default)
- Validate it against the bundled ``config_schema.json``
- Apply defaults for every omitted key (an empty file is a valid config)
"""

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "default_config",
    "load_config",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/file_arrival.yml")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: Any) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or invalid, or the config
            data fails validation (wrong types, unknown keys, bad column letters).
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


def default_config() -> AppConfig:
    return AppConfig()


def load_config(path: Path) -> AppConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if data is None:
        data = {}

    _validate_config_schema(data)

    defaults = default_config()
    layout = replace(ColumnLayout(), **data.get("columns", {}))
    if "sheet" in data:
        layout = replace(layout, sheet=data["sheet"])

    normalize_raw = data.get("normalize", {})
    scan_raw = data.get("scan", {})
    return AppConfig(
        layout=layout,
        match_threshold_percent=float(
            data.get("match_threshold_percent", defaults.match_threshold_percent)
        ),
        normalize=NormalizeConfig(
            override_with_code=normalize_raw.get(
                "override_with_code", defaults.normalize.override_with_code
            ),
        ),
        scan=ScanConfig(
            eligible_codes=tuple(scan_raw.get("eligible_codes", defaults.scan.eligible_codes)),
            directory_policy=scan_raw.get("directory_policy", defaults.scan.directory_policy),
        ),
    )
