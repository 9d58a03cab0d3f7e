from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..exceptions import ConfigError
from ..services.paths import PATH_DERIVATION_MODES

"""Config loader for the attribute table reinitialization tool.

Responsibilities:
- Load YAML config (default config/reinit.yml, optional)
- Validate keys and types against CONFIG_SCHEMA
- Apply defaults for anything not given
"""

__all__ = [
    "ConfigError",
    "ReinitConfig",
    "CONFIG_SCHEMA",
    "DEFAULT_CONFIG_PATH",
    "load_config",
]

DEFAULT_CONFIG_PATH = Path("config/reinit.yml")

CONFIG_SCHEMA: dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "geometry_extension": {"type": "string", "pattern": r"^\.[A-Za-z0-9]+$"},
        "attribute_extension": {"type": "string", "pattern": r"^\.[A-Za-z0-9]+$"},
        "path_derivation": {"type": "string", "enum": list(PATH_DERIVATION_MODES)},
        "progress_label": {"type": "string"},
        "logs_dir": {"type": "string", "minLength": 1},
        "encoding": {"type": "string", "minLength": 1},
    },
}


@dataclass(frozen=True)
class ReinitConfig:
    geometry_extension: str = ".shp"
    attribute_extension: str = ".dbf"
    path_derivation: str = "suffix"  # suffix | legacy
    progress_label: str = "Reading Points:"
    logs_dir: str = "./logs"
    encoding: str = "utf-8"


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against CONFIG_SCHEMA.

    Raises:
        ConfigError: If the data fails schema validation (unknown keys,
            wrong types, unsupported path_derivation mode).
    """
    try:
        jsonschema.validate(data, CONFIG_SCHEMA)
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path | None = None, *, required: bool = False) -> ReinitConfig:
    """Load and validate the YAML config.

    A missing file yields the defaults unless ``required`` is set (an
    explicitly requested config must exist).
    """
    path = DEFAULT_CONFIG_PATH if path is None else path
    if not path.exists():
        if required:
            raise ConfigError(f"config file not found: {path}")
        return ReinitConfig()
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config validation failed: top level must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    defaults = ReinitConfig()
    geometry_ext = data.get("geometry_extension", defaults.geometry_extension)
    attribute_ext = data.get("attribute_extension", defaults.attribute_extension)
    if geometry_ext.lower() == attribute_ext.lower():
        # Deriving the table path must never point back at the geometry file
        raise ConfigError(
            f"config validation failed: geometry_extension and attribute_extension are both {geometry_ext}"
        )
    return ReinitConfig(
        geometry_extension=geometry_ext,
        attribute_extension=attribute_ext,
        path_derivation=data.get("path_derivation", defaults.path_derivation),
        progress_label=data.get("progress_label", defaults.progress_label),
        logs_dir=data.get("logs_dir", defaults.logs_dir),
        encoding=data.get("encoding", defaults.encoding),
    )
