#
# config/loader.py
#
"""
Loads suitewatch configuration from `suitewatch.toml` or the
`[tool.suitewatch]` table of `pyproject.toml`.
"""

import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import attrs
import structlog

from suitewatch.exceptions import ConfigurationError
from suitewatch.telemetry import StructLogger

from .models import CoverageConfig, GlobalConfig, RunConfig, SuitewatchConfig, TypecheckConfig

log: StructLogger = structlog.get_logger("config.loader")

DEFAULT_CONFIG_NAME = "suitewatch.toml"
PYPROJECT_NAME = "pyproject.toml"

SECTION_MODELS: dict[str, type] = {
    "run": RunConfig,
    "coverage": CoverageConfig,
    "typecheck": TypecheckConfig,
    "global": GlobalConfig,
}


def find_config_file(start_dir: Path) -> Path | None:
    """Returns the first config candidate in `start_dir`, if any."""
    dedicated = start_dir / DEFAULT_CONFIG_NAME
    if dedicated.is_file():
        return dedicated
    pyproject = start_dir / PYPROJECT_NAME
    if pyproject.is_file():
        return pyproject
    return None


def _read_table(path: Path) -> Mapping[str, Any]:
    try:
        with path.open("rb") as fh:
            data = tomllib.load(fh)
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration file: {e}", path=str(path)) from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML: {e}", path=str(path)) from e

    if path.name == PYPROJECT_NAME:
        return data.get("tool", {}).get("suitewatch", {})
    return data


def _build_section(name: str, values: Any, path: Path) -> Any:
    model = SECTION_MODELS[name]
    if not isinstance(values, Mapping):
        raise ConfigurationError(f"Section '{name}' must be a table", path=str(path))

    known = {a.name for a in attrs.fields(model)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigurationError(f"Unknown keys in section '{name}': {unknown}", path=str(path))

    try:
        return model(**values)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid value in section '{name}': {e}", path=str(path)) from e


def load_config(config_path: Path | None = None, start_dir: Path | None = None) -> SuitewatchConfig:
    """
    Loads configuration from an explicit file, or from the first candidate
    found in `start_dir`. Without any file the defaults are returned.

    Raises:
        ConfigurationError: The file is unreadable, malformed or holds invalid values.
    """
    path = config_path or find_config_file(start_dir or Path.cwd())
    if path is None:
        log.debug("No configuration file found, using defaults")
        return SuitewatchConfig()

    log.debug("Loading configuration", path=str(path), emoji_key="load")
    table = _read_table(path)

    sections: dict[str, Any] = {}
    for name, values in table.items():
        if name not in SECTION_MODELS:
            raise ConfigurationError(f"Unknown configuration section '{name}'", path=str(path))
        sections["global_config" if name == "global" else name] = _build_section(name, values, path)

    config = SuitewatchConfig(**sections, source_path=path)
    log.info("Configuration loaded", path=str(path), sections=sorted(table))
    return config

# 🔼⚙️
