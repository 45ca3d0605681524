#
# config/models.py
#
"""
Attrs-based data models for suitewatch configuration structure.
"""

import logging
import shlex
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from attrs import define, field


# --- Validators ---
def _validate_log_level(inst: Any, attr: Any, value: str) -> None:
    """Validator for standard logging level names."""
    valid = logging._nameToLevel.keys()
    if value.upper() not in valid:
        raise ValueError(f"Invalid log_level '{value}'. Must be one of {list(valid)}.")


def _validate_positive_int(inst: Any, attr: Any, value: int) -> None:
    """Validator ensures integer is positive."""
    if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
        raise ValueError(f"Field '{attr.name}' must be positive integer, got {value}")


def _validate_positive_number(inst: Any, attr: Any, value: float) -> None:
    if not isinstance(value, int | float) or isinstance(value, bool) or value <= 0:
        raise ValueError(f"Field '{attr.name}' must be a positive number, got {value}")


def _validate_percentage(inst: Any, attr: Any, value: float) -> None:
    if not isinstance(value, int | float) or not 0 <= value <= 100:
        raise ValueError(f"Field '{attr.name}' must be between 0 and 100, got {value}")


def _validate_command(inst: Any, attr: Any, value: tuple[str, ...]) -> None:
    if not value:
        raise ValueError(f"Field '{attr.name}' must name a command, got an empty value")


# --- Converters ---
def to_command(value: str | Sequence[str]) -> tuple[str, ...]:
    """Accepts a shell-like string or a sequence of arguments."""
    if isinstance(value, str):
        return tuple(shlex.split(value))
    return tuple(str(part) for part in value)


def to_optional_command(value: str | Sequence[str] | None) -> tuple[str, ...] | None:
    """Like to_command, but an empty value disables the command."""
    if value is None:
        return None
    command = to_command(value)
    return command or None


# --- Run configuration ---
@define(frozen=True, slots=True)
class RunConfig:
    """Settings for supervising one test-runner process."""
    command: tuple[str, ...] = field(default=("npm", "test"), converter=to_command, validator=_validate_command)
    discovery_command: tuple[str, ...] | None = field(
        default=("npx", "jest", "--listTests"), converter=to_optional_command
    )
    runner_name: str = field(default="Jest")
    working_dir: Path = field(default=Path("."), converter=Path)
    log_path: Path = field(default=Path("test-results.log"), converter=Path)
    report_path: Path = field(default=Path("test-results.failed.txt"), converter=Path)
    tick_interval: float = field(default=0.16, validator=_validate_positive_number)
    bar_width: int = field(default=28, validator=_validate_positive_int)

    @property
    def command_display(self) -> str:
        return shlex.join(self.command)

    @property
    def resolved_log_path(self) -> Path:
        return self.working_dir / self.log_path

    @property
    def resolved_report_path(self) -> Path:
        return self.working_dir / self.report_path


@define(frozen=True, slots=True)
class CoverageConfig:
    """Settings for the lcov directory rollup."""
    lcov_path: Path = field(default=Path("coverage/lcov.info"), converter=Path)
    output_path: Path = field(default=Path("coverage-summary.txt"), converter=Path)
    # Directories under src/ that are broken down one level further.
    deep_directories: tuple[str, ...] = field(default=("pages",), converter=tuple)
    critical_threshold: float = field(default=60.0, validator=_validate_percentage)
    good_threshold: float = field(default=85.0, validator=_validate_percentage)
    good_limit: int = field(default=10, validator=_validate_positive_int)


@define(frozen=True, slots=True)
class TypecheckConfig:
    """Settings for the tsc diagnostics checker."""
    command: tuple[str, ...] = field(
        default=("npx", "tsc-files", "--noEmit", "--pretty", "false"),
        converter=to_command,
        validator=_validate_command,
    )
    output_path: Path = field(default=Path("tsc-errors.txt"), converter=Path)
    extensions: tuple[str, ...] = field(default=(".ts", ".tsx"), converter=tuple)


@define(frozen=True, slots=True)
class GlobalConfig:
    """Global default settings for suitewatch."""
    log_level: str = field(default="WARNING", validator=_validate_log_level)


@define(frozen=True, slots=True)
class SuitewatchConfig:
    """Root configuration object for the suitewatch application."""
    run: RunConfig = field(factory=RunConfig)
    coverage: CoverageConfig = field(factory=CoverageConfig)
    typecheck: TypecheckConfig = field(factory=TypecheckConfig)
    global_config: GlobalConfig = field(factory=GlobalConfig, metadata={"toml_name": "global"})
    source_path: Path | None = field(default=None)


# 🔼⚙️
