# src/suitewatch/cli/utils.py

import logging
from pathlib import Path

import click
import structlog

from suitewatch.config import SuitewatchConfig, load_config
from suitewatch.exceptions import ConfigurationError
from suitewatch.telemetry.logger import setup_logging as core_setup_logging

log = structlog.get_logger("cli.utils")

LOG_LEVEL_CHOICES = click.Choice(list(logging._nameToLevel.keys()), case_sensitive=False)


def logging_options(f):
    """Decorator to add logging options to any command."""
    f = click.option(
        "-l",
        "--log-level",
        type=LOG_LEVEL_CHOICES,
        default=None,
        envvar="SUITEWATCH_LOG_LEVEL",
        help="Set the logging level (overrides config file).",
    )(f)
    f = click.option(
        "--log-file",
        type=click.Path(dir_okay=False, writable=True, resolve_path=True),
        default=None,
        envvar="SUITEWATCH_LOG_FILE",
        help="Path to write logs to a file (JSON format).",
    )(f)
    f = click.option(
        "--json-logs",
        is_flag=True,
        default=None,
        envvar="SUITEWATCH_JSON_LOGS",
        help="Output console logs as JSON.",
    )(f)
    return f


def config_options(f):
    """Decorator adding the config file and working directory options."""
    f = click.option(
        "-c",
        "--config-path",
        type=click.Path(exists=True, file_okay=True, dir_okay=False, readable=True, path_type=Path),
        default=None,
        envvar="SUITEWATCH_CONF",
        show_envvar=True,
        help="Path to a suitewatch.toml (default: ./suitewatch.toml or [tool.suitewatch] in ./pyproject.toml).",
    )(f)
    f = click.option(
        "-C",
        "--cwd",
        "working_dir",
        type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
        default=None,
        envvar="SUITEWATCH_CWD",
        help="Directory to run in and resolve relative paths against.",
    )(f)
    return f


def setup_logging_from_context(
    ctx: click.Context,
    local_log_level: str | None = None,
    local_log_file: str | None = None,
    local_json_logs: bool | None = None,
    default_log_level: str = "WARNING",
) -> None:
    """
    Setup logging using context values, allowing local overrides.
    """
    log_level_str = local_log_level or ctx.obj.get("LOG_LEVEL") or default_log_level
    log_file_path = local_log_file or ctx.obj.get("LOG_FILE")
    use_json_logs = local_json_logs if local_json_logs is not None else ctx.obj.get("JSON_LOGS", False)

    numeric_level = logging.getLevelName(log_level_str.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.WARNING
        log_level_str = "WARNING"

    core_setup_logging(
        level=numeric_level,
        json_logs=use_json_logs,
        log_file=log_file_path,
    )

    log.debug(
        "CLI logging initialized via utils",
        level=log_level_str,
        file=log_file_path or "console",
        json=use_json_logs,
    )


def load_config_or_exit(ctx: click.Context, config_path: Path | None, working_dir: Path | None) -> SuitewatchConfig:
    """Loads the configuration, turning a ConfigurationError into a clean CLI exit."""
    try:
        return load_config(config_path, start_dir=working_dir)
    except ConfigurationError as e:
        log.error("Failed to load or validate configuration", error=str(e))
        click.echo(f"Error: Configuration problem:\n{e}", err=True)
        ctx.exit(1)


def apply_config_log_level(ctx: click.Context, config: SuitewatchConfig, **kwargs) -> None:
    """Re-initializes logging when the config file sets a level and no CLI/env value did."""
    if kwargs.get("log_level") or ctx.obj.get("LOG_LEVEL"):
        return
    if config.global_config.log_level.upper() == "WARNING":
        return
    setup_logging_from_context(
        ctx,
        local_log_level=config.global_config.log_level,
        local_log_file=kwargs.get("log_file"),
        local_json_logs=kwargs.get("json_logs"),
    )

# ⚙️🛠️
