# src/suitewatch/cli/config_cmds.py

from pathlib import Path

import click
import structlog
from rich.pretty import pretty_repr

from suitewatch.cli.utils import config_options, load_config_or_exit, logging_options, setup_logging_from_context
from suitewatch.telemetry import StructLogger

log: StructLogger = structlog.get_logger("cli.config")


@click.group(name="config")
def config_cli():
    """Commands for inspecting and validating configuration."""
    pass


@config_cli.command(name="show")
@config_options
@logging_options
@click.pass_context
def show_config(ctx: click.Context, config_path: Path | None, working_dir: Path | None, **kwargs):
    """Load, validate, and display the effective configuration."""
    setup_logging_from_context(
        ctx,
        local_log_level=kwargs.get("log_level"),
        local_log_file=kwargs.get("log_file"),
        local_json_logs=kwargs.get("json_logs"),
    )
    log.info("Executing 'config show' command", config_path=str(config_path))

    config = load_config_or_exit(ctx, config_path, working_dir)
    if config.source_path is None:
        click.echo("No configuration file found; showing defaults.")
    # Echo the rich-formatted string for testability.
    click.echo(pretty_repr(config, expand_all=True))

# 🔼⚙️
