# src/suitewatch/cli/typecheck_cmds.py

import asyncio
from pathlib import Path

import click
import structlog
from rich.console import Console

from suitewatch.cli.utils import config_options, load_config_or_exit, logging_options, setup_logging_from_context
from suitewatch.exceptions import ReportWriteError
from suitewatch.telemetry import StructLogger
from suitewatch.tools.diagnostics import TypecheckRunner, get_staged_files

log: StructLogger = structlog.get_logger("cli.typecheck")


def _split_files(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


@click.command(name="typecheck")
@click.option("--files", default=None, help='Comma-separated files to check, e.g. "src/a.ts,src/b.tsx".')
@click.option("--staged", is_flag=True, default=False, help="Check the TypeScript files staged in git.")
@config_options
@logging_options
@click.pass_context
def typecheck_cli(
    ctx: click.Context,
    files: str | None,
    staged: bool,
    config_path: Path | None,
    working_dir: Path | None,
    **kwargs,
):
    """Type-check files with tsc-files and save a diagnostics report.

    Informational: type errors never fail the exit code.
    """
    setup_logging_from_context(
        ctx,
        local_log_level=kwargs.get("log_level"),
        local_log_file=kwargs.get("log_file"),
        local_json_logs=kwargs.get("json_logs"),
    )
    config = load_config_or_exit(ctx, config_path, working_dir)
    root = working_dir or Path.cwd()

    file_list = _split_files(files)
    if not file_list and not staged:
        click.echo("[WARN] No files provided. Usage:")
        click.echo('    suitewatch typecheck --files "src/a.ts,src/b.tsx"')
        click.echo("    suitewatch typecheck --staged")
        return

    if staged:
        title = "TypeScript check for staged files"
        file_list = asyncio.run(get_staged_files(root, config.typecheck.extensions))
    else:
        title = "TypeScript check for specified files"

    runner = TypecheckRunner(config.typecheck, root, console=Console(), err_console=Console(stderr=True))
    try:
        exit_code = asyncio.run(runner.run(file_list, title))
    except ReportWriteError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    if exit_code != 0:
        ctx.exit(exit_code)

# 🔼⚙️
