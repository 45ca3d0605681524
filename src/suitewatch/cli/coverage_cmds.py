# src/suitewatch/cli/coverage_cmds.py

from pathlib import Path

import attrs
import click
import structlog

from suitewatch.cli.utils import config_options, load_config_or_exit, logging_options, setup_logging_from_context
from suitewatch.exceptions import ReportWriteError
from suitewatch.telemetry import StructLogger
from suitewatch.tools.coverage import CoverageInputError, build_coverage_report

log: StructLogger = structlog.get_logger("cli.coverage")


@click.command(name="coverage")
@click.option(
    "--lcov-path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="lcov report to read (default: coverage/lcov.info).",
)
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Where the text summary is saved (default: coverage-summary.txt).",
)
@config_options
@logging_options
@click.pass_context
def coverage_cli(
    ctx: click.Context,
    lcov_path: Path | None,
    output_path: Path | None,
    config_path: Path | None,
    working_dir: Path | None,
    **kwargs,
):
    """Summarize an lcov coverage report by source directory."""
    setup_logging_from_context(
        ctx,
        local_log_level=kwargs.get("log_level"),
        local_log_file=kwargs.get("log_file"),
        local_json_logs=kwargs.get("json_logs"),
    )
    config = load_config_or_exit(ctx, config_path, working_dir)
    changes = {name: value for name, value in {"lcov_path": lcov_path, "output_path": output_path}.items() if value}
    coverage_config = attrs.evolve(config.coverage, **changes)
    root = working_dir or Path.cwd()

    try:
        report = build_coverage_report(coverage_config, root)
    except CoverageInputError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)
    except ReportWriteError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    click.echo(f"\n{report}\n")
    click.echo(f"Report saved to {root / coverage_config.output_path}\n")

# 🔼⚙️
