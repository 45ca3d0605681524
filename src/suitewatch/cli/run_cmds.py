# src/suitewatch/cli/run_cmds.py

import asyncio
import logging
import sys
from pathlib import Path

import attrs
import click
import structlog
from rich.console import Console

from suitewatch.cli.utils import (
    apply_config_log_level,
    config_options,
    load_config_or_exit,
    logging_options,
    setup_logging_from_context,
)
from suitewatch.config import RunConfig
from suitewatch.config.models import to_optional_command
from suitewatch.runtime.orchestrator import RunOrchestrator
from suitewatch.telemetry import StructLogger

log: StructLogger = structlog.get_logger("cli.run")


def _run_supervised(orchestrator: RunOrchestrator) -> int:
    """
    Runs the orchestrator on a fresh event loop and maps the outcome to an
    exit code.
    """
    try:
        return asyncio.run(orchestrator.run())
    except KeyboardInterrupt:
        # orchestrator.run() has already stopped the renderer in its finally block.
        log.warning("Run interrupted by KeyboardInterrupt (CTRL-C).")
        return 130  # Standard exit code for SIGINT
    except Exception:
        log.critical("Run exited with an unhandled exception.", exc_info=True)
        return 1
    finally:
        logging.shutdown()


def build_run_config(base: RunConfig, working_dir: Path | None = None, **overrides) -> RunConfig:
    """Applies CLI overrides (None means "not given") on top of the loaded config."""
    changes = {name: value for name, value in overrides.items() if value is not None}
    if working_dir is not None:
        changes["working_dir"] = working_dir
    try:
        return attrs.evolve(base, **changes)
    except (TypeError, ValueError) as e:
        raise click.BadParameter(str(e)) from e


@click.command(name="run", context_settings={"ignore_unknown_options": True})
@click.argument("command", nargs=-1, type=click.UNPROCESSED)
@click.option(
    "--discovery-command",
    default=None,
    envvar="SUITEWATCH_DISCOVERY_COMMAND",
    help="Command that lists the suites to run, one per line (default: 'npx jest --listTests').",
)
@click.option("--no-discovery", is_flag=True, default=False, help="Skip suite discovery; no ETA will be shown.")
@click.option("--runner-name", default=None, envvar="SUITEWATCH_RUNNER_NAME", help="Runner name shown while waiting.")
@click.option(
    "--log-path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    envvar="SUITEWATCH_LOG_PATH",
    help="Where the verbatim runner output is written (default: test-results.log).",
)
@click.option(
    "--report-path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    envvar="SUITEWATCH_REPORT_PATH",
    help="Where the failed tests digest is written (default: test-results.failed.txt).",
)
@config_options
@logging_options
@click.pass_context
def run_cli(
    ctx: click.Context,
    command: tuple[str, ...],
    discovery_command: str | None,
    no_discovery: bool,
    runner_name: str | None,
    log_path: Path | None,
    report_path: Path | None,
    config_path: Path | None,
    working_dir: Path | None,
    **kwargs,
):
    """Run the test runner with a live status line and a failures digest.

    Pass the runner command after `--`, e.g. `suitewatch run -- npx jest --ci`.
    Without one, the configured command (default `npm test`) is used.
    """
    setup_logging_from_context(
        ctx,
        local_log_level=kwargs.get("log_level"),
        local_log_file=kwargs.get("log_file"),
        local_json_logs=kwargs.get("json_logs"),
    )
    config = load_config_or_exit(ctx, config_path, working_dir)
    apply_config_log_level(ctx, config, **kwargs)

    overrides = {
        "command": command or None,
        "runner_name": runner_name,
        "log_path": log_path,
        "report_path": report_path,
    }
    if no_discovery:
        overrides["discovery_command"] = ()
    elif discovery_command is not None:
        overrides["discovery_command"] = to_optional_command(discovery_command) or ()

    run_config = build_run_config(config.run, working_dir, **overrides)
    log.info("Initializing run command...", command=run_config.command_display)

    orchestrator = RunOrchestrator(config=run_config, console=Console(), err_console=Console(stderr=True))
    exit_code = _run_supervised(orchestrator)

    log.info("'run' command finished.", exit_code=exit_code)
    if exit_code != 0:
        sys.exit(exit_code)

# 🔼⚙️
