# src/suitewatch/runtime/orchestrator.py

"""
High-level coordinator for a supervised test run.
Owns the run lifecycle: discovery, streaming, reporting and the exit code.
"""

import structlog
from attrs import define, field
from rich.console import Console
from rich.markup import escape

from suitewatch.config import RunConfig
from suitewatch.exceptions import DiscoveryError, ReportWriteError, SpawnError
from suitewatch.parsing import FailureTracker
from suitewatch.protocols import FailureRecord, ProgressRenderer, SuiteObservation
from suitewatch.state import RunPhase, RunStats
from suitewatch.telemetry import StructLogger

from .discovery import SuitePlan, discover_suites
from .process import run_process
from .progress import create_progress_renderer
from .report import write_failure_report

log: StructLogger = structlog.get_logger("runtime.orchestrator")

DISCOVERY_LABEL = "Determining list of test files..."
FULL_BAR = "[########################]"
SHORT_BAR = "[########]"


def compute_exit_code(child_exit_code: int, report_written: bool) -> int:
    """A failing child wins; otherwise a missing report is a tooling failure."""
    if child_exit_code != 0:
        return child_exit_code
    return 0 if report_written else 1


@define(slots=True)
class RunResult:
    """Outcome of one supervised run."""
    exit_code: int
    child_exit_code: int | None = None
    failures: list[FailureRecord] = field(factory=list)
    report_written: bool = False
    spawn_failed: bool = False


class RunOrchestrator:
    """Instantiates and coordinates all runtime components for the run command."""

    def __init__(
        self,
        config: RunConfig,
        console: Console | None = None,
        err_console: Console | None = None,
        stats: RunStats | None = None,
    ):
        self.config = config
        self.console = console or Console()
        self.err_console = err_console or Console(stderr=True)
        self.stats = stats or RunStats(runner_name=config.runner_name)
        self.phase = RunPhase.DISCOVERING
        self.plan: SuitePlan | None = None
        self.tracker = FailureTracker(on_suite_result=self._on_suite_result)
        self.progress: ProgressRenderer | None = None
        self.result: RunResult | None = None
        self._log = log.bind(command=config.command_display)

    async def run(self) -> int:
        """Main execution method: discover, stream, finalize. Returns the exit code."""
        self._log.info("Run sequence starting.")
        try:
            await self._discover()

            self.progress = create_progress_renderer(
                self.console,
                default_label=f"Running {self.config.command_display}...",
                bar_width=self.config.bar_width,
                tick_interval=self.config.tick_interval,
            )
            self._refresh_status()

            self.phase = RunPhase.RUNNING
            self.stats.mark_start()
            self.progress.start()

            try:
                child_exit_code = await run_process(
                    list(self.config.command),
                    self.config.working_dir,
                    self.tracker,
                    self.config.resolved_log_path,
                )
            except SpawnError as e:
                self._handle_spawn_failure(e)
                return 1

            self.phase = RunPhase.FINALIZING
            return self._finalize(child_exit_code)
        finally:
            if self.progress is not None:
                self.progress.stop()
            self.phase = RunPhase.DONE
            self._log.info("Run sequence complete.", exit_code=self.result.exit_code if self.result else None)

    async def _discover(self) -> None:
        self.phase = RunPhase.DISCOVERING
        discovery_command = self.config.discovery_command
        if not discovery_command:
            self._log.debug("Suite discovery disabled; ETA will be unavailable")
            return

        self.console.print(DISCOVERY_LABEL, markup=False, highlight=False)
        try:
            self.plan = await discover_suites(list(discovery_command), self.config.working_dir)
        except DiscoveryError as e:
            self._log.warning("Could not determine number of test files", error=str(e))
            self.err_console.print("[yellow]Warning:[/] could not determine number of test files.")
            self.err_console.print(escape(str(e)), highlight=False)
            return

        if len(self.plan) > 0:
            self.stats.set_total_suites(len(self.plan))

    def _on_suite_result(self, observation: SuiteObservation) -> None:
        if self.plan is not None and len(self.plan) > 0 and observation.key not in self.plan:
            self._log.debug("Suite reported that discovery did not list", suite=observation.key)
        self.stats.mark_suite(observation)
        self._refresh_status()

    def _refresh_status(self) -> None:
        if self.progress is not None:
            self.progress.set_status(self.stats.get_summary(), self.stats.get_completion_ratio())

    def _handle_spawn_failure(self, error: SpawnError) -> None:
        self._log.error("Test runner failed to start", error=str(error))
        if self.progress is not None:
            self.progress.stop(f"{SHORT_BAR} {self.config.command_display} failed to start")
        self.err_console.print(f"[bold red]Error:[/] could not start {escape(self.config.command_display)}.")
        self.err_console.print(escape(str(error)), highlight=False)
        self.result = RunResult(exit_code=1, spawn_failed=True)

    def _finalize(self, child_exit_code: int) -> int:
        if child_exit_code == 0:
            banner = f"{FULL_BAR} {self.config.command_display} completed"
        else:
            banner = f"{FULL_BAR} {self.config.command_display} completed with errors"

        summary = self.stats.get_summary()
        if self.progress is not None:
            self.progress.set_status(summary, self.stats.get_completion_ratio())
            self.progress.stop(f"{banner} | {summary}")

        failures = self.tracker.get_failures()
        report_path = self.config.resolved_report_path
        report_written = False
        try:
            write_failure_report(report_path, failures)
            report_written = True
        except ReportWriteError as e:
            self.err_console.print(f"[yellow]Warning:[/] could not save {escape(str(report_path))}.")
            self.err_console.print(escape(str(e)), highlight=False)

        self._print_summary(child_exit_code, failures, report_written)

        exit_code = compute_exit_code(child_exit_code, report_written)
        self.result = RunResult(
            exit_code=exit_code,
            child_exit_code=child_exit_code,
            failures=failures,
            report_written=report_written,
        )
        self._log.info(
            "Run finalized",
            child_exit_code=child_exit_code,
            failures=len(failures),
            completed_suites=self.stats.completed_suites,
            failed_suites=self.stats.failed_suites,
            report_written=report_written,
            exit_code=exit_code,
            emoji_key="success" if exit_code == 0 else "fail",
        )
        return exit_code

    def _print_summary(self, child_exit_code: int, failures: list[FailureRecord], report_written: bool) -> None:
        report_path = escape(str(self.config.report_path))
        log_path = escape(str(self.config.log_path))

        self.console.print("")
        if failures:
            self.console.print(f"Detected {len(failures)} failures. Detailed list: {report_path}.", highlight=False)
        elif child_exit_code == 0:
            self.console.print(f"All tests passed successfully. Log: {log_path}.", highlight=False)
        else:
            self.console.print(f"Some tests failed. See {log_path}.", highlight=False)

        if not report_written:
            self.console.print("Warning: could not properly generate the failed tests report.", highlight=False)

# 🔼⚙️
