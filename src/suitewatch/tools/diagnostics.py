# src/suitewatch/tools/diagnostics.py
"""
Runs the TypeScript checker on a set of files and turns its compiler
output into a per-file diagnostics report.
"""
import asyncio
import re
from collections import Counter
from collections.abc import Iterable
from pathlib import Path

import structlog
from attrs import define
from rich.console import Console
from rich.markup import escape

from suitewatch.config import TypecheckConfig
from suitewatch.exceptions import ReportWriteError, SpawnError
from suitewatch.parsing import strip_ansi
from suitewatch.runtime.progress import create_progress_renderer
from suitewatch.telemetry import StructLogger

log: StructLogger = structlog.get_logger("tools.diagnostics")

# src/path/file.ts(123,45): error TS2304: Cannot find name 'foo'.
ERROR_PATTERN = re.compile(r"^(.+?)\((\d+),(\d+)\):\s+error\s+(TS\d+):\s+(.+)$")
CONSOLE_ERROR_LIMIT = 10
CONSOLE_FILE_LIMIT = 5
OK_LABEL = "[OK] TypeScript check completed"
WARN_LABEL = "[WARN] TypeScript check completed with errors"


@define(frozen=True, slots=True)
class Diagnostic:
    file: str
    line: int
    col: int
    code: str
    message: str

    @property
    def location(self) -> str:
        return f"{self.file}:{self.line}:{self.col}"


@define(frozen=True, slots=True)
class CheckerOutput:
    exit_code: int
    output: str


def parse_tsc_output(output: str) -> list[Diagnostic]:
    diagnostics = []
    for raw_line in output.splitlines():
        match = ERROR_PATTERN.match(strip_ansi(raw_line).strip())
        if match:
            file, line, col, code, message = match.groups()
            diagnostics.append(Diagnostic(file=file, line=int(line), col=int(col), code=code, message=message))
    return diagnostics


def filter_to_files(diagnostics: Iterable[Diagnostic], files: Iterable[str], root: Path) -> list[Diagnostic]:
    """Keeps diagnostics whose file resolves to one of ``files``."""
    wanted = {(root / f).resolve() for f in files}
    return [d for d in diagnostics if (root / d.file).resolve() in wanted]


def summarize_by_file(diagnostics: Iterable[Diagnostic]) -> list[tuple[str, int]]:
    """Error counts per file, most errors first; ties keep first-seen order."""
    return Counter(d.file for d in diagnostics).most_common()


def format_diagnostics_report(diagnostics: list[Diagnostic], files_checked: int, title: str) -> str:
    lines = [f"# {title}", "", f"Files checked: {files_checked}", f"Errors found: {len(diagnostics)}", ""]

    if not diagnostics:
        lines.append("[OK] No TypeScript errors detected!")
        return "\n".join(lines)

    lines += ["---", ""]
    for index, diagnostic in enumerate(diagnostics, start=1):
        lines.append(f"{index}. {diagnostic.location}")
        lines.append(f"   Code: {diagnostic.code}")
        lines.append(f"   Error: {diagnostic.message}")
        lines.append("")

    lines += ["---", "", "Summary by file:"]
    lines.extend(f"- {file}: {count} error(s)" for file, count in summarize_by_file(diagnostics))
    return "\n".join(lines)


async def get_staged_files(repo_root: Path, extensions: Iterable[str]) -> list[str]:
    """Staged (added, copied, modified) files with a matching extension that still exist."""
    try:
        process = await asyncio.create_subprocess_exec(
            "git", "diff", "--cached", "--name-only", "--diff-filter=ACM",
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.DEVNULL,
            cwd=repo_root,
        )
        stdout_bytes, _ = await process.communicate()
    except OSError as e:
        log.error("Could not list staged files", error=str(e))
        return []

    if process.returncode != 0:
        log.error("git diff --cached failed", exit_code=process.returncode)
        return []

    suffixes = tuple(extensions)
    names = (line.strip() for line in stdout_bytes.decode("utf-8", errors="replace").splitlines())
    return [name for name in names if name and name.endswith(suffixes) and (repo_root / name).exists()]


async def run_checker(command: list[str], files: list[str], working_dir: Path) -> CheckerOutput:
    """
    Raises:
        SpawnError: The checker could not be started.
    """
    if not files:
        return CheckerOutput(exit_code=0, output="")

    full_command = [*command, *files]
    try:
        process = await asyncio.create_subprocess_exec(
            *full_command,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=working_dir,
        )
        stdout_bytes, stderr_bytes = await process.communicate()
    except OSError as e:
        raise SpawnError(f"Failed to run '{command[0]}': {e}", command=full_command, details=e) from e

    output = stdout_bytes.decode("utf-8", errors="replace") + stderr_bytes.decode("utf-8", errors="replace")
    return CheckerOutput(exit_code=process.returncode or 0, output=output)


class TypecheckRunner:
    """Checks a file list and reports; informational, so errors never fail the exit code."""

    def __init__(self, config: TypecheckConfig, working_dir: Path, console: Console, err_console: Console):
        self.config = config
        self.working_dir = working_dir
        self.console = console
        self.err_console = err_console

    async def run(self, files: list[str], title: str) -> int:
        output_path = self.working_dir / self.config.output_path
        if not files:
            self.console.print("[WARN] No TypeScript files to check.", markup=False)
            self._write(output_path, format_diagnostics_report([], 0, title))
            self.console.print(f"Result saved to {escape(str(output_path))}", highlight=False)
            return 0

        self.console.print(f"Checking TypeScript in {len(files)} file(s)...", highlight=False)
        progress = create_progress_renderer(self.console, default_label="Checking TypeScript...", bar_width=24)
        progress.start()
        final_label = WARN_LABEL
        result: CheckerOutput | None = None
        spawn_error: SpawnError | None = None
        try:
            result = await run_checker(list(self.config.command), files, self.working_dir)
            if result.exit_code == 0:
                final_label = OK_LABEL
        except SpawnError as e:
            spawn_error = e
        finally:
            progress.stop(final_label)

        if result is None:
            log.error("Type checker failed to start", error=str(spawn_error))
            self.err_console.print("[bold red]Error:[/] failed to run the TypeScript checker.")
            self.err_console.print(escape(str(spawn_error)), highlight=False)
            return 1

        diagnostics = filter_to_files(parse_tsc_output(result.output), files, self.working_dir)
        log.info("Type check finished", files=len(files), errors=len(diagnostics), exit_code=result.exit_code)

        self._write(output_path, format_diagnostics_report(diagnostics, len(files), title))
        self._print_console_summary(diagnostics)
        self.console.print(f"Full report saved to {escape(str(output_path))}", highlight=False)
        return 0

    def _write(self, path: Path, report: str) -> None:
        try:
            path.write_text(report, encoding="utf-8")
        except OSError as e:
            raise ReportWriteError("Could not write the diagnostics report", path=str(path), details=e) from e

    def _print_console_summary(self, diagnostics: list[Diagnostic]) -> None:
        if not diagnostics:
            self.console.print("[OK] No TypeScript errors detected!", markup=False)
            return

        self.console.print(f"[FAIL] TypeScript errors found: {len(diagnostics)}\n", markup=False)
        for index, diagnostic in enumerate(diagnostics[:CONSOLE_ERROR_LIMIT], start=1):
            self.console.print(f"{index}. {diagnostic.location}", markup=False, highlight=False)
            self.console.print(f"   {diagnostic.code}: {diagnostic.message}\n", markup=False, highlight=False)
        if len(diagnostics) > CONSOLE_ERROR_LIMIT:
            self.console.print(f"... and {len(diagnostics) - CONSOLE_ERROR_LIMIT} more error(s)\n", markup=False)

        by_file = summarize_by_file(diagnostics)
        self.console.print("Summary by file:", markup=False)
        for file, count in by_file[:CONSOLE_FILE_LIMIT]:
            self.console.print(f"   - {file}: {count} error(s)", markup=False, highlight=False)
        if len(by_file) > CONSOLE_FILE_LIMIT:
            self.console.print(f"   ... and {len(by_file) - CONSOLE_FILE_LIMIT} more files with errors", markup=False)

# 🔼⚙️
