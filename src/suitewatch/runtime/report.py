# src/suitewatch/runtime/report.py
"""
Formats and writes the digest of failing tests.
"""
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

import structlog

from suitewatch.exceptions import ReportWriteError
from suitewatch.protocols import FailureRecord
from suitewatch.telemetry import StructLogger

log: StructLogger = structlog.get_logger("runtime.report")

REPORT_HEADING = "# Failed Tests List"


def group_failures(failures: Iterable[FailureRecord]) -> dict[str, list[str]]:
    """Groups failing test names by suite, both in first-seen order."""
    grouped: dict[str, list[str]] = {}
    for failure in failures:
        grouped.setdefault(failure.suite or "Unknown file", []).append(failure.test or "Unknown test")
    return grouped


def _iso_timestamp(moment: datetime) -> str:
    # Millisecond precision with a Z suffix.
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_failure_report(failures: list[FailureRecord], generated_at: datetime | None = None) -> str:
    lines = [REPORT_HEADING, ""]

    if not failures:
        lines.append("No failed tests detected.")
    else:
        lines.append(f"Detected {len(failures)} failures. List grouped by test files:")
        lines.append("")
        for suite, tests in group_failures(failures).items():
            lines.append(f"- {suite}")
            lines.extend(f"    - {test}" for test in tests)
            lines.append("")

    lines.append("---")
    lines.append("")
    lines.append(f"Last updated: {_iso_timestamp(generated_at or datetime.now(UTC))}")
    return "\n".join(lines)


def write_failure_report(path: Path, failures: list[FailureRecord], generated_at: datetime | None = None) -> None:
    """
    Raises:
        ReportWriteError: The file could not be written.
    """
    report = format_failure_report(failures, generated_at)
    try:
        path.write_text(f"{report}\n", encoding="utf-8")
    except OSError as e:
        log.error("Failed to write failure report", path=str(path), error=str(e))
        raise ReportWriteError("Could not write the failed tests report", path=str(path), details=e) from e
    log.info("Failure report written", path=str(path), failures=len(failures), emoji_key="report")

# 🔼⚙️
