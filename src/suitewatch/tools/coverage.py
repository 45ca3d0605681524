# src/suitewatch/tools/coverage.py
"""
Rolls an lcov report up into per-directory line/function/branch coverage.
"""
import re
from collections.abc import Iterable
from pathlib import Path

import structlog
from attrs import define, field, mutable

from suitewatch.config import CoverageConfig
from suitewatch.exceptions import ReportWriteError, SuitewatchError
from suitewatch.telemetry import StructLogger

log: StructLogger = structlog.get_logger("tools.coverage")

RULE_WIDTH = 130
RECORD_END = "end_of_record"
SRC_PREFIX_PATTERN = re.compile(r"^.*/src/")

# lcov tag -> FileCoverage attribute
LCOV_TAGS = {
    "LF": "lines_found",
    "LH": "lines_hit",
    "FNF": "functions_found",
    "FNH": "functions_hit",
    "BRF": "branches_found",
    "BRH": "branches_hit",
}


class CoverageInputError(SuitewatchError):
    """The lcov report is missing or unreadable."""


@define(slots=True)
class FileCoverage:
    path: str
    lines_found: int = 0
    lines_hit: int = 0
    functions_found: int = 0
    functions_hit: int = 0
    branches_found: int = 0
    branches_hit: int = 0


@mutable(slots=True)
class Metric:
    found: int = 0
    hit: int = 0

    def percent(self) -> float:
        if self.found == 0:
            return 0.0
        return self.hit / self.found * 100

    def format(self) -> str:
        return f"{self.percent():6.2f}% ({self.hit:>5}/{self.found:<5})"


@mutable(slots=True)
class CoverageStats:
    lines: Metric = field(factory=Metric)
    functions: Metric = field(factory=Metric)
    branches: Metric = field(factory=Metric)
    files: int = 0

    def add(self, record: FileCoverage) -> None:
        self.lines.found += record.lines_found
        self.lines.hit += record.lines_hit
        self.functions.found += record.functions_found
        self.functions.hit += record.functions_hit
        self.branches.found += record.branches_found
        self.branches.hit += record.branches_hit
        self.files += 1


@define(slots=True)
class CoverageSummary:
    total: CoverageStats
    by_directory: dict[str, CoverageStats]


def parse_lcov(content: str) -> list[FileCoverage]:
    """Parses the per-file totals of an lcov report. Records without SF are skipped."""
    records: list[FileCoverage] = []
    for block in content.split(RECORD_END):
        record: FileCoverage | None = None
        counts: dict[str, int] = {}
        for raw_line in block.strip().splitlines():
            tag, sep, value = raw_line.strip().partition(":")
            if not sep:
                continue
            if tag == "SF":
                record = FileCoverage(path=value)
            elif tag in LCOV_TAGS:
                try:
                    counts[LCOV_TAGS[tag]] = int(value)
                except ValueError:
                    log.debug("Ignoring malformed lcov counter", line=raw_line)
        if record is not None:
            for name, count in counts.items():
                setattr(record, name, count)
            records.append(record)
    return records


def directory_for(path: str, deep_directories: Iterable[str] = ("pages",)) -> str:
    """
    Maps a source file to its rollup directory: ``src/<area>``, or
    ``src/<area>/<sub>`` when ``<area>`` is one of the deep directories.
    """
    relative = SRC_PREFIX_PATTERN.sub("src/", path)
    parts = relative.split("/")[:-1]
    if not parts:
        return "."
    if len(parts) > 2 and parts[1] in set(deep_directories):
        return "/".join(parts[:3])
    return "/".join(parts[:2])


def aggregate(records: Iterable[FileCoverage], deep_directories: Iterable[str] = ("pages",)) -> CoverageSummary:
    deep = tuple(deep_directories)
    total = CoverageStats()
    by_directory: dict[str, CoverageStats] = {}
    for record in records:
        directory = directory_for(record.path, deep)
        by_directory.setdefault(directory, CoverageStats()).add(record)
        total.add(record)
    return CoverageSummary(total=total, by_directory=by_directory)


def sort_directories(
    by_directory: dict[str, CoverageStats], deep_directories: Iterable[str] = ("pages",)
) -> list[tuple[str, CoverageStats]]:
    """Deep directories first, then everything else alphabetically."""
    prefixes = tuple(f"src/{name}/" for name in deep_directories)
    return sorted(by_directory.items(), key=lambda item: (not item[0].startswith(prefixes), item[0]))


def format_coverage_report(summary: CoverageSummary, config: CoverageConfig | None = None) -> str:
    config = config or CoverageConfig()
    total = summary.total
    directories = sort_directories(summary.by_directory, config.deep_directories)
    critical = [(d, s) for d, s in directories if s.lines.percent() < config.critical_threshold]
    good = [(d, s) for d, s in directories if s.lines.percent() >= config.good_threshold]

    lines = [
        "=" * RULE_WIDTH,
        "COVERAGE REPORT",
        "=" * RULE_WIDTH,
        "",
        "TOTAL PROJECT STATISTICS:",
        "",
        f"Lines:      {total.lines.format()}",
        f"Statements: {total.lines.format()}",
        f"Branches:   {total.branches.format()}",
        f"Functions:  {total.functions.format()}",
        "",
        "-" * RULE_WIDTH,
        "DETAILED STATISTICS BY DIRECTORY:",
        "",
        f"{'Directory':<35} | Files | Lines          | Branches       | Functions",
        "-" * RULE_WIDTH,
    ]
    for directory, stats in directories:
        lines.append(
            f"{directory:<35} | {stats.files:>5} | {stats.lines.format()} | "
            f"{stats.branches.format()} | {stats.functions.format()}"
        )
    lines.append("-" * RULE_WIDTH)

    lines += ["", f"CRITICAL DIRECTORIES (<{config.critical_threshold:g}% coverage):", ""]
    if critical:
        lines.extend(
            f"  [FAIL] {directory:<40} - {stats.lines.percent():.2f}% lines coverage" for directory, stats in critical
        )
    else:
        lines.append("  [OK] No critical directories found")

    lines += ["", f"DIRECTORIES WITH GOOD COVERAGE (>={config.good_threshold:g}%):", ""]
    if good:
        lines.extend(
            f"  [OK] {directory:<40} - {stats.lines.percent():.2f}% lines coverage"
            for directory, stats in good[: config.good_limit]
        )
        if len(good) > config.good_limit:
            lines.append(f"  ... and {len(good) - config.good_limit} more directories")
    else:
        lines.append("  [FAIL] No directories with good coverage found")

    lines += ["", "=" * RULE_WIDTH]
    return "\n".join(lines)


def build_coverage_report(config: CoverageConfig, root: Path) -> str:
    """
    Reads the lcov file, writes the text report and returns it.

    Raises:
        CoverageInputError: The lcov file cannot be read.
        ReportWriteError: The summary file cannot be written.
    """
    lcov_path = root / config.lcov_path
    try:
        content = lcov_path.read_text(encoding="utf-8")
    except OSError as e:
        log.error("Cannot read lcov report", path=str(lcov_path), error=str(e))
        raise CoverageInputError(f"Cannot read coverage report '{lcov_path}': {e}") from e

    records = parse_lcov(content)
    summary = aggregate(records, config.deep_directories)
    report = format_coverage_report(summary, config)
    log.info("Coverage aggregated", files=len(records), directories=len(summary.by_directory))

    output_path = root / config.output_path
    try:
        output_path.write_text(f"\n{report}\n", encoding="utf-8")
    except OSError as e:
        raise ReportWriteError("Could not write the coverage summary", path=str(output_path), details=e) from e
    log.info("Coverage summary written", path=str(output_path), emoji_key="report")
    return report

# 🔼⚙️
