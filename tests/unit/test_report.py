# tests/unit/test_report.py

"""Tests for the failed tests digest."""

from datetime import UTC, datetime
from pathlib import Path

import pytest

from suitewatch.exceptions import ReportWriteError
from suitewatch.protocols import FailureRecord
from suitewatch.runtime.report import format_failure_report, group_failures, write_failure_report

GENERATED_AT = datetime(2024, 3, 5, 14, 7, 9, 123456, tzinfo=UTC)


def test_group_failures_keeps_first_seen_order():
    failures = [
        FailureRecord("b.test.js", "one"),
        FailureRecord("a.test.js", "two"),
        FailureRecord("b.test.js", "three"),
    ]
    assert group_failures(failures) == {"b.test.js": ["one", "three"], "a.test.js": ["two"]}


def test_group_failures_fills_in_unknown_names():
    assert group_failures([FailureRecord("", "")]) == {"Unknown file": ["Unknown test"]}


def test_report_without_failures():
    report = format_failure_report([], GENERATED_AT)
    assert report == (
        "# Failed Tests List\n"
        "\n"
        "No failed tests detected.\n"
        "---\n"
        "\n"
        "Last updated: 2024-03-05T14:07:09.123Z"
    )


def test_report_groups_failures_by_suite():
    failures = [
        FailureRecord("src/a.test.ts", "adds"),
        FailureRecord("src/b.test.ts", "renders"),
        FailureRecord("src/a.test.ts", "subtracts"),
    ]
    report = format_failure_report(failures, GENERATED_AT)
    assert report.splitlines() == [
        "# Failed Tests List",
        "",
        "Detected 3 failures. List grouped by test files:",
        "",
        "- src/a.test.ts",
        "    - adds",
        "    - subtracts",
        "",
        "- src/b.test.ts",
        "    - renders",
        "",
        "---",
        "",
        "Last updated: 2024-03-05T14:07:09.123Z",
    ]


def test_write_failure_report_adds_trailing_newline(tmp_path: Path):
    path = tmp_path / "failed.txt"
    write_failure_report(path, [FailureRecord("a.test.js", "x")], GENERATED_AT)
    content = path.read_text(encoding="utf-8")
    assert content.endswith("Last updated: 2024-03-05T14:07:09.123Z\n")
    assert "- a.test.js\n    - x\n" in content


def test_write_failure_report_overwrites_previous_content(tmp_path: Path):
    path = tmp_path / "failed.txt"
    path.write_text("stale content from an earlier run", encoding="utf-8")
    write_failure_report(path, [], GENERATED_AT)
    assert "stale" not in path.read_text(encoding="utf-8")


def test_write_failure_report_raises_on_unwritable_path(tmp_path: Path):
    target = tmp_path / "missing-dir" / "failed.txt"
    with pytest.raises(ReportWriteError) as exc_info:
        write_failure_report(target, [])
    assert exc_info.value.path == str(target)
