#
# tests/unit/test_failure_tracker.py
#
"""
Tests for suite-result classification and failing test collection.
"""

from suitewatch.parsing import (
    FailureBulletLine,
    FailureTracker,
    Idle,
    InFailingSuite,
    SuiteResultLine,
    advance,
    classify_line,
)
from suitewatch.protocols import FailureRecord, SuiteObservation, SuiteStatus


class TestClassifyLine:
    """Regex-level classification of single lines."""

    def test_suite_result_with_duration(self) -> None:
        event = classify_line("FAIL suites/x.test.js (2.5 s)")
        assert event == SuiteResultLine(status=SuiteStatus.FAIL, suite="suites/x.test.js", duration_ms=2500.0)

    def test_suite_result_without_duration(self) -> None:
        event = classify_line("PASS suites/y.test.js")
        assert event == SuiteResultLine(status=SuiteStatus.PASS, suite="suites/y.test.js", duration_ms=None)

    def test_duration_without_space_before_unit(self) -> None:
        event = classify_line("  PASS src/app.test.tsx (12s)")
        assert isinstance(event, SuiteResultLine)
        assert event.duration_ms == 12000.0

    def test_ansi_colors_are_ignored(self) -> None:
        event = classify_line("\x1b[1m\x1b[42m PASS \x1b[49m\x1b[22m src/a.test.js")
        assert event == SuiteResultLine(status=SuiteStatus.PASS, suite="src/a.test.js")

    def test_failure_bullet(self) -> None:
        assert classify_line("    ● Suite › renders correctly") == FailureBulletLine(test="Suite › renders correctly")

    def test_empty_bullet_is_not_an_event(self) -> None:
        assert classify_line("  ●   ") is None

    def test_unrelated_lines(self) -> None:
        for line in ["", "    at Object.<anonymous> (src/a.test.js:3:5)", "Tests: 1 failed", "PASSED all"]:
            assert classify_line(line) is None


class TestTransitions:
    """The transition table, independent of any text."""

    def test_fail_enters_failing_suite(self) -> None:
        state, record = advance(Idle(), SuiteResultLine(SuiteStatus.FAIL, "a"))
        assert state == InFailingSuite("a")
        assert record is None

    def test_pass_returns_to_idle(self) -> None:
        state, _ = advance(InFailingSuite("a"), SuiteResultLine(SuiteStatus.PASS, "b"))
        assert state == Idle()

    def test_bullet_in_failing_suite_records(self) -> None:
        state, record = advance(InFailingSuite("a"), FailureBulletLine("t"))
        assert state == InFailingSuite("a")
        assert record == FailureRecord(suite="a", test="t")

    def test_bullet_when_idle_is_ignored(self) -> None:
        assert advance(Idle(), FailureBulletLine("t")) == (Idle(), None)

    def test_unrelated_line_keeps_state(self) -> None:
        assert advance(InFailingSuite("a"), None) == (InFailingSuite("a"), None)


class TestFailureTracker:
    """End-to-end behaviour of the line sink."""

    def test_collects_failures_of_failing_suite(self) -> None:
        observations: list[SuiteObservation] = []
        tracker = FailureTracker(on_suite_result=observations.append)

        for line in [
            "FAIL suites/x.test.js (2.5 s)",
            "  ● renders correctly",
            "",
            "    expect(received).toBe(expected)",
            "  ● handles error",
            "PASS suites/y.test.js",
            "  ● not a failure of y",
        ]:
            tracker.handle_line(line)

        assert tracker.get_failures() == [
            FailureRecord(suite="suites/x.test.js", test="renders correctly"),
            FailureRecord(suite="suites/x.test.js", test="handles error"),
        ]
        assert observations[0] == SuiteObservation(
            key="suites/x.test.js", status=SuiteStatus.FAIL, duration_ms=2500.0
        )
        assert observations[1].status is SuiteStatus.PASS
        assert tracker.state == Idle()

    def test_repeated_bullets_are_deduplicated(self) -> None:
        tracker = FailureTracker()
        for line in ["FAIL a.test.js", "  ● same", "  ● same", "FAIL a.test.js", "  ● same"]:
            tracker.handle_line(line)
        assert tracker.get_failures() == [FailureRecord(suite="a.test.js", test="same")]

    def test_same_test_name_in_different_suites_is_kept(self) -> None:
        tracker = FailureTracker()
        for line in ["FAIL a.test.js", "  ● works", "FAIL b.test.js", "  ● works"]:
            tracker.handle_line(line, "stderr")
        assert [f.suite for f in tracker.get_failures()] == ["a.test.js", "b.test.js"]

    def test_get_failures_returns_a_copy(self) -> None:
        tracker = FailureTracker()
        tracker.handle_line("FAIL a.test.js")
        tracker.handle_line("  ● one")
        tracker.get_failures().clear()
        assert len(tracker.get_failures()) == 1
