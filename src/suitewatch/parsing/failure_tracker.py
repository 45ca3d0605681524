#
# src/suitewatch/parsing/failure_tracker.py
#
"""
Classifies runner output lines into suite results and failing tests.

The tracker is a two-state machine. ``classify_line`` turns text into an
event, ``advance`` is the pure transition function, and ``FailureTracker``
applies both to a live stream while collecting failures.
"""
import re
from collections.abc import Callable
from typing import TypeAlias

import structlog
from attrs import define

from suitewatch.protocols import FailureRecord, SuiteObservation, SuiteStatus
from suitewatch.telemetry import StructLogger

log: StructLogger = structlog.get_logger("parsing.failure_tracker")

ANSI_SGR_PATTERN = re.compile(r"\x1b\[[0-9;]*m")
SUITE_RESULT_PATTERN = re.compile(r"^\s*(PASS|FAIL)\s+(.+?)(?:\s+\((\d+(?:\.\d+)?) ?s\))?\s*$")
FAILURE_BULLET = "●"


def strip_ansi(value: str) -> str:
    return ANSI_SGR_PATTERN.sub("", value)


# --- Events ---
@define(frozen=True, slots=True)
class SuiteResultLine:
    status: SuiteStatus
    suite: str
    duration_ms: float | None = None


@define(frozen=True, slots=True)
class FailureBulletLine:
    test: str


LineEvent: TypeAlias = SuiteResultLine | FailureBulletLine


# --- States ---
@define(frozen=True, slots=True)
class Idle:
    """Outside any failing suite; bullets are ignored."""


@define(frozen=True, slots=True)
class InFailingSuite:
    """Bullets are attributed to ``suite`` until the next suite result."""
    suite: str


TrackerState: TypeAlias = Idle | InFailingSuite


def classify_line(line: str) -> LineEvent | None:
    """Returns the event a line represents, or None for unrelated output."""
    cleaned = strip_ansi(line)

    match = SUITE_RESULT_PATTERN.match(cleaned)
    if match:
        status, suite, seconds = match.groups()
        duration_ms = float(seconds) * 1000 if seconds is not None else None
        return SuiteResultLine(status=SuiteStatus(status), suite=suite, duration_ms=duration_ms)

    trimmed = cleaned.strip()
    if trimmed.startswith(FAILURE_BULLET):
        test_name = trimmed[len(FAILURE_BULLET):].strip()
        if test_name:
            return FailureBulletLine(test=test_name)

    return None


def advance(state: TrackerState, event: LineEvent | None) -> tuple[TrackerState, FailureRecord | None]:
    """
    Transition table of the tracker.

    Returns the next state and the failure to record, if any.
    """
    if isinstance(event, SuiteResultLine):
        if event.status is SuiteStatus.FAIL:
            return InFailingSuite(event.suite), None
        return Idle(), None

    if isinstance(event, FailureBulletLine) and isinstance(state, InFailingSuite):
        return state, FailureRecord(suite=state.suite, test=event.test)

    return state, None


class FailureTracker:
    """Line sink that follows suite results and collects failing tests."""

    def __init__(self, on_suite_result: Callable[[SuiteObservation], None] | None = None):
        self._on_suite_result = on_suite_result
        self.state: TrackerState = Idle()
        self._failures: list[FailureRecord] = []
        self._seen: set[FailureRecord] = set()

    def handle_line(self, line: str, source: str = "stdout") -> None:
        event = classify_line(line)
        if event is None:
            return

        if isinstance(event, SuiteResultLine):
            log.debug(
                "Suite result",
                suite=event.suite,
                status=event.status.value,
                duration_ms=event.duration_ms,
                source=source,
                emoji_key="suite",
            )
            if self._on_suite_result:
                self._on_suite_result(
                    SuiteObservation(key=event.suite, status=event.status, duration_ms=event.duration_ms)
                )

        self.state, failure = advance(self.state, event)
        if failure is not None:
            self._record(failure)

    def _record(self, failure: FailureRecord) -> None:
        if failure in self._seen:
            return
        self._seen.add(failure)
        self._failures.append(failure)
        log.debug("Recorded failing test", suite=failure.suite, test=failure.test, emoji_key="fail")

    def get_failures(self) -> list[FailureRecord]:
        return list(self._failures)

# 🔼⚙️
