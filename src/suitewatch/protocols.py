#
# src/suitewatch/protocols.py
#
"""
Defines the protocols and shared data structures that connect the
streaming, classification and rendering stages.
"""

from enum import Enum
from typing import Protocol, runtime_checkable

from attrs import define


class SuiteStatus(str, Enum):
    """Terminal outcome of one suite as reported by the runner."""

    PASS = "PASS"
    FAIL = "FAIL"


@define(frozen=True, slots=True)
class SuiteObservation:
    """One suite-result line, as seen by the statistics tracker."""
    key: str
    status: SuiteStatus
    duration_ms: float | None = None


@define(frozen=True, slots=True)
class FailureRecord:
    """A failing test inside a failing suite."""
    suite: str
    test: str


@runtime_checkable
class LineSink(Protocol):
    """Consumer of reassembled logical lines."""

    def handle_line(self, line: str, source: str) -> None:
        """
        Processes one complete line.

        Args:
            line: The line text, without its terminator.
            source: The stream the line came from ("stdout" or "stderr").
        """
        ...


@runtime_checkable
class StatusLine(Protocol):
    """The single console line a progress renderer writes to."""

    def update_progress(self, text: str) -> None: ...

    def teardown(self, final_line: str | None = None) -> None: ...


@runtime_checkable
class ProgressRenderer(Protocol):
    """Live progress display with an explicit start/stop lifecycle."""

    def start(self) -> None: ...

    def set_status(self, label: str | None, ratio: float | None = None) -> None: ...

    def stop(self, final_label: str | None = None) -> None: ...

# 🔼⚙️
