# src/suitewatch/state.py
#
"""
Defines the run lifecycle phases and the mutable statistics aggregate that
drives the progress line and its ETA.
"""

import math
import time
from collections.abc import Callable
from enum import Enum, auto

import structlog
from attrs import field, mutable

from suitewatch.protocols import SuiteObservation, SuiteStatus

log: structlog.stdlib.BoundLogger = structlog.get_logger("state")


class RunPhase(Enum):
    """Lifecycle of one supervised run."""

    DISCOVERING = auto()  # Listing the suites the runner is going to execute.
    RUNNING = auto()  # Runner process alive, output streaming.
    FINALIZING = auto()  # Runner exited; writing the report.
    DONE = auto()


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def format_eta(ms: float | None) -> str | None:
    """Formats a remaining time as ``45s`` or ``1m 05s``."""
    if ms is None or not math.isfinite(ms) or ms <= 0:
        return None
    total_seconds = max(0, _round_half_up(ms / 1000))
    minutes, seconds = divmod(total_seconds, 60)
    if minutes > 0:
        return f"{minutes}m {seconds:02d}s"
    return f"{seconds}s"


def format_duration(ms: float | None) -> str | None:
    """Formats a duration with a precision that shrinks as it grows."""
    if ms is None or not math.isfinite(ms) or ms <= 0:
        return None
    if ms < 1000:
        return f"{max(1, _round_half_up(ms))}ms"

    seconds = ms / 1000
    if seconds < 10:
        return f"{seconds:.1f}s"
    if seconds < 60:
        return f"{_round_half_up(seconds)}s"

    minutes, rem_seconds = divmod(_round_half_up(seconds), 60)
    return f"{minutes}m {rem_seconds:02d}s"


def format_average_duration(ms: float | None) -> str | None:
    duration = format_duration(ms)
    return f"{duration}/suite" if duration else None


def _initial_total(value: int | None) -> int | None:
    """The constructor accepts any known total, including zero."""
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return None
    return value


@mutable(slots=True)
class RunStats:
    """
    Aggregate of suite results for one run.

    Suites are counted once per key, however often the runner reports them.
    Completed suites may exceed the planned total when the runner reports
    suites discovery did not list; the raw counters are kept and only the
    displayed percentage and ratio are clamped.
    """

    total_suites: int | None = field(default=None, converter=_initial_total)
    runner_name: str = field(default="Jest")
    clock: Callable[[], float] = field(default=time.time, repr=False)
    completed_suites: int = field(default=0, init=False)
    failed_suites: int = field(default=0, init=False)
    start_timestamp: float | None = field(default=None, init=False)  # Seconds since the epoch
    _processed_keys: set[str] = field(factory=set, init=False, repr=False)

    def set_total_suites(self, value: float | None) -> None:
        """Overwrites the total; ignores anything that is not a finite positive number."""
        if isinstance(value, bool) or not isinstance(value, int | float):
            return
        if not math.isfinite(value) or value <= 0:
            return
        if self.total_suites is not None and self.total_suites != value:
            log.debug("Total suites updated", old_total=self.total_suites, new_total=int(value))
        self.total_suites = int(value)

    def mark_start(self) -> None:
        if self.start_timestamp is not None:
            return
        self.start_timestamp = self.clock()
        log.debug("Run start recorded", start_timestamp=self.start_timestamp, emoji_key="time")

    def mark_suite(self, observation: SuiteObservation) -> bool:
        """
        Counts a suite result. Returns False when the key was already counted.
        """
        key = observation.key or f"__unknown_{len(self._processed_keys)}"
        if key in self._processed_keys:
            log.debug("Ignoring repeated suite result", suite=key)
            return False

        self._processed_keys.add(key)
        self.completed_suites += 1
        if observation.status is SuiteStatus.FAIL:
            self.failed_suites += 1

        duration = observation.duration_ms
        if self.start_timestamp is None and duration is not None and math.isfinite(duration):
            # First sample arrived before any explicit start: back-date it.
            self.start_timestamp = self.clock() - duration / 1000
            log.debug("Run start back-dated from first suite duration", duration_ms=duration)

        return True

    def elapsed_ms(self) -> float | None:
        if self.start_timestamp is None:
            return None
        return max(0.0, (self.clock() - self.start_timestamp) * 1000)

    def average_duration_ms(self) -> float | None:
        elapsed = self.elapsed_ms()
        if elapsed is None or self.completed_suites == 0:
            return None
        return elapsed / self.completed_suites

    def eta_ms(self) -> float | None:
        avg = self.average_duration_ms()
        if avg is None or self.total_suites is None:
            return None
        remaining = self.total_suites - self.completed_suites
        if remaining <= 0:
            return None
        return avg * remaining

    def get_completion_ratio(self) -> float | None:
        if self.total_suites is None:
            return None
        if self.total_suites == 0:
            return 1.0
        return max(0.0, min(1.0, self.completed_suites / self.total_suites))

    def get_summary(self) -> str:
        parts: list[str] = []
        if self.total_suites is not None:
            if self.total_suites == 0:
                percent = 100
            else:
                percent = min(100, _round_half_up(self.completed_suites / self.total_suites * 100))
            parts.append(f"{percent}%")
            parts.append(f"Suites {self.completed_suites}/{self.total_suites}")
        else:
            parts.append(f"Suites {self.completed_suites}")

        if self.failed_suites > 0:
            parts.append(f"FAIL {self.failed_suites}")

        if self.start_timestamp is None:
            parts.append(f"Waiting for {self.runner_name} to start")
        else:
            eta_label = format_eta(self.eta_ms())
            if eta_label:
                parts.append(f"ETA {eta_label}")
            avg_label = format_average_duration(self.average_duration_ms())
            if avg_label:
                parts.append(f"~{avg_label}")

        return " | ".join(parts)

# 🔼⚙️
