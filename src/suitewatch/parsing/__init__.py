#
# src/suitewatch/parsing/__init__.py
#
"""
Turns raw runner output into lines and classified suite/failure events.
"""
from .failure_tracker import (
    FailureBulletLine,
    FailureTracker,
    Idle,
    InFailingSuite,
    SuiteResultLine,
    advance,
    classify_line,
    strip_ansi,
)
from .line_buffer import LineBuffer

__all__ = [
    "FailureBulletLine",
    "FailureTracker",
    "Idle",
    "InFailingSuite",
    "LineBuffer",
    "SuiteResultLine",
    "advance",
    "classify_line",
    "strip_ansi",
]

# 🔼⚙️
