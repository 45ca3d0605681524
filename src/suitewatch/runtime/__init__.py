#
# src/suitewatch/runtime/__init__.py
#
"""
Runtime components of a supervised run: discovery, process streaming,
progress rendering, reporting and the orchestrator tying them together.
"""
from .discovery import SuitePlan, discover_suites
from .orchestrator import RunOrchestrator, RunResult, compute_exit_code
from .process import OutputConsumer, ProcessProducer, run_process
from .progress import (
    AnimatedProgressRenderer,
    PlainProgressRenderer,
    PlainStatusLine,
    TerminalStatusLine,
    create_progress_renderer,
)
from .report import format_failure_report, write_failure_report

__all__ = [
    "AnimatedProgressRenderer",
    "OutputConsumer",
    "PlainProgressRenderer",
    "PlainStatusLine",
    "ProcessProducer",
    "RunOrchestrator",
    "RunResult",
    "SuitePlan",
    "TerminalStatusLine",
    "compute_exit_code",
    "create_progress_renderer",
    "discover_suites",
    "format_failure_report",
    "run_process",
    "write_failure_report",
]

# 🔼⚙️
