#
# src/suitewatch/tools/__init__.py
#
"""
Standalone report tools that share the CLI but not the run lifecycle:
the lcov coverage rollup and the TypeScript diagnostics checker.
"""
from .coverage import aggregate, build_coverage_report, format_coverage_report, parse_lcov
from .diagnostics import Diagnostic, TypecheckRunner, format_diagnostics_report, parse_tsc_output

__all__ = [
    "Diagnostic",
    "TypecheckRunner",
    "aggregate",
    "build_coverage_report",
    "format_coverage_report",
    "format_diagnostics_report",
    "parse_lcov",
    "parse_tsc_output",
]

# 🔼⚙️
