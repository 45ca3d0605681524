#
# src/suitewatch/telemetry/__init__.py
#
"""
Logging setup and shared logger type for suitewatch.
"""

from .logger import StructLogger, setup_logging

__all__ = ["StructLogger", "setup_logging"]

# 🔼⚙️
