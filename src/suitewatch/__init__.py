#
# src/suitewatch/__init__.py
#
"""
suitewatch: supervises a test-runner subprocess, shows a single live status
line and writes a deduplicated digest of failing tests.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("suitewatch")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

__all__ = ["__version__"]

# 🔼⚙️
