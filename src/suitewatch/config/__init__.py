#
# config/__init__.py
#
"""
Configuration handling sub-package for suitewatch.

Exports the loading function and core configuration models.
"""

from .loader import find_config_file, load_config
from .models import (
    CoverageConfig,
    GlobalConfig,
    RunConfig,
    SuitewatchConfig,
    TypecheckConfig,
)

__all__ = [
    "CoverageConfig",
    "GlobalConfig",
    "RunConfig",
    "SuitewatchConfig",
    "TypecheckConfig",
    "find_config_file",
    "load_config",
]

# 🔼⚙️
