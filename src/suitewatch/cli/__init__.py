#
# src/suitewatch/cli/__init__.py
#
"""
Click command-line interface for suitewatch.
"""
