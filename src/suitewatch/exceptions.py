#
# src/suitewatch/exceptions.py
#
"""
Custom exceptions for suitewatch.
"""


class SuitewatchError(Exception):
    """Base class for all suitewatch errors."""

    pass


class ConfigurationError(SuitewatchError):
    """Raised when the configuration file or values are invalid."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        full_message = message
        if path:
            full_message += f" (Config: '{path}')"
        super().__init__(full_message)


class DiscoveryError(SuitewatchError):
    """Suite discovery failed. Non-fatal: the run continues without a known total."""

    def __init__(self, message: str, command: list[str] | None = None, details: Exception | None = None):
        self.command = command
        self.details = details
        super().__init__(message)
        if details and hasattr(self, "add_note"):
            self.add_note(f"Original error: {type(details).__name__}: {details}")


class SpawnError(SuitewatchError):
    """The runner subprocess could not be started."""

    def __init__(self, message: str, command: list[str] | None = None, details: Exception | None = None):
        self.command = command
        self.details = details
        super().__init__(message)
        if details and hasattr(self, "add_note"):
            self.add_note(f"Original error: {type(details).__name__}: {details}")


class ReportWriteError(SuitewatchError):
    """A report file could not be written."""

    def __init__(self, message: str, path: str | None = None, details: Exception | None = None):
        self.path = path
        self.details = details
        full_message = message
        if path:
            full_message += f" (Path: '{path}')"
        super().__init__(full_message)
        if details and hasattr(self, "add_note"):
            self.add_note(f"Original error: {type(details).__name__}: {details}")


# 🔼⚙️
