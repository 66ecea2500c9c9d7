"""
Error Types

Exceptions raised by the worktime ledger. The CLI reports any
``WorktimeError`` and exits with a non-zero status.
"""

from pathlib import Path
from typing import Optional, Union


class WorktimeError(Exception):
    """Base class for all worktime ledger errors."""


class InvalidInput(WorktimeError):
    """Malformed date, invalid hours value or empty device id."""


class ServiceUnavailable(WorktimeError):
    """The tracking service could not be reached or answered with an error."""


class NoSourceFound(WorktimeError):
    """No AFK or window bucket exists for the host."""


class CorruptLedger(WorktimeError):
    """A ledger file exists but is not a valid JSON object."""

    def __init__(self, path: Union[str, Path], reason: Optional[str] = None):
        self.path = Path(path)
        self.reason = reason
        message = f"Invalid ledger file: {self.path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class VcsError(WorktimeError):
    """A git command failed."""
