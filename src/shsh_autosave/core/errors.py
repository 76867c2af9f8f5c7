"""
Exception taxonomy for shsh-autosave.

Only ConfigurationError is fatal for a run. Every other error is local to
one device record or one (device, firmware) pair and is turned into a
structured message by the planner.
"""

from typing import Optional


class ShshAutosaveError(Exception):
    """Base exception for all shsh-autosave failures."""


class ConfigurationError(ShshAutosaveError):
    """Raised when the run cannot start (fetcher or profile source unusable)."""


class ProfileParseError(ShshAutosaveError):
    """
    Raised for a single malformed device record.

    Attributes:
        record: Name of the offending record, if known
    """
    def __init__(self, message: str, record: str = ""):
        self.record = record
        super().__init__(message)


class CatalogFetchError(ShshAutosaveError):
    """Raised when the firmware listing for one device cannot be obtained."""

    def __init__(self, message: str, identifier: str = ""):
        self.identifier = identifier
        super().__init__(message)


class MalformedIdentity(ShshAutosaveError, ValueError):
    """Raised when an ECID is not a usable hexadecimal value."""


class SubprocessFailure(ShshAutosaveError):
    """
    Raised when the ticket fetcher could not be run to a zero exit.

    Attributes:
        command: Full argv that was attempted
        returncode: Exit status, or None if the process never completed
        output: Trailing stderr/stdout text useful for diagnosis
    """
    def __init__(
        self,
        message: str,
        command: Optional[list] = None,
        returncode: Optional[int] = None,
        output: str = "",
    ):
        self.command = command or []
        self.returncode = returncode
        self.output = output
        super().__init__(message)
