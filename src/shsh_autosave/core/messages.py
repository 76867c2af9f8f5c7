"""
Standardized message system for shsh-autosave.

Provides structured message items with stable codes so the planner can
return diagnostics as values and the CLI can render them consistently
(or dump them as JSON).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class MessageLevel(Enum):
    """Severity level for messages."""
    INFO = "info"
    WARN = "warn"
    ERROR = "error"


class WarningCode(Enum):
    """Stable codes for known conditions."""
    # Informational
    I_ALREADY_EXISTS = "I_ALREADY_EXISTS"
    I_UNSIGNED_SKIPPED = "I_UNSIGNED_SKIPPED"
    I_FETCHED = "I_FETCHED"
    I_DRY_RUN = "I_DRY_RUN"

    # Baseband policy mismatches
    W_BASEBAND_MISSING = "W_BASEBAND_MISSING"
    W_BASEBAND_UNEXPECTED = "W_BASEBAND_UNEXPECTED"

    # Errors local to one record, device or pair
    E_PROFILE_PARSE = "E_PROFILE_PARSE"
    E_CATALOG_FETCH = "E_CATALOG_FETCH"
    E_SAVE_PATH_MISSING = "E_SAVE_PATH_MISSING"
    E_CATALOG_EMPTY = "E_CATALOG_EMPTY"
    E_MALFORMED_IDENTITY = "E_MALFORMED_IDENTITY"
    E_FETCHER_FAILED = "E_FETCHER_FAILED"
    E_FETCHER_EXIT = "E_FETCHER_EXIT"


# Default remediation hints for each code
WARNING_REMEDIATIONS: Dict[WarningCode, str] = {
    WarningCode.I_ALREADY_EXISTS:
        "Delete the file to fetch it again. Existing files are not validated.",
    WarningCode.I_UNSIGNED_SKIPPED:
        "Tickets can only be saved while the vendor still signs a build.",
    WarningCode.I_DRY_RUN:
        "Dry run only. Re-run without --dry-run to fetch tickets.",
    WarningCode.W_BASEBAND_MISSING:
        "Add the baseband serial number to the device profile in blobsaver.",
    WarningCode.W_BASEBAND_UNEXPECTED:
        "A baseband ticket will be requested for a device that usually has none.",
    WarningCode.E_PROFILE_PARSE:
        "Check the device entry in the blobsaver XML (Device Identifier and ECID are required).",
    WarningCode.E_SAVE_PATH_MISSING:
        "Set a Save Path for the device in blobsaver, or pass --output.",
    WarningCode.E_CATALOG_FETCH:
        "Check network access and the --api URL.",
    WarningCode.E_CATALOG_EMPTY:
        "The catalog returned no firmware for this identifier. Check the identifier.",
    WarningCode.E_MALFORMED_IDENTITY:
        "The ECID must be hexadecimal, e.g. 1A2B3C.",
    WarningCode.E_FETCHER_FAILED:
        "Check that tsschecker runs from this shell, or raise --timeout.",
    WarningCode.E_FETCHER_EXIT:
        "Run the command shown with -v to see the fetcher output.",
}


@dataclass
class WarningItem:
    """
    Structured message with stable code.

    Attributes:
        level: Severity (INFO, WARN, ERROR)
        code: Stable code for programmatic handling
        title: Short, user-facing title
        detail: Longer explanation of the issue
        remediation: Suggested action to resolve the issue
    """
    level: MessageLevel
    code: WarningCode
    title: str
    detail: str = ""
    remediation: str = ""

    def __post_init__(self):
        """Set default remediation if not provided."""
        if not self.remediation and self.code in WARNING_REMEDIATIONS:
            self.remediation = WARNING_REMEDIATIONS[self.code]

    @classmethod
    def info(
        cls,
        code: WarningCode,
        title: str,
        detail: str = "",
        remediation: str = "",
    ) -> "WarningItem":
        """Create an INFO-level message."""
        return cls(MessageLevel.INFO, code, title, detail, remediation)

    @classmethod
    def warn(
        cls,
        code: WarningCode,
        title: str,
        detail: str = "",
        remediation: str = "",
    ) -> "WarningItem":
        """Create a WARN-level message."""
        return cls(MessageLevel.WARN, code, title, detail, remediation)

    @classmethod
    def error(
        cls,
        code: WarningCode,
        title: str,
        detail: str = "",
        remediation: str = "",
    ) -> "WarningItem":
        """Create an ERROR-level message."""
        return cls(MessageLevel.ERROR, code, title, detail, remediation)

    @property
    def is_error(self) -> bool:
        return self.level is MessageLevel.ERROR

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON/display."""
        return {
            "level": self.level.value,
            "code": self.code.value,
            "title": self.title,
            "detail": self.detail,
            "remediation": self.remediation,
        }


def level_for(code: WarningCode) -> MessageLevel:
    """Severity implied by a code's prefix."""
    prefix = code.value[:2]
    if prefix == "E_":
        return MessageLevel.ERROR
    if prefix == "W_":
        return MessageLevel.WARN
    return MessageLevel.INFO


def message_for_error(
    exc: Exception,
    code: WarningCode,
    title: Optional[str] = None,
) -> WarningItem:
    """
    Convert a caught exception into a message.

    Args:
        exc: The exception raised by a collaborator
        code: Code describing where it was raised
        title: Optional title; defaults to the exception text

    Returns:
        WarningItem with the level implied by the code.
    """
    if title is None:
        return WarningItem(level_for(code), code, str(exc))
    return WarningItem(level_for(code), code, title, detail=str(exc))
