"""
Core module for shsh-autosave.

This module provides the single source of truth for:
- Identity normalization (identity.py)
- Ticket naming and the existence gate (naming.py)
- Baseband ticket policy (baseband.py)
- Fetcher argument synthesis (command.py)
- The provisioning loop (planner.py)
- Result objects and standardized messages (results.py, messages.py)

The CLI calls into this module rather than implementing its own logic.
"""

from .errors import (
    ShshAutosaveError,
    ConfigurationError,
    ProfileParseError,
    CatalogFetchError,
    MalformedIdentity,
    SubprocessFailure,
)
from .models import (
    DeviceProfile,
    FirmwareCandidate,
    BasebandMode,
    BasebandDecision,
    ProvisioningPlan,
)
from .identity import normalize_ecid, normalize_board_config
from .naming import derive_filename, resolve_output_dir, artifact_exists
from .baseband import decide_baseband, baseband_warning
from .command import synthesize, build_plan
from .messages import MessageLevel, WarningCode, WarningItem
from .results import PairStatus, PairOutcome, DeviceReport, RunReport
from .runner import FetchOutcome, SubprocessRunner, resolve_fetcher
from .planner import FirmwareCatalog, ProvisioningPlanner

__all__ = [
    # Errors
    "ShshAutosaveError",
    "ConfigurationError",
    "ProfileParseError",
    "CatalogFetchError",
    "MalformedIdentity",
    "SubprocessFailure",
    # Records
    "DeviceProfile",
    "FirmwareCandidate",
    "BasebandMode",
    "BasebandDecision",
    "ProvisioningPlan",
    # Pipeline
    "normalize_ecid",
    "normalize_board_config",
    "derive_filename",
    "resolve_output_dir",
    "artifact_exists",
    "decide_baseband",
    "baseband_warning",
    "synthesize",
    "build_plan",
    "FirmwareCatalog",
    "ProvisioningPlanner",
    # Results
    "MessageLevel",
    "WarningCode",
    "WarningItem",
    "PairStatus",
    "PairOutcome",
    "DeviceReport",
    "RunReport",
    # Subprocess
    "FetchOutcome",
    "SubprocessRunner",
    "resolve_fetcher",
]
