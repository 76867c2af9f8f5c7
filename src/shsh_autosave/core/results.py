"""
Result objects for a provisioning run.

The planner never prints. Everything the operator should see is collected
here, attributed to the device it came from, and rendered by the CLI.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .messages import WarningItem
from .models import DeviceProfile, FirmwareCandidate, ProvisioningPlan


class PairStatus(Enum):
    """Terminal state of one (device, signed firmware) pair."""
    SKIPPED_EXISTS = "skipped_exists"
    PLANNED = "planned"
    FETCHED = "fetched"
    FAILED = "failed"
    INVALID = "invalid"


@dataclass
class PairOutcome:
    """
    What happened to one signed firmware candidate of a device.

    Attributes:
        firmware: The candidate
        status: Terminal state
        filename: Derived ticket filename (empty if it could not be derived)
        plan: Plan handed to the fetcher, if one was built
        returncode: Fetcher exit status, if it ran to completion
    """
    firmware: FirmwareCandidate
    status: PairStatus
    filename: str = ""
    plan: Optional[ProvisioningPlan] = None
    returncode: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.firmware.version,
            "build_id": self.firmware.build_id,
            "board_config": self.firmware.board_config,
            "status": self.status.value,
            "filename": self.filename,
            "command": self.plan.command if self.plan else None,
            "returncode": self.returncode,
        }


@dataclass
class DeviceReport:
    """
    Unified result for one device.

    Attributes:
        device: The profile that was processed
        firmware_count: Number of candidates the catalog listed
        signed_count: Number of those still signed
        outcomes: One entry per signed candidate, in catalog order
        messages: Diagnostics attributed to this device
        abandoned: True if the catalog could not be used for this device
    """
    device: DeviceProfile
    firmware_count: int = 0
    signed_count: int = 0
    outcomes: List[PairOutcome] = field(default_factory=list)
    messages: List[WarningItem] = field(default_factory=list)
    abandoned: bool = False

    def add(self, message: WarningItem) -> None:
        self.messages.append(message)

    def count(self, status: PairStatus) -> int:
        return sum(1 for o in self.outcomes if o.status is status)

    @property
    def ok(self) -> bool:
        """No ERROR messages were recorded for this device."""
        return not any(m.is_error for m in self.messages)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.device.name,
            "identifier": self.device.identifier,
            "firmware_count": self.firmware_count,
            "signed_count": self.signed_count,
            "abandoned": self.abandoned,
            "outcomes": [o.to_dict() for o in self.outcomes],
            "messages": [m.to_dict() for m in self.messages],
        }


@dataclass
class RunReport:
    """
    Aggregate result of a whole run.

    Run-level messages are the ones that belong to no single device
    (dropped profile records, for example).
    """
    devices: List[DeviceReport] = field(default_factory=list)
    messages: List[WarningItem] = field(default_factory=list)
    dry_run: bool = False

    def add(self, message: WarningItem) -> None:
        self.messages.append(message)

    def count(self, status: PairStatus) -> int:
        return sum(d.count(status) for d in self.devices)

    @property
    def all_messages(self) -> List[WarningItem]:
        items = list(self.messages)
        for report in self.devices:
            items.extend(report.messages)
        return items

    @property
    def error_count(self) -> int:
        return sum(1 for m in self.all_messages if m.is_error)

    def to_summary(self) -> str:
        """
        Generate a human-readable summary string.

        Suitable for CLI output or simple logging.
        """
        mode = "DRY RUN" if self.dry_run else "RUN"
        lines = [f"[{mode}] {len(self.devices)} device(s)"]
        lines.append(f"  Already saved: {self.count(PairStatus.SKIPPED_EXISTS)}")
        if self.dry_run:
            lines.append(f"  Planned: {self.count(PairStatus.PLANNED)}")
        else:
            lines.append(f"  Fetched: {self.count(PairStatus.FETCHED)}")
        lines.append(f"  Failed: {self.count(PairStatus.FAILED) + self.count(PairStatus.INVALID)}")
        abandoned = [d.device.label for d in self.devices if d.abandoned]
        if abandoned:
            lines.append(f"  Catalog unavailable: {', '.join(abandoned)}")
        if self.error_count:
            lines.append(f"  Errors: {self.error_count}")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "dry_run": self.dry_run,
            "devices": [d.to_dict() for d in self.devices],
            "messages": [m.to_dict() for m in self.messages],
            "counts": {status.value: self.count(status) for status in PairStatus},
        }
