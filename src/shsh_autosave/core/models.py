"""
Record types flowing through the provisioning pipeline.

DeviceProfile and FirmwareCandidate are built once per run by the profile
source and the catalog client; nothing in the core mutates them.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Tuple


@dataclass(frozen=True)
class DeviceProfile:
    """
    Identity and save configuration for one registered device.

    Attributes:
        name: Display label from the profile source (not used in logic)
        identifier: Vendor device type, e.g. "iPhone14,5"
        ecid: Unique hardware identifier, hexadecimal as saved
        generator: Nonce seed, hexadecimal
        apnonce: Nonce value, hexadecimal
        baseband_serial: Baseband serial number, empty if not recorded
        save_path: Directory the device's tickets are saved to
    """
    name: str
    identifier: str
    ecid: str
    generator: str = ""
    apnonce: str = ""
    baseband_serial: str = ""
    save_path: str = ""

    @property
    def label(self) -> str:
        """Name to show in reports, falling back to the identifier."""
        return self.name or self.identifier


@dataclass(frozen=True)
class FirmwareCandidate:
    """One firmware build listed by the catalog for a device."""
    version: str
    build_id: str
    board_config: str
    is_signed: bool = False

    @property
    def label(self) -> str:
        return f"{self.version} ({self.build_id})"


class BasebandMode(Enum):
    """Whether the fetcher is asked for a baseband ticket."""
    OMIT = "omit"
    INCLUDE = "include"


@dataclass(frozen=True)
class BasebandDecision:
    """Outcome of the baseband policy for one device."""
    mode: BasebandMode
    serial: str = ""

    @classmethod
    def omit(cls) -> "BasebandDecision":
        return cls(BasebandMode.OMIT)

    @classmethod
    def include(cls, serial: str) -> "BasebandDecision":
        return cls(BasebandMode.INCLUDE, serial)

    @property
    def included(self) -> bool:
        return self.mode is BasebandMode.INCLUDE


@dataclass(frozen=True)
class ProvisioningPlan:
    """
    Resolved inputs for one fetcher invocation.

    Exists only between the command synthesizer and the subprocess
    boundary; never persisted.
    """
    fetcher: str
    target_path: Path
    arguments: Tuple[str, ...]
    baseband: BasebandDecision

    @property
    def command(self) -> list:
        """Full argv: fetcher binary followed by its arguments."""
        return [self.fetcher, *self.arguments]

    @property
    def output_dir(self) -> Path:
        return self.target_path.parent

    @property
    def filename(self) -> str:
        return self.target_path.name
