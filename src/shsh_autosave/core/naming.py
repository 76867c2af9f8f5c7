"""
Artifact naming and the existence gate.

The filename is the idempotency key: if a file with the derived name is
already in the output directory, the pair is considered done.
"""

import os
from pathlib import Path
from typing import Optional, Union

from .identity import normalize_board_config, normalize_ecid
from .models import DeviceProfile, FirmwareCandidate

TICKET_SUFFIX = ".shsh2"


def derive_filename(device: DeviceProfile, firmware: FirmwareCandidate) -> str:
    """
    Derive the ticket filename for a (device, firmware) pair.

    Format:
        {decimal ecid}_{identifier}_{lowercase board config}_{version}-{build id}_{apnonce}.shsh2

    Fields are substituted literally. Records containing path separators
    produce unusable names; profile and catalog data are trusted.

    Raises:
        MalformedIdentity: If the device ECID is not hexadecimal.
    """
    return (
        f"{normalize_ecid(device.ecid)}_{device.identifier}_"
        f"{normalize_board_config(firmware.board_config)}_"
        f"{firmware.version}-{firmware.build_id}_{device.apnonce}{TICKET_SUFFIX}"
    )


def resolve_output_dir(
    device: DeviceProfile,
    override: Optional[Union[str, Path]] = None,
) -> Path:
    """Run-level override directory if given, else the device's save path."""
    if override:
        return Path(override)
    return Path(device.save_path)


def artifact_exists(directory: Union[str, Path], filename: str) -> bool:
    """
    Check whether anything already exists at directory/filename.

    Existence only: an empty or corrupt file still counts as saved.
    """
    return os.path.lexists(Path(directory) / filename)
