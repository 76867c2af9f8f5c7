"""
Command synthesis for the external ticket fetcher (tsschecker).

Arguments are built as a vector and never joined into a shell string.
"""

from pathlib import Path
from typing import Optional, Tuple, Union

from .baseband import decide_baseband
from .models import (
    BasebandDecision,
    DeviceProfile,
    FirmwareCandidate,
    ProvisioningPlan,
)
from .naming import derive_filename, resolve_output_dir

NO_BASEBAND_FLAG = "-b"
SAVE_FLAG = "-s"


def synthesize(
    device: DeviceProfile,
    firmware: FirmwareCandidate,
    baseband: BasebandDecision,
    output_dir: Union[str, Path],
) -> Tuple[str, ...]:
    """
    Build the fetcher arguments for one (device, firmware) pair.

    The ECID is passed as saved (hex) and the board config in its original
    case; only the ticket filename uses the normalized forms.

    Returns:
        Ordered tuple of arguments, without the fetcher binary itself.
    """
    args = [
        "--device", device.identifier,
        "--ecid", device.ecid,
        "--apnonce", device.apnonce,
        "--generator", device.generator,
        "--boardconfig", firmware.board_config,
        "--buildid", firmware.build_id,
    ]
    if baseband.included:
        args += ["--bbsnum", baseband.serial]
    else:
        args.append(NO_BASEBAND_FLAG)
    args += ["--save-path", str(output_dir), SAVE_FLAG]
    return tuple(args)


def build_plan(
    fetcher: str,
    device: DeviceProfile,
    firmware: FirmwareCandidate,
    output_override: Optional[Union[str, Path]] = None,
    baseband: Optional[BasebandDecision] = None,
) -> ProvisioningPlan:
    """
    Resolve everything needed to run the fetcher for one pair.

    Raises:
        MalformedIdentity: If the device ECID is not hexadecimal.
    """
    output_dir = resolve_output_dir(device, output_override)
    filename = derive_filename(device, firmware)
    if baseband is None:
        baseband = decide_baseband(device)
    return ProvisioningPlan(
        fetcher=fetcher,
        target_path=output_dir / filename,
        arguments=synthesize(device, firmware, baseband, output_dir),
        baseband=baseband,
    )
