"""
Baseband ticket policy.

The decision depends only on whether a baseband serial is recorded. The
device class (via an injectable predicate) only decides whether the
operator gets a warning about it.
"""

from typing import Optional

from ..models import BasebandPredicate, is_baseband_device
from .messages import WarningCode, WarningItem
from .models import BasebandDecision, DeviceProfile


def decide_baseband(device: DeviceProfile) -> BasebandDecision:
    """Omit the baseband ticket iff no baseband serial is recorded."""
    if not device.baseband_serial:
        return BasebandDecision.omit()
    return BasebandDecision.include(device.baseband_serial)


def baseband_warning(
    device: DeviceProfile,
    is_baseband: BasebandPredicate = is_baseband_device,
) -> Optional[WarningItem]:
    """
    Warn when the recorded serial does not fit the device class.

    Returns:
        WARN item for a baseband-bearing device without a serial, or for
        a serial on a device outside the baseband-bearing class; None
        otherwise.
    """
    bearing = is_baseband(device.identifier)
    has_serial = bool(device.baseband_serial)

    if bearing and not has_serial:
        return WarningItem.warn(
            WarningCode.W_BASEBAND_MISSING,
            f"Not saving baseband ticket for {device.identifier}",
            f"{device.label} normally needs a baseband ticket but has no baseband serial recorded.",
        )
    if has_serial and not bearing:
        return WarningItem.warn(
            WarningCode.W_BASEBAND_UNEXPECTED,
            f"Saving baseband ticket for {device.identifier}",
            f"{device.label} has a baseband serial although its device class has no baseband.",
        )
    return None
