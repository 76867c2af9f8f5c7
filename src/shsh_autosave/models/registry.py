"""
Device family registry.

Provides a single source of truth for:
- Which device families exist (iPhone, iPad, Watch, ...)
- Which identifier substrings map a device to a family
- Whether a family carries a cellular baseband (and so needs a baseband ticket)

Usage:
    from shsh_autosave.models import (
        list_families, get_family, detect_family, is_baseband_device
    )

    # Which family does an identifier belong to?
    family = detect_family("iPhone14,5")

    # Default predicate used by the baseband policy
    is_baseband_device("iPhone14,5")   # True
    is_baseband_device("iPad13,1")     # False
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional


BasebandPredicate = Callable[[str], bool]


@dataclass(frozen=True)
class DeviceFamily:
    """
    One product line of devices.

    Identifiers are matched by substring, the same way the vendor's
    identifiers are usually grepped ("iPhone" in "iPhone14,5").
    """
    name: str
    matchers: List[str] = field(default_factory=list)
    has_baseband: bool = False
    notes: List[str] = field(default_factory=list)

    def matches(self, identifier: str) -> bool:
        return any(m in identifier for m in self.matchers)


# ============================================================================
# FAMILY REGISTRY - All known device families
# ============================================================================

_FAMILY_REGISTRY: Dict[str, DeviceFamily] = {}


def register_family(family: DeviceFamily) -> None:
    """Register (or replace) a device family."""
    _FAMILY_REGISTRY[family.name] = family


def _init_registry() -> None:
    """Initialize the registry with known families."""

    register_family(DeviceFamily(
        name="iPhone",
        matchers=["iPhone"],
        has_baseband=True,
        notes=["Cellular modem on every model; save baseband tickets"],
    ))

    # An iPad without a baseband serial gets no missing-baseband warning
    register_family(DeviceFamily(
        name="iPad",
        matchers=["iPad"],
        notes=["Baseband ticket optional for cellular models"],
    ))

    register_family(DeviceFamily(
        name="iPod",
        matchers=["iPod"],
    ))

    register_family(DeviceFamily(
        name="Watch",
        matchers=["Watch"],
    ))

    register_family(DeviceFamily(
        name="AppleTV",
        matchers=["AppleTV"],
    ))

    register_family(DeviceFamily(
        name="HomePod",
        matchers=["AudioAccessory"],
    ))

    register_family(DeviceFamily(
        name="Vision",
        matchers=["RealityDevice"],
    ))

    # Apple silicon Macs (Mac14,2, MacBookPro18,3, iMac21,1)
    register_family(DeviceFamily(
        name="Mac",
        matchers=["Mac"],
    ))


# Initialize registry on module load
_init_registry()


# ============================================================================
# PUBLIC API
# ============================================================================

def list_families() -> List[str]:
    """
    List all registered family names.

    Returns:
        Sorted list of family names.
    """
    return sorted(_FAMILY_REGISTRY.keys())


def get_family(name: str) -> Optional[DeviceFamily]:
    """Get a family by name (case-sensitive), or None."""
    return _FAMILY_REGISTRY.get(name)


def detect_family(identifier: str) -> Optional[DeviceFamily]:
    """
    Detect the family of a device identifier.

    Args:
        identifier: Vendor device type, e.g. "iPhone14,5"

    Returns:
        First matching DeviceFamily, or None if no family matches.
    """
    for family in _FAMILY_REGISTRY.values():
        if family.matches(identifier):
            return family
    return None


def is_baseband_device(identifier: str) -> bool:
    """
    Default baseband-bearing predicate.

    Unknown families are treated as not carrying a baseband.
    """
    family = detect_family(identifier)
    return family is not None and family.has_baseband


def baseband_predicate(*family_names: str) -> BasebandPredicate:
    """
    Build a predicate that treats only the named families as baseband-bearing.

    Example:
        predicate = baseband_predicate("iPhone", "iPad")
    """
    wanted = set(family_names)

    def predicate(identifier: str) -> bool:
        family = detect_family(identifier)
        return family is not None and family.name in wanted

    return predicate
