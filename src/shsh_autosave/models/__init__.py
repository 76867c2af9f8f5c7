"""
Device family registry for shsh-autosave.

Provides the device-class heuristics used by the baseband policy.
"""

from .registry import (
    BasebandPredicate,
    DeviceFamily,
    baseband_predicate,
    detect_family,
    get_family,
    is_baseband_device,
    list_families,
    register_family,
)

__all__ = [
    "BasebandPredicate",
    "DeviceFamily",
    "baseband_predicate",
    "detect_family",
    "get_family",
    "is_baseband_device",
    "list_families",
    "register_family",
]
