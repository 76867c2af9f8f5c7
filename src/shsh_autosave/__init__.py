"""
shsh-autosave - Save signing tickets for every registered device

Reads blobsaver device profiles, asks the firmware catalog what is still
signed, and runs tsschecker for every ticket not saved yet.
"""

__version__ = "0.1.0"

from shsh_autosave.core import ProvisioningPlanner, DeviceProfile, FirmwareCandidate

__all__ = [
    "ProvisioningPlanner",
    "DeviceProfile",
    "FirmwareCandidate",
    "__version__",
]
