"""Shared fixtures: device/firmware factories and fake collaborators."""

from typing import Dict, List, Sequence

import pytest

from shsh_autosave.core.models import DeviceProfile, FirmwareCandidate
from shsh_autosave.core.runner import FetchOutcome

APNONCE = "603be133ff0bdfa0f83f21e74191cf6770ea43bb"
GENERATOR = "0x1111111111111111"


def make_device(save_path: str = "/tmp/out", **overrides) -> DeviceProfile:
    fields = dict(
        name="Test Phone",
        identifier="iPhone14,5",
        ecid="1A2B3C",
        generator=GENERATOR,
        apnonce=APNONCE,
        baseband_serial="",
        save_path=save_path,
    )
    fields.update(overrides)
    return DeviceProfile(**fields)


def make_firmware(**overrides) -> FirmwareCandidate:
    fields = dict(version="17.0", build_id="21A329", board_config="D27AP", is_signed=True)
    fields.update(overrides)
    return FirmwareCandidate(**fields)


class FakeCatalog:
    """Catalog returning canned listings; identifiers mapped to an exception fail."""

    def __init__(self, listings: Dict[str, object]) -> None:
        self.listings = listings
        self.calls: List[str] = []

    def fetch(self, identifier: str) -> Sequence[FirmwareCandidate]:
        self.calls.append(identifier)
        listing = self.listings.get(identifier, [])
        if isinstance(listing, Exception):
            raise listing
        return listing


class FakeRunner:
    """Records every argv; returns the configured exit code."""

    def __init__(self, returncode: int = 0, stderr: str = "") -> None:
        self.returncode = returncode
        self.stderr = stderr
        self.commands: List[List[str]] = []

    def __call__(self, command: Sequence[str]) -> FetchOutcome:
        self.commands.append(list(command))
        return FetchOutcome(command=list(command), returncode=self.returncode, stderr=self.stderr)


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()
