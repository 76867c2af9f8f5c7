"""
Device profile source: blobsaver's preferences XML.

blobsaver stores its settings through Java preferences, exported as:

    <preferences>
      <root type="user">
        <node name="blobsaver">
          <node name="app">
            <node name="Saved Devices">
              <node name="My iPhone">
                <map>
                  <entry key="Device Identifier" value="iPhone14,5"/>
                  <entry key="ECID" value="1A2B3C"/>
                  ...

Each node under "Saved Devices" becomes one DeviceProfile.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List

from shsh_autosave.core.errors import ConfigurationError, ProfileParseError
from shsh_autosave.core.messages import WarningCode, WarningItem
from shsh_autosave.core.models import DeviceProfile

logger = logging.getLogger(__name__)

SAVED_DEVICES_XPATH = ".//node[@name='blobsaver']/node[@name='app']/node[@name='Saved Devices']/node"

# blobsaver entry key -> DeviceProfile field
ENTRY_KEYS: Dict[str, str] = {
    "Device Identifier": "identifier",
    "ECID": "ecid",
    "Generator": "generator",
    "Apnonce": "apnonce",
    "BasebandSerialNumber": "baseband_serial",
    "Save Path": "save_path",
}

REQUIRED_FIELDS = ("identifier", "ecid")


@dataclass
class ProfileLoadResult:
    """Devices parsed from the XML, plus the records that had to be dropped."""

    devices: List[DeviceProfile] = field(default_factory=list)
    errors: List[ProfileParseError] = field(default_factory=list)

    @property
    def messages(self) -> List[WarningItem]:
        return [
            WarningItem.error(
                WarningCode.E_PROFILE_PARSE,
                f"Dropped device record '{err.record or '?'}'",
                str(err),
            )
            for err in self.errors
        ]


def parse_device_node(node: ET.Element) -> DeviceProfile:
    """
    Build a DeviceProfile from one saved-device node.

    Raises:
        ProfileParseError: If the identifier or ECID is missing.
    """
    name = node.get("name", "")
    values: Dict[str, str] = {}
    for entry in node.iterfind("./map/entry"):
        attr = ENTRY_KEYS.get(entry.get("key", ""))
        if attr:
            values[attr] = (entry.get("value") or "").strip()

    missing = [f for f in REQUIRED_FIELDS if not values.get(f)]
    if missing:
        raise ProfileParseError(
            f"Device '{name}' is missing {', '.join(missing)}",
            record=name,
        )
    return DeviceProfile(name=name, **values)


def parse_profiles(text: str | bytes) -> ProfileLoadResult:
    """
    Parse blobsaver preferences XML content.

    Raises:
        ConfigurationError: If the content is not well-formed XML.
    """
    try:
        root = ET.fromstring(text)
    except ET.ParseError as exc:
        raise ConfigurationError(f"Profile XML is not well-formed: {exc}") from exc

    result = ProfileLoadResult()
    for node in root.iterfind(SAVED_DEVICES_XPATH):
        try:
            result.devices.append(parse_device_node(node))
        except ProfileParseError as exc:
            logger.warning("Dropping device record: %s", exc)
            result.errors.append(exc)
    if not result.devices and not result.errors:
        logger.warning("No saved devices found in profile XML")
    return result


def load_profiles(path: str | Path) -> ProfileLoadResult:
    """
    Read and parse the blobsaver preferences file.

    Raises:
        ConfigurationError: If the file cannot be read or parsed.
    """
    xml_path = Path(path)
    try:
        data = xml_path.read_bytes()
    except OSError as exc:
        raise ConfigurationError(f"Cannot read profile XML {xml_path}: {exc.strerror or exc}") from exc

    result = parse_profiles(data)
    logger.info("Parsed %d device(s) from %s", len(result.devices), xml_path)
    return result
