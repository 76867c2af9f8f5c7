"""Tests for reading device profiles from blobsaver preferences XML."""

import pytest

from shsh_autosave.core.errors import ConfigurationError
from shsh_autosave.core.messages import WarningCode
from shsh_autosave.profiles import load_profiles, parse_profiles

BLOBSAVER_XML = """<?xml version="1.0" encoding="UTF-8" standalone="no"?>
<!DOCTYPE preferences SYSTEM "http://java.sun.com/dtd/preferences.dtd">
<preferences EXTERNAL_XML_VERSION="1.0">
  <root type="user">
    <map/>
    <node name="blobsaver">
      <map/>
      <node name="app">
        <map>
          <entry key="Background Interval" value="1"/>
        </map>
        <node name="Saved Devices">
          <map/>
          <node name="My iPhone">
            <map>
              <entry key="Apnonce" value="603be133ff0bdfa0f83f21e74191cf6770ea43bb"/>
              <entry key="BasebandSerialNumber" value="1234567890"/>
              <entry key="Device Identifier" value="iPhone14,5"/>
              <entry key="Device Model" value="D27AP"/>
              <entry key="ECID" value="1A2B3C"/>
              <entry key="Generator" value="0x1111111111111111"/>
              <entry key="Save Path" value="/home/Blobs/iphone"/>
            </map>
          </node>
          <node name="Old iPad">
            <map>
              <entry key="Device Identifier" value="iPad7,5"/>
              <entry key="ECID" value=" 00ABCDEF "/>
              <entry key="Save Path" value="/home/Blobs/ipad"/>
            </map>
          </node>
          <node name="Broken">
            <map>
              <entry key="Device Identifier" value="iPhone10,3"/>
            </map>
          </node>
        </node>
      </node>
    </node>
  </root>
</preferences>
"""


class TestParseProfiles:
    """Test extracting DeviceProfile records from the XML."""

    def test_parses_full_device(self):
        result = parse_profiles(BLOBSAVER_XML.encode())
        phone = result.devices[0]
        assert phone.name == "My iPhone"
        assert phone.identifier == "iPhone14,5"
        assert phone.ecid == "1A2B3C"
        assert phone.generator == "0x1111111111111111"
        assert phone.apnonce == "603be133ff0bdfa0f83f21e74191cf6770ea43bb"
        assert phone.baseband_serial == "1234567890"
        assert phone.save_path == "/home/Blobs/iphone"

    def test_optional_fields_default_empty(self):
        result = parse_profiles(BLOBSAVER_XML.encode())
        ipad = result.devices[1]
        assert ipad.identifier == "iPad7,5"
        assert ipad.ecid == "00ABCDEF"
        assert ipad.baseband_serial == ""
        assert ipad.apnonce == ""
        assert ipad.generator == ""

    def test_malformed_record_dropped(self):
        """A record without an ECID is reported and dropped, others survive."""
        result = parse_profiles(BLOBSAVER_XML.encode())
        assert [d.name for d in result.devices] == ["My iPhone", "Old iPad"]
        assert len(result.errors) == 1
        assert result.errors[0].record == "Broken"
        assert "ecid" in str(result.errors[0])
        messages = result.messages
        assert messages[0].code is WarningCode.E_PROFILE_PARSE
        assert "Broken" in messages[0].title

    def test_ignores_nodes_outside_saved_devices(self):
        xml = """<preferences><root type="user">
            <node name="other"><node name="Saved Devices"><node name="x"><map>
              <entry key="Device Identifier" value="iPhone1,1"/><entry key="ECID" value="1"/>
            </map></node></node></node>
        </root></preferences>"""
        result = parse_profiles(xml)
        assert result.devices == []
        assert result.errors == []

    def test_not_xml_raises(self):
        with pytest.raises(ConfigurationError):
            parse_profiles("this is not xml <")


class TestLoadProfiles:
    """Test reading from disk."""

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "blobsaver.xml"
        path.write_text(BLOBSAVER_XML, encoding="utf-8")
        result = load_profiles(path)
        assert len(result.devices) == 2

    def test_missing_file_is_configuration_error(self, tmp_path):
        with pytest.raises(ConfigurationError) as ei:
            load_profiles(tmp_path / "missing.xml")
        assert "missing.xml" in str(ei.value)
