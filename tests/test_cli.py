"""Tests for the typer CLI."""

import json
import os

import pytest
from rich.console import Console
from typer.testing import CliRunner

from conftest import APNONCE, FakeCatalog, make_firmware
from shsh_autosave import __version__
from shsh_autosave import cli
from test_profiles import BLOBSAVER_XML

runner = CliRunner()

PHONE_FILE = f"1715004_iPhone14,5_d63ap_17.1-21B74_{APNONCE}.shsh2"


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    """Keep Rich from wrapping table cells and long paths."""
    monkeypatch.setattr(cli, "console", Console(width=240))


@pytest.fixture
def xml_file(tmp_path):
    path = tmp_path / "blobsaver.xml"
    path.write_text(BLOBSAVER_XML, encoding="utf-8")
    return path


@pytest.fixture
def fake_catalog(monkeypatch):
    """Replace the HTTP catalog used by the CLI."""
    catalog = FakeCatalog({
        "iPhone14,5": [make_firmware(version="17.1", build_id="21B74", board_config="D63AP")],
        "iPad7,5": [make_firmware(version="17.1", build_id="21B74", board_config="J71bAP", is_signed=False)],
    })

    class _Factory:
        def __init__(self, settings):
            self.settings = settings

        def __enter__(self):
            return catalog

        def __exit__(self, *exc_info):
            return None

    monkeypatch.setattr(cli, "IpswCatalog", _Factory)
    return catalog


@pytest.fixture
def fetcher(tmp_path):
    path = tmp_path / "tsschecker"
    path.write_text("#!/bin/sh\nexit 0\n")
    os.chmod(path, 0o755)
    return path


class TestPlanCommand:
    """Dry-run planning through the CLI."""

    def test_plan_lists_missing_ticket(self, xml_file, fake_catalog, tmp_path):
        out_dir = tmp_path / "blobs"
        result = runner.invoke(cli.app, ["plan", "-x", str(xml_file), "-o", str(out_dir), "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["dry_run"] is True
        phone = data["devices"][0]
        assert phone["identifier"] == "iPhone14,5"
        assert phone["outcomes"][0]["status"] == "planned"
        assert phone["outcomes"][0]["filename"] == PHONE_FILE
        command = phone["outcomes"][0]["command"]
        assert command[0] == "tsschecker"
        assert command[command.index("--bbsnum") + 1] == "1234567890"
        # iPad build is unsigned
        assert data["devices"][1]["outcomes"] == []
        # Dropped profile record is a run-level message
        assert data["messages"][0]["code"] == "E_PROFILE_PARSE"
        # Dry runs never create the output directory
        assert not out_dir.exists()

    def test_plan_skips_existing(self, xml_file, fake_catalog, tmp_path):
        out_dir = tmp_path / "blobs"
        out_dir.mkdir()
        (out_dir / PHONE_FILE).touch()
        result = runner.invoke(cli.app, ["plan", "-x", str(xml_file), "-o", str(out_dir), "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["devices"][0]["outcomes"][0]["status"] == "skipped_exists"

    def test_plan_human_output(self, xml_file, fake_catalog, tmp_path):
        result = runner.invoke(cli.app, ["plan", "-x", str(xml_file), "-o", str(tmp_path)])
        assert result.exit_code == 0, result.output
        assert "Parsed 2 device(s)" in result.output
        assert "--bbsnum" in result.output
        assert "E_PROFILE_PARSE" in result.output


class TestRunCommand:
    """Full runs with a fake fetcher binary."""

    def test_missing_fetcher_exits_1(self, xml_file, tmp_path, fake_catalog):
        result = runner.invoke(cli.app, ["run", "-t", str(tmp_path / "nope"), "-x", str(xml_file)])
        assert result.exit_code == 1
        assert fake_catalog.calls == []

    def test_missing_xml_exits_1(self, fetcher, tmp_path, fake_catalog):
        result = runner.invoke(cli.app, ["run", "-t", str(fetcher), "-x", str(tmp_path / "missing.xml")])
        assert result.exit_code == 1
        assert fake_catalog.calls == []

    def test_run_executes_fetcher(self, xml_file, fetcher, fake_catalog, tmp_path, monkeypatch):
        commands = []

        class _Runner:
            def __init__(self, timeout=None):
                self.timeout = timeout

            def __call__(self, command):
                from shsh_autosave.core.runner import FetchOutcome
                commands.append(list(command))
                return FetchOutcome(command=list(command), returncode=0)

        monkeypatch.setattr(cli, "SubprocessRunner", _Runner)
        out_dir = tmp_path / "new" / "blobs"
        result = runner.invoke(
            cli.app,
            ["run", "-t", str(fetcher), "-x", str(xml_file), "-o", str(out_dir), "--timeout", "30", "--json"],
        )

        assert result.exit_code == 0, result.output
        assert out_dir.is_dir()
        assert len(commands) == 1
        assert commands[0][0] == str(fetcher.resolve())
        assert commands[0][-3:] == ["--save-path", str(out_dir), "-s"]
        data = json.loads(result.output)
        assert data["counts"]["fetched"] == 1

    def test_fetch_failures_do_not_change_exit_code(self, xml_file, fetcher, fake_catalog, tmp_path, monkeypatch):
        from conftest import FakeRunner

        monkeypatch.setattr(cli, "SubprocessRunner", lambda timeout=None: FakeRunner(returncode=1))
        result = runner.invoke(cli.app, ["run", "-t", str(fetcher), "-x", str(xml_file), "-o", str(tmp_path)])
        assert result.exit_code == 0, result.output
        assert "E_FETCHER_EXIT" in result.output

    def test_negative_timeout_rejected(self, xml_file, fetcher):
        result = runner.invoke(cli.app, ["run", "-t", str(fetcher), "-x", str(xml_file), "--timeout", "-1"])
        assert result.exit_code != 0


class TestInfoCommands:
    """list-devices, list-families, version."""

    def test_list_devices_json(self, xml_file):
        result = runner.invoke(cli.app, ["list-devices", "-x", str(xml_file), "--json"])
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert [d["identifier"] for d in data["devices"]] == ["iPhone14,5", "iPad7,5"]
        assert data["errors"][0]["code"] == "E_PROFILE_PARSE"

    def test_list_devices_table(self, xml_file):
        result = runner.invoke(cli.app, ["list-devices", "-x", str(xml_file)])
        assert result.exit_code == 0, result.output
        assert "1715004" in result.output
        assert "iPhone" in result.output

    def test_list_devices_env_var(self, xml_file, monkeypatch):
        monkeypatch.setenv("SHSH_AUTOSAVE_XML", str(xml_file))
        result = runner.invoke(cli.app, ["list-devices", "--json"])
        assert result.exit_code == 0, result.output
        assert len(json.loads(result.output)["devices"]) == 2

    def test_list_families(self):
        result = runner.invoke(cli.app, ["list-families"])
        assert result.exit_code == 0
        assert "iPhone" in result.output
        assert "Watch" in result.output

    def test_version(self):
        result = runner.invoke(cli.app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output


BRACKETED_XML = """<preferences><root type="user">
  <node name="blobsaver"><node name="app"><node name="Saved Devices">
    <node name="Phone [/old]"><map>
      <entry key="Device Identifier" value="iPhone14,5"/>
      <entry key="ECID" value="1A2B3C"/>
      <entry key="Save Path" value="/home/Blobs/[bold]"/>
    </map></node>
    <node name="Tablet [red]"><map>
      <entry key="Device Identifier" value="iPad7,5"/>
      <entry key="ECID" value="ABCDEF"/>
    </map></node>
  </node></node></node>
</root></preferences>
"""


class TestMarkupInData:
    """Profile and catalog text is printed literally, never as Rich markup."""

    @pytest.fixture
    def bracketed_xml(self, tmp_path):
        path = tmp_path / "blobsaver.xml"
        path.write_text(BRACKETED_XML, encoding="utf-8")
        return path

    def test_list_devices_with_bracketed_name(self, bracketed_xml):
        result = runner.invoke(cli.app, ["list-devices", "-x", str(bracketed_xml)])
        assert result.exit_code == 0, result.output
        assert "Phone [/old]" in result.output
        assert "/home/Blobs/[bold]" in result.output

    def test_plan_with_bracketed_names(self, bracketed_xml, tmp_path, monkeypatch):
        from shsh_autosave.core.errors import CatalogFetchError

        catalog = FakeCatalog({
            "iPhone14,5": [make_firmware(version="17.1 [/beta]", build_id="21B74", board_config="D63AP")],
            "iPad7,5": CatalogFetchError("Catalog returned HTTP 503 for iPad7,5", "iPad7,5"),
        })

        class _Factory:
            def __init__(self, settings):
                pass

            def __enter__(self):
                return catalog

            def __exit__(self, *exc_info):
                return None

        monkeypatch.setattr(cli, "IpswCatalog", _Factory)
        result = runner.invoke(cli.app, ["plan", "-x", str(bracketed_xml), "-o", str(tmp_path)])

        assert result.exit_code == 0, result.output
        # Both devices were processed and reported
        assert catalog.calls == ["iPhone14,5", "iPad7,5"]
        assert "17.1 [/beta]" in result.output
        assert "Catalog unavailable: Tablet [red]" in result.output
