"""
shsh-autosave CLI

Save signing tickets for every device registered in blobsaver.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from shsh_autosave import __version__
from shsh_autosave.catalog import IpswCatalog
from shsh_autosave.config import (
    DEFAULT_API_URL,
    DEFAULT_TSS_BIN,
    DEFAULT_XML_PATH,
    Settings,
    env_var,
)
from shsh_autosave.core.errors import ConfigurationError, MalformedIdentity
from shsh_autosave.core.identity import normalize_ecid
from shsh_autosave.core.messages import MessageLevel, WarningItem
from shsh_autosave.core.planner import ProvisioningPlanner
from shsh_autosave.core.results import DeviceReport, PairStatus, RunReport
from shsh_autosave.core.runner import SubprocessRunner, resolve_fetcher
from shsh_autosave.models import detect_family, get_family, list_families as registry_list_families
from shsh_autosave.profiles import load_profiles

# Setup Rich console
console = Console()

app = typer.Typer(help="💾 shsh-autosave - Save SHSH2 tickets for every signed firmware")


def setup_logging(verbose: bool = False) -> None:
    """Route library logging through Rich; DEBUG with --verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
        force=True,
    )
    # Without -v, diagnostics are shown from the run report only
    logging.getLogger("shsh_autosave").setLevel(logging.DEBUG if verbose else logging.CRITICAL)


def print_header(text: str) -> None:
    """Print fancy header."""
    console.print(Panel(text, expand=False, style="bold blue"))


def print_success(text: str) -> None:
    """Print success message."""
    console.print(f"✓ {escape(text)}", style="green")


def print_warning(text: str) -> None:
    """Print warning message."""
    console.print(f"⚠️  {escape(text)}", style="yellow")


def print_error(text: str) -> None:
    """Print error message."""
    console.print(f"❌ {escape(text)}", style="red")


def print_structured_warning(warning: WarningItem, verbose: bool = False) -> None:
    """Print a structured message with optional remediation."""
    if warning.level == MessageLevel.ERROR:
        style = "red"
        icon = "❌"
    elif warning.level == MessageLevel.WARN:
        style = "yellow"
        icon = "⚠️"
    else:
        style = "dim"
        icon = "ℹ️"

    console.print(f"{icon} [{warning.code.value}] {warning.title}", style=style, markup=False)
    if verbose and warning.detail:
        console.print(f"   {warning.detail}", style="dim", markup=False)
    if verbose and warning.remediation:
        console.print(f"   → {warning.remediation}", style="cyan", markup=False)


_STATUS_STYLES = {
    PairStatus.SKIPPED_EXISTS: ("already saved", "dim"),
    PairStatus.PLANNED: ("planned", "cyan"),
    PairStatus.FETCHED: ("fetched", "green"),
    PairStatus.FAILED: ("failed", "red"),
    PairStatus.INVALID: ("invalid", "red"),
}


def print_device_report(report: DeviceReport, verbose: bool = False) -> None:
    """Print one device's outcomes and messages as soon as it is done."""
    device = report.device
    console.print()
    console.print(
        f"[bold]{escape(device.label)}[/bold] [dim]({escape(device.identifier)})[/dim]: "
        f"{report.firmware_count} firmware(s), {report.signed_count} signed"
    )

    if report.outcomes:
        table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
        table.add_column("Version", style="cyan", no_wrap=True)
        table.add_column("Build", style="magenta", no_wrap=True)
        table.add_column("Status")
        table.add_column("File", style="dim", overflow="fold")
        for outcome in report.outcomes:
            label, style = _STATUS_STYLES[outcome.status]
            table.add_row(
                escape(outcome.firmware.version),
                escape(outcome.firmware.build_id),
                f"[{style}]{label}[/{style}]",
                escape(outcome.filename or "-"),
            )
        console.print(table)

        for outcome in report.outcomes:
            if outcome.status is PairStatus.PLANNED and outcome.plan is not None:
                console.print(f"  $ {' '.join(outcome.plan.command)}", style="green", markup=False)
            elif verbose and outcome.plan is not None:
                console.print(f"  $ {' '.join(outcome.plan.command)}", style="dim", markup=False)

    for message in report.messages:
        if message.level is MessageLevel.INFO and not verbose:
            continue
        print_structured_warning(message, verbose=verbose)


def print_summary(report: RunReport) -> None:
    """Print the end-of-run summary panel."""
    style = "red" if report.error_count else "green"
    console.print()
    console.print(Panel(escape(report.to_summary()), title="Summary", expand=False, border_style=style))


def parse_timeout(value: Optional[float]) -> Optional[float]:
    """Validate --timeout; None or 0 disables it."""
    if value is None or value == 0:
        return None
    if value < 0:
        raise typer.BadParameter(f"Invalid timeout: {value}")
    return value


def _execute(settings: Settings, output_json: bool, verbose: bool) -> RunReport:
    """Shared body of `run` and `plan`."""
    if settings.dry_run:
        fetcher = settings.tss_bin
    else:
        fetcher = resolve_fetcher(settings.tss_bin)

    loaded = load_profiles(settings.xml_path)
    if not output_json:
        console.print(f"Parsed {len(loaded.devices)} device(s) from {escape(str(settings.xml_path))}")

    if settings.output_dir is not None and not settings.dry_run:
        try:
            settings.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigurationError(f"Cannot create output directory {settings.output_dir}: {exc}") from exc

    progress_cb = None
    if not output_json:
        def progress_cb(device_report: DeviceReport) -> None:
            print_device_report(device_report, verbose=verbose)

        for message in loaded.messages:
            print_structured_warning(message, verbose=verbose)

    with IpswCatalog(settings) as catalog:
        planner = ProvisioningPlanner(
            catalog=catalog,
            runner=SubprocessRunner(timeout=settings.timeout),
            fetcher=fetcher,
            output_override=settings.output_dir,
            dry_run=settings.dry_run,
        )
        report = planner.run(loaded.devices, loaded.messages, progress_cb=progress_cb)

    if output_json:
        console.print_json(json.dumps(report.to_dict()))
    else:
        print_summary(report)
        if not report.error_count:
            print_success("All signed tickets are saved" if not report.dry_run else "Plan complete")
    return report


def _run_command(settings: Settings, output_json: bool, verbose: bool) -> None:
    setup_logging(verbose)
    if not output_json:
        print_header("Plan SHSH2 Tickets" if settings.dry_run else "Save SHSH2 Tickets")
    try:
        _execute(settings, output_json, verbose)
    except ConfigurationError as exc:
        print_error(str(exc))
        raise typer.Exit(code=1)


@app.command()
def run(
    tss_bin: str = typer.Option(
        DEFAULT_TSS_BIN, "--tss-bin", "-t", envvar=env_var("tss_bin"),
        help="Path to tsschecker (or a name on PATH)",
    ),
    xml: Path = typer.Option(
        Path(DEFAULT_XML_PATH), "--xml", "-x", envvar=env_var("xml"),
        help="blobsaver preferences XML with the saved devices",
    ),
    api: str = typer.Option(
        DEFAULT_API_URL, "--api", "-a", envvar=env_var("api"),
        help="Firmware catalog base URL",
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", envvar=env_var("output"),
        help="Save every ticket here instead of each device's save path",
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Per-fetch timeout in seconds (default: none)",
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show commands, do not run tsschecker"),
    output_json: bool = typer.Option(False, "--json", "-j", help="Output the run report as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show info messages, commands and debug logs"),
) -> None:
    """
    Fetch tickets for every signed firmware not saved yet.

    Example:
        shsh-autosave run -t /usr/local/bin/tsschecker -x ~/blobsaver.xml
    """
    settings = Settings(
        tss_bin=tss_bin,
        xml_path=xml,
        api_url=api,
        output_dir=output,
        timeout=parse_timeout(timeout),
        dry_run=dry_run,
    )
    _run_command(settings, output_json, verbose)


@app.command()
def plan(
    tss_bin: str = typer.Option(
        DEFAULT_TSS_BIN, "--tss-bin", "-t", envvar=env_var("tss_bin"),
        help="tsschecker path shown in the planned commands",
    ),
    xml: Path = typer.Option(
        Path(DEFAULT_XML_PATH), "--xml", "-x", envvar=env_var("xml"),
        help="blobsaver preferences XML with the saved devices",
    ),
    api: str = typer.Option(
        DEFAULT_API_URL, "--api", "-a", envvar=env_var("api"),
        help="Firmware catalog base URL",
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", envvar=env_var("output"),
        help="Plan for this directory instead of each device's save path",
    ),
    output_json: bool = typer.Option(False, "--json", "-j", help="Output the run report as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show info messages and debug logs"),
) -> None:
    """Show which tickets are missing and the commands that would fetch them."""
    settings = Settings(
        tss_bin=tss_bin,
        xml_path=xml,
        api_url=api,
        output_dir=output,
        dry_run=True,
    )
    _run_command(settings, output_json, verbose)


@app.command("list-devices")
def list_devices(
    xml: Path = typer.Option(
        Path(DEFAULT_XML_PATH), "--xml", "-x", envvar=env_var("xml"),
        help="blobsaver preferences XML with the saved devices",
    ),
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON for scripting"),
) -> None:
    """List the devices saved in the blobsaver XML."""
    setup_logging()
    try:
        loaded = load_profiles(xml)
    except ConfigurationError as exc:
        print_error(str(exc))
        raise typer.Exit(code=1)

    if output_json:
        payload = {
            "devices": [
                {
                    "name": d.name,
                    "identifier": d.identifier,
                    "ecid": d.ecid,
                    "baseband_serial": d.baseband_serial,
                    "save_path": d.save_path,
                }
                for d in loaded.devices
            ],
            "errors": [m.to_dict() for m in loaded.messages],
        }
        console.print_json(json.dumps(payload))
        return

    print_header("Saved Devices")
    if not loaded.devices:
        print_warning("No saved devices found")

    table = Table(title=escape(str(xml)))
    table.add_column("Name", style="cyan")
    table.add_column("Identifier", style="magenta")
    table.add_column("ECID (dec)", style="green")
    table.add_column("Family")
    table.add_column("Baseband", style="yellow")
    table.add_column("Save Path", style="dim", overflow="fold")

    for device in loaded.devices:
        try:
            ecid = normalize_ecid(device.ecid)
        except MalformedIdentity:
            ecid = "[red]invalid[/red]"
        family = detect_family(device.identifier)
        table.add_row(
            escape(device.name or "-"),
            escape(device.identifier),
            ecid,
            family.name if family else "unknown",
            escape(device.baseband_serial or "-"),
            escape(device.save_path or "-"),
        )
    console.print(table)

    for message in loaded.messages:
        print_structured_warning(message, verbose=True)


@app.command("list-families")
def list_families() -> None:
    """List known device families and whether they carry a baseband."""
    print_header("Device Families")

    table = Table(title="Baseband Policy")
    table.add_column("Family", style="cyan")
    table.add_column("Matches", style="magenta")
    table.add_column("Baseband", style="yellow")
    table.add_column("Notes", style="dim")

    for name in registry_list_families():
        family = get_family(name)
        table.add_row(
            family.name,
            ", ".join(family.matchers),
            "Yes" if family.has_baseband else "No",
            "; ".join(family.notes) or "-",
        )
    console.print(table)


@app.command()
def version() -> None:
    """Print the shsh-autosave version."""
    console.print(f"shsh-autosave {__version__}")


def main() -> None:
    """Main entry point."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(0)
    except Exception as e:
        console.print(f"\n[red bold]Fatal error:[/red bold] {escape(str(e))}")
        sys.exit(1)


if __name__ == "__main__":
    main()
