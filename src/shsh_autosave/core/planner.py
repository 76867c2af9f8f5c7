"""
Provisioning planner: the per-device, per-firmware decision loop.

For every device the catalog is queried once. Each signed firmware then goes
through the existence gate and, when its ticket is missing, through the
baseband policy and command synthesizer before the fetcher is run. Devices
and pairs fail independently; nothing here aborts the run.
"""

import logging
from pathlib import Path
from typing import Callable, Iterable, Optional, Protocol, Sequence, Union

from ..models import BasebandPredicate, is_baseband_device
from .baseband import baseband_warning, decide_baseband
from .command import build_plan
from .errors import CatalogFetchError, MalformedIdentity, SubprocessFailure
from .messages import WarningCode, WarningItem, message_for_error
from .models import DeviceProfile, FirmwareCandidate
from .naming import artifact_exists, derive_filename, resolve_output_dir
from .results import DeviceReport, PairOutcome, PairStatus, RunReport
from .runner import FetcherRunner

logger = logging.getLogger(__name__)

_BASEBAND_CODES = (WarningCode.W_BASEBAND_MISSING, WarningCode.W_BASEBAND_UNEXPECTED)


class FirmwareCatalog(Protocol):
    """Source of firmware candidates for a device identifier."""

    def fetch(self, identifier: str) -> Sequence[FirmwareCandidate]:
        """
        Return the firmware listed for `identifier`, in catalog order.

        Raises:
            CatalogFetchError: If the listing cannot be obtained or parsed.
        """
        ...


class ProvisioningPlanner:
    """
    Decide and run the fetches needed to bring every device up to date.

    Args:
        catalog: Firmware catalog client
        runner: Subprocess boundary; called with the full fetcher argv
        fetcher: Path of the fetcher binary placed at argv[0]
        output_override: Directory used instead of every device's save path
        is_baseband: Predicate telling whether an identifier carries a baseband
        dry_run: Build plans but never call the runner
    """

    def __init__(
        self,
        catalog: FirmwareCatalog,
        runner: FetcherRunner,
        fetcher: str,
        output_override: Optional[Union[str, Path]] = None,
        is_baseband: BasebandPredicate = is_baseband_device,
        dry_run: bool = False,
    ) -> None:
        self.catalog = catalog
        self.runner = runner
        self.fetcher = fetcher
        self.output_override = output_override
        self.is_baseband = is_baseband
        self.dry_run = dry_run

    def run(
        self,
        devices: Iterable[DeviceProfile],
        messages: Iterable[WarningItem] = (),
        progress_cb: Optional[Callable[[DeviceReport], None]] = None,
    ) -> RunReport:
        """
        Process every device sequentially, in the order given.

        Args:
            devices: Parsed device profiles
            messages: Run-level messages gathered before planning
                (e.g. dropped profile records)
            progress_cb: Optional callback invoked with each finished DeviceReport

        Returns:
            RunReport with one DeviceReport per device.
        """
        report = RunReport(dry_run=self.dry_run)
        for message in messages:
            report.add(message)
        if self.dry_run:
            report.add(WarningItem.info(
                WarningCode.I_DRY_RUN,
                "Dry run - the fetcher was not executed",
            ))

        for device in devices:
            device_report = self.process_device(device)
            report.devices.append(device_report)
            if progress_cb:
                progress_cb(device_report)
        return report

    def process_device(self, device: DeviceProfile) -> DeviceReport:
        """Fetch the catalog for one device and handle each signed firmware."""
        report = DeviceReport(device=device)

        # An empty save path would resolve to the working directory
        if not self.output_override and not device.save_path:
            logger.error("%s: no save path recorded and no output directory given", device.label)
            report.add(WarningItem.error(
                WarningCode.E_SAVE_PATH_MISSING,
                f"No save path for {device.label}",
            ))
            return report

        try:
            firmwares = list(self.catalog.fetch(device.identifier))
        except CatalogFetchError as exc:
            logger.error("%s: failed to fetch firmware list: %s", device.label, exc)
            report.abandoned = True
            report.add(message_for_error(
                exc,
                WarningCode.E_CATALOG_FETCH,
                f"Failed to fetch firmware list for {device.identifier}",
            ))
            return report

        if not firmwares:
            logger.error("%s: catalog listed no firmware", device.label)
            report.abandoned = True
            report.add(WarningItem.error(
                WarningCode.E_CATALOG_EMPTY,
                f"No firmware listed for {device.identifier}",
            ))
            return report

        signed = [fw for fw in firmwares if fw.is_signed]
        report.firmware_count = len(firmwares)
        report.signed_count = len(signed)
        logger.info(
            "%s: %d firmware(s) listed, %d signed",
            device.label, len(firmwares), len(signed),
        )

        unsigned = len(firmwares) - len(signed)
        if unsigned:
            report.add(WarningItem.info(
                WarningCode.I_UNSIGNED_SKIPPED,
                f"Skipping {unsigned} unsigned firmware(s) for {device.identifier}",
            ))

        for firmware in signed:
            report.outcomes.append(self._process_pair(device, firmware, report))
        return report

    def _process_pair(
        self,
        device: DeviceProfile,
        firmware: FirmwareCandidate,
        report: DeviceReport,
    ) -> PairOutcome:
        try:
            filename = derive_filename(device, firmware)
        except MalformedIdentity as exc:
            logger.error("%s: %s", device.label, exc)
            report.add(message_for_error(
                exc,
                WarningCode.E_MALFORMED_IDENTITY,
                f"Cannot name ticket for {firmware.label}",
            ))
            return PairOutcome(firmware, PairStatus.INVALID)

        output_dir = resolve_output_dir(device, self.output_override)
        if artifact_exists(output_dir, filename):
            logger.info("%s: %s already exists", device.label, filename)
            report.add(WarningItem.info(
                WarningCode.I_ALREADY_EXISTS,
                f"Already exists: {filename}",
            ))
            return PairOutcome(firmware, PairStatus.SKIPPED_EXISTS, filename)

        decision = decide_baseband(device)
        self._warn_baseband_once(device, report)
        plan = build_plan(self.fetcher, device, firmware, self.output_override, decision)

        if self.dry_run:
            logger.info("%s: would run %s", device.label, " ".join(plan.command))
            return PairOutcome(firmware, PairStatus.PLANNED, filename, plan)

        logger.info("%s: fetching %s", device.label, filename)
        try:
            outcome = self.runner(plan.command)
        except SubprocessFailure as exc:
            logger.error("%s: %s", device.label, exc)
            report.add(message_for_error(
                exc,
                WarningCode.E_FETCHER_FAILED,
                f"Fetcher failed for {firmware.label}",
            ))
            return PairOutcome(firmware, PairStatus.FAILED, filename, plan)

        if outcome.returncode != 0:
            logger.error(
                "%s: fetcher exited with status %d for %s",
                device.label, outcome.returncode, filename,
            )
            report.add(WarningItem.error(
                WarningCode.E_FETCHER_EXIT,
                f"Fetcher exited with status {outcome.returncode} for {firmware.label}",
                outcome.output_tail(),
            ))
            return PairOutcome(firmware, PairStatus.FAILED, filename, plan, outcome.returncode)

        report.add(WarningItem.info(WarningCode.I_FETCHED, f"Fetched {filename}"))
        return PairOutcome(firmware, PairStatus.FETCHED, filename, plan, outcome.returncode)

    def _warn_baseband_once(self, device: DeviceProfile, report: DeviceReport) -> None:
        # Same device, same answer; one warning per device is enough.
        if any(m.code in _BASEBAND_CODES for m in report.messages):
            return
        warning = baseband_warning(device, self.is_baseband)
        if warning is not None:
            logger.warning("%s: %s", device.label, warning.title)
            report.add(warning)
