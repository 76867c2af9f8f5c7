"""
Firmware catalog client for the ipsw.me v4 API.

GET {base_url}/{identifier}?type=ipsw returns:

    {
      "identifier": "iPhone14,5",
      "boardconfig": "D27AP",
      "firmwares": [
        {"version": "17.0", "buildid": "21A329", "signed": true, ...},
        ...
      ]
    }

The board config lives at the top level and applies to every listed build.
"""

from __future__ import annotations

import logging
from typing import Any, List
from urllib.parse import quote

import httpx

from shsh_autosave.config import Settings
from shsh_autosave.core.errors import CatalogFetchError
from shsh_autosave.core.models import FirmwareCandidate

logger = logging.getLogger(__name__)


def build_client(settings: Settings | None = None) -> httpx.Client:
    """Create an `httpx.Client` with the run's timeout and user agent."""

    settings = settings or Settings()
    return httpx.Client(
        timeout=httpx.Timeout(settings.http_timeout),
        follow_redirects=True,
        headers={
            "User-Agent": settings.user_agent,
            "Accept": "application/json",
        },
    )


def parse_firmware_listing(payload: Any, identifier: str = "") -> List[FirmwareCandidate]:
    """
    Convert a decoded catalog payload into firmware candidates.

    Raises:
        CatalogFetchError: If required keys are missing or mistyped.
    """
    if not isinstance(payload, dict):
        raise CatalogFetchError("Catalog payload is not a JSON object", identifier)

    board_config = payload.get("boardconfig")
    firmwares = payload.get("firmwares")
    if not isinstance(board_config, str) or not isinstance(firmwares, list):
        raise CatalogFetchError("Catalog payload lacks 'boardconfig' or 'firmwares'", identifier)

    candidates: List[FirmwareCandidate] = []
    for index, item in enumerate(firmwares):
        try:
            version = item["version"]
            build_id = item["buildid"]
            signed = item["signed"]
        except (KeyError, TypeError) as exc:
            raise CatalogFetchError(f"Firmware entry {index} is incomplete: {exc}", identifier) from exc
        if not isinstance(signed, bool):
            raise CatalogFetchError(f"Firmware entry {index} has non-boolean 'signed'", identifier)
        candidates.append(FirmwareCandidate(
            version=str(version),
            build_id=str(build_id),
            board_config=board_config,
            is_signed=signed,
        ))
    return candidates


class IpswCatalog:
    """Firmware catalog backed by the ipsw.me v4 device endpoint."""

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._client = client or build_client(self._settings)

    def url_for(self, identifier: str) -> str:
        return f"{self._settings.api_url}/{quote(identifier, safe=',')}"

    def fetch(self, identifier: str) -> List[FirmwareCandidate]:
        url = self.url_for(identifier)
        logger.debug("GET %s?type=ipsw", url)
        try:
            response = self._client.get(url, params={"type": "ipsw"})
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise CatalogFetchError(
                f"Catalog returned HTTP {exc.response.status_code} for {identifier}",
                identifier,
            ) from exc
        except httpx.HTTPError as exc:
            raise CatalogFetchError(f"Catalog request failed: {exc}", identifier) from exc
        except ValueError as exc:
            raise CatalogFetchError(f"Catalog response is not valid JSON: {exc}", identifier) from exc

        candidates = parse_firmware_listing(payload, identifier)
        logger.info("Parsed %d firmware(s) for %s", len(candidates), identifier)
        return candidates

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "IpswCatalog":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
