"""
Run configuration for shsh-autosave.

Defaults match a stock blobsaver install; every field can be overridden
from the CLI (or its environment variables).
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from shsh_autosave import __version__

DEFAULT_TSS_BIN = "tsschecker"
DEFAULT_XML_PATH = "/home/Blobs/blobsaver.xml"
DEFAULT_API_URL = "https://api.ipsw.me/v4/device"
DEFAULT_HTTP_TIMEOUT = 20.0

ENV_PREFIX = "SHSH_AUTOSAVE_"


@dataclass
class Settings:
    """
    Settings for one run.

    Attributes:
        tss_bin: Fetcher binary, a path or a name looked up on PATH
        xml_path: blobsaver preferences XML holding the saved devices
        api_url: Firmware catalog base URL
        output_dir: Save every ticket here instead of each device's save path
        timeout: Per-fetch timeout in seconds (None waits forever)
        http_timeout: Catalog request timeout in seconds
        dry_run: Plan only, never run the fetcher
    """
    tss_bin: str = DEFAULT_TSS_BIN
    xml_path: Path = Path(DEFAULT_XML_PATH)
    api_url: str = DEFAULT_API_URL
    output_dir: Optional[Path] = None
    timeout: Optional[float] = None
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    dry_run: bool = False

    def __post_init__(self):
        self.xml_path = Path(self.xml_path).expanduser()
        if self.output_dir is not None:
            self.output_dir = Path(self.output_dir).expanduser()
        self.api_url = self.api_url.rstrip("/")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError(f"Invalid timeout {self.timeout}. Use a positive number of seconds.")
        if self.http_timeout <= 0:
            raise ValueError(f"Invalid HTTP timeout {self.http_timeout}. Use a positive number of seconds.")

    @property
    def user_agent(self) -> str:
        return f"shsh-autosave/{__version__}"


def env_var(name: str) -> str:
    """Environment variable name for a CLI option."""
    return f"{ENV_PREFIX}{name.upper()}"
