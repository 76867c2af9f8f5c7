"""
Subprocess boundary for the external ticket fetcher.

Also holds the fetcher resolution check that gates a whole run.
"""

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol, Sequence

from .errors import ConfigurationError, SubprocessFailure

logger = logging.getLogger(__name__)

# Lines of fetcher output kept on failures
_OUTPUT_TAIL_LINES = 5


@dataclass
class FetchOutcome:
    """Result of one completed fetcher process."""
    command: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def output_tail(self, lines: int = _OUTPUT_TAIL_LINES) -> str:
        """Last few lines of stderr (or stdout when stderr is empty)."""
        text = (self.stderr or self.stdout or "").strip()
        return "\n".join(text.splitlines()[-lines:])


class FetcherRunner(Protocol):
    """Anything that can run a fetcher argv to completion."""

    def __call__(self, command: Sequence[str]) -> FetchOutcome:
        ...


class SubprocessRunner:
    """
    Run the fetcher with subprocess.run and wait for it to finish.

    A non-zero exit is returned as a FetchOutcome, not raised; the planner
    decides how to report it. Launch failures and timeouts raise
    SubprocessFailure.
    """

    def __init__(self, timeout: Optional[float] = None) -> None:
        self.timeout = timeout

    def __call__(self, command: Sequence[str]) -> FetchOutcome:
        cmd = [str(part) for part in command]
        logger.debug("Running: %s", " ".join(cmd))
        try:
            proc = subprocess.run(
                cmd,
                check=False,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise SubprocessFailure(
                f"Fetcher timed out after {self.timeout:g}s",
                command=cmd,
            ) from exc
        except OSError as exc:
            raise SubprocessFailure(f"Fetcher could not be started: {exc}", command=cmd) from exc

        if proc.stdout:
            logger.debug(proc.stdout.rstrip())
        return FetchOutcome(
            command=cmd,
            returncode=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
        )


def resolve_fetcher(path: str) -> str:
    """
    Locate the fetcher binary and check it is executable.

    Bare names ("tsschecker") are looked up on PATH first, then in the
    working directory. The result is always a path subprocess can launch
    without another PATH lookup.

    Returns:
        Path to the executable, as a string.

    Raises:
        ConfigurationError: If the binary is missing or not executable.
    """
    if not path:
        raise ConfigurationError("No fetcher path given")

    candidate = Path(path).expanduser()
    if candidate.parent == Path("."):
        found = shutil.which(path)
        if found is not None:
            return found
        if not candidate.exists():
            raise ConfigurationError(f"Fetcher '{path}' not found on PATH")

    if not candidate.is_file():
        raise ConfigurationError(f"Fetcher not found: {candidate}")
    if not os.access(candidate, os.X_OK):
        raise ConfigurationError(f"Fetcher is not executable: {candidate}")
    # A bare name would be looked up on PATH again by subprocess
    return str(candidate.resolve())
