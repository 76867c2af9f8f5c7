"""
Centralized normalization helpers for device identity fields.

Both the artifact namer and the CLI must import these helpers rather than
re-implement them, so a ticket saved by one code path is always found by
the other.
"""

import re
import string

from .errors import MalformedIdentity

_HEX_DIGITS = re.compile(r"[0-9A-Fa-f]+")

_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


def normalize_ecid(value: str) -> str:
    """
    Convert a hexadecimal ECID to its decimal string form.

    This is the single source of truth for ECID rendering in filenames.

    Accepts:
        - Bare hex: "1A2B3C" or "1a2b3c"
        - Hex with 0x prefix: "0x1A2B3C" or "0X1A2B3C"
        - Surrounding whitespace is ignored

    Returns:
        Decimal string, e.g. "1715004" for "1A2B3C".

    Raises:
        MalformedIdentity: If value is empty or contains non-hex characters.
    """
    if value is None:
        raise MalformedIdentity("ECID is missing")

    text = value.strip()
    if text[:2] in ("0x", "0X"):
        text = text[2:]

    # int(x, 16) also accepts signs and underscores; the ECID must not.
    if not _HEX_DIGITS.fullmatch(text):
        raise MalformedIdentity(
            f"Invalid ECID '{value}'. Expected hexadecimal digits, e.g. 1A2B3C or 0x1A2B3C."
        )
    return str(int(text, 16))


def normalize_board_config(raw: str) -> str:
    """Lowercase ASCII letters only; anything else passes through unchanged."""
    return raw.translate(_ASCII_LOWER)
