"""Serial-code detection (``IPX-156``, ``SSIS123``, ``259LUXU``)."""

from __future__ import annotations

import re

CODE_PATTERN = r"[A-Z]{2,6}-?\d{3,6}"

# Tried in order; the first pattern that matches wins.
_CODE_RES = (
    re.compile(rf"(?<![A-Z0-9])({CODE_PATTERN})(?!\d)"),
    re.compile(r"(?<![A-Z0-9])([A-Z]+\d{3,6})(?!\d)"),
    re.compile(r"(?<![A-Z0-9])(\d{3,6}[A-Z]{2,6})(?![A-Z])"),
)

_CODE_PATH_RE = re.compile(rf"/({CODE_PATTERN})(?:/|$|[?#])", re.IGNORECASE)


def extract_code(text: str) -> str:
    """Return the first serial code in ``text`` (upper-cased), or ""."""
    if not text:
        return ""
    upper = text.upper()
    for pattern in _CODE_RES:
        match = pattern.search(upper)
        if match:
            return match.group(1)
    return ""


def has_code_path(path: str) -> bool:
    """True if a URL path has a serial code as one complete segment."""
    return bool(_CODE_PATH_RE.search(path))


def compact_code(code: str) -> str:
    """Comparison form of a code: upper-case, no hyphen."""
    return code.upper().replace("-", "")
