"""Parsing utilities for data extraction."""

from __future__ import annotations

import re
from datetime import date

_DATE_RE = re.compile(r"(\d{4})\s*[年\-/.]\s*(\d{1,2})\s*[月\-/.]\s*(\d{1,2})")
_MINUTES_RE = re.compile(r"(\d+)\s*(?:分|min)", re.IGNORECASE)
_CLOCK_RE = re.compile(r"\b(\d{1,3}):(\d{2})(?::(\d{2}))?\b")
_SIZE_RE = re.compile(r"(\d+(?:\.\d+)?)\s*([KMGT]i?B)", re.IGNORECASE)


def parse_date_iso(text: str) -> str:
    """Extract a calendar date and re-emit it as ``YYYY-MM-DD``.

    Supports formats:
        - "2020-01-31"
        - "2020/1/31"
        - "2020年1月31日"
        - "Release: 2020.01.31"

    Returns:
        ISO date string, or "" if nothing parsable (including impossible
        dates such as 2020-02-31) is found.
    """
    if not text:
        return ""

    match = _DATE_RE.search(text)
    if not match:
        return ""

    year, month, day = (int(g) for g in match.groups())
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return ""


def parse_duration_minutes(text: str) -> int:
    """Parse a running time into whole minutes.

    Supports formats:
        - "120分鐘" / "120 min"
        - "01:59:00" (hh:mm:ss)
        - "119:30" (mm:ss)
        - "120" (bare minutes)
    """
    if not text:
        return 0

    match = _MINUTES_RE.search(text)
    if match:
        return int(match.group(1))

    match = _CLOCK_RE.search(text)
    if match:
        first, second, third = match.groups()
        if third is not None:
            return int(first) * 60 + int(second)
        return int(first)

    stripped = text.strip()
    if stripped.isdigit():
        return int(stripped)
    return 0


def find_size(text: str) -> str:
    """Return the first human-readable size (``"4.5 GiB"``) found in ``text``."""
    if not text:
        return ""
    match = _SIZE_RE.search(text)
    if not match:
        return ""
    return f"{match.group(1)} {match.group(2)}"

