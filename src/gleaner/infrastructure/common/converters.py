"""Type conversion utilities."""

from __future__ import annotations

import re

_NUMBER_RE = re.compile(r"-?\d+(?:[.,]\d+)?")


def to_int(raw: str | int | float | None) -> int | None:
    """Convert string or number to int, return None if invalid.

    Handles various formats:
        - None → None
        - int → int (passthrough)
        - 12.7 → 12
        - "123" → 123
        - "1,234" → 1234
        - "Seeders: 42" → 42
        - "" → None
    """
    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, int):
        return raw

    if isinstance(raw, float):
        return int(raw)

    if isinstance(raw, str):
        # Remove commas and spaces, extract digits only
        txt = "".join(ch for ch in raw if ch.isdigit())
        if not txt:
            return None
        return int(txt)

    return None


def to_float(raw: str | int | float | None) -> float | None:
    """Convert the first number found in ``raw`` to float.

    ``"4.5 / 5"`` → 4.5, ``"8,2"`` → 8.2, ``"n/a"`` → None.
    """
    if raw is None or isinstance(raw, bool):
        return None

    if isinstance(raw, (int, float)):
        return float(raw)

    if isinstance(raw, str):
        m = _NUMBER_RE.search(raw)
        if m is None:
            return None
        return float(m.group(0).replace(",", "."))

    return None
