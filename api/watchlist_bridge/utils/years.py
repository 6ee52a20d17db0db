"""Year parsing helpers for list payloads."""

from __future__ import annotations

import re

_LEADING_YEAR_RE = re.compile(r"^\s*(\d{4})")


def parse_year(value: object) -> int | None:
    """Parse 2023, "2023", or the leading year of "2023-05-01" into an int."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str):
        match = _LEADING_YEAR_RE.match(value)
        if match:
            return int(match.group(1))
    return None
