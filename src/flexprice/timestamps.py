"""Parsing of the timestamp formats found in tariff feeds and meter exports."""

import re
from datetime import datetime

# 14.3.24 08:15 / 14.03.2024T08:15:30
SWISS_PATTERN = re.compile(
    r"^(\d{1,2})\.(\d{1,2})\.(\d{4}|\d{2})[ T](\d{1,2}):(\d{2})(?::(\d{2}))?$"
)
SPACE_SEPARATOR = re.compile(r"^(\S+) (\S+)$")


def _from_iso(text: str) -> datetime | None:
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def parse_timestamp(text) -> datetime | None:
    """Parse a timestamp string, returning None if no known format matches.

    Tried in order: ISO 8601, ISO with a space instead of 'T', and the
    Swiss D.M.YY[YY] H:MM[:SS] form (two-digit years are 20YY).
    """
    if not isinstance(text, str):
        return None

    value = text.strip().lstrip("\ufeff").strip()
    if not value:
        return None

    parsed = _from_iso(value)
    if parsed is not None:
        return parsed

    match = SPACE_SEPARATOR.match(value)
    if match:
        parsed = _from_iso(f"{match.group(1)}T{match.group(2)}")
        if parsed is not None:
            return parsed

    match = SWISS_PATTERN.match(value)
    if not match:
        return None

    day, month, year, hour, minute, second = match.groups()
    year_num = int(year)
    if len(year) == 2:
        year_num += 2000

    try:
        return datetime(
            year_num, int(month), int(day), int(hour), int(minute), int(second or 0)
        )
    except ValueError:
        # Out-of-range component, e.g. 31.2.24 or 25:00
        return None
