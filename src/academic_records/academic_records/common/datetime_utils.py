from __future__ import annotations

import re
from datetime import date, datetime, time

from ..core.constants import MINUTES_PER_DAY
from ..core.exceptions import InvalidTimeWindowError

_HHMM = re.compile(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def now_local() -> datetime:
    """Current server-local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


def parse_hhmm(value: str) -> int:
    """Parse a 24-hour ``HH:MM`` string into minutes since midnight."""
    m = _HHMM.match((value or "").strip())
    if not m:
        raise InvalidTimeWindowError(f"Invalid time format (HH:MM): {value!r}")
    return int(m.group(1)) * 60 + int(m.group(2))


def format_hhmm(minutes: int) -> str:
    if not 0 <= int(minutes) < MINUTES_PER_DAY:
        raise InvalidTimeWindowError(f"Minute of day out of range: {minutes}")
    return f"{int(minutes) // 60:02d}:{int(minutes) % 60:02d}"


def minute_of_day(value: datetime | time | int) -> int:
    """Minutes since midnight for a datetime, time or already-normalized int.

    Seconds are truncated, so 06:59:59 is minute 419.
    """
    if isinstance(value, int):
        if not 0 <= value < MINUTES_PER_DAY:
            raise InvalidTimeWindowError(f"Minute of day out of range: {value}")
        return value
    return value.hour * 60 + value.minute
