"""Shared validation utilities"""

import re
from datetime import date, datetime
from typing import Optional, Union

TIME_PATTERN = re.compile(r"^\s*(\d{1,2})(?::(\d{1,2}))?(?::(\d{1,2}))?\s*$")


def normalize_time_string(value: str) -> str:
    """
    Normalize a 24-hour time string to zero-padded HH:MM.

    Accepts "9", "9:00", "09:00" and Postgres "09:00:00"; seconds are dropped.

    Raises:
        ValueError: If the value is not a 24-hour time
    """
    if value is None:
        raise ValueError("Time is required")

    match = TIME_PATTERN.match(str(value))
    if not match:
        raise ValueError(f"Invalid time format: {value!r} (expected HH:MM)")

    hours = int(match.group(1))
    minutes = int(match.group(2) or 0)
    if hours > 23 or minutes > 59:
        raise ValueError(f"Time out of range: {value!r}")

    return f"{hours:02d}:{minutes:02d}"


def parse_calendar_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    """
    Coerce ISO strings and datetimes to a calendar date (time of day dropped).

    Raises:
        ValueError: If a string is not an ISO date
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        raise ValueError(f"Invalid date format: {value!r} (expected YYYY-MM-DD)") from None
