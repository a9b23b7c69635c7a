"""
Date and time primitives for pickup/delivery scheduling.

All helpers are null-safe and work on calendar dates, never on elapsed
time, so daylight-saving shifts cannot move a pickup to the wrong day.
Slot times are 24-hour strings and are always compared after
normalization to zero-padded HH:MM ("9:00" sorts before "10:00").
"""

from datetime import date, datetime, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from ...config import BUSINESS_TIMEZONE
from ...shared.validators import normalize_time_string


def _as_date(value) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    return value


def today_in(timezone: str = BUSINESS_TIMEZONE, now: Optional[datetime] = None) -> date:
    """Calendar date in the business time zone (computed once per scheduling session)"""
    tz = ZoneInfo(timezone)
    if now is None:
        return datetime.now(tz).date()
    if now.tzinfo is None:
        return now.date()
    return now.astimezone(tz).date()


def tomorrow_of(today: date) -> date:
    return add_days(today, 1)


def same_day(a, b) -> bool:
    a, b = _as_date(a), _as_date(b)
    if a is None or b is None:
        return False
    return a == b


def is_before(a, b) -> bool:
    a, b = _as_date(a), _as_date(b)
    if a is None or b is None:
        return False
    return a < b


def is_after(a, b) -> bool:
    a, b = _as_date(a), _as_date(b)
    if a is None or b is None:
        return False
    return a > b


def add_days(value, days: int) -> Optional[date]:
    """Shift by whole calendar days; None stays None"""
    value = _as_date(value)
    if value is None:
        return None
    return value + timedelta(days=days)


def date_string(value) -> str:
    """YYYY-MM-DD, or an empty string for no date"""
    value = _as_date(value)
    if value is None:
        return ""
    return value.isoformat()


def _normalize_time(value: str) -> str:
    try:
        return normalize_time_string(value)
    except ValueError:
        # Unparseable input still gets padded so ordering stays deterministic
        hours, _, rest = str(value or "").partition(":")
        minutes = rest.split(":")[0] or "00"
        return f"{hours.strip().zfill(2)}:{minutes.strip().zfill(2)}"


def compare_time_strings(t1: str, t2: str) -> int:
    """Compare two 24-hour times; returns -1, 0 or 1"""
    n1 = _normalize_time(t1)
    n2 = _normalize_time(t2)
    if n1 < n2:
        return -1
    if n1 > n2:
        return 1
    return 0


def is_time_after_or_equal(t1: str, t2: str) -> bool:
    return compare_time_strings(t1, t2) >= 0


def is_valid_future_date(value, today: Optional[date] = None) -> bool:
    """True for today or any later date; False for past dates and None"""
    value = _as_date(value)
    if value is None:
        return False
    if today is None:
        today = today_in()
    return not is_before(value, today)
