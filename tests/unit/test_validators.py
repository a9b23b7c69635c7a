from datetime import date, datetime

import pytest

from app.shared.validators import normalize_time_string, parse_calendar_date


@pytest.mark.parametrize(
    "value,expected",
    [
        ("9", "09:00"),
        ("9:5", "09:05"),
        ("09:00", "09:00"),
        ("13:30:00", "13:30"),
        (" 7:15 ", "07:15"),
    ],
)
def test_normalize_time_string(value, expected):
    assert normalize_time_string(value) == expected


@pytest.mark.parametrize("value", ["", "noon", "24:00", "12:60", "9am"])
def test_normalize_time_string_rejects_invalid(value):
    with pytest.raises(ValueError):
        normalize_time_string(value)


def test_parse_calendar_date():
    assert parse_calendar_date("2025-03-10") == date(2025, 3, 10)
    assert parse_calendar_date("2025-03-10T18:45:00Z") == date(2025, 3, 10)
    assert parse_calendar_date(datetime(2025, 3, 10, 8, 0)) == date(2025, 3, 10)
    assert parse_calendar_date(date(2025, 3, 10)) == date(2025, 3, 10)
    assert parse_calendar_date(None) is None
    assert parse_calendar_date("") is None


def test_parse_calendar_date_rejects_garbage():
    with pytest.raises(ValueError):
        parse_calendar_date("next tuesday")
