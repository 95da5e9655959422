from datetime import date

import pytest

from weather_dashboard.errors import DateRangeError, InvalidDateFormat, InvalidDateOrder, RangeTooLarge
from weather_dashboard.validation import parse_date, validate_date_range


@pytest.mark.parametrize("start,end,days", [
    ("2024-06-01", "2024-06-01", 0),
    ("2024-06-01", "2024-06-03", 2),
    ("2024-06-01", "2024-06-06", 5),
    ("2024-12-30", "2025-01-02", 3),
])
def test_valid_windows_echo_input(start, end, days):
    window = validate_date_range(start, end)
    assert window.start == date.fromisoformat(start)
    assert window.end == date.fromisoformat(end)
    assert (window.end - window.start).days == days


def test_end_before_start_is_rejected():
    with pytest.raises(InvalidDateOrder):
        validate_date_range("2024-06-03", "2024-06-02")


def test_span_over_five_days_is_rejected():
    with pytest.raises(RangeTooLarge) as exc:
        validate_date_range("2024-06-01", "2024-06-07")
    assert "5 days" in str(exc.value)


def test_span_cap_is_configurable():
    validate_date_range("2024-06-01", "2024-06-17", max_days=16)
    with pytest.raises(RangeTooLarge):
        validate_date_range("2024-06-01", "2024-06-03", max_days=1)


@pytest.mark.parametrize("bad", [
    "", "   ", "not-a-date", "2024-13-01", "2024-02-30", "20240601", "2024-W22-6", "2024-6-1",
    "2024-06-01Tnoon", None, 20240601,
])
def test_unparseable_dates_are_rejected(bad):
    with pytest.raises(InvalidDateFormat):
        validate_date_range(bad, "2024-06-01")
    with pytest.raises(InvalidDateFormat):
        validate_date_range("2024-06-01", bad)


def test_format_is_checked_before_order():
    with pytest.raises(InvalidDateFormat):
        validate_date_range("2024-06-03", "garbage")


def test_all_failures_share_a_base_class():
    for start, end in [("x", "2024-06-01"), ("2024-06-02", "2024-06-01"), ("2024-06-01", "2024-06-30")]:
        with pytest.raises(DateRangeError):
            validate_date_range(start, end)


def test_parse_date_keeps_date_part_of_iso_datetime():
    assert parse_date("2024-06-01T18:30:00") == date(2024, 6, 1)
    assert parse_date(" 2024-06-01 ") == date(2024, 6, 1)


def test_parse_date_accepts_zoned_datetimes():
    assert parse_date("2024-06-01T23:30:00Z") == date(2024, 6, 1)
    assert parse_date("2024-06-01 08:00+02:00") == date(2024, 6, 1)
