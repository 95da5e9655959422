"""
Date range validation for stored searches.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any

from .errors import InvalidDateFormat, InvalidDateOrder, RangeTooLarge
from .schemas import DateWindow

# Keeps a stored snapshot within the provider's 5-day forecast horizon.
MAX_RANGE_DAYS = 5

# "YYYY-MM-DD", optionally followed by an ISO time whose value is ignored
_ISO_DATE = re.compile(
    r"(\d{4}-\d{2}-\d{2})(?:[T ]\d{2}:\d{2}(?::\d{2}(?:\.\d+)?)?(?:Z|[+-]\d{2}:?\d{2})?)?"
)


def parse_date(value: Any) -> date:
    """Parse "YYYY-MM-DD" (or an ISO datetime, keeping its date part)."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidDateFormat("Invalid date format")
    match = _ISO_DATE.fullmatch(value.strip())
    if not match:
        raise InvalidDateFormat("Invalid date format")
    try:
        return datetime.strptime(match.group(1), "%Y-%m-%d").date()
    except ValueError:
        raise InvalidDateFormat("Invalid date format") from None


def validate_date_range(start_date: Any, end_date: Any, max_days: int = MAX_RANGE_DAYS) -> DateWindow:
    """
    Business rules for a requested window:
    - both ends parse to calendar dates
    - end is not before start (equal is fine)
    - end - start is at most `max_days` days
    """
    start = parse_date(start_date)
    end = parse_date(end_date)

    if end < start:
        raise InvalidDateOrder("End date must be after start date")

    if (end - start).days > max_days:
        raise RangeTooLarge(f"Date range cannot exceed {max_days} days")

    return DateWindow(start=start, end=end)
