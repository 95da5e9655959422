"""
Failure taxonomy shared by the validator, provider client, store and service.

Every failure a caller can see is one of these types; the HTTP layer maps
them to status codes.
"""

from __future__ import annotations

from typing import Optional


class WeatherError(RuntimeError):
    """Raised for user-facing weather and record failures."""
    pass


class DateRangeError(WeatherError):
    """A requested date window is unusable."""
    pass


class InvalidDateFormat(DateRangeError):
    pass


class InvalidDateOrder(DateRangeError):
    pass


class RangeTooLarge(DateRangeError):
    pass


class LocationNotFound(WeatherError):
    pass


class UpstreamError(WeatherError):
    """The weather provider failed or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RecordNotFound(WeatherError):
    def __init__(self, record_id: int):
        super().__init__("Record not found")
        self.record_id = record_id


class StoreUnavailable(WeatherError):
    pass
