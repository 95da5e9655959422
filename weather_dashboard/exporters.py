"""
CSV export of saved searches.

Output is one header line plus one line per record, joined with "\n" and
no trailing newline. Everything is formatted by hand (no locale, no csv
dialect) so the same records always give the same bytes.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable

from .schemas import ForecastSample, SearchRecord

CSV_HEADER = "Location,Start Date,End Date,Latitude,Longitude,Temperature Data,Created At,Updated At"

SAMPLE_TS_FORMAT = "%Y-%m-%d %H:%M"
AUDIT_TS_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_number(value: float) -> str:
    """Shortest round-trip repr, with integral floats written without ".0"."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def escape_field(value: str) -> str:
    """
    Quote a text field only when it would otherwise break the row.
    Plain values come out untouched.
    """
    if any(c in value for c in ',"\r\n'):
        return '"' + value.replace('"', '""') + '"'
    return value


def format_sample(sample: ForecastSample) -> str:
    ts = datetime.fromtimestamp(sample.dt, tz=timezone.utc).strftime(SAMPLE_TS_FORMAT)
    return f"{ts}:{format_number(sample.main.temp)}°C"


def temperature_field(samples: Iterable[ForecastSample]) -> str:
    return '"' + "; ".join(format_sample(s) for s in samples) + '"'


def record_row(record: SearchRecord) -> str:
    return ",".join([
        escape_field(record.location),
        record.start_date.isoformat(),
        record.end_date.isoformat(),
        format_number(record.latitude),
        format_number(record.longitude),
        temperature_field(record.temperature_data),
        record.created_at.strftime(AUDIT_TS_FORMAT),
        record.updated_at.strftime(AUDIT_TS_FORMAT),
    ])


def export_csv(records: Iterable[SearchRecord]) -> str:
    """Header line, then one line per record in the given order."""
    return "\n".join([CSV_HEADER, *(record_row(r) for r in records)])


def export_filename(now: datetime) -> str:
    return f"weather_records_{now.strftime('%Y%m%d_%H%M%S')}.csv"
