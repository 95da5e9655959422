"""
Forecast helpers that work on already-fetched samples.

Provider timestamps and requested dates are compared as naive civil values:
`dt` is read as UTC wall time and never shifted to the location's zone.
"""

from __future__ import annotations

from collections import Counter
from datetime import date, datetime, time, timezone
from typing import Dict, Iterable, List, Sequence

from .schemas import DailySummary, DateWindow, ForecastSample

END_OF_DAY = time(23, 59, 59)


def sample_instant(sample: ForecastSample) -> datetime:
    """Naive datetime for a sample's epoch seconds."""
    return datetime.fromtimestamp(sample.dt, tz=timezone.utc).replace(tzinfo=None)


def filter_samples(samples: Iterable[ForecastSample], window: DateWindow) -> List[ForecastSample]:
    """
    Keep samples whose instant lies in [start 00:00:00, end 23:59:59].

    Stable: input order is preserved and nothing is re-sorted, so filtering an
    already-filtered list with the same window returns it unchanged.
    """
    lower = datetime.combine(window.start, time.min)
    upper = datetime.combine(window.end, END_OF_DAY)
    return [s for s in samples if lower <= sample_instant(s) <= upper]


def summarize_daily(samples: Sequence[ForecastSample], days: int = 5) -> List[DailySummary]:
    """
    Collapse 3-hour samples into one entry per calendar date:
    - temp min / max over the day's samples
    - mean humidity, rounded
    - the most frequent (condition, description) pair
    """
    grouped: Dict[date, List[ForecastSample]] = {}
    for s in samples:
        grouped.setdefault(sample_instant(s).date(), []).append(s)

    out: List[DailySummary] = []
    for d in sorted(grouped)[:days]:
        steps = grouped[d]
        temps = [s.main.temp for s in steps]
        humidity = [s.main.humidity for s in steps]

        counts = Counter(
            (s.weather[0].main, s.weather[0].description) for s in steps if s.weather
        )
        condition, description = counts.most_common(1)[0][0] if counts else ("", "")

        out.append(DailySummary(
            date=d,
            tmin=min(temps),
            tmax=max(temps),
            humidity_avg=round(sum(humidity) / len(humidity)),
            condition=condition,
            description=description,
        ))

    return out
