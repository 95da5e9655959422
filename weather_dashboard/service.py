"""
Record service: the resolve -> fetch -> filter -> persist flow behind the
records API, plus pass-throughs for list/get/delete/export.

The store is synchronous SQLAlchemy; its calls are awaited through the
threadpool so a slow database does not stall other requests.
"""

from __future__ import annotations

from typing import List, Optional, Protocol

import structlog
from starlette.concurrency import run_in_threadpool

from .errors import LocationNotFound, UpstreamError
from .exporters import export_csv
from .forecast import filter_samples, summarize_daily
from .schemas import DailySummary, ForecastSample, SearchRecord
from .store import RecordStore
from .validation import MAX_RANGE_DAYS, validate_date_range
from .weather_clients import ResolvedLocation

logger = structlog.get_logger(__name__)


class LocationResolver(Protocol):
    async def geocode(self, query: str) -> ResolvedLocation: ...


class ForecastSource(Protocol):
    async def forecast(self, lat: float, lon: float) -> List[ForecastSample]: ...


class RecordService:
    def __init__(
        self,
        store: RecordStore,
        resolver: LocationResolver,
        source: ForecastSource,
        max_range_days: int = MAX_RANGE_DAYS,
    ):
        self.store = store
        self.resolver = resolver
        self.source = source
        self.max_range_days = max_range_days

    async def _resolve(self, location: str) -> ResolvedLocation:
        resolved = await self.resolver.geocode(location)
        if resolved is None or not resolved.name:
            raise LocationNotFound("Location not found")
        return resolved

    async def save(
        self,
        location: str,
        start_date: str,
        end_date: str,
        record_id: Optional[int] = None,
    ) -> SearchRecord:
        """
        CREATE (no id) or UPDATE (id given):
        - validate the date window
        - resolve the location text
        - fetch the provider forecast and keep the samples inside the window
        - write one row
        """
        window = validate_date_range(start_date, end_date, self.max_range_days)
        resolved = await self._resolve(location)
        try:
            samples = await self.source.forecast(resolved.lat, resolved.lon)
        except UpstreamError:
            logger.warning("forecast_failed", location=resolved.name)
            raise
        snapshot = filter_samples(samples, window)

        if record_id is None:
            record = await run_in_threadpool(
                self.store.create, resolved.name, resolved.lat, resolved.lon, window, snapshot
            )
            logger.info("record_created", id=record.id, location=record.location, samples=len(snapshot))
        else:
            record = await run_in_threadpool(
                self.store.update, record_id, resolved.name, resolved.lat, resolved.lon, window, snapshot
            )
            logger.info("record_updated", id=record.id, location=record.location, samples=len(snapshot))
        return record

    async def create(self, location: str, start_date: str, end_date: str) -> SearchRecord:
        return await self.save(location, start_date, end_date)

    async def update(self, record_id: int, location: str, start_date: str, end_date: str) -> SearchRecord:
        return await self.save(location, start_date, end_date, record_id=record_id)

    async def list(self) -> List[SearchRecord]:
        return await run_in_threadpool(self.store.list)

    async def get(self, record_id: int) -> SearchRecord:
        return await run_in_threadpool(self.store.get, record_id)

    async def delete(self, record_id: int) -> None:
        await run_in_threadpool(self.store.delete, record_id)
        logger.info("record_deleted", id=record_id)

    async def export_csv(self) -> str:
        return export_csv(await self.list())

    async def daily_forecast(self, location: str) -> tuple[ResolvedLocation, List[DailySummary]]:
        """Dashboard forecast strip: resolve, fetch, one summary per day."""
        resolved = await self._resolve(location)
        samples = await self.source.forecast(resolved.lat, resolved.lon)
        return resolved, summarize_daily(samples)
