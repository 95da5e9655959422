"""
Record store: CRUD for saved searches.

Every operation opens its own session from the `Database` handle and is a
single-row write (or a read), so the backend's row atomicity is all the
locking there is. SQLAlchemy failures surface as StoreUnavailable.
"""

from __future__ import annotations

import json
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Iterator, List, Sequence

import structlog
from pydantic import TypeAdapter
from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from . import models
from .db import Database
from .errors import RecordNotFound, StoreUnavailable
from .schemas import DateWindow, ForecastSample, SearchRecord

logger = structlog.get_logger(__name__)

_samples = TypeAdapter(List[ForecastSample])


def utcnow() -> datetime:
    """Naive UTC now, matching the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def dump_samples(snapshot: Sequence[ForecastSample]) -> str:
    return json.dumps([s.model_dump() for s in snapshot])


def load_samples(raw: str | None) -> List[ForecastSample]:
    return _samples.validate_json(raw or "[]")


def to_record(row: models.WeatherRecord) -> SearchRecord:
    """Convert ORM row -> SearchRecord."""
    return SearchRecord(
        id=row.id,
        location=row.location,
        latitude=row.latitude,
        longitude=row.longitude,
        start_date=row.start_date,
        end_date=row.end_date,
        temperature_data=load_samples(row.temperature_data),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class RecordStore:
    def __init__(self, database: Database, clock: Callable[[], datetime] = utcnow):
        self.database = database
        self.clock = clock

    @contextmanager
    def _session(self, op: str) -> Iterator[Session]:
        try:
            with self.database.session() as db:
                yield db
        except SQLAlchemyError as e:
            logger.error("store_unavailable", op=op, error=str(e))
            raise StoreUnavailable("Record store is unavailable") from e

    def list(self) -> List[SearchRecord]:
        """All records, oldest id first."""
        with self._session("list") as db:
            rows = db.scalars(select(models.WeatherRecord).order_by(models.WeatherRecord.id)).all()
            return [to_record(r) for r in rows]

    def get(self, record_id: int) -> SearchRecord:
        with self._session("get") as db:
            row = db.get(models.WeatherRecord, record_id)
            if row is None:
                raise RecordNotFound(record_id)
            return to_record(row)

    def create(
        self,
        location: str,
        latitude: float,
        longitude: float,
        window: DateWindow,
        snapshot: Sequence[ForecastSample],
    ) -> SearchRecord:
        """Insert a new record; id and both timestamps are assigned here."""
        now = self.clock()
        with self._session("create") as db:
            row = models.WeatherRecord(
                location=location,
                latitude=latitude,
                longitude=longitude,
                start_date=window.start,
                end_date=window.end,
                temperature_data=dump_samples(snapshot),
                created_at=now,
                updated_at=now,
            )
            db.add(row)
            db.commit()
            db.refresh(row)
            return to_record(row)

    def update(
        self,
        record_id: int,
        location: str,
        latitude: float,
        longitude: float,
        window: DateWindow,
        snapshot: Sequence[ForecastSample],
    ) -> SearchRecord:
        """
        Overwrite every mutable field of an existing record.
        `created_at` is never part of the statement.
        """
        with self._session("update") as db:
            result = db.execute(
                update(models.WeatherRecord)
                .where(models.WeatherRecord.id == record_id)
                .values(
                    location=location,
                    latitude=latitude,
                    longitude=longitude,
                    start_date=window.start,
                    end_date=window.end,
                    temperature_data=dump_samples(snapshot),
                    updated_at=self.clock(),
                )
            )
            if result.rowcount == 0:
                db.rollback()
                raise RecordNotFound(record_id)

            record = to_record(db.get(models.WeatherRecord, record_id))
            db.commit()
            return record

    def delete(self, record_id: int) -> None:
        """Remove a record. Deleting an id that is already gone raises RecordNotFound."""
        with self._session("delete") as db:
            result = db.execute(delete(models.WeatherRecord).where(models.WeatherRecord.id == record_id))
            if result.rowcount == 0:
                db.rollback()
                raise RecordNotFound(record_id)
            db.commit()
