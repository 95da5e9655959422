"""
ORM models.

We store:
- resolved location name + lat/lon (so the record is stable)
- requested date range
- the filtered forecast samples (JSON serialized)
"""

from datetime import date, datetime

from sqlalchemy import Date, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base


class WeatherRecord(Base):
    __tablename__ = "weather_records"
    # Without AUTOINCREMENT SQLite hands a deleted max id to the next insert.
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # Canonical name returned by geocoding, not the raw user text
    location: Mapped[str] = mapped_column(String(255), index=True)
    latitude: Mapped[float] = mapped_column(Float)
    longitude: Mapped[float] = mapped_column(Float)

    start_date: Mapped[date] = mapped_column(Date)
    end_date: Mapped[date] = mapped_column(Date)

    # Filtered forecast samples as a JSON array.
    # Example:
    #   [{"dt":1717200000,"main":{"temp":18.5,"feels_like":18.1,"humidity":72},
    #     "weather":[{"main":"Clouds","description":"broken clouds"}]}, ...]
    temperature_data: Mapped[str] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime)
    updated_at: Mapped[datetime] = mapped_column(DateTime)
