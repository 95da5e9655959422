"""
Pydantic schemas.

- ForecastSample mirrors the provider's 3-hour forecast item, which is also
  the shape stored in `temperature_data`
- SearchRecord is what the store returns and the API serializes
- Request bodies keep the camelCase field names the dashboard sends
"""

from datetime import date, datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field

# 9999-12-31T23:59:59Z, the last instant a datetime can hold
MAX_EPOCH_S = 253402300799


class Condition(BaseModel):
    """One weather condition entry ("Clouds" / "broken clouds")."""
    main: str
    description: str = ""


class SampleMain(BaseModel):
    temp: float
    feels_like: float
    humidity: int = Field(..., ge=0, le=100)


class ForecastSample(BaseModel):
    """One instant's conditions. `dt` is provider epoch seconds."""
    dt: int = Field(..., ge=0, le=MAX_EPOCH_S)
    main: SampleMain
    weather: List[Condition] = Field(default_factory=list)


class DateWindow(BaseModel):
    """Inclusive calendar-date range."""
    start: date
    end: date


class SearchRecord(BaseModel):
    """A persisted search as returned from the store and the API."""
    id: int
    location: str
    latitude: float
    longitude: float
    start_date: date
    end_date: date
    temperature_data: List[ForecastSample]
    created_at: datetime
    updated_at: datetime

    @property
    def window(self) -> DateWindow:
        return DateWindow(start=self.start_date, end=self.end_date)


class RecordCreate(BaseModel):
    """
    Payload for creating a stored record.
    Dates stay strings here so the date validator reports format errors itself.
    """
    model_config = ConfigDict(populate_by_name=True)

    location: str = Field(..., min_length=1, max_length=255)
    start_date: str = Field(..., alias="startDate")
    end_date: str = Field(..., alias="endDate")


class RecordUpdate(RecordCreate):
    """Updates re-resolve the location and re-fetch the forecast; no field patching."""
    id: int


class RecordDelete(BaseModel):
    id: int


class DailySummary(BaseModel):
    """One day of the dashboard's forecast strip."""
    date: date
    tmin: float
    tmax: float
    humidity_avg: int
    condition: str = ""
    description: str = ""
