import os
from datetime import datetime, timedelta
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

# Settings are read from the environment; keep tests off any real key or database file
os.environ.setdefault("OPENWEATHER_API_KEY", "test-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from weather_dashboard.db import Database
from weather_dashboard.errors import LocationNotFound, UpstreamError
from weather_dashboard.main import create_app
from weather_dashboard.schemas import ForecastSample
from weather_dashboard.service import RecordService
from weather_dashboard.settings import Settings
from weather_dashboard.store import RecordStore
from weather_dashboard.weather_clients import ResolvedLocation

# 2024-06-01T00:00:00Z
JUNE_1 = 1717200000
THREE_HOURS = 3 * 3600


def make_sample(dt: int, temp: float = 20.0, feels_like: Optional[float] = None,
                humidity: int = 60, main: str = "Clouds", description: str = "broken clouds") -> ForecastSample:
    return ForecastSample.model_validate({
        "dt": dt,
        "main": {"temp": temp, "feels_like": temp if feels_like is None else feels_like, "humidity": humidity},
        "weather": [{"main": main, "description": description}],
    })


def five_day_feed(start: int = JUNE_1, count: int = 40) -> List[ForecastSample]:
    """40 three-hour samples: June 1 00:00 through June 5 21:00."""
    return [make_sample(start + i * THREE_HOURS, temp=10.0 + i * 0.5) for i in range(count)]


class Clock:
    """Each call returns a time one minute after the previous one."""

    def __init__(self, start: datetime = datetime(2024, 6, 1, 10, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(minutes=1)
        return current


class FakeWeather:
    """Stands in for OpenWeatherClient in service and API tests."""

    def __init__(self):
        self.places: Dict[str, ResolvedLocation] = {
            "paris": ResolvedLocation(name="Paris", state="", country="FR", lat=48.85, lon=2.35),
            "london": ResolvedLocation(name="London", state="England", country="GB", lat=51.51, lon=-0.13),
        }
        self.samples: List[ForecastSample] = five_day_feed()
        self.forecast_error: Optional[Exception] = None
        self.geocode_calls: List[str] = []
        self.forecast_calls: List[tuple] = []

    async def geocode(self, query: str) -> ResolvedLocation:
        self.geocode_calls.append(query)
        try:
            return self.places[query.strip().lower()]
        except KeyError:
            raise LocationNotFound("Location not found") from None

    async def forecast(self, lat: float, lon: float) -> List[ForecastSample]:
        self.forecast_calls.append((lat, lon))
        if self.forecast_error is not None:
            raise self.forecast_error
        return list(self.samples)

    async def current_weather(self, query):
        if query.location_text().lower() == "atlantis":
            raise UpstreamError("Location not found", status_code=404)
        return {"name": query.location_text(), "main": {"temp": 21.0}}


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def database():
    db = Database("sqlite://")
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def store(database, clock):
    return RecordStore(database, clock=clock)


@pytest.fixture
def weather():
    return FakeWeather()


@pytest.fixture
def service(store, weather):
    return RecordService(store, weather, weather)


@pytest.fixture
def settings():
    return Settings(openweather_api_key="test-key", database_url="sqlite://", log_level="WARNING")


@pytest.fixture
def client(settings, database, weather, clock):
    app = create_app(settings, database=database, weather_client=weather, clock=clock)
    with TestClient(app) as c:
        yield c
