"""
FastAPI entrypoint.

This file focuses on:
- routing
- request/response handling (the dashboard expects {data} / {error} bodies)
- wiring together DB + provider client + record service

Run with:  uvicorn weather_dashboard.main:create_app --factory
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Any, Callable, Dict, Optional

import structlog
from fastapi import APIRouter, Body, Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .db import Database
from .errors import RecordNotFound, WeatherError
from .exporters import export_filename
from .logging_config import configure_logging
from .schemas import RecordCreate, RecordDelete, RecordUpdate
from .search import search_query_adapter
from .service import RecordService
from .settings import Settings, get_settings
from .store import RecordStore, utcnow
from .weather_clients import OpenWeatherClient

logger = structlog.get_logger(__name__)

router = APIRouter()


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def get_service(request: Request) -> RecordService:
    return request.app.state.service


def get_weather_client(request: Request) -> OpenWeatherClient:
    return request.app.state.weather_client


# -------------------------
# Search history (records)
# -------------------------

@router.get("/api/weather-records")
async def list_records(service: RecordService = Depends(get_service)):
    """All saved searches."""
    try:
        records = await service.list()
    except WeatherError as e:
        return error_response(500, str(e))
    return {"data": [r.model_dump(mode="json") for r in records]}


@router.post("/api/weather-records", status_code=201)
async def create_record(payload: RecordCreate, service: RecordService = Depends(get_service)):
    """Validate, resolve, fetch, filter and store a search."""
    try:
        record = await service.create(payload.location, payload.start_date, payload.end_date)
    except WeatherError as e:
        return error_response(400, str(e))
    return {"data": record.model_dump(mode="json")}


@router.put("/api/weather-records")
async def update_record(payload: RecordUpdate, service: RecordService = Depends(get_service)):
    """Re-resolve and re-fetch an existing search, then overwrite it."""
    try:
        record = await service.update(payload.id, payload.location, payload.start_date, payload.end_date)
    except RecordNotFound as e:
        return error_response(404, str(e))
    except WeatherError as e:
        return error_response(400, str(e))
    return {"data": record.model_dump(mode="json")}


@router.delete("/api/weather-records", status_code=204)
async def delete_record(payload: RecordDelete, service: RecordService = Depends(get_service)):
    try:
        await service.delete(payload.id)
    except RecordNotFound as e:
        return error_response(404, str(e))
    except WeatherError as e:
        return error_response(400, str(e))
    return Response(status_code=204)


@router.get("/api/weather-records/export")
async def export_records(service: RecordService = Depends(get_service)):
    """Download every record as CSV."""
    try:
        content = await service.export_csv()
    except WeatherError as e:
        return error_response(500, str(e))
    filename = export_filename(utcnow())
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/api/weather-records/{record_id}")
async def get_record(record_id: int, service: RecordService = Depends(get_service)):
    try:
        record = await service.get(record_id)
    except RecordNotFound as e:
        return error_response(404, str(e))
    except WeatherError as e:
        return error_response(500, str(e))
    return {"data": record.model_dump(mode="json")}


# -------------------------
# Dashboard weather lookups
# -------------------------

@router.post("/api/weather/current")
async def current_weather(
    payload: Dict[str, Any] = Body(...),
    client: OpenWeatherClient = Depends(get_weather_client),
):
    """Current conditions for a city/zip/coordinates/text search. Nothing is stored."""
    try:
        query = search_query_adapter.validate_python(payload)
    except ValidationError as e:
        return error_response(400, format_errors(e.errors()))
    try:
        data = await client.current_weather(query)
    except WeatherError as e:
        return error_response(400, str(e))
    return {"data": data}


@router.post("/api/weather/forecast")
async def daily_forecast(
    payload: Dict[str, Any] = Body(...),
    service: RecordService = Depends(get_service),
):
    """5-day forecast collapsed to one summary per day."""
    try:
        query = search_query_adapter.validate_python(payload)
    except ValidationError as e:
        return error_response(400, format_errors(e.errors()))
    try:
        resolved, days = await service.daily_forecast(query.location_text())
    except WeatherError as e:
        return error_response(400, str(e))
    return {
        "data": {
            "location": asdict(resolved),
            "days": [d.model_dump(mode="json") for d in days],
        }
    }


@router.get("/health")
def health():
    return {"status": "ok"}


def format_errors(errors) -> str:
    """First validation error as "field: message"."""
    if not errors:
        return "Invalid request"
    first = errors[0]
    loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    msg = first.get("msg", "invalid value")
    return f"{loc}: {msg}" if loc else msg


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(400, format_errors(exc.errors()))


def create_app(
    settings: Optional[Settings] = None,
    *,
    database: Optional[Database] = None,
    weather_client: Optional[OpenWeatherClient] = None,
    clock: Callable = utcnow,
) -> FastAPI:
    """
    Build the application and everything it owns.

    Tests pass their own database / client / clock; a database passed in is
    left open on shutdown since the caller owns it.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    owns_database = database is None
    if database is None:
        database = Database(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout_s=settings.db_pool_timeout_s,
        )
    database.create_all()

    if weather_client is None:
        weather_client = OpenWeatherClient(
            settings.openweather_api_key,
            base_url=settings.openweather_base_url,
            timeout_s=settings.http_timeout_s,
        )

    store = RecordStore(database, clock=clock)
    service = RecordService(store, weather_client, weather_client, max_range_days=settings.max_range_days)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("startup", database=database.engine.url.render_as_string(hide_password=True))
        yield
        if owns_database:
            database.dispose()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database
    app.state.weather_client = weather_client
    app.state.service = service
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.include_router(router)
    return app
