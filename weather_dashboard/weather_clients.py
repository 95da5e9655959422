"""
OpenWeather client.

Implements both collaborators the record service needs:
- location resolution (`geocode`)
- forecast source (`forecast`)

plus current conditions for the dashboard's search box.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx
import structlog
from pydantic import ValidationError

from .errors import LocationNotFound, UpstreamError
from .schemas import ForecastSample
from .search import CityQuery, CoordinatesQuery, TextQuery, ZipQuery

logger = structlog.get_logger(__name__)

_COORDS = re.compile(r"\s*(-?\d+(?:\.\d+)?)\s*,\s*(-?\d+(?:\.\d+)?)\s*")
_US_ZIP = re.compile(r"(?i)\s*(\d{5})(?:-\d{4})?\s*(?:,\s*([a-z]{2}))?\s*")


@dataclass(frozen=True)
class ResolvedLocation:
    """
    Minimal resolved location object produced by geocoding.
    """
    name: str
    country: str
    state: str
    lat: float
    lon: float


def upstream_message(status_code: int, provider_message: str = "") -> str:
    """User-facing message for a provider status code."""
    if status_code == 401:
        return "Invalid API key"
    if status_code == 404:
        return "Location not found"
    if status_code == 429:
        return "Rate limit exceeded. Please try again later"
    if status_code >= 500:
        return "Weather service is currently unavailable"
    if provider_message:
        return f"Weather provider request failed ({status_code}): {provider_message}"
    return f"Weather provider request failed ({status_code})"


def _unreadable() -> UpstreamError:
    return UpstreamError("Weather provider returned an unreadable response")


def _first_match(results: Any) -> Optional[Dict[str, Any]]:
    """Top geocoding hit, or None for an empty result list."""
    if results is None:
        return None
    if not isinstance(results, list):
        raise _unreadable()
    if not results:
        return None
    if not isinstance(results[0], dict):
        raise _unreadable()
    return results[0]


def _coordinates(entry: Dict[str, Any]) -> tuple:
    try:
        return float(entry["lat"]), float(entry["lon"])
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("provider_unreadable", reason="missing coordinates")
        raise _unreadable() from e


class OpenWeatherClient:
    """
    OpenWeatherMap wrapper.

    Endpoints used:
    - Geocoding:
        /geo/1.0/direct?q=...&limit=1&appid=KEY
        /geo/1.0/zip?zip=...&appid=KEY
        /geo/1.0/reverse?lat=...&lon=...&limit=1&appid=KEY
    - Current weather:
        /data/2.5/weather?<query>&units=metric&appid=KEY
    - 5-day forecast (3-hour increments):
        /data/2.5/forecast?lat=...&lon=...&units=metric&appid=KEY

    `transport` lets tests plug in an `httpx.MockTransport`.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openweathermap.org",
        timeout_s: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.transport = transport

    async def _get(self, path: str, params: Dict[str, Any]) -> Any:
        """GET a provider endpoint; any failure becomes UpstreamError."""
        params = {**params, "appid": self.api_key}
        try:
            async with httpx.AsyncClient(timeout=self.timeout_s, transport=self.transport) as client:
                r = await client.get(f"{self.base}{path}", params=params)
        except httpx.HTTPError as e:
            logger.warning("provider_unreachable", path=path, error=str(e))
            raise UpstreamError("Weather service is currently unavailable") from e

        if r.status_code != 200:
            try:
                body = r.json()
            except ValueError:
                body = None
            if isinstance(body, dict):
                provider_message = str(body.get("message", ""))
            else:
                provider_message = r.text
            logger.warning("provider_error", path=path, status=r.status_code, message=provider_message)
            raise UpstreamError(upstream_message(r.status_code, provider_message), status_code=r.status_code)

        try:
            return r.json()
        except ValueError as e:
            raise _unreadable() from e

    async def geocode(self, query: str) -> ResolvedLocation:
        """
        Resolve a user-provided location string into (name/state/country/lat/lon).

        Supported input formats (checked in this order):

        1) Coordinates: "40.7128,-74.0060"
           Bounds are checked, then reverse-geocoded for a human-friendly label.

        2) US ZIP code: "10001", "10001-1234" or "10001,US"
           Uses the ZIP endpoint; defaults to US if no country is given.

        3) Anything else: "Austin, TX", "Paris, FR", "London"
           Direct geocoding; the top match wins.
        """
        raw = query.strip().strip("'\"")
        if not raw:
            raise LocationNotFound("Location not found")

        coord_match = _COORDS.fullmatch(raw)
        if coord_match:
            lat = float(coord_match.group(1))
            lon = float(coord_match.group(2))
            if not (-90.0 <= lat <= 90.0):
                raise LocationNotFound("Invalid latitude. Must be between -90 and 90.")
            if not (-180.0 <= lon <= 180.0):
                raise LocationNotFound("Invalid longitude. Must be between -180 and 180.")

            best = _first_match(await self._get("/geo/1.0/reverse", {"lat": lat, "lon": lon, "limit": 1})) or {}
            # Coordinates stay authoritative even when reverse geocoding finds nothing.
            return ResolvedLocation(
                name=best.get("name", "Current Location"),
                state=best.get("state", ""),
                country=best.get("country", ""),
                lat=lat,
                lon=lon,
            )

        zip_match = _US_ZIP.fullmatch(raw)
        if zip_match:
            country = (zip_match.group(2) or "US").upper()
            try:
                data = await self._get("/geo/1.0/zip", {"zip": f"{zip_match.group(1)},{country}"})
            except UpstreamError as e:
                if e.status_code == 404:
                    raise LocationNotFound("Location not found") from e
                raise
            if not isinstance(data, dict):
                raise _unreadable()
            lat, lon = _coordinates(data)
            return ResolvedLocation(
                name=data.get("name", raw),
                state="",
                country=data.get("country", country),
                lat=lat,
                lon=lon,
            )

        best = _first_match(await self._get("/geo/1.0/direct", {"q": raw, "limit": 1}))
        if best is None:
            raise LocationNotFound("Location not found")

        lat, lon = _coordinates(best)
        return ResolvedLocation(
            name=best.get("name", raw),
            state=best.get("state", ""),
            country=best.get("country", ""),
            lat=lat,
            lon=lon,
        )

    async def forecast(self, lat: float, lon: float) -> List[ForecastSample]:
        """
        5-day forecast in 3-hour steps, metric units, ascending by `dt`.
        Items that do not carry the fields a sample needs are dropped.
        """
        data = await self._get("/data/2.5/forecast", {"lat": lat, "lon": lon, "units": "metric"})
        items = data.get("list") if isinstance(data, dict) else None
        if not isinstance(items, list):
            raise _unreadable()

        samples: List[ForecastSample] = []
        for item in items:
            try:
                samples.append(ForecastSample.model_validate(item))
            except ValidationError:
                logger.warning("forecast_item_skipped", dt=item.get("dt") if isinstance(item, dict) else None)
        return samples

    async def current_weather(self, query: CityQuery | ZipQuery | CoordinatesQuery | TextQuery) -> Dict[str, Any]:
        """
        Current conditions for any search mode, returned as the provider's JSON.
        """
        try:
            return await self._get("/data/2.5/weather", {**query.to_params(), "units": "metric"})
        except UpstreamError as e:
            if e.status_code == 404:
                raise LocationNotFound(f'Location "{query.location_text()}" not found') from e
            raise
