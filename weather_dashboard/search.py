"""
Search modes offered by the dashboard.

Each mode carries only its own fields. A query knows how to become
provider query params (for current weather) and a location string that
`OpenWeatherClient.geocode` understands (for forecasts and records).
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter


class CityQuery(BaseModel):
    mode: Literal["city"] = "city"
    city: str = Field(..., min_length=1, max_length=128)
    state: Optional[str] = None
    country: Optional[str] = None

    def to_params(self) -> Dict[str, Any]:
        return {"q": self.location_text()}

    def location_text(self) -> str:
        return ",".join(p.strip() for p in (self.city, self.state, self.country) if p and p.strip())


class ZipQuery(BaseModel):
    mode: Literal["zip"] = "zip"
    zip_code: str = Field(..., min_length=3, max_length=16)
    country: Optional[str] = None

    def to_params(self) -> Dict[str, Any]:
        return {"zip": self.location_text()}

    def location_text(self) -> str:
        country = (self.country or "US").strip().upper()
        return f"{self.zip_code.strip()},{country}"


class CoordinatesQuery(BaseModel):
    mode: Literal["coordinates"] = "coordinates"
    lat: float = Field(..., ge=-90.0, le=90.0)
    lon: float = Field(..., ge=-180.0, le=180.0)

    def to_params(self) -> Dict[str, Any]:
        return {"lat": self.lat, "lon": self.lon}

    def location_text(self) -> str:
        return f"{self.lat},{self.lon}"


class TextQuery(BaseModel):
    mode: Literal["text"] = "text"
    text: str = Field(..., min_length=1, max_length=255)

    def to_params(self) -> Dict[str, Any]:
        return {"q": self.text.strip()}

    def location_text(self) -> str:
        return self.text.strip()


SearchQuery = Annotated[
    Union[CityQuery, ZipQuery, CoordinatesQuery, TextQuery],
    Field(discriminator="mode"),
]

search_query_adapter: TypeAdapter[SearchQuery] = TypeAdapter(SearchQuery)
