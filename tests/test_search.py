import pytest
from pydantic import ValidationError

from weather_dashboard.search import CityQuery, CoordinatesQuery, TextQuery, ZipQuery, search_query_adapter


def test_modes_are_picked_by_discriminator():
    assert isinstance(search_query_adapter.validate_python({"mode": "city", "city": "Austin"}), CityQuery)
    assert isinstance(search_query_adapter.validate_python({"mode": "zip", "zip_code": "10001"}), ZipQuery)
    assert isinstance(search_query_adapter.validate_python({"mode": "coordinates", "lat": 1, "lon": 2}), CoordinatesQuery)
    assert isinstance(search_query_adapter.validate_python({"mode": "text", "text": "Eiffel Tower"}), TextQuery)


def test_unknown_mode_and_missing_fields_are_rejected():
    with pytest.raises(ValidationError):
        search_query_adapter.validate_python({"mode": "planet", "name": "Mars"})
    with pytest.raises(ValidationError):
        search_query_adapter.validate_python({"mode": "zip"})
    with pytest.raises(ValidationError):
        search_query_adapter.validate_python({"city": "Austin"})


def test_coordinates_are_bounds_checked():
    with pytest.raises(ValidationError):
        CoordinatesQuery(lat=91, lon=0)
    with pytest.raises(ValidationError):
        CoordinatesQuery(lat=0, lon=-181)


def test_city_query_skips_blank_parts():
    q = CityQuery(city="Austin", state="TX", country="US")
    assert q.location_text() == "Austin,TX,US"
    assert q.to_params() == {"q": "Austin,TX,US"}
    assert CityQuery(city="Paris", state=" ", country="FR").location_text() == "Paris,FR"


def test_zip_query_defaults_to_us():
    assert ZipQuery(zip_code="10001").to_params() == {"zip": "10001,US"}
    assert ZipQuery(zip_code="75001", country="fr").location_text() == "75001,FR"


def test_coordinates_and_text_params():
    assert CoordinatesQuery(lat=48.85, lon=2.35).to_params() == {"lat": 48.85, "lon": 2.35}
    assert CoordinatesQuery(lat=48.85, lon=2.35).location_text() == "48.85,2.35"
    assert TextQuery(text="  Big Ben ").to_params() == {"q": "Big Ben"}
