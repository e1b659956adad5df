import pytest
import requests

from conftest import FakeGeocodeSession, geocode_ok
from questionhour.errors import GeocodingUnavailableError, NotFoundError, ValidationError
from questionhour.geocoding import Geocoder, resolve_location


class BrokenSession:
    def get(self, url, params=None, timeout=None):
        raise requests.ConnectionError("connection refused")


def _geocoder():
    session = FakeGeocodeSession(
        by_address={"10001": geocode_ok(40.7506, -73.9972, "10001")},
        by_latlng={"40.7506,-73.9972": geocode_ok(40.7506, -73.9972, "10001")},
    )
    return Geocoder("key", session=session), session


def test_zip_to_coordinates():
    geocoder, session = _geocoder()
    assert geocoder.zip_to_coordinates("10001") == {"lat": 40.7506, "lng": -73.9972}
    assert session.calls[0]["key"] == "key"


def test_zip_not_found():
    geocoder, _ = _geocoder()
    with pytest.raises(NotFoundError):
        geocoder.zip_to_coordinates("00000")


def test_coordinates_to_zip():
    geocoder, _ = _geocoder()
    assert geocoder.coordinates_to_zip(40.7506, -73.9972) == "10001"
    assert geocoder.coordinates_to_zip(0.0, 0.0) is None


def test_transport_failure():
    geocoder = Geocoder("key", session=BrokenSession())
    with pytest.raises(GeocodingUnavailableError):
        geocoder.zip_to_coordinates("10001")


def test_api_error_status():
    session = FakeGeocodeSession(by_address={"10001": {"status": "REQUEST_DENIED", "error_message": "bad key"}})
    with pytest.raises(GeocodingUnavailableError):
        Geocoder("key", session=session).zip_to_coordinates("10001")


def test_missing_key():
    with pytest.raises(GeocodingUnavailableError):
        Geocoder("", session=FakeGeocodeSession()).zip_to_coordinates("10001")


class TestResolveLocation:

    def test_fills_coordinates_from_zip(self):
        geocoder, _ = _geocoder()
        payload = resolve_location({"location": "10001", "response": "agree"}, geocoder)
        assert (payload["lat"], payload["lng"]) == (40.7506, -73.9972)

    def test_fills_zip_from_coordinates(self):
        geocoder, _ = _geocoder()
        payload = resolve_location({"lat": 40.7506, "lng": -73.9972}, geocoder)
        assert payload["location"] == "10001"

    def test_unknown_coordinates(self):
        geocoder, _ = _geocoder()
        with pytest.raises(ValidationError):
            resolve_location({"lat": 1.0, "lng": 1.0}, geocoder)

    def test_complete_payload_untouched(self):
        geocoder, session = _geocoder()
        payload = {"location": "10001", "lat": 1.0, "lng": 2.0}
        assert resolve_location(payload, geocoder) == payload
        assert session.calls == []

    def test_string_coordinates_left_for_validation(self):
        geocoder, session = _geocoder()
        payload = {"location": "10001", "lat": "40.7", "lng": "-73.9"}
        assert resolve_location(payload, geocoder) == payload
        assert session.calls == []
