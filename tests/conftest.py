"""Shared pytest fixtures for QuestionHour tests.

Provides a Flask application on an in-memory SQLite database, a test client,
the lifecycle manager, and a fake ``requests`` session for the geocoder.
"""

from __future__ import annotations

import os

import pytest

# Must be set BEFORE questionhour_tasks is imported
os.environ.setdefault("QUESTIONHOUR_ENV", "testing")

from questionhour import create_app
from questionhour.geocoding import EXTENSION_KEY as GEOCODER_KEY, Geocoder
from questionhour.lifecycle import get_lifecycle


class FakeGeocodeResponse:
    """Minimal stand-in for ``requests.Response``."""

    status_code = 200

    def __init__(self, payload: dict):
        self._payload = payload

    def raise_for_status(self) -> None:
        return None

    def json(self) -> dict:
        return self._payload


class FakeGeocodeSession:
    """Answers Geocoding API calls from a ``{query: payload}`` table."""

    def __init__(self, by_address=None, by_latlng=None):
        self.by_address = by_address or {}
        self.by_latlng = by_latlng or {}
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append(params)
        if "address" in params:
            payload = self.by_address.get(params["address"], {"status": "ZERO_RESULTS", "results": []})
        else:
            payload = self.by_latlng.get(params["latlng"], {"status": "ZERO_RESULTS", "results": []})
        return FakeGeocodeResponse(payload)


def geocode_ok(lat: float, lng: float, zip_code: str) -> dict:
    return {
        "status": "OK",
        "results": [{
            "geometry": {"location": {"lat": lat, "lng": lng}},
            "address_components": [
                {"long_name": zip_code, "short_name": zip_code, "types": ["postal_code"]},
                {"long_name": "United States", "short_name": "US", "types": ["country", "political"]},
            ],
        }],
    }


def make_response(response="agree", location="10001", lat=40.7506, lng=-73.9972,
                  timestamp="2024-05-01T08:30:00Z", **extra) -> dict:
    record = {"response": response, "location": location, "lat": lat, "lng": lng, "timestamp": timestamp}
    record.update(extra)
    return record


@pytest.fixture()
def app():
    flask_app = create_app("testing")
    with flask_app.app_context():
        yield flask_app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def lifecycle(app):
    return get_lifecycle()


@pytest.fixture()
def geocode_session(app):
    """Install a geocoder backed by a fake session that knows two ZIP codes."""
    session = FakeGeocodeSession(
        by_address={
            "10001": geocode_ok(40.7506, -73.9972, "10001"),
            "90210": geocode_ok(34.0901, -118.4065, "90210"),
        },
        by_latlng={
            "40.7506,-73.9972": geocode_ok(40.7506, -73.9972, "10001"),
        },
    )
    app.extensions[GEOCODER_KEY] = Geocoder("test-key", session=session)
    return session
