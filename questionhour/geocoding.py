"""ZIP code <-> coordinate lookups through the Google Geocoding API."""

import logging
from typing import Optional

import requests
from flask import current_app
from requests import Session

from .errors import GeocodingUnavailableError, NotFoundError, ValidationError
from .validation import is_finite_number

logger = logging.getLogger(__name__)

GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
EXTENSION_KEY = "questionhour.geocoder"


class Geocoder:

    def __init__(self, api_key: str, session: Optional[Session] = None, timeout: float = 10.0):
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout

    def _lookup(self, params: dict) -> list:
        if not self.api_key:
            raise GeocodingUnavailableError("geocoding is not configured (GOOGLE_MAPS_API_KEY)")
        try:
            resp = self.session.get(GEOCODE_URL, params={**params, "key": self.api_key}, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Geocoding request failed: {str(e)}")
            raise GeocodingUnavailableError("geocoding service unavailable") from e

        status = data.get("status")
        if status == "ZERO_RESULTS":
            return []
        if status != "OK":
            logger.warning(f"Geocoding API returned {status}: {data.get('error_message')}")
            raise GeocodingUnavailableError(f"geocoding service error: {status}")
        return data.get("results") or []

    def zip_to_coordinates(self, zip_code: str) -> dict:
        zip_code = (zip_code or "").strip()
        if not zip_code:
            raise ValidationError("zip code must be a non-empty string", {"field": "location"})
        results = self._lookup({"address": zip_code, "components": f"postal_code:{zip_code}"})
        if not results:
            raise NotFoundError(f"no coordinates found for zip code {zip_code}", {"location": zip_code})
        location = results[0]["geometry"]["location"]
        return {"lat": float(location["lat"]), "lng": float(location["lng"])}

    def coordinates_to_zip(self, lat: float, lng: float) -> Optional[str]:
        results = self._lookup({"latlng": f"{lat},{lng}", "result_type": "postal_code"})
        for result in results:
            for component in result.get("address_components", []):
                if "postal_code" in component.get("types", []):
                    return component.get("short_name") or component.get("long_name")
        return None


def resolve_location(payload: dict, geocoder: Geocoder) -> dict:
    """Fill in whichever half of (ZIP, coordinates) a submission is missing.

    Payloads that already carry both, or neither, are returned unchanged and
    left for validation to judge.
    """
    payload = dict(payload)
    location = payload.get("location")
    has_location = isinstance(location, str) and location.strip() != ""
    has_coords = "lat" in payload or "lng" in payload

    if has_location and not has_coords:
        payload.update(geocoder.zip_to_coordinates(location))
    elif not has_location and is_finite_number(payload.get("lat")) and is_finite_number(payload.get("lng")):
        zip_code = geocoder.coordinates_to_zip(payload["lat"], payload["lng"])
        if not zip_code:
            raise ValidationError("could not derive a zip code from the coordinates", {"field": "location"})
        payload["location"] = zip_code
    return payload


def get_geocoder() -> Geocoder:
    return current_app.extensions[EXTENSION_KEY]
