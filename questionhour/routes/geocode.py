from flask import Blueprint, jsonify, request

from ..errors import NotFoundError, ValidationError
from ..geocoding import get_geocoder
from ..validation import is_finite_number

bp = Blueprint("geocode", __name__, url_prefix="/api/geocode")


@bp.get("/zip/<zip_code>")
def zip_lookup(zip_code):
    coords = get_geocoder().zip_to_coordinates(zip_code)
    return jsonify({"zip": zip_code, **coords})


@bp.get("/reverse")
def reverse_lookup():
    lat = request.args.get("lat", type=float)
    lng = request.args.get("lng", type=float)
    if not (is_finite_number(lat) and is_finite_number(lng)):
        raise ValidationError("lat and lng query parameters must be numbers")
    zip_code = get_geocoder().coordinates_to_zip(lat, lng)
    if zip_code is None:
        raise NotFoundError("no zip code found for these coordinates", {"lat": lat, "lng": lng})
    return jsonify({"zip": zip_code, "lat": lat, "lng": lng})
