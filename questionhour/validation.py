import math

from .analytics.aggregation import SENTIMENTS
from .errors import ValidationError

STRING_FIELDS = ("question", "response", "timestamp", "location")
COORDINATE_FIELDS = ("lat", "lng")


def is_finite_number(value) -> bool:
    """True for real ints/floats; bools and numeric strings are rejected."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def validate_submission(payload) -> dict:
    """Check a response submission and return the cleaned fields.

    All problems are reported at once in ``details["fields"]``.
    """
    if not isinstance(payload, dict):
        raise ValidationError("request body must be a JSON object")

    errors = {}
    cleaned = {}
    for name in STRING_FIELDS:
        value = payload.get(name)
        if not isinstance(value, str) or not value.strip():
            errors[name] = "must be a non-empty string"
        else:
            cleaned[name] = value.strip()

    for name in COORDINATE_FIELDS:
        value = payload.get(name)
        if not is_finite_number(value):
            errors[name] = "must be a finite number"
        else:
            cleaned[name] = float(value)

    if "response" in cleaned and cleaned["response"] not in SENTIMENTS:
        errors["response"] = f"must be one of {', '.join(SENTIMENTS)}"

    if errors:
        raise ValidationError("invalid submission", {"fields": errors})
    return cleaned
