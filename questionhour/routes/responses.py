import logging

from flask import Blueprint, jsonify, request

from ..errors import NotFoundError, ValidationError
from ..geocoding import get_geocoder, resolve_location
from ..lifecycle import get_lifecycle
from ..validation import validate_submission

logger = logging.getLogger(__name__)

bp = Blueprint("responses", __name__, url_prefix="/api/responses")


@bp.get("")
def list_responses():
    """All responses, newest first; ``?question=`` narrows to one question in submission order."""
    store = get_lifecycle().store
    text = request.args.get("question")
    if text:
        responses = store.list_responses(text)
    else:
        responses = store.list_all_responses()
    return jsonify([r.to_dict() for r in responses])


@bp.post("")
def add_response():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("request body must be a JSON object")

    lifecycle = get_lifecycle()
    if not payload.get("question"):
        current = lifecycle.get_current()
        if current is None:
            raise NotFoundError("no question is currently accepting responses")
        payload = {**payload, "question": current.text}

    payload = resolve_location(payload, get_geocoder())
    fields = validate_submission(payload)
    response = lifecycle.submit_response(fields["question"], fields)
    logger.info(f"Response recorded: {fields['response']} from {fields['location']} for {fields['question']!r}")
    return jsonify(response.to_dict()), 201


@bp.delete("")
def reset_responses():
    deleted = get_lifecycle().reset_all()
    return jsonify({"message": "All data reset successfully", "deleted": deleted})


@bp.get("/<int:response_id>/connections")
def connections(response_id):
    """Responses from the same ZIP code as ``response_id``."""
    store = get_lifecycle().store
    origin = store.get_response(response_id)
    others = store.same_location(response_id)
    return jsonify({
        "response": origin.to_dict(),
        "location": origin.location,
        "connections": [r.to_dict() for r in others],
    })
