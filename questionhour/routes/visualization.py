from flask import Blueprint, jsonify, request

from ..analytics import derive_visualization
from ..errors import NotFoundError, ValidationError
from ..lifecycle import get_lifecycle

bp = Blueprint("visualization", __name__, url_prefix="/api")


@bp.get("/visualization")
def visualization():
    lifecycle = get_lifecycle()
    text = request.args.get("question")
    if text:
        question = lifecycle.store.require_question(text)
    else:
        question = lifecycle.get_current()
        if question is None:
            raise NotFoundError("no current question")

    seed = request.args.get("seed")
    if seed is not None:
        try:
            seed = int(seed)
        except ValueError:
            raise ValidationError("seed must be an integer", {"field": "seed"})
        if seed < 0:
            raise ValidationError("seed must be non-negative", {"field": "seed"})

    responses = [r.to_dict() for r in lifecycle.store.list_responses(question.text)]
    data = derive_visualization(question.to_dict(), responses, rng=seed)
    data["question"] = lifecycle.summary(question)
    return jsonify(data)
