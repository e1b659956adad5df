from flask import Blueprint, jsonify, request

from ..analytics.aggregation import aggregate
from ..errors import NotFoundError, ValidationError
from ..lifecycle import get_lifecycle

bp = Blueprint("questions", __name__, url_prefix="/api/questions")


def _truthy(value) -> bool:
    return str(value or "").strip().lower() in {"1", "true", "yes", "on"}


def _locations(responses):
    # distinct, in first-seen order
    return list(dict.fromkeys(r["location"] for r in responses))


@bp.get("/current")
def get_current():
    lifecycle = get_lifecycle()
    question = lifecycle.get_current()
    if question is None:
        raise NotFoundError("no current question")
    return jsonify(lifecycle.summary(question))


@bp.route("/current", methods=["PUT", "POST"])
def set_current():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("request body must be a JSON object")
    theme = payload.get("theme")
    if theme is not None and not isinstance(theme, str):
        raise ValidationError("theme must be a string", {"field": "theme"})

    lifecycle = get_lifecycle()
    question = lifecycle.set_current(payload.get("text"), theme)
    return jsonify(lifecycle.summary(question)), 201


@bp.get("/history")
def history():
    """Archived questions, most recently archived first."""
    lifecycle = get_lifecycle()
    include_responses = _truthy(request.args.get("include_responses"))
    result = []
    for question in lifecycle.store.list_archived_questions():
        item = lifecycle.summary(question)
        if include_responses:
            responses = [r.to_dict() for r in question.responses]
            item["responses"] = responses
            item["locations"] = _locations(responses)
        result.append(item)
    return jsonify(result)


@bp.get("/responses")
def question_responses():
    text = request.args.get("text")
    if not text:
        raise ValidationError("text query parameter is required", {"field": "text"})

    lifecycle = get_lifecycle()
    question = lifecycle.store.require_question(text)
    responses = [r.to_dict() for r in lifecycle.store.list_responses(text)]
    agg = aggregate(responses)
    return jsonify({
        "question": lifecycle.summary(question),
        "responses": responses,
        "locations": _locations(responses),
        "totalResponses": agg.total_responses,
        "agreeCount": agg.agree_count,
        "disagreeCount": agg.disagree_count,
    })
