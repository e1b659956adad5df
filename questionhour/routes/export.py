from datetime import datetime
from io import BytesIO

import pandas as pd
from flask import Blueprint, jsonify, request, send_file

from ..errors import NotFoundError, ValidationError
from ..lifecycle import get_lifecycle

bp = Blueprint("export", __name__, url_prefix="/api")

EXPORT_COLUMNS = ["id", "question", "response", "location", "lat", "lng", "timestamp"]


def responses_frame(responses) -> pd.DataFrame:
    return pd.DataFrame([r.to_dict() for r in responses], columns=EXPORT_COLUMNS)


@bp.get("/stats")
def system_stats():
    """Overall system statistics"""
    lifecycle = get_lifecycle()
    stats = lifecycle.store.counts()
    current = lifecycle.get_current()
    stats["current_question"] = current.text if current else None
    return jsonify(stats)


@bp.get("/export")
def export_responses():
    """Export one question's responses to Excel or CSV"""
    lifecycle = get_lifecycle()
    text = request.args.get("question")
    fmt = (request.args.get("format") or "xlsx").lower()
    if fmt not in ("xlsx", "csv"):
        raise ValidationError("format must be xlsx or csv", {"field": "format"})

    if text:
        question = lifecycle.store.require_question(text)
    else:
        question = lifecycle.get_current()
        if question is None:
            raise NotFoundError("no current question")

    responses = lifecycle.store.list_responses(question.text)
    if not responses:
        return jsonify({'error': 'No data to export'}), 404

    df = responses_frame(responses)
    stem = "_".join(question.text.split())[:60] or "question"
    filename = f"{stem}_export_{datetime.now().strftime('%Y%m%d')}.{fmt}"

    output = BytesIO()
    if fmt == "csv":
        output.write(df.to_csv(index=False).encode("utf-8-sig"))
        mimetype = "text/csv"
    else:
        with pd.ExcelWriter(output, engine='openpyxl') as writer:
            df.to_excel(writer, sheet_name='Responses', index=False)
        mimetype = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    output.seek(0)

    return send_file(output, mimetype=mimetype, as_attachment=True, download_name=filename)
