"""Question / response persistence on top of Flask-SQLAlchemy.

Write helpers only ``flush``; the caller (``QuestionLifecycle``) owns the
transaction and commits or rolls back around them.
"""

import functools
import logging
from contextlib import contextmanager
from datetime import datetime, timedelta

from sqlalchemy import func
from sqlalchemy.exc import OperationalError

from .errors import NotFoundError, StoreUnavailableError
from .extensions import db
from .models import CurrentQuestion, Question, Response

logger = logging.getLogger(__name__)

CURRENT_ROW_ID = 1


def _guarded(fn):
    """Translate database connectivity failures into StoreUnavailableError."""
    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except OperationalError as e:
            db.session.rollback()
            logger.error(f"Store error in {fn.__name__}: {str(e)}")
            raise StoreUnavailableError("response store unavailable") from e
    return wrapper


class ResponseStore:

    @contextmanager
    def transaction(self):
        try:
            yield db.session
            db.session.commit()
        except OperationalError as e:
            db.session.rollback()
            logger.error(f"Store transaction failed: {str(e)}")
            raise StoreUnavailableError("response store unavailable") from e
        except Exception:
            db.session.rollback()
            raise

    def discard_cached(self):
        """Drop identity-map state so the next reads see committed rows."""
        db.session.expire_all()

    # --- questions -----------------------------------------------------

    @_guarded
    def get_question(self, text):
        return Question.query.filter_by(text=text).first()

    def require_question(self, text):
        question = self.get_question(text)
        if question is None:
            raise NotFoundError(f"question not found: {text}", {"question": text})
        return question

    @_guarded
    def get_current_question(self):
        row = db.session.get(CurrentQuestion, CURRENT_ROW_ID)
        return row.question if row else None

    @_guarded
    def set_current_pointer(self, question):
        row = db.session.get(CurrentQuestion, CURRENT_ROW_ID)
        if row is None:
            row = CurrentQuestion(id=CURRENT_ROW_ID)
            db.session.add(row)
        row.question_id = question.id if question else None
        db.session.flush()
        return row

    @_guarded
    def create_question(self, text, theme):
        question = Question(text=text, theme=theme or 'general')
        db.session.add(question)
        db.session.flush()
        return question

    @_guarded
    def list_archived_questions(self):
        return Question.query.filter(Question.archived_at.isnot(None), Question.current.is_(False)) \
            .order_by(Question.archived_at.desc(), Question.id.desc()).all()

    # --- responses -----------------------------------------------------

    @_guarded
    def append_response(self, question, fields):
        response = Response(
            question_id=question.id,
            response=fields['response'],
            location=fields['location'],
            lat=fields['lat'],
            lng=fields['lng'],
            timestamp=fields['timestamp'],
        )
        db.session.add(response)
        db.session.flush()
        return response

    @_guarded
    def list_responses(self, text):
        question = self.require_question(text)
        return Response.query.filter_by(question_id=question.id).order_by(Response.id).all()

    @_guarded
    def list_all_responses(self):
        return Response.query.order_by(Response.timestamp.desc(), Response.id.desc()).all()

    @_guarded
    def get_response(self, response_id):
        response = db.session.get(Response, response_id)
        if response is None:
            raise NotFoundError(f"response not found: {response_id}")
        return response

    @_guarded
    def same_location(self, response_id):
        """Other responses sharing the location of ``response_id``, across questions."""
        response = self.get_response(response_id)
        return Response.query.filter(
            Response.location == response.location,
            Response.id != response.id
        ).order_by(Response.id).all()

    # --- maintenance ---------------------------------------------------

    @_guarded
    def delete_all(self):
        CurrentQuestion.query.delete()
        deleted_responses = Response.query.delete()
        deleted_questions = Question.query.delete()
        db.session.flush()
        return deleted_questions, deleted_responses

    @_guarded
    def counts(self):
        week_ago = datetime.utcnow() - timedelta(days=7)
        return {
            'total_questions': db.session.query(func.count(Question.id)).scalar() or 0,
            'archived_questions': Question.query.filter(Question.archived_at.isnot(None)).count(),
            'total_responses': db.session.query(func.count(Response.id)).scalar() or 0,
            'recent_responses': Response.query.filter(Response.created_at >= week_ago).count(),
        }
