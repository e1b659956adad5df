"""Question lifecycle: ``absent -> current -> archived``.

Exactly one question is current at a time. Switching the current question
archives the previous one with a frozen rollup in the same transaction that
activates the new one, and response submissions are serialised against that
switch, so every response lands on exactly one question.
"""

import logging
import threading
from datetime import datetime
from typing import Optional

from flask import current_app

from .analytics.aggregation import aggregate, rollup
from .errors import LifecycleConflictError, ValidationError
from .models import Question
from .store import ResponseStore

logger = logging.getLogger(__name__)

EXTENSION_KEY = "questionhour.lifecycle"


class QuestionLifecycle:

    def __init__(self, store: Optional[ResponseStore] = None):
        self.store = store or ResponseStore()
        # Held by transitions and submissions alike
        self._write_lock = threading.RLock()
        # Only transitions; taken without blocking to detect overlap
        self._transition_lock = threading.Lock()

    # --- reads ---------------------------------------------------------

    def get_current(self) -> Optional[Question]:
        return self.store.get_current_question()

    def summary(self, question: Question) -> dict:
        data = question.to_dict()
        if question.current:
            agg = aggregate([r.to_dict() for r in question.responses])
            data.update(
                totalResponses=agg.total_responses,
                agreeCount=agg.agree_count,
                disagreeCount=agg.disagree_count,
            )
        return data

    # --- transitions ---------------------------------------------------

    def set_current(self, text: str, theme: Optional[str] = None) -> Question:
        text = (text or "").strip() if isinstance(text, str) else text
        if not isinstance(text, str) or not text:
            raise ValidationError("question text must be a non-empty string", {"field": "text"})

        if not self._transition_lock.acquire(blocking=False):
            raise LifecycleConflictError("another question transition is in progress")
        try:
            with self._write_lock, self.store.transaction():
                self.store.discard_cached()
                previous = self.store.get_current_question()
                if previous is not None and previous.text == text:
                    if theme:
                        previous.theme = theme
                    return previous

                now = datetime.utcnow()
                if previous is not None:
                    self._archive(previous, now)

                question = self.store.get_question(text)
                if question is None:
                    question = self.store.create_question(text, theme)
                elif theme:
                    question.theme = theme
                question.current = True
                question.timestamp = now
                question.archived_at = None
                question.total_responses = 0
                question.agree_count = 0
                question.disagree_count = 0
                self.store.set_current_pointer(question)

            logger.info(f"Current question set: {text!r} (previous: {previous.text if previous else None!r})")
            return question
        finally:
            self._transition_lock.release()

    def _archive(self, question: Question, when: datetime):
        total, agree, disagree = rollup([r.to_dict() for r in question.responses])
        question.total_responses = total
        question.agree_count = agree
        question.disagree_count = disagree
        question.archived_at = when
        question.current = False
        logger.info(f"Archived question {question.text!r}: {total} responses ({agree} agree / {disagree} disagree)")

    def submit_response(self, question_text: str, fields: dict):
        """Append a validated response to the question named ``question_text``.

        The question must exist and be the current one.
        """
        with self._write_lock, self.store.transaction():
            self.store.discard_cached()
            question = self.store.require_question(question_text)
            if not question.current:
                raise LifecycleConflictError(
                    f"question is archived and no longer accepting responses: {question_text}",
                    {"question": question_text}
                )
            response = self.store.append_response(question, fields)
        return response

    def reset_all(self):
        with self._write_lock, self.store.transaction():
            questions, responses = self.store.delete_all()
        logger.info(f"Reset: deleted {questions} questions and {responses} responses")
        return {'questions': questions, 'responses': responses}


def get_lifecycle() -> QuestionLifecycle:
    return current_app.extensions[EXTENSION_KEY]
