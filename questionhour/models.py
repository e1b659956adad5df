from datetime import datetime

from .extensions import db


def _iso(value):
    return value.isoformat() if value else None


class Question(db.Model):
    __tablename__ = 'questions'

    id = db.Column(db.Integer, primary_key=True)
    # Natural key: one row per question text across current and archived questions
    text = db.Column(db.Text, nullable=False, unique=True)
    theme = db.Column(db.String(100), default='general')
    current = db.Column(db.Boolean, default=False, nullable=False)
    timestamp = db.Column(db.DateTime, default=datetime.utcnow)
    archived_at = db.Column(db.DateTime)

    # Frozen when the question is archived
    total_responses = db.Column(db.Integer, default=0, nullable=False)
    agree_count = db.Column(db.Integer, default=0, nullable=False)
    disagree_count = db.Column(db.Integer, default=0, nullable=False)

    # Relationships
    responses = db.relationship(
        'Response', backref='question', lazy=True,
        order_by='Response.id', cascade='all, delete-orphan'
    )

    def to_dict(self):
        return {
            'text': self.text,
            'theme': self.theme,
            'current': bool(self.current),
            'timestamp': _iso(self.timestamp),
            'archivedAt': _iso(self.archived_at),
            'totalResponses': self.total_responses or 0,
            'agreeCount': self.agree_count or 0,
            'disagreeCount': self.disagree_count or 0,
        }


class CurrentQuestion(db.Model):
    """Singleton row (id == 1) naming the question that accepts responses."""
    __tablename__ = 'current_question'

    id = db.Column(db.Integer, primary_key=True)
    question_id = db.Column(db.Integer, db.ForeignKey('questions.id'), nullable=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    question = db.relationship('Question')


class Response(db.Model):
    __tablename__ = 'responses'

    id = db.Column(db.Integer, primary_key=True)
    question_id = db.Column(db.Integer, db.ForeignKey('questions.id'), nullable=False, index=True)
    response = db.Column(db.String(16), nullable=False)   # agree / disagree
    location = db.Column(db.String(32), nullable=False, index=True)
    lat = db.Column(db.Float, nullable=False)
    lng = db.Column(db.Float, nullable=False)
    timestamp = db.Column(db.String(64), nullable=False)  # client-supplied ISO-8601
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'question': self.question.text if self.question else None,
            'response': self.response,
            'location': self.location,
            'lat': self.lat,
            'lng': self.lng,
            'timestamp': self.timestamp,
        }
