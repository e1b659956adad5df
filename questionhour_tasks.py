import logging
import os
import shutil
from datetime import date, datetime, timedelta

import pandas as pd
import psutil
import redis
from celery import Celery
from celery.schedules import crontab
from sqlalchemy import text

from questionhour import create_app
from questionhour.extensions import db
from questionhour.lifecycle import get_lifecycle
from questionhour.models import Response
from questionhour.schedule import load_schedule, question_for

logger = logging.getLogger(__name__)

flask_app = create_app(os.getenv("QUESTIONHOUR_ENV"))

# Initialize Celery
celery = Celery(
    flask_app.import_name,
    broker=flask_app.config['CELERY_BROKER_URL'],
    backend=flask_app.config['CELERY_RESULT_BACKEND']
)


class ContextTask(celery.Task):
    """Make celery tasks work with Flask app context"""
    def __call__(self, *args, **kwargs):
        with flask_app.app_context():
            return self.run(*args, **kwargs)


celery.Task = ContextTask


@celery.task
def rotate_daily_question(day=None):
    """
    Make today's scheduled question current (archives the previous one)
    """
    schedule_file = flask_app.config.get('QUESTION_SCHEDULE_FILE')
    if not schedule_file:
        logger.info("No question schedule configured, skipping rotation")
        return {'status': 'skipped', 'reason': 'no schedule'}

    day = date.fromisoformat(day) if day else date.today()
    try:
        entry = question_for(load_schedule(schedule_file), day)
    except Exception as e:
        logger.error(f"Error loading question schedule {schedule_file}: {str(e)}")
        raise

    if entry is None:
        logger.info(f"No question scheduled for {day.isoformat()}")
        return {'status': 'skipped', 'reason': 'nothing scheduled', 'date': day.isoformat()}

    question = get_lifecycle().set_current(entry['text'], entry['theme'])
    logger.info(f"Daily question rotated for {day.isoformat()}: {question.text!r}")
    return {'status': 'rotated', 'date': day.isoformat(), 'question': question.text, 'theme': question.theme}


@celery.task
def generate_daily_report(day=None):
    """
    Generate daily statistics report
    """
    try:
        day = date.fromisoformat(day) if day else date.today() - timedelta(days=1)
        start_of_day = datetime.combine(day, datetime.min.time())
        end_of_day = start_of_day + timedelta(days=1)

        rows = Response.query.filter(
            Response.created_at >= start_of_day,
            Response.created_at < end_of_day
        ).all()
        df = pd.DataFrame([r.to_dict() for r in rows], columns=['question', 'response', 'location'])

        by_sentiment = df.groupby('response').size().to_dict() if not df.empty else {}
        by_location = df.groupby('location').size().sort_values(ascending=False).head(10) if not df.empty else pd.Series(dtype=int)

        store = get_lifecycle().store
        report = {
            'date': day.isoformat(),
            'daily_responses': int(len(df)),
            'agree': int(by_sentiment.get('agree', 0)),
            'disagree': int(by_sentiment.get('disagree', 0)),
            'top_locations': [{'location': loc, 'count': int(c)} for loc, c in by_location.items()],
            'questions': sorted(df['question'].dropna().unique().tolist()) if not df.empty else [],
            **store.counts(),
            'generated_at': datetime.now().isoformat()
        }

        logger.info(f"Daily report generated: {report}")
        return report

    except Exception as e:
        logger.error(f"Daily report generation error: {str(e)}")
        raise


def _check_database():
    try:
        db.session.execute(text('SELECT 1'))
        db.session.commit()
    except Exception as e:
        db.session.rollback()
        return f'unhealthy: {str(e)}'
    return 'healthy'


def _check_redis():
    # Celery broker and result backend
    try:
        client = redis.Redis.from_url(flask_app.config['REDIS_URL'], socket_connect_timeout=2)
        client.ping()
    except redis.RedisError as e:
        return f'unhealthy: {str(e)}'
    return 'healthy'


@celery.task
def health_check_task():
    """
    Check the response store, Redis, disk and memory
    """
    health_status = {
        'timestamp': datetime.now().isoformat(),
        'database': _check_database(),
        'redis': _check_redis(),
        'disk_space': 'healthy',
        'memory': 'healthy'
    }

    total, used, free = shutil.disk_usage('/')
    free_percent = (free / total) * 100
    if free_percent < 10:
        health_status['disk_space'] = f'warning: only {free_percent:.1f}% free'

    memory = psutil.virtual_memory()
    if memory.percent > 90:
        health_status['memory'] = f'warning: {memory.percent:.1f}% used'

    unhealthy = [k for k, v in health_status.items()
                 if k != 'timestamp' and v != 'healthy']
    if unhealthy:
        logger.warning(f"Health check: degraded components {unhealthy}: {health_status}")
    else:
        logger.info("Health check: all components healthy")

    return health_status


# Periodic task configuration
celery.conf.beat_schedule = {
    # New daily question at midnight
    'rotate-daily-question': {
        'task': 'questionhour_tasks.rotate_daily_question',
        'schedule': crontab(hour=0, minute=0),
    },

    # Generate daily report at 6 AM
    'daily-report': {
        'task': 'questionhour_tasks.generate_daily_report',
        'schedule': crontab(hour=6, minute=0),
    },

    # Health check every 30 minutes
    'health-check': {
        'task': 'questionhour_tasks.health_check_task',
        'schedule': crontab(minute='*/30'),
    },
}
