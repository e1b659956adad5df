import logging
import os

from flask import Flask

from .config import config
from .errors import register_error_handlers
from .extensions import cors, db
from .geocoding import EXTENSION_KEY as GEOCODER_KEY, Geocoder
from .lifecycle import EXTENSION_KEY as LIFECYCLE_KEY, QuestionLifecycle
from .routes.export import bp as export_bp
from .routes.geocode import bp as geocode_bp
from .routes.questions import bp as questions_bp
from .routes.responses import bp as responses_bp
from .routes.visualization import bp as visualization_bp

logger = logging.getLogger(__name__)


def _seed_current_question(app, lifecycle):
    text = app.config.get("DEFAULT_QUESTION")
    if not text or lifecycle.get_current() is not None:
        return
    lifecycle.set_current(text, app.config.get("DEFAULT_THEME"))
    logger.info(f"Seeded current question: {text!r}")


def create_app(config_name=None, **overrides):
    config_name = config_name or os.getenv("QUESTIONHOUR_ENV", "default")
    app = Flask(__name__)
    app.config.from_object(config[config_name])
    app.config.update(overrides)
    app.url_map.strict_slashes = False  # 避免 308/301 重定向

    logging.basicConfig(level=app.config["LOG_LEVEL"])

    db.init_app(app)
    cors.init_app(app, origins=app.config["CORS_ORIGINS"])

    app.extensions[LIFECYCLE_KEY] = QuestionLifecycle()
    app.extensions[GEOCODER_KEY] = Geocoder(
        app.config["GOOGLE_MAPS_API_KEY"],
        timeout=app.config["GEOCODING_TIMEOUT"],
    )

    app.register_blueprint(responses_bp)
    app.register_blueprint(questions_bp)
    app.register_blueprint(visualization_bp)
    app.register_blueprint(geocode_bp)
    app.register_blueprint(export_bp)
    register_error_handlers(app)

    @app.get("/api/health")
    def health():
        return {"status": "ok"}

    @app.get("/")
    def index():
        return "Server is running"

    with app.app_context():
        db.create_all()
        _seed_current_question(app, app.extensions[LIFECYCLE_KEY])
        for r in app.url_map.iter_rules():
            logger.debug(f"route: {r}")
    return app
