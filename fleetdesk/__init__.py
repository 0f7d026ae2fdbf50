import logging
import os

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from .config import Config, engine_options
from .controllers.auth import bp as auth_bp
from .controllers.bookings import bp as bookings_bp
from .controllers.rentals import bp as rentals_bp
from .controllers.staff import bp as staff_bp
from .controllers.vehicles import bp as vehicles_bp
from .exceptions import FleetdeskError, StorageUnavailable
from .models.db import db, install_sqlite_locking
from .models.repository import STORAGE_ERRORS
from .services import build_services
from .utils.converters import BoundedIntConverter

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("fleetdesk").setLevel(level)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(FleetdeskError)
    def _domain_error(err: FleetdeskError):
        return jsonify(err.to_dict()), err.status_code

    def _storage_error(err):
        logger.error("Storage call failed: %s", err)
        wrapped = StorageUnavailable()
        return jsonify(wrapped.to_dict()), wrapped.status_code

    for exc_class in STORAGE_ERRORS:
        app.register_error_handler(exc_class, _storage_error)

    @app.errorhandler(HTTPException)
    def _http_error(err: HTTPException):
        return jsonify({"error": err.name.replace(" ", ""), "message": err.description}), err.code


def create_app(config=None, overrides: dict | None = None, documents=None, notifier=None):
    """
    Build the JSON API.
    ``documents`` and ``notifier`` replace the default collaborators (tests
    pass recording fakes).
    """
    app = Flask(__name__, instance_relative_config=True)
    app.url_map.converters["int"] = BoundedIntConverter
    app.config.from_object(config or Config)
    overrides = dict(overrides or {})
    app.config.update(overrides)
    if "SQLALCHEMY_ENGINE_OPTIONS" not in overrides:
        app.config["SQLALCHEMY_ENGINE_OPTIONS"] = engine_options(
            app.config["SQLALCHEMY_DATABASE_URI"], app.config["STORAGE_TIMEOUT"]
        )
    if not os.path.isabs(app.config["DOCUMENT_DIR"]):
        app.config["DOCUMENT_DIR"] = os.path.join(app.instance_path, app.config["DOCUMENT_DIR"])
    os.makedirs(app.instance_path, exist_ok=True)

    configure_logging(app.config["LOG_LEVEL"])

    db.init_app(app)
    with app.app_context():
        install_sqlite_locking(db.engine)
        db.create_all()

    app.extensions["fleetdesk"] = build_services(app.config, db.session, documents=documents, notifier=notifier)

    app.register_blueprint(auth_bp)
    app.register_blueprint(vehicles_bp)
    app.register_blueprint(rentals_bp)
    app.register_blueprint(bookings_bp)
    app.register_blueprint(staff_bp)
    register_error_handlers(app)

    logger.info("fleetdesk ready (db=%s, same-day changeover=%s)",
                app.config["SQLALCHEMY_DATABASE_URI"], app.config["ALLOW_SAME_DAY_CHANGEOVER"])
    return app
