# backend/estatebooks/__init__.py
import logging

from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from .config import Config
from .extensions import db, migrate
from .permissions import PermissionDeniedError
from .storage import PersistenceError
from .validation import NotFoundError, ValidationError


def _register_error_handlers(app: Flask) -> None:
    """Map service exceptions that escape a route onto JSON error responses."""

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc):
        return jsonify({"error": str(exc)}), 400

    @app.errorhandler(NotFoundError)
    def handle_not_found(exc):
        return jsonify({"error": str(exc)}), 404

    @app.errorhandler(PermissionDeniedError)
    def handle_permission_denied(exc):
        return jsonify({"error": "Permission denied", "message": str(exc)}), 403

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(exc):
        app.logger.exception("Storage failure on %s %s", request.method, request.path)
        return jsonify({"error": "Storage failure"}), 500

    @app.errorhandler(Exception)
    def handle_unexpected(exc):
        if isinstance(exc, HTTPException):
            return jsonify({"error": exc.description}), exc.code
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"error": "Internal server error"}), 500


def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    app.logger.setLevel(getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO))
    logging.getLogger("estatebooks").setLevel(app.logger.level)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.users import users_bp
    from .routes.data import data_bp
    from .routes.transactions import transactions_bp
    from .routes.inventory import inventory_bp
    from .routes.projects import projects_bp
    from .routes.reports import reports_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(data_bp)
    app.register_blueprint(transactions_bp)
    app.register_blueprint(inventory_bp)
    app.register_blueprint(projects_bp)
    app.register_blueprint(reports_bp)

    _register_error_handlers(app)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin and origin in set(app.config.get("CORS_ALLOWED_ORIGINS", [])):
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
