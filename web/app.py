"""Flask application factory with metrics and security defaults."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from flask import Flask, jsonify
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from werkzeug.exceptions import HTTPException

from core import get_logger
from core.exceptions import ApplicationError, DataIntegrityError, ValidationError
from services.analytics_service import AnalyticsService
from web.auth import AdminCredentials, init_login_manager
from web.config_middleware import (
    configure_app,
    setup_extensions,
    setup_metrics,
    setup_security_headers,
)
from web.routes import register_routes

if TYPE_CHECKING:
    from config import Config
    from database.connection import OptimizedSQLitePool
    from services.raffle_service import RaffleService

logger = get_logger(__name__)


def create_app(
    config: Config,
    raffle_service: Optional[RaffleService] = None,
    db_pool: Optional[OptimizedSQLitePool] = None,
    testing: bool = False,
) -> Flask:
    """Create and configure Flask application.

    Args:
        config: Application configuration
        raffle_service: Draw service; its ledger backs every winner endpoint
        db_pool: Local database pool, reported by the health check
        testing: Whether running in testing mode

    Returns:
        Configured Flask application
    """
    app = Flask(__name__)

    configure_app(app, config, testing)
    setup_extensions(app, testing)
    setup_security_headers(app)
    setup_metrics(app)

    credentials = AdminCredentials(
        username=config.admin_username,
        password_hash=config.admin_password,
    )
    init_login_manager(app, credentials)

    app.config["RAFFLE_SERVICE"] = raffle_service
    app.config["DB_POOL"] = db_pool
    analytics_source = raffle_service.contestants if raffle_service else None
    app.config["ANALYTICS_SERVICE"] = AnalyticsService(analytics_source)

    register_routes(app)

    _setup_routes(app)
    _setup_error_handlers(app)

    return app


def _setup_routes(app: Flask) -> None:
    """Setup basic application routes.

    Args:
        app: Flask application instance
    """
    @app.route('/metrics')
    def metrics():
        """Expose Prometheus metrics."""
        return generate_latest(), 200, {'Content-Type': CONTENT_TYPE_LATEST}


def _setup_error_handlers(app: Flask) -> None:
    """Render every error as JSON.

    Args:
        app: Flask application instance
    """
    @app.errorhandler(ValidationError)
    def validation_error(error):
        return jsonify({"error": str(error)}), 400

    @app.errorhandler(DataIntegrityError)
    def data_integrity_error(error):
        app.logger.error(f"Contestant data is invalid: {error}")
        return jsonify({"error": "Contestant data is invalid"}), 500

    @app.errorhandler(ApplicationError)
    def application_error(error):
        app.logger.error(f"Request failed: {error}", exc_info=error)
        return jsonify({"error": "Internal server error"}), 500

    @app.errorhandler(HTTPException)
    def http_error(error):
        return jsonify({"error": error.description}), error.code

    @app.errorhandler(500)
    def internal_error(error):
        app.logger.error(f"Internal server error: {error}")
        return jsonify({"error": "Internal server error"}), 500
