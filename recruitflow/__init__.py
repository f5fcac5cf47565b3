"""
Application factory for the RecruitFlow recruitment workflow API.

Usage::

    from recruitflow import create_app
    app = create_app()           # Uses FLASK_ENV to pick config.
    app = create_app("testing")  # Explicit config for tests.
"""

import logging
import os

from flask import Flask
from werkzeug.exceptions import HTTPException

from .config import config_by_name
from .exceptions import RecruitFlowError
from .extensions import csrf, db, login_manager, migrate

logger = logging.getLogger(__name__)


def create_app(config_name: str | None = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config_name: One of 'development', 'testing', or 'production'.
                     Defaults to the FLASK_ENV environment variable,
                     falling back to 'development'.

    Returns:
        A fully configured Flask application instance.
    """
    # Resolve the configuration class.
    if config_name is None:
        config_name = os.environ.get("FLASK_ENV", "development")
    config_class = config_by_name.get(config_name)
    if config_class is None:
        raise ValueError(
            f"Unknown config '{config_name}'. "
            f"Valid options: {list(config_by_name.keys())}"
        )

    app = Flask(__name__)
    app.config.from_object(config_class)

    # Refuse to run production with development defaults.
    if config_name == "production":
        config_class.validate_production_secrets(app.config)

    # -- Initialize extensions ---------------------------------------------
    _register_extensions(app)

    # -- Register blueprints -----------------------------------------------
    _register_blueprints(app)

    # -- Register error handlers -------------------------------------------
    _register_error_handlers(app)

    # -- Register custom CLI commands --------------------------------------
    _register_cli_commands(app)

    # -- Configure logging -------------------------------------------------
    _configure_logging(app)

    # -- Workflow signal receivers -----------------------------------------
    from .services import notification_service  # pylint: disable=import-outside-toplevel

    notification_service.connect_receivers()

    return app


def _register_extensions(app: Flask) -> None:
    """Bind all Flask extensions to the application instance."""
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)

    # Imported here to avoid circular imports with models.
    from .models.user import User  # pylint: disable=import-outside-toplevel

    @login_manager.user_loader
    def load_user(user_id: str):
        """Load a user by primary key for Flask-Login session management."""
        user = db.session.get(User, int(user_id))
        return user if user is not None and user.is_active else None

    @login_manager.unauthorized_handler
    def unauthorized():
        """API clients get a JSON 401 instead of a login redirect."""
        return {
            "success": False,
            "code": "UNAUTHORIZED",
            "message": "Authentication required.",
        }, 401


def _register_blueprints(app: Flask) -> None:
    """
    Import and register each blueprint with its URL prefix.

    Blueprints are imported inside this function to avoid circular
    imports — models and services can safely import ``db`` from
    extensions at module level.
    """
    # pylint: disable=import-outside-toplevel

    # Main blueprint — dashboard counts and health check.
    from .blueprints.main import bp as main_bp

    app.register_blueprint(main_bp)

    # Authentication — dev login, logout, current user.
    from .blueprints.auth import bp as auth_bp

    app.register_blueprint(auth_bp, url_prefix="/auth")

    # Requisitions — raise, list, decide stages, delete.
    from .blueprints.requisitions import bp as requisitions_bp

    app.register_blueprint(requisitions_bp, url_prefix="/requisitions")

    # Jobs — create from requisitions, applications.
    from .blueprints.jobs import bp as jobs_bp

    app.register_blueprint(jobs_bp, url_prefix="/jobs")

    # Offers — issue, approve, respond.
    from .blueprints.offers import bp as offers_bp

    app.register_blueprint(offers_bp, url_prefix="/offers")

    # Notifications — the current user's inbox.
    from .blueprints.notifications import bp as notifications_bp

    app.register_blueprint(notifications_bp, url_prefix="/notifications")

    # Admin — user provisioning, audit logs.
    from .blueprints.admin import bp as admin_bp

    app.register_blueprint(admin_bp, url_prefix="/admin")


def _register_error_handlers(app: Flask) -> None:
    """Render every error as a JSON body with a machine-readable code."""

    @app.errorhandler(RecruitFlowError)
    def workflow_error(error: RecruitFlowError):
        """Service-layer errors carry their own code and status."""
        db.session.rollback()
        return error.to_dict(), error.http_status

    @app.errorhandler(HTTPException)
    def http_error(error: HTTPException):
        """401/403/404/405... raised by Flask or ``abort()``."""
        return {
            "success": False,
            "code": error.name.upper().replace(" ", "_"),
            "message": error.description,
        }, error.code

    @app.errorhandler(500)
    def internal_error(error):  # pylint: disable=unused-argument
        """Handle 500 Internal Server Error."""
        db.session.rollback()
        logger.error("Unhandled error: %s", error)
        return {
            "success": False,
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
        }, 500


def _register_cli_commands(app: Flask) -> None:
    """Register custom Flask CLI commands (e.g., flask db-check)."""
    from .cli import register_commands  # pylint: disable=import-outside-toplevel

    register_commands(app)


def _configure_logging(app: Flask) -> None:
    """Set the root log level from ``LOG_LEVEL``."""
    log_level = app.config.get("LOG_LEVEL", "INFO")
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    # Quiet down noisy libraries in development.
    if app.debug:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
