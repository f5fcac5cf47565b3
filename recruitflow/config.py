"""
Application configuration classes.

Each class represents a deployment environment. The factory function
``create_app`` in ``recruitflow/__init__.py`` selects the appropriate
config based on the FLASK_ENV environment variable.

Secrets and connection strings come from environment variables (a
``.env`` file is loaded by the ``flask`` CLI when python-dotenv is
installed) so they never appear in source control.
"""

import logging
import os

# Module-level logger for startup warnings emitted by config classes.
_logger = logging.getLogger(__name__)

# Sentinel for detecting an unset SECRET_KEY in production.
_DEFAULT_SECRET_KEY = "dev-secret-change-me"


class BaseConfig:
    """Shared configuration values inherited by all environments."""

    # -- Flask core --------------------------------------------------------
    ENV_NAME: str = "base"
    SECRET_KEY: str = os.environ.get("SECRET_KEY", _DEFAULT_SECRET_KEY)

    # -- Session cookie hardening ------------------------------------------
    SESSION_COOKIE_HTTPONLY: bool = True
    SESSION_COOKIE_SAMESITE: str = "Lax"
    # ProductionConfig overrides this to True (requires HTTPS).
    SESSION_COOKIE_SECURE: bool = False
    PERMANENT_SESSION_LIFETIME: int = int(
        os.environ.get("PERMANENT_SESSION_LIFETIME", "3600")
    )

    # -- SQLAlchemy --------------------------------------------------------
    # Point at SQL Server or PostgreSQL via DATABASE_URL in .env.  The
    # SQLite default keeps a fresh checkout runnable.
    SQLALCHEMY_DATABASE_URI: str = os.environ.get(
        "DATABASE_URL", "sqlite:///recruitflow-dev.db"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False
    SQLALCHEMY_ECHO: bool = False

    # -- CSRF --------------------------------------------------------------
    # The JSON API accepts the token via the X-CSRFToken header.
    WTF_CSRF_HEADERS: list[str] = ["X-CSRFToken", "X-CSRF-Token"]

    # -- Recruitment workflow ----------------------------------------------
    # Requisition numbers look like ``ORG-Req-00001``.
    REQUISITION_NUMBER_PREFIX: str = os.environ.get(
        "REQUISITION_NUMBER_PREFIX", "ORG"
    )
    REQUISITION_NUMBER_WIDTH: int = 5

    # Used to build absolute links in notification messages.
    FRONTEND_BASE_URL: str = os.environ.get(
        "FRONTEND_BASE_URL", "http://localhost:5173"
    )

    # -- Dev login guard ---------------------------------------------------
    # Dev-login routes are disabled unless explicitly enabled.  There is
    # no other way to establish a session in this application, so real
    # deployments sit behind an SSO proxy that calls the login endpoint.
    DEV_LOGIN_ENABLED: bool = (
        os.environ.get("DEV_LOGIN_ENABLED", "false").lower() == "true"
    )

    # -- Logging -----------------------------------------------------------
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")

    @classmethod
    def validate_production_secrets(cls, app_config: dict) -> None:
        """
        Verify that production is not running with development defaults.

        Args:
            app_config: The ``app.config`` dict after loading the
                        config class.

        Raises:
            RuntimeError: If any critical setting is missing or still
                          set to its insecure default value.
        """
        errors: list[str] = []

        if app_config.get("SECRET_KEY") == _DEFAULT_SECRET_KEY:
            errors.append(
                "SECRET_KEY is still the insecure default. "
                "Generate one with: python -c "
                '"import secrets; print(secrets.token_hex(32))"'
            )

        if app_config.get("DEV_LOGIN_ENABLED"):
            errors.append(
                "DEV_LOGIN_ENABLED must be false in production; it allows "
                "signing in as any user."
            )

        if str(app_config.get("SQLALCHEMY_DATABASE_URI", "")).startswith("sqlite"):
            errors.append(
                "DATABASE_URL points at SQLite. Production needs a server "
                "database that supports concurrent conditional updates."
            )

        if errors:
            combined = "\n  - ".join(errors)
            raise RuntimeError(f"Production configuration errors:\n  - {combined}")

        if app_config.get("LOG_LEVEL", "").upper() == "DEBUG":
            _logger.warning(
                "LOG_LEVEL=DEBUG is not recommended in production; "
                "SQL statements and request data may appear in logs."
            )


class DevelopmentConfig(BaseConfig):
    """Development environment: verbose logging, dev login on by default."""

    ENV_NAME: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "DEBUG")
    DEV_LOGIN_ENABLED: bool = (
        os.environ.get("DEV_LOGIN_ENABLED", "true").lower() == "true"
    )


class TestingConfig(BaseConfig):
    """
    Testing environment: in-memory SQLite unless TEST_DATABASE_URL is set.

    WTF_CSRF_ENABLED is disabled so API calls in tests don't need CSRF
    tokens. Dev login is enabled so tests can establish sessions.
    """

    ENV_NAME: str = "testing"
    TESTING: bool = True
    WTF_CSRF_ENABLED: bool = False
    SQLALCHEMY_DATABASE_URI: str = os.environ.get("TEST_DATABASE_URL", "sqlite://")
    LOG_LEVEL: str = "DEBUG"
    DEV_LOGIN_ENABLED: bool = True
    REQUISITION_NUMBER_PREFIX: str = "ORG"


class ProductionConfig(BaseConfig):
    """
    Production environment: strict settings, no debug output.

    The application factory calls ``validate_production_secrets()`` at
    startup and refuses to launch if critical values are missing.
    """

    ENV_NAME: str = "production"
    DEBUG: bool = False
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "WARNING")
    SESSION_COOKIE_SECURE: bool = True


# Lookup dict used by the application factory.
config_by_name: dict[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}
