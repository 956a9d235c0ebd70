"""Application settings with environment-based simple classes."""

from __future__ import annotations

import os
from collections.abc import Mapping
from datetime import timedelta
from typing import Final

from dotenv import load_dotenv

# Public selector env var (keep neutral name to avoid collisions)
ENV_VAR: Final[str] = "APP_ENV"  # 'development' | 'testing' | 'production'

# Load .env in development (no-op when missing)
load_dotenv()


def env_bool(name: str, default: bool = False) -> bool:
    """Parse a boolean flag from an environment variable.

    Parameters
    ----------
    name: str
        Environment variable to inspect.
    default: bool, optional
        Value returned when the variable is unset. Defaults to ``False``.

    Returns
    -------
    bool
        ``True`` if the value resembles ``{"1", "true", "yes", "y", "on"}``
        ignoring case; otherwise ``False`` or ``default`` when missing.
    """
    val = os.getenv(name)
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "y", "on"}


def env_minutes(name: str, default: float) -> timedelta:
    """Read a duration expressed in minutes."""
    raw = os.getenv(name)
    return timedelta(minutes=float(raw) if raw else default)


class BaseConfig:
    """Base configuration shared across environments.

    Attributes
    ----------
    API_BASE_PREFIX: str
        Root path for registering API blueprints.
    ACTIVATION_TOKEN_SECRET / ACTIVATION_TOKEN_EXPIRES:
        Signing domain of registration activation tokens.
    ACCESS_TOKEN_SECRET / ACCESS_TOKEN_EXPIRES:
        Signing domain of access tokens. Mirrored into ``JWT_SECRET_KEY`` so
        ``flask-jwt-extended`` can guard routes with the same key.
    REFRESH_TOKEN_SECRET / REFRESH_TOKEN_EXPIRES:
        Signing domain of refresh tokens.
    SESSION_TTL: timedelta
        Lifetime of a session entry, reset on login/refresh/profile writes.
    SESSION_BACKEND: str
        ``"redis"`` or ``"memory"``.
    REDIS_URL / REDIS_SOCKET_TIMEOUT:
        Session cache location and per-call latency bound (seconds).
    MAIL_BACKEND: str
        ``"smtp"`` or ``"memory"``.
    EMAIL_DELIVERY_TIMEOUT: float
        Seconds registration waits for the mailer.
    REQUIRE_EMAIL_DELIVERY: bool
        Fail registration when the activation e-mail cannot be sent.
    SQLALCHEMY_DATABASE_URI: str
        Database connection string consumed by SQLAlchemy.
    LOG_LEVEL: str
        Root logging verbosity (``INFO`` by default).
    CORS_ORIGINS: str
        Comma-separated list of allowed origins for CORS.

    Notes
    -----
    Values are primarily sourced from environment variables, enabling
    configuration without code changes.
    """

    API_BASE_PREFIX = "/api"

    # Secrets / security
    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    ACTIVATION_TOKEN_SECRET = os.getenv("ACTIVATION_TOKEN_SECRET", "CHANGE_ME_ACTIVATION")
    ACTIVATION_TOKEN_EXPIRES = env_minutes("ACTIVATION_TOKEN_EXPIRES_MINUTES", 120)
    ACCESS_TOKEN_SECRET = os.getenv("ACCESS_TOKEN_SECRET", "CHANGE_ME_ACCESS")
    ACCESS_TOKEN_EXPIRES = env_minutes("ACCESS_TOKEN_EXPIRES_MINUTES", 5)
    REFRESH_TOKEN_SECRET = os.getenv("REFRESH_TOKEN_SECRET", "CHANGE_ME_REFRESH")
    REFRESH_TOKEN_EXPIRES = env_minutes("REFRESH_TOKEN_EXPIRES_MINUTES", 3 * 24 * 60)
    SESSION_TTL = timedelta(days=7)

    # flask-jwt-extended (route protection only; issuance goes through the codec)
    JWT_SECRET_KEY = ACCESS_TOKEN_SECRET
    JWT_ALGORITHM = "HS256"
    JWT_TOKEN_LOCATION = ["headers", "cookies"]
    JWT_ACCESS_COOKIE_NAME = "access_token"
    JWT_REFRESH_COOKIE_NAME = "refresh_token"
    JWT_COOKIE_SECURE = env_bool("JWT_COOKIE_SECURE", True)
    JWT_COOKIE_SAMESITE = "Lax"
    JWT_COOKIE_CSRF_PROTECT = False

    # Session cache
    SESSION_BACKEND = os.getenv("SESSION_BACKEND", "redis")
    REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    REDIS_SOCKET_TIMEOUT = float(os.getenv("REDIS_SOCKET_TIMEOUT", "2.0"))

    # Mail
    MAIL_BACKEND = os.getenv("MAIL_BACKEND", "smtp")
    SMTP_HOST = os.getenv("SMTP_HOST", "localhost")
    SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
    SMTP_MAIL = os.getenv("SMTP_MAIL", "no-reply@coursehub.local")
    SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
    SMTP_USE_TLS = env_bool("SMTP_USE_TLS", True)
    MAIL_SENDER_NAME = os.getenv("MAIL_SENDER_NAME", "CourseHub")
    EMAIL_DELIVERY_TIMEOUT = float(os.getenv("EMAIL_DELIVERY_TIMEOUT", "10"))
    REQUIRE_EMAIL_DELIVERY = env_bool("REQUIRE_EMAIL_DELIVERY", False)

    # DB
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./dev.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO", False)

    # Flask & JSON
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    # Logging & CORS
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000")

    DEBUG = False
    TESTING = False


class DevelopmentConfig(BaseConfig):
    """Configuration tailored for local development."""

    DEBUG = env_bool("FLASK_DEBUG", True)
    JWT_COOKIE_SECURE = env_bool("JWT_COOKIE_SECURE", False)
    CORS_MAX_AGE = 600  # 10 minutes


class TestingConfig(BaseConfig):
    """Configuration for automated test runs.

    Notes
    -----
    - Uses an in-memory SQLite database unless ``TEST_DATABASE_URL`` is set.
    - Swaps Redis and SMTP for in-process doubles so tests need no services.
    """

    TESTING = True
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    SESSION_BACKEND = "memory"
    MAIL_BACKEND = "memory"
    JWT_COOKIE_SECURE = False
    EMAIL_DELIVERY_TIMEOUT = 2.0


class ProductionConfig(BaseConfig):
    """Configuration defaults for production deployments."""

    DEBUG = False
    SQLALCHEMY_ECHO = False
    PROPAGATE_EXCEPTIONS = False


# Map names -> classes (simple, explicit)
CONFIG_MAP: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Return the configuration class inferred from ``APP_ENV``.

    Falls back to :class:`DevelopmentConfig` when ``APP_ENV`` is unset or
    unknown.
    """
    name = os.getenv(ENV_VAR, "development").strip().lower()
    return CONFIG_MAP.get(name, DevelopmentConfig)
