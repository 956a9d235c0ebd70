"""Global Flask extension instances and collaborator wiring."""

from __future__ import annotations

import atexit
import logging
from collections.abc import Mapping
from typing import Any, cast

from flask import Flask, current_app
from flask_jwt_extended import JWTManager
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import MetaData

from coursehub.services._shared.errors import SigningError
from coursehub.services._shared.ports import (
    InMemorySessionStore,
    Mailer,
    RecordingMailer,
    SessionStore,
    TokenDomain,
)

log = logging.getLogger(__name__)

# Global naming convention for all constraints
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

# Global singletons (import-safe)
db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
jwt = JWTManager()

ACTIVATION = "activation"
ACCESS = "access"
REFRESH = "refresh"


def token_domains(config: Mapping[str, Any]) -> dict[str, TokenDomain]:
    """
    Build the three signing domains from configuration.

    :raises SigningError: When a secret is empty or two domains share one.
    """
    domains = {
        ACTIVATION: TokenDomain(
            ACTIVATION, config["ACTIVATION_TOKEN_SECRET"], config["ACTIVATION_TOKEN_EXPIRES"]
        ),
        ACCESS: TokenDomain(ACCESS, config["ACCESS_TOKEN_SECRET"], config["ACCESS_TOKEN_EXPIRES"]),
        REFRESH: TokenDomain(
            REFRESH, config["REFRESH_TOKEN_SECRET"], config["REFRESH_TOKEN_EXPIRES"]
        ),
    }
    secrets = [d.secret for d in domains.values()]
    if not all(secrets):
        raise SigningError("Every token domain needs a secret.")
    if len(set(secrets)) != len(secrets):
        raise SigningError("Token domains must not share secrets.")
    return domains


def _build_session_store(app: Flask) -> SessionStore:
    backend = str(app.config.get("SESSION_BACKEND", "redis")).lower()
    if backend == "memory":
        return InMemorySessionStore()

    from coursehub.infra.redis.redis_session_store import RedisSessionStore

    return RedisSessionStore.connect(
        app.config["REDIS_URL"],
        socket_timeout=float(app.config.get("REDIS_SOCKET_TIMEOUT", 2.0)),
    )


def _build_mailer(app: Flask) -> Mailer:
    backend = str(app.config.get("MAIL_BACKEND", "smtp")).lower()
    if backend == "memory":
        return RecordingMailer()

    from coursehub.infra.mail.smtp_mailer import SMTPMailer

    expires = app.config["ACTIVATION_TOKEN_EXPIRES"]
    return SMTPMailer(
        host=app.config["SMTP_HOST"],
        port=int(app.config["SMTP_PORT"]),
        sender=app.config["SMTP_MAIL"],
        username=app.config["SMTP_MAIL"],
        password=app.config.get("SMTP_PASSWORD"),
        use_tls=bool(app.config.get("SMTP_USE_TLS", True)),
        timeout=float(app.config.get("EMAIL_DELIVERY_TIMEOUT", 10)),
        sender_name=app.config.get("MAIL_SENDER_NAME", "CourseHub"),
        expires_in=f"{int(expires.total_seconds() // 60)} minutes",
    )


def _register_jwt_callbacks() -> None:
    """Render flask-jwt-extended failures as problem+json 401s."""
    from coursehub.core.errors import Unauthorized, problem_response

    def _unauthorized(message: str, code: str):
        return problem_response(Unauthorized(message, code=code).to_problem())

    @jwt.expired_token_loader
    def _expired(_header: dict, _payload: dict):
        return _unauthorized("Access token has expired.", "token_expired")

    @jwt.invalid_token_loader
    def _invalid(_reason: str):
        return _unauthorized("Access token is invalid.", "token_invalid")

    @jwt.unauthorized_loader
    def _missing(_reason: str):
        return _unauthorized("Please log in to access this resource.", "unauthorized")


def init_app(app: Flask) -> None:
    """Initialize SQLAlchemy, JWT route protection and the collaborators.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances. Collaborators are
        stored in ``app.extensions`` under ``session_store``, ``mailer`` and
        ``token_domains``. The session store is pinged on startup and closed
        at interpreter exit.
    """
    domains = token_domains(app.config)
    # flask-jwt-extended must verify with the access secret the codec signs with
    app.config["JWT_SECRET_KEY"] = domains[ACCESS].secret
    app.config["JWT_ACCESS_TOKEN_EXPIRES"] = domains[ACCESS].expires
    app.config["JWT_REFRESH_TOKEN_EXPIRES"] = domains[REFRESH].expires
    app.extensions["token_domains"] = domains

    db.init_app(app)

    # Ensure models are imported so metadata is complete
    from coursehub import models as _models  # noqa: F401

    jwt.init_app(app)
    _register_jwt_callbacks()

    store = _build_session_store(app)
    app.extensions["session_store"] = store
    atexit.register(store.close)
    app.extensions["mailer"] = _build_mailer(app)
    log.info("extensions.ready", extra={"outcome": app.config.get("SESSION_BACKEND")})


def get_session_store() -> SessionStore:
    """Return the session store bound to the current application."""
    store = current_app.extensions.get("session_store")
    if store is None:
        raise RuntimeError("Session store is not initialized. Call init_app() first.")
    return cast(SessionStore, store)


def get_mailer() -> Mailer:
    return cast(Mailer, current_app.extensions["mailer"])


def get_token_domains() -> dict[str, TokenDomain]:
    return cast(dict[str, TokenDomain], current_app.extensions["token_domains"])


__all__ = [
    "db",
    "jwt",
    "init_app",
    "token_domains",
    "get_session_store",
    "get_mailer",
    "get_token_domains",
]
