"""Shared API helpers: auth guard, response helpers and service wiring."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar

from flask import Response, current_app, g, jsonify, request
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from coursehub.core.extensions import (
    ACCESS,
    ACTIVATION,
    REFRESH,
    db,
    get_mailer,
    get_session_store,
    get_token_domains,
)
from coursehub.infra.jwt.jwt_token_codec import JWTTokenCodec
from coursehub.infra.sqlalchemy.user_store import SQLAlchemyUserStore
from coursehub.services import (
    AuthService,
    AuthTokenConfig,
    IdentityService,
    RegistrationService,
    ServiceContext,
)

F = TypeVar("F", bound=Callable[..., Any])


def require_auth(func: F) -> F:
    """Ensure the request carries a valid access token (header or cookie)."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        verify_jwt_in_request(optional=False)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def current_user_id() -> str:
    """Return the subject of the verified access token."""

    return str(get_jwt_identity())


def bearer_token() -> str | None:
    """Return the token from an ``Authorization: Bearer`` header, if any."""

    header = request.headers.get("Authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() != "bearer" or not value.strip():
        return None
    return value.strip()


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            current_app.logger.debug(
                "request.elapsed",
                extra={
                    "endpoint": getattr(request, "endpoint", None),
                    "elapsed_ms": round(elapsed_ms, 2),
                },
            )

    return wrapper  # type: ignore[return-value]


# --------------------------------------------------------------------------- #
# Service wiring
# --------------------------------------------------------------------------- #


def _context(actor_id: str | None = None) -> ServiceContext:
    return ServiceContext(actor_id=actor_id, request_id=getattr(g, "request_id", None))


def auth_service(actor_id: str | None = None) -> AuthService:
    """Build an :class:`AuthService` bound to the current request."""

    domains = get_token_domains()
    cfg = AuthTokenConfig(
        access=domains[ACCESS],
        refresh=domains[REFRESH],
        session_ttl=current_app.config["SESSION_TTL"],
    )
    return AuthService(
        users=SQLAlchemyUserStore(db.session),
        sessions=get_session_store(),
        codec=JWTTokenCodec(),
        token_cfg=cfg,
        ctx=_context(actor_id),
    )


def registration_service() -> RegistrationService:
    """Build a :class:`RegistrationService` bound to the current request."""

    auth = auth_service()
    return RegistrationService(
        users=auth.users,
        codec=auth.codec,
        mailer=get_mailer(),
        activation=get_token_domains()[ACTIVATION],
        auth=auth,
        delivery_timeout=float(current_app.config.get("EMAIL_DELIVERY_TIMEOUT", 10)),
        require_delivery=bool(current_app.config.get("REQUIRE_EMAIL_DELIVERY", False)),
        ctx=auth.ctx,
    )


def identity_service(actor_id: str | None = None) -> IdentityService:
    """Build an :class:`IdentityService` bound to the current request."""

    ttl = current_app.config["SESSION_TTL"]
    return IdentityService(
        users=SQLAlchemyUserStore(db.session),
        sessions=get_session_store(),
        session_ttl_seconds=int(ttl.total_seconds()),
        ctx=_context(actor_id),
    )
