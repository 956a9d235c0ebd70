"""Builders wiring the protocol services to in-memory collaborators."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from coursehub.infra.jwt.jwt_token_codec import JWTTokenCodec
from coursehub.services import AuthService, AuthTokenConfig, IdentityService, RegistrationService
from coursehub.services._shared.ports import (
    InMemorySessionStore,
    InMemoryUserStore,
    Mailer,
    RecordingMailer,
    SessionStore,
    TokenDomain,
)

ACTIVATION = TokenDomain("activation", "test-activation-secret", timedelta(minutes=120))
ACCESS = TokenDomain("access", "test-access-secret", timedelta(minutes=5))
REFRESH = TokenDomain("refresh", "test-refresh-secret", timedelta(days=3))
SESSION_TTL = timedelta(days=7)


@dataclass
class Wiring:
    """Services sharing one set of collaborators."""

    users: InMemoryUserStore
    sessions: SessionStore
    mailer: Mailer
    codec: JWTTokenCodec
    auth: AuthService
    registration: RegistrationService
    identity: IdentityService


def build(
    *,
    mailer: Mailer | None = None,
    sessions: SessionStore | None = None,
    delivery_timeout: float = 2.0,
    require_delivery: bool = False,
) -> Wiring:
    users = InMemoryUserStore()
    sessions = sessions if sessions is not None else InMemorySessionStore()
    codec = JWTTokenCodec()
    mailer = mailer if mailer is not None else RecordingMailer()
    auth = AuthService(
        users=users,
        sessions=sessions,
        codec=codec,
        token_cfg=AuthTokenConfig(access=ACCESS, refresh=REFRESH, session_ttl=SESSION_TTL),
    )
    registration = RegistrationService(
        users=users,
        codec=codec,
        mailer=mailer,
        activation=ACTIVATION,
        auth=auth,
        delivery_timeout=delivery_timeout,
        require_delivery=require_delivery,
    )
    identity = IdentityService(
        users=users,
        sessions=sessions,
        session_ttl_seconds=int(SESSION_TTL.total_seconds()),
    )
    return Wiring(users, sessions, mailer, codec, auth, registration, identity)
