"""
coursehub.services._shared.ports
================================

Collection of *ports* (hexagonal interfaces) that the identity protocols
depend on.

Modules
-------
- :mod:`token_codec`:
    :class:`~.TokenCodec`, :class:`~.TokenDomain`, :class:`~.VerifiedToken`:
    signed, time-bound tokens per signing domain.

- :mod:`session_store`:
    :class:`~.SessionStore` : user id -> snapshot cache with expiry, the sole
    authority for refresh capability.

- :mod:`user_store`:
    :class:`~.UserStore` and :class:`~.UserRecord` : persistence and credential
    verification collaborator.

- :mod:`mailer`:
    :class:`~.Mailer` : activation e-mail delivery.

Design Notes
------------
Concrete adapters (Redis, SQLAlchemy, SMTP, PyJWT) live under
``coursehub.infra``; the in-memory doubles here back unit tests and the
``testing`` configuration.
"""

from __future__ import annotations

from .mailer import Mailer, RecordingMailer, SentActivation
from .session_store import InMemorySessionStore, SessionStore
from .token_codec import RESERVED_CLAIMS, TokenCodec, TokenDomain, VerifiedToken
from .user_store import InMemoryUserStore, UserRecord, UserStore

__all__ = [
    "TokenCodec",
    "TokenDomain",
    "VerifiedToken",
    "RESERVED_CLAIMS",
    "SessionStore",
    "InMemorySessionStore",
    "UserStore",
    "UserRecord",
    "InMemoryUserStore",
    "Mailer",
    "RecordingMailer",
    "SentActivation",
]
