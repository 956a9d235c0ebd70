from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Protocol

# Claims managed by the codec itself; callers may not set them in a payload.
RESERVED_CLAIMS: frozenset[str] = frozenset({"iat", "nbf", "exp", "type"})


@dataclass(frozen=True, slots=True)
class TokenDomain:
    """
    One signing domain (activation, access or refresh).

    :ivar name: Domain tag embedded as the ``type`` claim and checked on verify.
    :ivar secret: HMAC secret private to this domain.
    :ivar expires: Token lifetime.
    """

    name: str
    secret: str = field(repr=False)
    expires: timedelta


@dataclass(frozen=True, slots=True)
class VerifiedToken:
    """
    Result of a successful verification.

    :ivar payload: Caller payload exactly as issued (reserved claims removed).
    :ivar issued_at: ``iat`` instant (UTC).
    :ivar expires_at: ``exp`` instant (UTC).
    """

    payload: dict[str, Any]
    issued_at: datetime
    expires_at: datetime


class TokenCodec(Protocol):
    """Port for creating and verifying signed, time-bound tokens."""

    def issue(self, payload: dict[str, Any], domain: TokenDomain) -> str:
        """
        Sign ``payload`` under ``domain``.

        :raises SigningError: When the domain has no secret.
        """

    def verify(self, token: str, domain: TokenDomain) -> VerifiedToken:
        """
        Verify signature, domain tag and expiry.

        :raises TokenExpiredError: When past ``exp``.
        :raises TokenInvalidError: On bad signature, structure or domain.
        """
