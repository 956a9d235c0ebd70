# coursehub/infra/jwt/jwt_token_codec.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import jwt

from coursehub.services._shared.errors import (
    SigningError,
    TokenExpiredError,
    TokenInvalidError,
)
from coursehub.services._shared.ports import (
    RESERVED_CLAIMS,
    TokenCodec,
    TokenDomain,
    VerifiedToken,
)

log = logging.getLogger(__name__)


@dataclass(slots=True)
class JWTTokenCodec(TokenCodec):
    """
    PyJWT (HS256) adapter for :class:`TokenCodec`.

    Each domain signs with its own secret and stamps its name into the
    ``type`` claim, so a token minted for one domain never verifies in
    another even if two secrets were accidentally shared.

    .. note::
       Access tokens carry ``sub`` + ``type="access"`` which is exactly what
       Flask-JWT-Extended expects, so routes can protect themselves with
       ``verify_jwt_in_request`` as long as ``JWT_SECRET_KEY`` is the access
       secret.
    """

    algorithm: str = "HS256"

    def issue(self, payload: dict[str, Any], domain: TokenDomain) -> str:
        if not domain.secret:
            raise SigningError(f"No secret configured for {domain.name} tokens.")
        clash = RESERVED_CLAIMS.intersection(payload)
        if clash:
            raise ValueError(f"Payload uses reserved claims: {sorted(clash)}")

        now = int(datetime.now(UTC).timestamp())
        claims: dict[str, Any] = {
            **payload,
            "type": domain.name,
            "iat": now,
            "nbf": now,
            "exp": now + int(domain.expires.total_seconds()),
        }
        return jwt.encode(claims, domain.secret, algorithm=self.algorithm)

    def verify(self, token: str, domain: TokenDomain) -> VerifiedToken:
        if not domain.secret:
            raise SigningError(f"No secret configured for {domain.name} tokens.")
        if not token:
            raise TokenInvalidError()
        try:
            claims: dict[str, Any] = jwt.decode(
                token,
                domain.secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat", "type"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpiredError() from exc
        except jwt.InvalidTokenError as exc:
            log.info("token.rejected", extra={"domain": domain.name, "reason": type(exc).__name__})
            raise TokenInvalidError() from exc

        if claims.get("type") != domain.name:
            log.info("token.rejected", extra={"domain": domain.name, "reason": "domain_mismatch"})
            raise TokenInvalidError()

        return VerifiedToken(
            payload={k: v for k, v in claims.items() if k not in RESERVED_CLAIMS},
            issued_at=datetime.fromtimestamp(int(claims["iat"]), tz=UTC),
            expires_at=datetime.fromtimestamp(int(claims["exp"]), tz=UTC),
        )
