# coursehub/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from coursehub.services._shared.ports import TokenDomain
from coursehub.services.identity.dto import UserPublicOut

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email (normalized by the service).
    :type email: str | None
    :param password: Raw password (to be verified).
    :type password: str | None
    """

    email: str | None
    password: str | None


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Input DTO for token refresh.

    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    refresh_token: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Encoded access JWT.
    :param refresh_token: Encoded refresh JWT.
    :param access_expires_in: Access token lifetime in seconds.
    :param refresh_expires_in: Refresh token lifetime in seconds.
    """

    access_token: str
    refresh_token: str
    access_expires_in: int
    refresh_expires_in: int


@dataclass(frozen=True, slots=True)
class LoginOut:
    """
    Output DTO for a started session.

    :param tokens: Issued token pair.
    :param user: Sanitized user view (never the password hash).
    """

    tokens: TokenPairOut
    user: UserPublicOut


# ------------------------ Config DTO --------------------------------------- #


@dataclass(frozen=True, slots=True)
class AuthTokenConfig:
    """
    Token emission configuration.

    :param access: Access signing domain (≈5 minutes).
    :param refresh: Refresh signing domain (≈3 days).
    :param session_ttl: Session entry lifetime (7 days).
    """

    access: TokenDomain
    refresh: TokenDomain
    session_ttl: timedelta = timedelta(days=7)

    @property
    def session_ttl_seconds(self) -> int:
        return int(self.session_ttl.total_seconds())
