# coursehub/services/auth/service.py
from __future__ import annotations

import logging

from coursehub.services._shared.base import BaseService, ServiceContext
from coursehub.services._shared.errors import (
    InvalidCredentialsError,
    MissingCredentialsError,
    PasswordChangedSinceIssuanceError,
    SessionNotFoundError,
    TokenInvalidError,
)
from coursehub.services._shared.ports import (
    SessionStore,
    TokenCodec,
    UserRecord,
    UserStore,
)
from coursehub.services._shared.ports.user_store import normalize_email
from coursehub.services.auth.dto import (
    AuthTokenConfig,
    LoginIn,
    LoginOut,
    RefreshIn,
    TokenPairOut,
)
from coursehub.services.identity.dto import UserPublicOut

log = logging.getLogger(__name__)


class AuthService(BaseService):
    """
    Session lifecycle service (login / refresh / logout).

    Tokens are issued and verified through a pluggable :class:`TokenCodec`.
    The :class:`SessionStore` entry keyed by user id is the only thing that
    keeps a refresh token exchangeable: logout deletes it and its TTL bounds
    it, whatever the refresh token's own expiry says. No per-token state is
    kept.
    """

    def __init__(
        self,
        *,
        users: UserStore,
        sessions: SessionStore,
        codec: TokenCodec,
        token_cfg: AuthTokenConfig,
        ctx: ServiceContext | None = None,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param users: Persistence / credential verification collaborator.
        :param sessions: Session cache (user id -> snapshot).
        :param codec: Token signing adapter.
        :param token_cfg: Access/refresh domains and session TTL.
        """
        super().__init__(ctx=ctx)
        self.users = users
        self.sessions = sessions
        self.codec = codec
        self.cfg = token_cfg

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> LoginOut:
        """
        Authenticate credentials and start a session.

        Unknown email and wrong password raise the same error with the same
        message.

        :param dto: Login input.
        :returns: Token pair plus sanitized user.
        :raises MissingCredentialsError: If email or password is absent.
        :raises InvalidCredentialsError: If credentials do not match.
        """
        email = normalize_email(dto.email or "")
        if not email or not dto.password:
            raise MissingCredentialsError()

        with self.collaborator("user_store"):
            user = self.users.find_by_email(email)
            matches = user is not None and self.users.verify_password(
                dto.password, user.password_hash
            )
        if user is None or not matches:
            log.info("auth.login.rejected")
            raise InvalidCredentialsError()

        tokens = self.start_session(user)
        log.info("auth.login.succeeded", extra={"user_id": user.id})
        return LoginOut(tokens=tokens, user=UserPublicOut.from_record(user))

    def start_session(self, user: UserRecord) -> TokenPairOut:
        """
        Issue a token pair for ``user`` and (re)write its session entry.

        Shared by login and account activation.
        """
        tokens = self._issue_pair(user.id)
        self.write_session(user)
        return tokens

    def write_session(self, user: UserRecord) -> None:
        """Replace the snapshot for ``user`` and reset its TTL."""
        with self.collaborator("session_store"):
            self.sessions.set(user.id, user.to_snapshot(), self.cfg.session_ttl_seconds)

    # ------------------------------------------------------------------ #
    # Refresh
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        """
        Exchange a refresh token for a fresh access/refresh pair.

        Security
        --------
        - Requires a live session entry for the token's user; absence means
          logout or TTL expiry and is reported as :class:`SessionNotFoundError`.
        - Rejects tokens minted before the user's last password change.
        - Rotation is unconditional; a stale refresh token is not blacklisted,
          so concurrent refreshes with the same token all succeed and the last
          snapshot write wins.

        :raises TokenExpiredError: Refresh token past its expiry.
        :raises TokenInvalidError: Bad signature, wrong domain or no subject.
        :raises SessionNotFoundError: No live (or no readable) session entry.
        :raises PasswordChangedSinceIssuanceError: Password changed after ``iat``.
        """
        verified = self.codec.verify(dto.refresh_token, self.cfg.refresh)
        user_id = verified.payload.get("sub")
        if not isinstance(user_id, str) or not user_id:
            raise TokenInvalidError()

        with self.collaborator("session_store"):
            snapshot = self.sessions.get(user_id)
        if snapshot is None:
            log.info("auth.refresh.rejected", extra={"user_id": user_id, "outcome": "no_session"})
            raise SessionNotFoundError()

        try:
            user = UserRecord.from_snapshot(snapshot)
            if user.id != user_id:
                raise ValueError("snapshot belongs to another user")
        except ValueError as exc:
            # An unreadable entry cannot vouch for the token.
            log.warning(
                "auth.refresh.rejected",
                extra={"user_id": user_id, "outcome": "corrupt_session"},
            )
            raise SessionNotFoundError() from exc

        if user.changed_password_after(verified.issued_at):
            log.info(
                "auth.refresh.rejected",
                extra={"user_id": user_id, "outcome": "password_changed"},
            )
            raise PasswordChangedSinceIssuanceError()

        tokens = self._issue_pair(user.id)
        with self.collaborator("session_store"):
            self.sessions.set(user.id, snapshot, self.cfg.session_ttl_seconds)
        log.info("auth.refresh.succeeded", extra={"user_id": user.id})
        return tokens

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, user_id: str) -> bool:
        """
        Revoke refresh capability for ``user_id`` by dropping its session.

        Clearing the token values on the client is the transport layer's job.

        :returns: True if a session entry existed.
        """
        with self.collaborator("session_store"):
            removed = self.sessions.delete(str(user_id))
        log.info(
            "auth.logout",
            extra={"user_id": user_id, "outcome": "removed" if removed else "absent"},
        )
        return removed

    # ------------------------------------------------------------------ #
    # Utilities
    # ------------------------------------------------------------------ #

    def _issue_pair(self, user_id: str) -> TokenPairOut:
        payload = {"sub": str(user_id)}
        return TokenPairOut(
            access_token=self.codec.issue(payload, self.cfg.access),
            refresh_token=self.codec.issue(payload, self.cfg.refresh),
            access_expires_in=int(self.cfg.access.expires.total_seconds()),
            refresh_expires_in=int(self.cfg.refresh.expires.total_seconds()),
        )
