"""
IdentityService
===============

Credential-change protocol for an authenticated user:

- Profile updates (name, email) with email uniqueness.
- Password change after verifying the current one.

Both refresh the live session snapshot so the next refresh call sees the new
state (a changed password makes older refresh tokens unusable).
"""

from __future__ import annotations

import logging

from coursehub.services._shared.base import BaseService, ServiceContext
from coursehub.services._shared.errors import (
    DuplicateEmailError,
    IncorrectPasswordError,
    InvalidUserError,
    MissingConfirmationError,
    MissingFieldsError,
)
from coursehub.services._shared.ports import SessionStore, UserRecord, UserStore
from coursehub.services._shared.ports.user_store import normalize_email
from coursehub.services.identity.dto import (
    PasswordChangeIn,
    ProfileUpdateIn,
    UserPublicOut,
)

log = logging.getLogger(__name__)


class IdentityService(BaseService):
    """
    Application service for profile and password changes.

    :param users: Persistence collaborator.
    :param sessions: Session cache whose snapshot is refreshed after writes.
    :param session_ttl_seconds: TTL applied when the snapshot is rewritten.
    """

    def __init__(
        self,
        *,
        users: UserStore,
        sessions: SessionStore,
        session_ttl_seconds: int,
        ctx: ServiceContext | None = None,
    ) -> None:
        super().__init__(ctx=ctx)
        self.users = users
        self.sessions = sessions
        self.session_ttl_seconds = session_ttl_seconds

    # --------------------------------------------------------------------- #
    # Update profile
    # --------------------------------------------------------------------- #

    def update_profile(self, user_id: str, dto: ProfileUpdateIn) -> UserPublicOut:
        """
        Update name and/or email.

        Absent fields are left untouched; both absent is a no-op that still
        returns the current record.

        :param user_id: Authenticated user id.
        :type user_id: str
        :param dto: New values.
        :type dto: ProfileUpdateIn
        :returns: Updated user DTO.
        :rtype: UserPublicOut
        :raises DuplicateEmailError: When another account owns the email.
        :raises InvalidUserError: When the user no longer exists.
        """
        with self.collaborator("user_store"):
            current = self.users.find_by_id(user_id)
            if current is None:
                raise InvalidUserError()

            email = normalize_email(dto.email) if dto.email else None
            if email and email != current.email:
                owner = self.users.find_by_email(email)
                if owner is not None and owner.id != current.id:
                    raise DuplicateEmailError()

            if email or dto.name:
                user = self.users.update_profile(user_id, name=dto.name, email=email)
            else:
                user = current

        self._refresh_snapshot(user)
        return UserPublicOut.from_record(user)

    # --------------------------------------------------------------------- #
    # Password management
    # --------------------------------------------------------------------- #

    def update_password(self, user_id: str, dto: PasswordChangeIn) -> UserPublicOut:
        """
        Change a user's password after verifying the old one.

        :raises MissingFieldsError: Old or new password absent.
        :raises MissingConfirmationError: Confirmation absent.
        :raises InvalidUserError: Stored hash unset/corrupt or user gone.
        :raises IncorrectPasswordError: Old password does not verify.
        :raises ValidationFailedError: New password and confirmation differ.
        """
        if not dto.old_password or not dto.new_password:
            raise MissingFieldsError()
        if not dto.confirm_password:
            raise MissingConfirmationError()

        with self.collaborator("user_store"):
            current = self.users.find_by_id(user_id)
            if current is None or not current.has_usable_password:
                raise InvalidUserError()
            if not self.users.verify_password(dto.old_password, current.password_hash):
                log.info("identity.password.rejected", extra={"user_id": user_id})
                raise IncorrectPasswordError()

            user = self.users.set_password(
                user_id,
                password=dto.new_password,
                password_confirm=dto.confirm_password,
            )

        self._refresh_snapshot(user)
        log.info("identity.password.changed", extra={"user_id": user_id})
        return UserPublicOut.from_record(user)

    # --------------------------------------------------------------------- #
    # Session snapshot
    # --------------------------------------------------------------------- #

    def _refresh_snapshot(self, user: UserRecord) -> None:
        # Only a live session is refreshed; a logged-out user stays logged out.
        # Read and write are two store calls: a logout landing between them is
        # undone by the write (last write wins, as with concurrent refreshes).
        with self.collaborator("session_store"):
            if self.sessions.get(user.id) is None:
                return
            self.sessions.set(user.id, user.to_snapshot(), self.session_ttl_seconds)
