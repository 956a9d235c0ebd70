"""SQLAlchemy implementation of the :class:`UserStore` collaborator."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, scoped_session
from werkzeug.security import check_password_hash

from coursehub.models.user import User
from coursehub.services._shared.errors import (
    DuplicateEmailError,
    InvalidUserError,
    ValidationFailedError,
)
from coursehub.services._shared.ports import UserRecord, UserStore
from coursehub.services._shared.ports.user_store import (
    UNSET_PASSWORD_HASH,
    normalize_email,
    validate_account_fields,
    validate_password_pair,
)


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    PostgreSQL reports the constraint name; SQLite reports the column, so the
    ``users.email`` spelling is accepted too.

    :param exc: The exception raised by SQLAlchemy during flush/commit.
    :param constraint_name: Constraint to match (e.g., ``'uq_users_email'``).
    :returns: True if the IntegrityError matches the given constraint.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    if constraint_name.lower() in message:
        return True
    return constraint_name == "uq_users_email" and "users.email" in message


def _to_record(user: User) -> UserRecord:
    return UserRecord(
        id=str(user.id),
        name=user.name,
        email=user.email,
        password_hash=user.password_hash,
        password_changed_at=user.password_changed_at,
    )


class SQLAlchemyUserStore(UserStore):
    """
    Persistence-only store for :class:`User`.

    It NEVER handles tokens or sessions; only DB-level user management.

    :param session: SQLAlchemy session (typically ``db.session``).
    """

    def __init__(self, session: Session | scoped_session) -> None:
        self.session = session

    # ---------------------------- Lookup helpers ----------------------------

    def _get(self, user_id: str) -> User | None:
        try:
            pk = int(user_id)
        except (TypeError, ValueError):
            return None
        return cast(User | None, self.session.get(User, pk))

    def _get_by_email(self, email: str) -> User | None:
        stmt = select(User).where(User.email == normalize_email(email))
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def find_by_email(self, email: str) -> UserRecord | None:
        user = self._get_by_email(email)
        return _to_record(user) if user else None

    def find_by_id(self, user_id: str) -> UserRecord | None:
        user = self._get(user_id)
        return _to_record(user) if user else None

    # ---------------------------- Writes ----------------------------

    def _commit(self) -> None:
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            if violates(exc, "uq_users_email"):
                raise DuplicateEmailError() from exc
            raise

    def create(
        self, *, name: str, email: str, password: str, password_confirm: str
    ) -> UserRecord:
        validate_account_fields(
            name=name,
            email=normalize_email(email or ""),
            password=password,
            password_confirm=password_confirm,
        )
        if self._get_by_email(email) is not None:
            raise DuplicateEmailError()
        try:
            user = User(name=name, email=email, password=password)
        except ValueError as exc:
            raise ValidationFailedError(str(exc)) from exc
        self.session.add(user)
        self._commit()
        return _to_record(user)

    def update_profile(
        self, user_id: str, *, name: str | None = None, email: str | None = None
    ) -> UserRecord:
        user = self._get(user_id)
        if user is None:
            raise InvalidUserError()
        try:
            if email:
                user.email = email
            if name:
                user.name = name
        except ValueError as exc:
            self.session.rollback()
            raise ValidationFailedError(str(exc)) from exc
        self._commit()
        return _to_record(user)

    def set_password(self, user_id: str, *, password: str, password_confirm: str) -> UserRecord:
        validate_password_pair(password, password_confirm)
        user = self._get(user_id)
        if user is None:
            raise InvalidUserError()
        user.password = password  # setter hashes and stamps password_changed_at
        self._commit()
        return _to_record(user)

    def verify_password(self, candidate: str, stored_hash: str) -> bool:
        if not stored_hash or stored_hash == UNSET_PASSWORD_HASH:
            return False
        return bool(check_password_hash(stored_hash, candidate))
