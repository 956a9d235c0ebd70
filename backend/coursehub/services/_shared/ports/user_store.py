from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Any, Protocol

from werkzeug.security import check_password_hash, generate_password_hash

from coursehub.services._shared.errors import (
    DuplicateEmailError,
    InvalidUserError,
    ValidationFailedError,
)

# Placeholder some legacy rows carry instead of a real hash.
UNSET_PASSWORD_HASH = "undefined"


@dataclass(frozen=True, slots=True)
class UserRecord:
    """
    Persistent user as seen by the protocol layer.

    :ivar id: Opaque identifier (stringified primary key).
    :ivar name: Display name.
    :ivar email: Normalized email (lowercase, trimmed).
    :ivar password_hash: Stored hash; never serialized into sessions.
    :ivar password_changed_at: Last password change instant, ``None`` if never.
    """

    id: str
    name: str
    email: str
    password_hash: str = field(default="", repr=False)
    password_changed_at: datetime | None = None

    @property
    def has_usable_password(self) -> bool:
        return bool(self.password_hash) and self.password_hash != UNSET_PASSWORD_HASH

    def changed_password_after(self, issued_at: datetime) -> bool:
        """
        Whether the password changed after a token issued at ``issued_at``.

        Both instants are compared at whole-second resolution, the resolution
        of the JWT ``iat`` claim.
        """
        if self.password_changed_at is None:
            return False
        changed_ts = int(_as_utc(self.password_changed_at).timestamp())
        return changed_ts > int(_as_utc(issued_at).timestamp())

    def to_snapshot(self) -> dict[str, Any]:
        """Serialize for the session store (no hash, no plaintext)."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "password_changed_at": (
                _as_utc(self.password_changed_at).isoformat()
                if self.password_changed_at
                else None
            ),
        }

    @classmethod
    def from_snapshot(cls, data: Any) -> UserRecord:
        """
        Rebuild a record from a session snapshot.

        :raises ValueError: When the snapshot is not a mapping, has no ``id``
            or carries an unreadable ``password_changed_at``.
        """
        if not isinstance(data, dict) or not data.get("id"):
            raise ValueError("malformed session snapshot")
        raw_changed = data.get("password_changed_at")
        if raw_changed is not None and not isinstance(raw_changed, str):
            raise ValueError("malformed password_changed_at")
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            email=str(data.get("email", "")),
            password_changed_at=datetime.fromisoformat(raw_changed) if raw_changed else None,
        )


def _as_utc(dt: datetime) -> datetime:
    # Naive values coming back from SQLite are UTC.
    return dt.replace(tzinfo=UTC) if dt.tzinfo is None else dt


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_account_fields(*, name: str, email: str, password: str, password_confirm: str) -> None:
    """
    Validation shared by every :class:`UserStore` adapter on create.

    :raises ValidationFailedError: When a field is missing or passwords differ.
    """
    if not name or not name.strip():
        raise ValidationFailedError("Please tell us your name.")
    if not email or "@" not in email or "." not in email.split("@")[-1]:
        raise ValidationFailedError("Please provide a valid email.")
    validate_password_pair(password, password_confirm)


def validate_password_pair(password: str, password_confirm: str) -> None:
    if not password:
        raise ValidationFailedError("Please provide a password.")
    if password != password_confirm:
        raise ValidationFailedError("Passwords are not the same.")


class UserStore(Protocol):
    """
    Persistence collaborator for user records.

    Password hashing, hash comparison and the password-change instant are the
    store's responsibility; the protocol layer only sees :class:`UserRecord`.
    """

    def find_by_email(self, email: str) -> UserRecord | None: ...

    def find_by_id(self, user_id: str) -> UserRecord | None: ...

    def create(
        self, *, name: str, email: str, password: str, password_confirm: str
    ) -> UserRecord:
        """
        Validate, hash and persist a new user.

        :raises DuplicateEmailError: When the email is taken.
        :raises ValidationFailedError: When fields are invalid.
        """

    def update_profile(
        self, user_id: str, *, name: str | None = None, email: str | None = None
    ) -> UserRecord:
        """Persist non-secret field changes without the full validation pipeline."""

    def set_password(self, user_id: str, *, password: str, password_confirm: str) -> UserRecord:
        """Re-hash, save and stamp ``password_changed_at``."""

    def verify_password(self, candidate: str, stored_hash: str) -> bool: ...


class InMemoryUserStore(UserStore):
    """Dictionary-backed user store used in unit tests."""

    def __init__(self) -> None:
        self._by_id: dict[str, UserRecord] = {}
        self._seq = 0
        self._lock = threading.Lock()

    def _email_taken(self, email: str, *, exclude_id: str | None = None) -> bool:
        return any(u.email == email and u.id != exclude_id for u in self._by_id.values())

    def find_by_email(self, email: str) -> UserRecord | None:
        norm = normalize_email(email)
        return next((u for u in self._by_id.values() if u.email == norm), None)

    def find_by_id(self, user_id: str) -> UserRecord | None:
        return self._by_id.get(str(user_id))

    def create(
        self, *, name: str, email: str, password: str, password_confirm: str
    ) -> UserRecord:
        norm = normalize_email(email or "")
        validate_account_fields(
            name=name, email=norm, password=password, password_confirm=password_confirm
        )
        with self._lock:
            if self._email_taken(norm):
                raise DuplicateEmailError()
            self._seq += 1
            user = UserRecord(
                id=str(self._seq),
                name=name.strip(),
                email=norm,
                password_hash=generate_password_hash(password),
            )
            self._by_id[user.id] = user
            return user

    def update_profile(
        self, user_id: str, *, name: str | None = None, email: str | None = None
    ) -> UserRecord:
        with self._lock:
            user = self._by_id.get(str(user_id))
            if user is None:
                raise InvalidUserError()
            changes: dict[str, Any] = {}
            if email:
                norm = normalize_email(email)
                if self._email_taken(norm, exclude_id=user.id):
                    raise DuplicateEmailError()
                changes["email"] = norm
            if name:
                changes["name"] = name
            user = replace(user, **changes)
            self._by_id[user.id] = user
            return user

    def set_password(self, user_id: str, *, password: str, password_confirm: str) -> UserRecord:
        validate_password_pair(password, password_confirm)
        with self._lock:
            user = self._by_id.get(str(user_id))
            if user is None:
                raise InvalidUserError()
            user = replace(
                user,
                password_hash=generate_password_hash(password),
                password_changed_at=datetime.now(UTC),
            )
            self._by_id[user.id] = user
            return user

    def verify_password(self, candidate: str, stored_hash: str) -> bool:
        if not stored_hash or stored_hash == UNSET_PASSWORD_HASH:
            return False
        return bool(check_password_hash(stored_hash, candidate))

    # test helper
    def put(self, user: UserRecord) -> None:
        with self._lock:
            self._by_id[user.id] = user
