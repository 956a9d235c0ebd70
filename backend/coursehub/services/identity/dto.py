"""
DTOs for IdentityService.

Data Transfer Objects (DTOs) isolate the service layer from storage records,
ensuring clear input/output contracts and type safety.
"""

from __future__ import annotations

from dataclasses import dataclass

from coursehub.services._shared.ports import UserRecord

# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class ProfileUpdateIn:
    """
    Input DTO for updating non-secret profile fields.

    :param name: Optional new display name.
    :type name: str | None
    :param email: Optional new email.
    :type email: str | None
    """

    name: str | None = None
    email: str | None = None


@dataclass(frozen=True, slots=True)
class PasswordChangeIn:
    """
    Input DTO for changing a user's password.

    :param old_password: Current password.
    :type old_password: str | None
    :param new_password: New password (raw).
    :type new_password: str | None
    :param confirm_password: Repetition of the new password.
    :type confirm_password: str | None
    """

    old_password: str | None
    new_password: str | None
    confirm_password: str | None


# --------------------------------------------------------------------------- #
# Output DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """
    Output DTO representing public-safe user data.

    :param id: User identifier.
    :type id: str
    :param name: Display name.
    :type name: str
    :param email: Email address.
    :type email: str
    """

    id: str
    name: str
    email: str

    @classmethod
    def from_record(cls, user: UserRecord) -> UserPublicOut:
        return cls(id=user.id, name=user.name, email=user.email)
