"""
DTOs for RegistrationService.

Contracts for the two-phase self-registration flow: a signed activation
token is handed out first, the account is created only when the e-mailed
code is redeemed.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from coursehub.services.auth.dto import TokenPairOut
from coursehub.services.identity.dto import UserPublicOut

# --------------------------------------------------------------------------- #
# Input
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class RegistrationIn:
    """
    Input payload for a registration request.

    :param name: Display name.
    :param email: Login email (normalized to lowercase+trim).
    :param password: Raw password.
    :param password_confirm: Repetition checked by the persistence collaborator.
    """

    name: str
    email: str
    password: str
    password_confirm: str


@dataclass(frozen=True, slots=True)
class ActivationIn:
    """
    Input payload for redeeming an activation code.

    :param activation_token: Signed token returned by the registration request.
    :param activation_code: 4-digit code delivered by e-mail.
    """

    activation_token: str
    activation_code: str


# --------------------------------------------------------------------------- #
# Token payload
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class PendingRegistration:
    """
    Registration data that lives only inside the activation token.

    Never persisted; it disappears with the token.
    """

    name: str
    email: str
    password: str
    password_confirm: str

    def to_claims(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_claims(cls, data: Any) -> PendingRegistration:
        if not isinstance(data, dict):
            raise TypeError("pending registration must be an object")
        return cls(
            name=str(data["name"]),
            email=str(data["email"]),
            password=str(data["password"]),
            password_confirm=str(data["password_confirm"]),
        )


# --------------------------------------------------------------------------- #
# Output
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class RegistrationOut:
    """
    Result of a registration request.

    :param activation_token: Signed token embedding the pending registration.
    :param message: Human-readable confirmation.
    :param email_delivered: Whether the activation e-mail was handed off in time.
    """

    activation_token: str
    message: str
    email_delivered: bool


@dataclass(frozen=True, slots=True)
class ActivationOut:
    """
    Result of a successful activation: the new account and its first session.

    :param user: Public-safe user payload.
    :param tokens: Token pair for the started session.
    """

    user: UserPublicOut
    tokens: TokenPairOut
