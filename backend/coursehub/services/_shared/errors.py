"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never import Flask, HTTP,
Redis or SQLAlchemy. Every error carries an :class:`ErrorKind` taken from a
closed enumeration; the kind alone decides the status class the API layer
emits (see :data:`STATUS_BY_KIND`).

The translation to HTTP responses (RFC 7807) is handled by
``coursehub/core/errors.py``.
"""

from __future__ import annotations

from enum import Enum
from http import HTTPStatus


class ErrorKind(str, Enum):
    """Closed set of recoverable, user-facing failure kinds."""

    DUPLICATE_EMAIL = "duplicate_email"
    MISSING_CREDENTIALS = "missing_credentials"
    INVALID_CREDENTIALS = "invalid_credentials"
    TOKEN_EXPIRED = "token_expired"
    TOKEN_INVALID = "token_invalid"
    ACTIVATION_CODE_MISMATCH = "activation_code_mismatch"
    SESSION_NOT_FOUND = "session_not_found"
    PASSWORD_CHANGED_SINCE_ISSUANCE = "password_changed_since_issuance"
    MISSING_FIELDS = "missing_fields"
    MISSING_CONFIRMATION = "missing_confirmation"
    INVALID_USER = "invalid_user"
    INCORRECT_PASSWORD = "incorrect_password"
    VALIDATION_FAILED = "validation_failed"
    SESSION_STORE_UNAVAILABLE = "session_store_unavailable"
    EMAIL_DELIVERY_FAILED = "email_delivery_failed"
    SIGNING_ERROR = "signing_error"
    INTERNAL_ERROR = "internal_error"


# Every kind must appear here; ``status_for`` raises on a gap.
STATUS_BY_KIND: dict[ErrorKind, HTTPStatus] = {
    ErrorKind.DUPLICATE_EMAIL: HTTPStatus.BAD_REQUEST,
    ErrorKind.MISSING_CREDENTIALS: HTTPStatus.BAD_REQUEST,
    ErrorKind.INVALID_CREDENTIALS: HTTPStatus.UNAUTHORIZED,
    ErrorKind.TOKEN_EXPIRED: HTTPStatus.UNAUTHORIZED,
    ErrorKind.TOKEN_INVALID: HTTPStatus.UNAUTHORIZED,
    ErrorKind.ACTIVATION_CODE_MISMATCH: HTTPStatus.UNAUTHORIZED,
    ErrorKind.SESSION_NOT_FOUND: HTTPStatus.UNAUTHORIZED,
    ErrorKind.PASSWORD_CHANGED_SINCE_ISSUANCE: HTTPStatus.UNAUTHORIZED,
    ErrorKind.MISSING_FIELDS: HTTPStatus.BAD_REQUEST,
    ErrorKind.MISSING_CONFIRMATION: HTTPStatus.BAD_REQUEST,
    ErrorKind.INVALID_USER: HTTPStatus.BAD_REQUEST,
    ErrorKind.INCORRECT_PASSWORD: HTTPStatus.UNAUTHORIZED,
    ErrorKind.VALIDATION_FAILED: HTTPStatus.BAD_REQUEST,
    ErrorKind.SESSION_STORE_UNAVAILABLE: HTTPStatus.SERVICE_UNAVAILABLE,
    ErrorKind.EMAIL_DELIVERY_FAILED: HTTPStatus.SERVICE_UNAVAILABLE,
    ErrorKind.SIGNING_ERROR: HTTPStatus.INTERNAL_SERVER_ERROR,
    ErrorKind.INTERNAL_ERROR: HTTPStatus.INTERNAL_SERVER_ERROR,
}

RETRYABLE_KINDS: frozenset[ErrorKind] = frozenset(
    {ErrorKind.SESSION_STORE_UNAVAILABLE, ErrorKind.EMAIL_DELIVERY_FAILED}
)


def status_for(kind: ErrorKind) -> HTTPStatus:
    """
    Return the HTTP status class bound to ``kind``.

    :param kind: Error kind.
    :type kind: ErrorKind
    :returns: Status code for the API layer.
    :rtype: HTTPStatus
    :raises LookupError: If the table is missing an entry for ``kind``.
    """
    try:
        return STATUS_BY_KIND[kind]
    except KeyError:
        raise LookupError(f"No status registered for error kind {kind!r}") from None


# --------------------------------------------------------------------------- #
# Base type
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - Subclasses pin ``kind`` and a default client-safe ``message``.
    - Messages never include hashes, plaintext secrets or token values.
    """

    kind: ErrorKind = ErrorKind.INTERNAL_ERROR
    default_message: str = "Something went wrong. Please try again later."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def status(self) -> HTTPStatus:
        """Status class for this error's kind."""
        return status_for(self.kind)

    @property
    def retryable(self) -> bool:
        """Whether callers may retry the operation unchanged."""
        return self.kind in RETRYABLE_KINDS


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


class DuplicateEmailError(ServiceError):
    kind = ErrorKind.DUPLICATE_EMAIL
    default_message = "Email already exists."


class MissingCredentialsError(ServiceError):
    kind = ErrorKind.MISSING_CREDENTIALS
    default_message = "Please provide email and password."


class InvalidCredentialsError(ServiceError):
    """Unknown email and wrong password share this error and message."""

    kind = ErrorKind.INVALID_CREDENTIALS
    default_message = "Incorrect email or password."


class TokenExpiredError(ServiceError):
    kind = ErrorKind.TOKEN_EXPIRED
    default_message = "Token has expired."


class TokenInvalidError(ServiceError):
    kind = ErrorKind.TOKEN_INVALID
    default_message = "Token is invalid."


class ActivationCodeMismatchError(ServiceError):
    kind = ErrorKind.ACTIVATION_CODE_MISMATCH
    default_message = "Invalid activation code. Please try again."


class SessionNotFoundError(ServiceError):
    kind = ErrorKind.SESSION_NOT_FOUND
    default_message = "Session not found. Please log in again."


class PasswordChangedSinceIssuanceError(ServiceError):
    kind = ErrorKind.PASSWORD_CHANGED_SINCE_ISSUANCE
    default_message = "User recently changed password. Please log in again."


class MissingFieldsError(ServiceError):
    kind = ErrorKind.MISSING_FIELDS
    default_message = "Please provide your old and new passwords."


class MissingConfirmationError(ServiceError):
    kind = ErrorKind.MISSING_CONFIRMATION
    default_message = "Please confirm your password."


class InvalidUserError(ServiceError):
    kind = ErrorKind.INVALID_USER
    default_message = "Invalid user."


class IncorrectPasswordError(ServiceError):
    kind = ErrorKind.INCORRECT_PASSWORD
    default_message = "Your current password is wrong."


class ValidationFailedError(ServiceError):
    """Raised by the persistence collaborator when a record fails validation."""

    kind = ErrorKind.VALIDATION_FAILED
    default_message = "Validation failed."


class SessionStoreUnavailableError(ServiceError):
    """Session cache could not be reached in bounded time. Retryable."""

    kind = ErrorKind.SESSION_STORE_UNAVAILABLE
    default_message = "Session store temporarily unavailable. Please retry."


class EmailDeliveryFailedError(ServiceError):
    kind = ErrorKind.EMAIL_DELIVERY_FAILED
    default_message = "Activation email could not be delivered. Please retry."


class SigningError(ServiceError):
    """Token signing is misconfigured (e.g. missing secret)."""

    kind = ErrorKind.SIGNING_ERROR
    default_message = "Token signing is not configured."


class InternalError(ServiceError):
    """Wraps unexpected collaborator exceptions; the cause stays in ``__cause__``."""

    kind = ErrorKind.INTERNAL_ERROR


ERROR_BY_KIND: dict[ErrorKind, type[ServiceError]] = {
    cls.kind: cls
    for cls in (
        DuplicateEmailError,
        MissingCredentialsError,
        InvalidCredentialsError,
        TokenExpiredError,
        TokenInvalidError,
        ActivationCodeMismatchError,
        SessionNotFoundError,
        PasswordChangedSinceIssuanceError,
        MissingFieldsError,
        MissingConfirmationError,
        InvalidUserError,
        IncorrectPasswordError,
        ValidationFailedError,
        SessionStoreUnavailableError,
        EmailDeliveryFailedError,
        SigningError,
        InternalError,
    )
}
