"""Service layer public API.

This package exposes the building blocks of the identity core so callers can
import from :mod:`coursehub.services` without knowing internal structure.

Re-exports
----------
- Base primitives: :class:`BaseService`, :class:`ServiceContext`
- Session protocol: :class:`AuthService` with :class:`LoginIn`,
  :class:`RefreshIn`, :class:`LoginOut`, :class:`TokenPairOut`,
  :class:`AuthTokenConfig`
- Registration protocol: :class:`RegistrationService` with
  :class:`RegistrationIn`, :class:`ActivationIn`, :class:`RegistrationOut`,
  :class:`ActivationOut`
- Credential-change protocol: :class:`IdentityService` with
  :class:`ProfileUpdateIn`, :class:`PasswordChangeIn`, :class:`UserPublicOut`
"""

from __future__ import annotations

from ._shared.base import BaseService, ServiceContext
from .auth.dto import AuthTokenConfig, LoginIn, LoginOut, RefreshIn, TokenPairOut
from .auth.service import AuthService
from .identity.dto import PasswordChangeIn, ProfileUpdateIn, UserPublicOut
from .identity.service import IdentityService
from .registration.dto import ActivationIn, ActivationOut, RegistrationIn, RegistrationOut
from .registration.service import RegistrationService

__all__ = [
    # Base
    "BaseService",
    "ServiceContext",
    # Session protocol
    "AuthService",
    "AuthTokenConfig",
    "LoginIn",
    "LoginOut",
    "RefreshIn",
    "TokenPairOut",
    # Registration protocol
    "RegistrationService",
    "RegistrationIn",
    "ActivationIn",
    "RegistrationOut",
    "ActivationOut",
    # Credential-change protocol
    "IdentityService",
    "ProfileUpdateIn",
    "PasswordChangeIn",
    "UserPublicOut",
]
