"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    ActivationSchema,
    LoginSchema,
    RefreshSchema,
    RegisterSchema,
    RegistrationResultSchema,
    TokenPairSchema,
)
from .user import PasswordChangeSchema, ProfileUpdateSchema, UserSchema

__all__ = [
    "ActivationSchema",
    "LoginSchema",
    "RefreshSchema",
    "RegisterSchema",
    "RegistrationResultSchema",
    "TokenPairSchema",
    "PasswordChangeSchema",
    "ProfileUpdateSchema",
    "UserSchema",
]
