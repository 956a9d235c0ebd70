"""User resource schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate


class UserSchema(Schema):
    """Public representation of a user (never the password hash)."""

    id = fields.String(required=True)
    name = fields.String(required=True)
    email = fields.Email(required=True)


class ProfileUpdateSchema(Schema):
    """Payload for ``PATCH /users/me``; absent fields stay untouched."""

    class Meta:
        unknown = EXCLUDE

    name = fields.String(load_default=None, validate=validate.Length(min=1, max=100))
    email = fields.Email(load_default=None, validate=validate.Length(max=254))


class PasswordChangeSchema(Schema):
    """Payload for ``PUT /users/me/password``."""

    class Meta:
        unknown = EXCLUDE

    old_password = fields.String(load_default=None, data_key="oldPassword")
    new_password = fields.String(
        load_default=None, data_key="newPassword", validate=validate.Length(min=6, max=128)
    )
    confirm_password = fields.String(load_default=None, data_key="confirmPassword")
