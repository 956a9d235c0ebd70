"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate


class ActivationCode(fields.String):
    """String field that also accepts the code sent as a JSON number."""

    def _deserialize(self, value, attr, data, **kwargs):
        if isinstance(value, int) and not isinstance(value, bool):
            value = str(value)
        return super()._deserialize(value, attr, data, **kwargs)


class RegisterSchema(Schema):
    """Input payload for a registration request."""

    class Meta:
        unknown = EXCLUDE

    name = fields.String(required=True, validate=validate.Length(min=1, max=100))
    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=6, max=128))
    password_confirm = fields.String(
        required=True, data_key="passwordConfirm", validate=validate.Length(max=128)
    )


class ActivationSchema(Schema):
    """Input payload for redeeming an activation code.

    The token may also arrive as a bearer header; the route merges it in.
    """

    class Meta:
        unknown = EXCLUDE

    activation_token = fields.String(required=True, validate=validate.Length(min=1))
    activation_code = ActivationCode(required=True, validate=validate.Length(min=1, max=16))


class LoginSchema(Schema):
    """Input payload for authenticating a user.

    Both fields are optional here so that the service reports the missing
    credentials with its own error kind.
    """

    class Meta:
        unknown = EXCLUDE

    email = fields.String(load_default=None, validate=validate.Length(max=254))
    password = fields.String(load_default=None, validate=validate.Length(max=128))


class RefreshSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    refresh_token = fields.String(required=True, validate=validate.Length(min=1))


class TokenPairSchema(Schema):
    """Response payload containing the issued token pair."""

    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)
    access_expires_in = fields.Integer(required=True)
    refresh_expires_in = fields.Integer(required=True)
    token_type = fields.String(dump_default="bearer")


class RegistrationResultSchema(Schema):
    """Response payload of a registration request."""

    activation_token = fields.String(required=True)
    message = fields.String(required=True)
    email_delivered = fields.Boolean(required=True)
