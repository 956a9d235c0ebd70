"""Endpoints for the authenticated user's own account."""

from __future__ import annotations

from flask import Blueprint, request

from coursehub.api.deps import (
    current_user_id,
    identity_service,
    json_response,
    require_auth,
    timing,
)
from coursehub.schemas import PasswordChangeSchema, ProfileUpdateSchema, UserSchema
from coursehub.services import PasswordChangeIn, ProfileUpdateIn

bp = Blueprint("users", __name__, url_prefix="/users")

user_schema = UserSchema()
profile_update_schema = ProfileUpdateSchema()
password_change_schema = PasswordChangeSchema()


@bp.patch("/me")
@require_auth
@timing
def update_me():
    """Update the caller's name and/or email."""

    data = profile_update_schema.load(request.get_json(silent=True) or {})
    user_id = current_user_id()
    user = identity_service(user_id).update_profile(user_id, ProfileUpdateIn(**data))
    return json_response({"data": user_schema.dump(user)})


@bp.put("/me/password")
@require_auth
@timing
def update_my_password():
    """Change the caller's password; older refresh tokens stop working."""

    data = password_change_schema.load(request.get_json(silent=True) or {})
    user_id = current_user_id()
    user = identity_service(user_id).update_password(user_id, PasswordChangeIn(**data))
    return json_response({"data": user_schema.dump(user)})
