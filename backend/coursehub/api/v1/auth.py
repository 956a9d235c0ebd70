"""Registration and session endpoints using the service layer."""

from __future__ import annotations

from flask import Blueprint, Response, current_app, request
from flask_jwt_extended import set_access_cookies, set_refresh_cookies, unset_jwt_cookies

from coursehub.api.deps import (
    auth_service,
    bearer_token,
    current_user_id,
    json_response,
    registration_service,
    require_auth,
    timing,
)
from coursehub.schemas import (
    ActivationSchema,
    LoginSchema,
    RefreshSchema,
    RegisterSchema,
    RegistrationResultSchema,
    TokenPairSchema,
    UserSchema,
)
from coursehub.services import ActivationIn, LoginIn, RefreshIn, RegistrationIn, TokenPairOut

bp = Blueprint("auth", __name__, url_prefix="/auth")

register_schema = RegisterSchema()
activation_schema = ActivationSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
registration_result_schema = RegistrationResultSchema()
token_schema = TokenPairSchema()
user_schema = UserSchema()


def _with_token_cookies(response: Response, tokens: TokenPairOut) -> Response:
    """Mirror the token pair into HttpOnly cookies with their own lifetimes."""

    set_access_cookies(response, tokens.access_token, max_age=tokens.access_expires_in)
    set_refresh_cookies(response, tokens.refresh_token, max_age=tokens.refresh_expires_in)
    return response


@bp.post("/register")
@timing
def register():
    """Start a registration and e-mail the activation code."""

    payload = register_schema.load(request.get_json(silent=True) or {})
    result = registration_service().request_registration(RegistrationIn(**payload))
    return json_response({"data": registration_result_schema.dump(result)}, status=201)


@bp.post("/activate")
@timing
def activate():
    """Redeem an activation code, create the account and start its session."""

    body = dict(request.get_json(silent=True) or {})
    token = bearer_token()
    if token:
        body["activation_token"] = token
    payload = activation_schema.load(body)
    result = registration_service().activate_account(ActivationIn(**payload))
    response = json_response(
        {"data": {"user": user_schema.dump(result.user), **token_schema.dump(result.tokens)}},
        status=201,
    )
    return _with_token_cookies(response, result.tokens)


@bp.post("/login")
@timing
def login():
    """Authenticate credentials and issue an access/refresh pair."""

    data = login_schema.load(request.get_json(silent=True) or {})
    result = auth_service().login(LoginIn(email=data["email"], password=data["password"]))
    response = json_response(
        {"data": {"user": user_schema.dump(result.user), **token_schema.dump(result.tokens)}}
    )
    return _with_token_cookies(response, result.tokens)


@bp.post("/refresh")
@timing
def refresh():
    """Exchange a refresh token (cookie or body) for a new pair."""

    body = dict(request.get_json(silent=True) or {})
    cookie_name = current_app.config.get("JWT_REFRESH_COOKIE_NAME", "refresh_token")
    if not body.get("refresh_token") and request.cookies.get(cookie_name):
        body["refresh_token"] = request.cookies[cookie_name]
    payload = refresh_schema.load(body)
    tokens = auth_service().refresh(RefreshIn(**payload))
    response = json_response({"data": token_schema.dump(tokens)})
    return _with_token_cookies(response, tokens)


@bp.post("/logout")
@require_auth
@timing
def logout():
    """Drop the caller's session and clear the token cookies."""

    user_id = current_user_id()
    auth_service(user_id).logout(user_id)
    response = json_response({"message": "Logged out successfully."})
    unset_jwt_cookies(response)
    return response
