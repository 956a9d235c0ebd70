"""End-to-end HTTP flows for registration and the session lifecycle."""

from __future__ import annotations

API = "/api/v1"
ADA = {"name": "Ada", "email": "ada@x.io", "password": "secret1", "passwordConfirm": "secret1"}


def _cookies(response) -> dict[str, str]:
    """Map cookie name -> raw ``Set-Cookie`` header."""
    return {h.split("=", 1)[0]: h for h in response.headers.getlist("Set-Cookie")}


def _register_and_activate(client, mailer, payload=ADA):
    resp = client.post(f"{API}/auth/register", json=payload)
    assert resp.status_code == 201, resp.get_json()
    token = resp.get_json()["data"]["activation_token"]
    return client.post(
        f"{API}/auth/activate",
        json={"activation_code": mailer.last.code},
        headers={"Authorization": f"Bearer {token}"},
    )


def test_register_returns_token_and_mails_code(client, mailer):
    resp = client.post(f"{API}/auth/register", json=ADA)

    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert data["activation_token"]
    assert data["email_delivered"] is True
    assert data["message"] == "Please check your email: ada@x.io to activate your account!"
    assert mailer.last.to_email == "ada@x.io"


def test_register_validates_payload(client):
    resp = client.post(f"{API}/auth/register", json={"name": "Ada", "email": "not-an-email"})

    assert resp.status_code == 422
    body = resp.get_json()
    assert resp.mimetype == "application/problem+json"
    assert {"email", "password", "passwordConfirm"} <= set(body["details"]["errors"])


def test_activate_creates_account_and_sets_cookies(client, mailer, session_store):
    resp = _register_and_activate(client, mailer)

    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert data["user"]["email"] == "ada@x.io"
    assert "password" not in str(data["user"])
    assert data["access_expires_in"] < data["refresh_expires_in"]
    cookies = _cookies(resp)
    assert "HttpOnly" in cookies["access_token"]
    assert "HttpOnly" in cookies["refresh_token"]
    assert session_store.get(data["user"]["id"]) is not None


def test_activate_with_wrong_code(client, mailer):
    token = client.post(f"{API}/auth/register", json=ADA).get_json()["data"]["activation_token"]

    resp = client.post(
        f"{API}/auth/activate", json={"activation_token": token, "activation_code": "0000"}
    )

    assert resp.status_code == 401
    assert resp.get_json()["code"] == "activation_code_mismatch"


def test_activate_accepts_code_sent_as_number(client, mailer):
    token = client.post(f"{API}/auth/register", json=ADA).get_json()["data"]["activation_token"]

    resp = client.post(
        f"{API}/auth/activate",
        json={"activation_token": token, "activation_code": int(mailer.last.code)},
    )

    assert resp.status_code == 201, resp.get_json()
    assert resp.get_json()["data"]["user"]["email"] == "ada@x.io"


def test_register_again_after_activation_is_duplicate(client, mailer):
    _register_and_activate(client, mailer)

    resp = client.post(f"{API}/auth/register", json=ADA)

    assert resp.status_code == 400
    assert resp.get_json()["code"] == "duplicate_email"


def test_login_failures_look_the_same(client, mailer):
    _register_and_activate(client, mailer)

    unknown = client.post(f"{API}/auth/login", json={"email": "x@x.io", "password": "secret1"})
    wrong = client.post(f"{API}/auth/login", json={"email": "ada@x.io", "password": "nope!!"})
    missing = client.post(f"{API}/auth/login", json={"email": "ada@x.io"})

    assert unknown.status_code == wrong.status_code == 401
    assert unknown.get_json()["detail"] == wrong.get_json()["detail"]
    assert unknown.get_json()["code"] == wrong.get_json()["code"] == "invalid_credentials"
    assert missing.status_code == 400
    assert missing.get_json()["code"] == "missing_credentials"


def test_login_refresh_logout_cycle(client, mailer):
    _register_and_activate(client, mailer)

    login = client.post(f"{API}/auth/login", json={"email": "ada@x.io", "password": "secret1"})
    assert login.status_code == 200
    tokens = login.get_json()["data"]
    auth = {"Authorization": f"Bearer {tokens['access_token']}"}

    # refresh token taken from the cookie
    refreshed = client.post(f"{API}/auth/refresh")
    assert refreshed.status_code == 200
    assert refreshed.get_json()["data"]["access_token"]

    logout = client.post(f"{API}/auth/logout", headers=auth)
    assert logout.status_code == 200
    cleared = _cookies(logout)
    assert "access_token" in cleared and "refresh_token" in cleared

    again = client.post(f"{API}/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert again.status_code == 401
    assert again.get_json()["code"] == "session_not_found"


def test_refresh_with_garbage_token(client):
    resp = client.post(f"{API}/auth/refresh", json={"refresh_token": "garbage"})

    assert resp.status_code == 401
    assert resp.get_json()["code"] == "token_invalid"


def test_logout_requires_access_token(client):
    resp = client.post(f"{API}/auth/logout")

    assert resp.status_code == 401
    assert resp.mimetype == "application/problem+json"


def test_health_reports_dependencies(client):
    resp = client.get(f"{API}/health")

    assert resp.status_code == 200
    assert resp.get_json()["db"] == "ok"
    assert resp.get_json()["sessions"] == "ok"
