"""Unit tests for the PyJWT-backed token codec."""

from __future__ import annotations

from datetime import timedelta

import jwt
import pytest
from freezegun import freeze_time

from coursehub.infra.jwt.jwt_token_codec import JWTTokenCodec
from coursehub.services._shared.errors import SigningError, TokenExpiredError, TokenInvalidError
from coursehub.services._shared.ports import TokenDomain

ACTIVATION = TokenDomain("activation", "activation-secret", timedelta(hours=2))
ACCESS = TokenDomain("access", "access-secret", timedelta(minutes=5))
REFRESH = TokenDomain("refresh", "refresh-secret", timedelta(days=3))


@pytest.fixture()
def codec() -> JWTTokenCodec:
    return JWTTokenCodec()


@pytest.mark.parametrize("domain", [ACTIVATION, ACCESS, REFRESH], ids=lambda d: d.name)
def test_verify_returns_payload_as_issued(codec, domain):
    payload = {"sub": "42", "user": {"name": "Ada", "email": "ada@x.io"}}

    verified = codec.verify(codec.issue(payload, domain), domain)

    assert verified.payload == payload
    assert verified.expires_at - verified.issued_at == domain.expires


@pytest.mark.parametrize(
    "issued_for, checked_with",
    [(ACCESS, REFRESH), (REFRESH, ACCESS), (ACTIVATION, ACCESS), (ACCESS, ACTIVATION)],
    ids=lambda d: d.name,
)
def test_token_from_one_domain_is_rejected_by_another(codec, issued_for, checked_with):
    token = codec.issue({"sub": "1"}, issued_for)

    with pytest.raises(TokenInvalidError):
        codec.verify(token, checked_with)


def test_domain_tag_is_checked_even_when_secrets_collide(codec):
    shared_access = TokenDomain("access", "same", timedelta(minutes=5))
    shared_refresh = TokenDomain("refresh", "same", timedelta(days=3))
    token = codec.issue({"sub": "1"}, shared_access)

    with pytest.raises(TokenInvalidError):
        codec.verify(token, shared_refresh)


def test_expired_token_is_reported_as_expired(codec):
    with freeze_time("2026-03-01 12:00:00") as frozen:
        token = codec.issue({"sub": "1"}, ACCESS)
        frozen.tick(timedelta(minutes=4, seconds=59))
        assert codec.verify(token, ACCESS).payload == {"sub": "1"}
        frozen.tick(timedelta(seconds=2))
        with pytest.raises(TokenExpiredError):
            codec.verify(token, ACCESS)


def test_tampered_token_is_invalid(codec):
    token = codec.issue({"sub": "1"}, ACCESS)
    head, body, sig = token.split(".")
    forged = jwt.encode({"sub": "2", "type": "access", "iat": 0, "exp": 2**31}, "other")

    with pytest.raises(TokenInvalidError):
        codec.verify(forged, ACCESS)
    with pytest.raises(TokenInvalidError):
        codec.verify(f"{head}.{body}.{sig[::-1]}", ACCESS)
    with pytest.raises(TokenInvalidError):
        codec.verify("not-a-token", ACCESS)
    with pytest.raises(TokenInvalidError):
        codec.verify("", ACCESS)


def test_missing_secret_raises_signing_error(codec):
    unsigned = TokenDomain("access", "", timedelta(minutes=5))

    with pytest.raises(SigningError):
        codec.issue({"sub": "1"}, unsigned)


def test_reserved_claims_cannot_be_overridden(codec):
    with pytest.raises(ValueError):
        codec.issue({"sub": "1", "exp": 0}, ACCESS)
