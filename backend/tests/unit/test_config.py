"""Configuration selection and signing-domain validation."""

from __future__ import annotations

from datetime import timedelta

import pytest

from coursehub.core.config import (
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    env_minutes,
    get_config,
)
from coursehub.core.extensions import ACCESS, ACTIVATION, REFRESH, token_domains
from coursehub.services._shared.errors import SigningError


def _settings(**overrides):
    base = {
        "ACTIVATION_TOKEN_SECRET": "a",
        "ACTIVATION_TOKEN_EXPIRES": timedelta(minutes=120),
        "ACCESS_TOKEN_SECRET": "b",
        "ACCESS_TOKEN_EXPIRES": timedelta(minutes=5),
        "REFRESH_TOKEN_SECRET": "c",
        "REFRESH_TOKEN_EXPIRES": timedelta(days=3),
    }
    base.update(overrides)
    return base


@pytest.mark.parametrize(
    "env, expected",
    [
        ("testing", TestingConfig),
        ("production", ProductionConfig),
        ("development", DevelopmentConfig),
        ("unknown", DevelopmentConfig),
    ],
)
def test_get_config_follows_app_env(monkeypatch, env, expected):
    monkeypatch.setenv("APP_ENV", env)

    assert get_config() is expected


def test_default_lifetimes():
    assert TestingConfig.ACCESS_TOKEN_EXPIRES < TestingConfig.REFRESH_TOKEN_EXPIRES
    assert TestingConfig.ACTIVATION_TOKEN_EXPIRES == timedelta(hours=2)
    assert TestingConfig.SESSION_TTL == timedelta(days=7)


def test_env_minutes_reads_override(monkeypatch):
    monkeypatch.setenv("SOME_EXPIRES_MINUTES", "15")

    assert env_minutes("SOME_EXPIRES_MINUTES", 5) == timedelta(minutes=15)
    assert env_minutes("MISSING_EXPIRES_MINUTES", 5) == timedelta(minutes=5)


def test_token_domains_are_built_from_settings():
    domains = token_domains(_settings())

    assert set(domains) == {ACTIVATION, ACCESS, REFRESH}
    assert domains[ACCESS].secret == "b"
    assert domains[REFRESH].expires == timedelta(days=3)


@pytest.mark.parametrize(
    "overrides",
    [{"ACCESS_TOKEN_SECRET": ""}, {"REFRESH_TOKEN_SECRET": "b"}],
    ids=["empty-secret", "shared-secret"],
)
def test_token_domains_refuse_unsafe_secrets(overrides):
    with pytest.raises(SigningError):
        token_domains(_settings(**overrides))
