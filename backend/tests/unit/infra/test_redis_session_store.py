"""
Unit tests for RedisSessionStore using fakeredis.

They cover snapshot round-trips, TTL handling, deletion and the mapping of
connection failures to :class:`SessionStoreUnavailableError`.
"""

from __future__ import annotations

import fakeredis
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from coursehub.infra.redis.redis_session_store import RedisSessionStore
from coursehub.services._shared.errors import SessionStoreUnavailableError

SNAPSHOT = {"id": "7", "name": "Ada", "email": "ada@x.io", "password_changed_at": None}


@pytest.fixture
def fake_redis():
    """Provide a fresh FakeRedis instance for each test."""
    r = fakeredis.FakeRedis()
    r.flushall()
    return r


@pytest.fixture
def store(fake_redis):
    return RedisSessionStore(r=fake_redis)


def test_set_then_get_returns_snapshot(store, fake_redis):
    store.set("7", SNAPSHOT, 604800)

    assert store.get("7") == SNAPSHOT
    assert fake_redis.exists("session:7") == 1


def test_set_applies_ttl_and_overwrites(store):
    store.set("7", SNAPSHOT, 60)
    store.set("7", {**SNAPSHOT, "name": "Grace"}, 604800)

    assert store.get("7")["name"] == "Grace"
    assert 604790 <= store.ttl("7") <= 604800


def test_get_missing_returns_none(store):
    assert store.get("missing") is None
    assert store.ttl("missing") is None


def test_delete_reports_whether_entry_existed(store):
    store.set("7", SNAPSHOT, 60)

    assert store.delete("7") is True
    assert store.delete("7") is False
    assert store.get("7") is None


def test_corrupt_entry_is_treated_as_absent(store, fake_redis):
    fake_redis.set("session:7", b"{not json")

    assert store.get("7") is None


@pytest.mark.parametrize("body", [b"[1, 2]", b'"Ada"', b"null"])
def test_non_object_entry_is_treated_as_absent(store, fake_redis, body):
    fake_redis.set("session:7", body)

    assert store.get("7") is None


def test_prefix_namespaces_keys(fake_redis):
    store = RedisSessionStore(r=fake_redis, prefix="coursehub:session")
    store.set("7", SNAPSHOT, 60)

    assert fake_redis.exists("coursehub:session:7") == 1


class _DownRedis:
    """Client double whose every call fails like an unreachable server."""

    def __getattr__(self, name):
        def _fail(*args, **kwargs):
            raise RedisConnectionError("connection refused")

        return _fail


def test_backend_failures_become_store_unavailable():
    store = RedisSessionStore(r=_DownRedis())

    with pytest.raises(SessionStoreUnavailableError) as exc_info:
        store.get("7")
    assert exc_info.value.retryable is True
    with pytest.raises(SessionStoreUnavailableError):
        store.set("7", SNAPSHOT, 60)
    assert store.ping() is False


def test_connect_fails_fast_when_unreachable(monkeypatch):
    monkeypatch.setattr(
        "coursehub.infra.redis.redis_session_store.redis.Redis.from_url",
        lambda *args, **kwargs: _DownRedis(),
    )

    with pytest.raises(SessionStoreUnavailableError):
        RedisSessionStore.connect("redis://nowhere:6379/0", socket_timeout=0.1)
