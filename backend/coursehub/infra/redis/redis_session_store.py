# comments in English; reST docstrings
from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any, TypeVar, cast

import redis  # type: ignore[import-untyped]
from redis.exceptions import RedisError  # type: ignore[import-untyped]

from coursehub.services._shared.errors import SessionStoreUnavailableError
from coursehub.services._shared.ports import SessionStore

log = logging.getLogger(__name__)

T = TypeVar("T")


class RedisSessionStore(SessionStore):
    """
    Redis-backed session store: one string key per user with ``EX`` expiry.

    :param r: A Redis client (already connected).
    :param prefix: Key namespace.
    """

    def __init__(self, r: redis.Redis, *, prefix: str = "session") -> None:
        self.r = r
        self.prefix = prefix

    @classmethod
    def connect(
        cls, url: str, *, socket_timeout: float = 2.0, prefix: str = "session"
    ) -> RedisSessionStore:
        """
        Build a client from ``url`` and ping it.

        Socket timeouts keep every cache call bounded.

        :raises SessionStoreUnavailableError: If Redis does not answer.
        """
        client = redis.Redis.from_url(
            url,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )
        store = cls(client, prefix=prefix)
        if not store.ping():
            raise SessionStoreUnavailableError(f"Failed to connect to session store at {url!r}")
        return store

    # -------------------- helpers --------------------

    def _k(self, user_id: str) -> str:
        return f"{self.prefix}:{user_id}"

    def _call(self, op: str, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except RedisError as exc:
            log.error("session_store.unavailable", extra={"op": op}, exc_info=True)
            raise SessionStoreUnavailableError() from exc

    # -------------------- API ------------------------

    def get(self, user_id: str) -> dict[str, Any] | None:
        raw = self._call("get", lambda: self.r.get(self._k(user_id)))
        if raw is None:
            return None
        try:
            snapshot = json.loads(raw)
        except ValueError:
            snapshot = None
        if not isinstance(snapshot, dict):
            # Unreadable snapshot: treat as no session
            log.warning("session_store.corrupt_entry", extra={"user_id": user_id})
            return None
        return cast(dict[str, Any], snapshot)

    def set(self, user_id: str, snapshot: dict[str, Any], ttl_seconds: int) -> None:
        body = json.dumps(snapshot, separators=(",", ":"))
        self._call("set", lambda: self.r.set(self._k(user_id), body, ex=max(1, int(ttl_seconds))))

    def delete(self, user_id: str) -> bool:
        removed = self._call("delete", lambda: self.r.delete(self._k(user_id)))
        return cast(int, removed) > 0

    def ttl(self, user_id: str) -> int | None:
        remaining = cast(int, self._call("ttl", lambda: self.r.ttl(self._k(user_id))))
        # -2: no key, -1: no expiry
        return None if remaining == -2 else remaining

    def ping(self) -> bool:
        try:
            return bool(self.r.ping())
        except RedisError:
            return False

    def close(self) -> None:
        self.r.close()
