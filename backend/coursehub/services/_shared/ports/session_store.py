from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol


class SessionStore(Protocol):
    """
    Key/value cache mapping user id -> serialized user snapshot.

    A live entry is the only proof that the user's refresh token may still be
    exchanged. Adapters must raise ``SessionStoreUnavailableError`` instead of
    hanging or leaking driver exceptions.
    """

    def get(self, user_id: str) -> dict[str, Any] | None:
        """Return the snapshot for ``user_id`` or ``None`` when absent/expired."""

    def set(self, user_id: str, snapshot: dict[str, Any], ttl_seconds: int) -> None:
        """Replace the snapshot and reset its time-to-live."""

    def delete(self, user_id: str) -> bool:
        """Drop the entry. :returns: True if one existed."""

    def ttl(self, user_id: str) -> int | None:
        """Remaining lifetime in seconds, or ``None`` when absent."""

    def ping(self) -> bool:
        """Return True when the backend answers."""

    def close(self) -> None:
        """Release backend connections."""


@dataclass(frozen=True)
class _Entry:
    snapshot: dict[str, Any]
    expires_at: datetime


class InMemorySessionStore(SessionStore):
    """
    Process-local session store with per-entry expiry.

    .. note::
       Uses a threading lock so concurrent requests see last-write-wins
       semantics, mirroring a single Redis ``SET``.
    """

    def __init__(self) -> None:
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _now() -> datetime:
        return datetime.now(UTC)

    def _live(self, user_id: str) -> _Entry | None:
        entry = self._entries.get(user_id)
        if entry is None:
            return None
        if entry.expires_at <= self._now():
            del self._entries[user_id]
            return None
        return entry

    def get(self, user_id: str) -> dict[str, Any] | None:
        with self._lock:
            entry = self._live(user_id)
            return dict(entry.snapshot) if entry else None

    def set(self, user_id: str, snapshot: dict[str, Any], ttl_seconds: int) -> None:
        with self._lock:
            self._entries[user_id] = _Entry(
                snapshot=dict(snapshot),
                expires_at=self._now() + timedelta(seconds=ttl_seconds),
            )

    def delete(self, user_id: str) -> bool:
        with self._lock:
            return self._entries.pop(user_id, None) is not None

    def ttl(self, user_id: str) -> int | None:
        with self._lock:
            entry = self._live(user_id)
            if entry is None:
                return None
            return int((entry.expires_at - self._now()).total_seconds())

    def ping(self) -> bool:
        return True

    def close(self) -> None:
        with self._lock:
            self._entries.clear()
