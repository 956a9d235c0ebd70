"""SQLAlchemy models registered on :data:`coursehub.core.extensions.db`."""

from __future__ import annotations

from .user import User

__all__ = ["User"]
