"""Identity and session-lifecycle core of the CourseHub platform.

Provide convenient access to :func:`coursehub.factory.create_app` so callers
can ``from coursehub import create_app``.
"""

from __future__ import annotations

from .factory import create_app

__all__ = ["create_app"]
