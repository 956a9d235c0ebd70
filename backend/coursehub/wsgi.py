"""WSGI entrypoint (``gunicorn coursehub.wsgi:app``)."""

from __future__ import annotations

from coursehub import create_app

app = create_app()
