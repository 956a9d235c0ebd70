"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from coursehub.api.deps import json_response, timing
from coursehub.core.extensions import db, get_session_store

bp = Blueprint("health", __name__)


@bp.get("/health")
@timing
def healthcheck():
    """Return database and session-store reachability."""

    db_status = "ok"
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:  # pragma: no cover - depends on DB backend
        current_app.logger.exception("healthcheck.db_error")
        db_status = "fail"
    sessions_status = "ok" if get_session_store().ping() else "fail"
    healthy = db_status == "ok" and sessions_status == "ok"
    payload = {
        "status": "ok" if healthy else "degraded",
        "db": db_status,
        "sessions": sessions_status,
        "version": current_app.config.get("APP_VERSION", "dev"),
    }
    return json_response(payload, status=200 if healthy else 503)
