"""Health check routes."""

from __future__ import annotations

from flask import Blueprint

from gacha.utils.responses import ok

health_bp = Blueprint("health", __name__)


@health_bp.get("/health")
def health_check():
    """Liveness only; the remote store is not contacted."""

    return ok({"status": "ok"})
