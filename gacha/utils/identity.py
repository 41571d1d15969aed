"""Caller identity as forwarded by the fronting auth layer."""

from __future__ import annotations

from flask import current_app, request

from gacha.errors import UnauthorizedError


def current_user_id() -> str:
    header = str(current_app.config.get("USER_ID_HEADER") or "X-Discord-User-Id")
    user_id = (request.headers.get(header) or "").strip()
    if not user_id:
        raise UnauthorizedError(message="UNAUTHORIZED")
    return user_id
