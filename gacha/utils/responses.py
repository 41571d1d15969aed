"""Helpers for the JSON envelope shared by every endpoint."""

from __future__ import annotations

import uuid
from typing import Any

from flask import Response, jsonify


def new_request_id() -> str:
    return str(uuid.uuid4())


def ok(data: Any, status_code: int = 200) -> tuple[Response, int]:
    """Success envelope."""

    return jsonify({"success": True, "data": data, "error": None}), status_code


def fail(
    code: str,
    message: str,
    status_code: int,
    details: Any | None = None,
    request_id: str | None = None,
) -> tuple[Response, int]:
    """Error envelope.

    Server-side failures carry a ``requestId`` so a report from a member can be
    matched with the log line that recorded the underlying exception.
    """

    error: dict[str, Any] = {"code": code, "message": message, "details": details}
    if request_id is not None:
        error["requestId"] = request_id
    return jsonify({"success": False, "data": None, "error": error}), status_code
