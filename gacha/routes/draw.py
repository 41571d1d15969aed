"""Draw routes (controllers). No business logic here."""

from __future__ import annotations

from flask import Blueprint, current_app, request

from gacha.db import get_engine
from gacha.repositories.draw_procedure_repository import DrawProcedureRepository
from gacha.schemas.draw import BatchOutcomeSchema, DrawRequestSchema
from gacha.services.draw_orchestrator import DrawOrchestrator
from gacha.services.types import DrawRequest
from gacha.utils.identity import current_user_id
from gacha.utils.responses import ok

draw_bp = Blueprint("draw", __name__)

_request_schema = DrawRequestSchema()
_response_schema = BatchOutcomeSchema()


def _orchestrator() -> DrawOrchestrator:
    repository = DrawProcedureRepository(
        get_engine(),
        statement_timeout_ms=int(current_app.config.get("DRAW_STATEMENT_TIMEOUT_MS") or 0),
    )
    return DrawOrchestrator(repository.draw)


@draw_bp.post("/draw")
def draw():
    user_id = current_user_id()
    payload = request.get_json(silent=True) or {}
    data = _request_schema.load(payload)

    outcome = _orchestrator().execute_batch(
        DrawRequest(user_id=user_id, pool_id=data["pool_id"], amount=data["amount"])
    )
    return ok(_response_schema.dump(outcome))
