"""Pull history routes."""

from __future__ import annotations

from flask import Blueprint, request

from gacha.db import get_session
from gacha.repositories.pull_ledger_repository import PullLedgerRepository
from gacha.schemas.history import HistoryPageSchema, HistoryQuerySchema
from gacha.services.history_reconstructor import HistoryReconstructor
from gacha.utils.identity import current_user_id
from gacha.utils.responses import ok

history_bp = Blueprint("history", __name__)

_query_schema = HistoryQuerySchema()
_page_schema = HistoryPageSchema()
_ledger = PullLedgerRepository()


@history_bp.get("/history")
def history():
    """One page of the caller's pulls.

    Query params:
    - limit (1..50, default 30), offset (>= 0)
    - poolId: optional pool UUID
    - rarities: comma-separated subset of R,S,SS,SSS
    - pity: "1" for pity pulls only
    - q: item name substring
    """

    user_id = current_user_id()
    query = _query_schema.load(request.args)

    session = get_session()
    reconstructor = HistoryReconstructor(
        lambda offset, limit: _ledger.list_chunk(session, user_id, offset, limit)
    )
    return ok(_page_schema.dump(reconstructor.page(query)))
