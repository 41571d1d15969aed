"""Calls the remote ``perform_gacha_draw`` procedure."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError

from gacha.services.error_classifier import RemoteDrawError
from gacha.services.types import DrawUnitOutcome

logger = logging.getLogger(__name__)

_DRAW_SQL = text("SELECT * FROM perform_gacha_draw(:p_discord_user_id, :p_pool_id)")
_STATEMENT_TIMEOUT_SQL = text("SELECT set_config('statement_timeout', :value, true)")


def remote_error_from(exc: DBAPIError) -> RemoteDrawError:
    """Reduce a driver error to the code and first message line."""

    orig = exc.orig
    code = getattr(orig, "pgcode", None)

    diag = getattr(orig, "diag", None)
    message = getattr(diag, "message_primary", None) if diag is not None else None
    if not message:
        lines = str(orig if orig is not None else exc).strip().splitlines()
        message = lines[0] if lines else ""

    return RemoteDrawError(message=message, code=code)


def _to_outcome(row: Mapping[str, Any]) -> DrawUnitOutcome:
    new_balance = row.get("out_new_balance")
    return DrawUnitOutcome(
        item_id=str(row["out_item_id"]),
        name=str(row.get("out_name") or ""),
        rarity=str(row.get("out_rarity") or ""),
        role_id=row.get("out_discord_role_id"),
        reward_points=max(0, int(row.get("out_reward_points") or 0)),
        is_variant=bool(row.get("out_is_variant")),
        is_free=bool(row.get("out_is_free")),
        refund_points=int(row.get("out_refund_points") or 0),
        new_balance=int(new_balance) if new_balance is not None else None,
    )


class DrawProcedureRepository:
    """One remote draw per call, each in its own transaction.

    A failed attempt rolls back only itself, so the next attempt starts on a
    clean connection rather than inside an aborted transaction.
    """

    def __init__(self, engine: Engine, statement_timeout_ms: int = 0) -> None:
        self._engine = engine
        self._statement_timeout_ms = statement_timeout_ms

    def draw(self, user_id: str, pool_id: str | None) -> DrawUnitOutcome:
        try:
            with self._engine.begin() as conn:
                if self._statement_timeout_ms > 0 and conn.dialect.name == "postgresql":
                    conn.execute(_STATEMENT_TIMEOUT_SQL, {"value": f"{self._statement_timeout_ms}ms"})
                row = (
                    conn.execute(_DRAW_SQL, {"p_discord_user_id": user_id, "p_pool_id": pool_id})
                    .mappings()
                    .first()
                )
        except DBAPIError as exc:
            error = remote_error_from(exc)
            logger.debug("perform_gacha_draw failed code=%s: %s", error.code, error.message)
            raise error from exc

        if row is None:
            raise RemoteDrawError("perform_gacha_draw returned no row")
        return _to_outcome(row)
