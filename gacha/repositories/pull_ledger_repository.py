"""Repository layer for the pull ledger read."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from gacha.errors import HistoryUnavailableError
from gacha.models.pull import GachaPull
from gacha.services.types import HistoryEntry, PoolRef, PullResultView


def _to_entry(pull: GachaPull) -> HistoryEntry:
    pool = pull.pool
    first = pull.results[0] if pull.results else None

    result: PullResultView | None = None
    if first is not None:
        item = first.item
        result = PullResultView(
            item_id=first.item_id,
            name=item.name if item is not None else None,
            rarity=item.rarity if item is not None else None,
            role_id=item.discord_role_id if item is not None else None,
            reward_points=int((item.reward_points if item is not None else None) or 0),
            qty=int(first.qty),
            is_pity=bool(first.is_pity),
            is_variant=bool(first.is_variant),
        )

    return HistoryEntry(
        pull_id=pull.pull_id,
        created_at=pull.created_at,
        pool=PoolRef(
            pool_id=pull.pool_id,
            name=pool.name if pool is not None else None,
            kind=pool.kind if pool is not None else None,
        ),
        is_free=bool(pull.is_free),
        spent_points=int(pull.spent_points),
        result=result,
    )


class PullLedgerRepository:
    """Read a member's pulls newest first, one offset window at a time."""

    def list_chunk(self, session: Session, user_id: str, offset: int, limit: int) -> list[HistoryEntry]:
        stmt = (
            select(GachaPull)
            .where(GachaPull.discord_user_id == user_id)
            .options(selectinload(GachaPull.results))
            .order_by(GachaPull.created_at.desc(), GachaPull.pull_id.desc())
            .offset(offset)
            .limit(limit)
        )
        try:
            pulls = session.scalars(stmt).all()
            return [_to_entry(pull) for pull in pulls]
        except SQLAlchemyError as exc:
            raise HistoryUnavailableError() from exc
