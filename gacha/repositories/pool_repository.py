"""Read-only access to pools and per-member draw state."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from gacha.models.item import Item
from gacha.models.pool import GachaPool, GachaPoolItem
from gacha.models.user_state import GachaUserState, PointBalance


class PoolRepository:
    def list_active(self, session: Session) -> Sequence[GachaPool]:
        stmt = (
            select(GachaPool)
            .where(GachaPool.is_active.is_(True))
            .order_by(GachaPool.updated_at.desc(), GachaPool.pool_id.asc())
        )
        return list(session.scalars(stmt).all())

    def list_items(self, session: Session, pool_id: str) -> Sequence[Item]:
        stmt = (
            select(Item)
            .join(GachaPoolItem, GachaPoolItem.item_id == Item.item_id)
            .where(GachaPoolItem.pool_id == pool_id)
            .order_by(Item.item_id.asc())
        )
        return list(session.scalars(stmt).all())


class UserStateRepository:
    def get_balance(self, session: Session, user_id: str) -> int:
        balance = session.scalar(
            select(PointBalance.balance).where(PointBalance.discord_user_id == user_id)
        )
        return int(balance or 0)

    def get_pool_state(self, session: Session, user_id: str, pool_id: str) -> GachaUserState | None:
        return session.get(GachaUserState, (user_id, pool_id))
