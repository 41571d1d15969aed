"""Pull ledger: one row per pull plus its result rows.

Rows are written by ``perform_gacha_draw`` only.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gacha.models.base import Base
from gacha.models.item import Item
from gacha.models.pool import GachaPool


class GachaPull(Base):
    __tablename__ = "gacha_pulls"
    __table_args__ = (Index("ix_gacha_pulls_user_created", "discord_user_id", "created_at"),)

    pull_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    discord_user_id: Mapped[str] = mapped_column(String(32), nullable=False)
    pool_id: Mapped[str] = mapped_column(String(36), ForeignKey("gacha_pools.pool_id"), nullable=False)
    is_free: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    spent_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())

    pool: Mapped[GachaPool | None] = relationship(lazy="joined")
    results: Mapped[list["GachaPullResult"]] = relationship(
        back_populates="pull",
        order_by="GachaPullResult.item_id",
    )


class GachaPullResult(Base):
    __tablename__ = "gacha_pull_results"

    pull_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("gacha_pulls.pull_id", ondelete="CASCADE"), primary_key=True
    )
    item_id: Mapped[str] = mapped_column(String(36), ForeignKey("items.item_id"), primary_key=True)
    qty: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    is_pity: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_variant: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    pull: Mapped[GachaPull] = relationship(back_populates="results")
    item: Mapped[Item | None] = relationship(lazy="joined")
