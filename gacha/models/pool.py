"""Gacha pool configuration, read-only from this service."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gacha.models.base import Base
from gacha.models.item import Item


class GachaPool(Base):
    __tablename__ = "gacha_pools"

    pool_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    kind: Mapped[str] = mapped_column(String(16), nullable=False, default="permanent")  # permanent | limited
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    banner_image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    cost_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    free_pull_interval_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    paid_pull_cooldown_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    pity_threshold: Mapped[int | None] = mapped_column(Integer, nullable=True)
    pity_rarity: Mapped[str | None] = mapped_column(String(3), nullable=True)

    rate_r: Mapped[Decimal] = mapped_column(Numeric(6, 3), nullable=False, default=0)
    rate_s: Mapped[Decimal] = mapped_column(Numeric(6, 3), nullable=False, default=0)
    rate_ss: Mapped[Decimal] = mapped_column(Numeric(6, 3), nullable=False, default=0)
    rate_sss: Mapped[Decimal] = mapped_column(Numeric(6, 3), nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class GachaPoolItem(Base):
    """Membership of an item in a pool's drop table."""

    __tablename__ = "gacha_pool_items"

    pool_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("gacha_pools.pool_id", ondelete="CASCADE"), primary_key=True
    )
    item_id: Mapped[str] = mapped_column(String(36), ForeignKey("items.item_id"), primary_key=True)
    weight: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    item: Mapped[Item | None] = relationship(lazy="joined")
