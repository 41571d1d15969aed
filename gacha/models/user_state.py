"""Per-member balance and per-pool draw state."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from gacha.models.base import Base


class PointBalance(Base):
    __tablename__ = "point_balances"

    discord_user_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    balance: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class GachaUserState(Base):
    """Pity counter and cooldown gates for one member in one pool."""

    __tablename__ = "gacha_user_state"

    discord_user_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    pool_id: Mapped[str] = mapped_column(String(36), ForeignKey("gacha_pools.pool_id"), primary_key=True)
    pity_counter: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    free_available_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    paid_available_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
