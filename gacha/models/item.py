"""Item catalogue rows referenced by pull results."""

from __future__ import annotations

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from gacha.models.base import Base


class Item(Base):
    """A drawable item (usually granting a Discord role)."""

    __tablename__ = "items"

    item_id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    rarity: Mapped[str | None] = mapped_column(String(3), nullable=True)  # R | S | SS | SSS
    discord_role_id: Mapped[str | None] = mapped_column(String(32), nullable=True)
    reward_points: Mapped[int | None] = mapped_column(Integer, nullable=True)
