"""ORM models."""

from gacha.models.item import Item
from gacha.models.pool import GachaPool, GachaPoolItem
from gacha.models.pull import GachaPull, GachaPullResult
from gacha.models.user_state import GachaUserState, PointBalance

__all__ = ["GachaPool", "GachaPoolItem", "GachaPull", "GachaPullResult", "GachaUserState", "Item", "PointBalance"]
