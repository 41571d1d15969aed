"""Pool listing and per-member draw status."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.orm import Session

from gacha.models.item import Item
from gacha.models.pool import GachaPool
from gacha.repositories.pool_repository import PoolRepository, UserStateRepository


@dataclass(frozen=True)
class GachaStatus:
    balance: int
    pity_counter: int = 0
    free_available_at: datetime | None = None
    paid_available_at: datetime | None = None


class StatusService:
    """Pool and status use-cases."""

    def __init__(
        self,
        pools: PoolRepository | None = None,
        states: UserStateRepository | None = None,
    ) -> None:
        self._pools = pools or PoolRepository()
        self._states = states or UserStateRepository()

    def list_pools(self, session: Session) -> Sequence[GachaPool]:
        return self._pools.list_active(session)

    def list_pool_items(self, session: Session, pool_id: str) -> Sequence[Item]:
        return self._pools.list_items(session, pool_id)

    def get_status(self, session: Session, user_id: str, pool_id: str | None) -> GachaStatus:
        balance = self._states.get_balance(session, user_id)
        if not pool_id:
            return GachaStatus(balance=balance)

        state = self._states.get_pool_state(session, user_id, pool_id)
        if state is None:
            return GachaStatus(balance=balance)

        return GachaStatus(
            balance=balance,
            pity_counter=int(state.pity_counter),
            free_available_at=state.free_available_at,
            paid_available_at=state.paid_available_at,
        )
