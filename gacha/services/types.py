"""Value types passed between repositories, services and routes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Rarity(str, Enum):
    R = "R"
    S = "S"
    SS = "SS"
    SSS = "SSS"


MIN_DRAW_AMOUNT = 1
MAX_DRAW_AMOUNT = 10


def clamp_amount(raw: object) -> int:
    """Clamp a requested pull count into [1, 10]; unusable input means 1."""

    try:
        amount = int(raw)  # type: ignore[call-overload]
    except (TypeError, ValueError, OverflowError):
        return MIN_DRAW_AMOUNT
    return max(MIN_DRAW_AMOUNT, min(MAX_DRAW_AMOUNT, amount))


@dataclass(frozen=True)
class DrawRequest:
    user_id: str
    pool_id: str | None
    amount: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", clamp_amount(self.amount))


@dataclass(frozen=True)
class DrawUnitOutcome:
    """One committed pull as reported by ``perform_gacha_draw``.

    ``is_variant`` means the procedure treated the item as a duplicate and paid
    out an alternate reward; it is passed through untouched.
    """

    item_id: str
    name: str
    rarity: str
    role_id: str | None = None
    reward_points: int = 0
    is_variant: bool = False
    is_free: bool = False
    refund_points: int = 0
    new_balance: int | None = None


@dataclass(frozen=True)
class BatchOutcome:
    results: tuple[DrawUnitOutcome, ...]
    requested_amount: int
    warning: str | None = None
    completed_amount: int = field(init=False)
    partial: bool = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "results", tuple(self.results))
        object.__setattr__(self, "completed_amount", len(self.results))
        object.__setattr__(self, "partial", self.completed_amount < self.requested_amount)


@dataclass(frozen=True)
class HistoryQuery:
    limit: int = 30
    offset: int = 0
    pool_id: str | None = None
    rarities: frozenset[str] = frozenset()
    pity_only: bool = False
    q: str = ""


@dataclass(frozen=True)
class PoolRef:
    pool_id: str
    name: str | None
    kind: str | None


@dataclass(frozen=True)
class PullResultView:
    item_id: str
    name: str | None
    rarity: str | None
    role_id: str | None
    reward_points: int
    qty: int
    is_pity: bool
    is_variant: bool = False


@dataclass(frozen=True)
class HistoryEntry:
    pull_id: str
    created_at: datetime
    pool: PoolRef
    is_free: bool
    spent_points: int
    result: PullResultView | None


@dataclass(frozen=True)
class HistoryPage:
    entries: tuple[HistoryEntry, ...]
    next_offset: int
    exhausted: bool
