from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from gacha import create_app
from gacha.models import GachaPool, GachaPull, GachaPullResult, Item
from gacha.services.error_classifier import RemoteDrawError
from gacha.services.types import DrawUnitOutcome

USER_HEADER = "X-Discord-User-Id"
POOL_A = "0b7c5d3e-8f1a-4c2b-9d3e-1a2b3c4d5e6f"
POOL_B = "5f6e7d8c-1b2a-4c3d-8e9f-0a1b2c3d4e5f"
BASE_TIME = datetime(2026, 1, 1, 12, 0, 0)


@pytest.fixture()
def app(tmp_path):
    app = create_app(
        {
            "TESTING": True,
            "DATABASE_URL": f"sqlite:///{tmp_path / 'gacha.db'}",
            "DB_CREATE_TABLES": True,
            "USER_ID_HEADER": USER_HEADER,
        }
    )
    yield app
    app.extensions["engine"].dispose()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def db_session(app):
    session = app.extensions["session_factory"]()
    yield session
    session.close()


def unit(n: int = 1, rarity: str = "R") -> DrawUnitOutcome:
    return DrawUnitOutcome(item_id=f"item-{n}", name=f"Item {n}", rarity=rarity, reward_points=10)


class ScriptedProcedure:
    """Stand-in for perform_gacha_draw that replays a fixed script.

    Each step is a ``DrawUnitOutcome`` to return or a ``RemoteDrawError`` to
    raise. Once the script runs out every further call succeeds.
    """

    def __init__(self, steps=None):
        self.steps = list(steps or [])
        self.calls: list[tuple[str, str | None]] = []

    def __call__(self, user_id, pool_id):
        self.calls.append((user_id, pool_id))
        if self.steps:
            step = self.steps.pop(0)
        else:
            step = unit(len(self.calls))
        if isinstance(step, RemoteDrawError):
            raise step
        return step


class RecordingSleep:
    def __init__(self):
        self.delays: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def seed_pools(session) -> None:
    session.add_all(
        [
            GachaPool(pool_id=POOL_A, name="Standard", kind="permanent", cost_points=100,
                      paid_pull_cooldown_seconds=3, rate_r=80, rate_s=15, rate_ss=4, rate_sss=1,
                      updated_at=BASE_TIME),
            GachaPool(pool_id=POOL_B, name="Spring Banner", kind="limited", cost_points=150,
                      paid_pull_cooldown_seconds=3, pity_threshold=90, pity_rarity="SSS",
                      rate_r=70, rate_s=20, rate_ss=8, rate_sss=2,
                      updated_at=BASE_TIME + timedelta(days=1)),
        ]
    )
    session.flush()


def seed_pulls(session, user_id: str, specs) -> list[str]:
    """Insert pulls newest-first.

    ``specs`` is a list of dicts with optional keys ``pool_id``, ``rarity``,
    ``name``, ``is_pity``. ``rarity=None`` stores a pull without a result row.
    Returns pull ids in newest-first order.
    """

    pull_ids: list[str] = []
    for i, spec in enumerate(specs):
        pull_id = f"{user_id}-pull-{i:04d}"
        pull = GachaPull(
            pull_id=pull_id,
            discord_user_id=user_id,
            pool_id=spec.get("pool_id", POOL_A),
            is_free=bool(spec.get("is_free", False)),
            spent_points=int(spec.get("spent_points", 100)),
            created_at=BASE_TIME - timedelta(minutes=i),
        )
        session.add(pull)

        rarity = spec.get("rarity", "R")
        if rarity is not None:
            item_id = f"item-{rarity}-{spec.get('name', 'plain')}"
            if session.get(Item, item_id) is None:
                session.add(
                    Item(item_id=item_id, name=spec.get("name", f"{rarity} Role"), rarity=rarity,
                         discord_role_id=None, reward_points=5)
                )
                session.flush()
            session.add(
                GachaPullResult(pull_id=pull_id, item_id=item_id, qty=1,
                                is_pity=bool(spec.get("is_pity", False)))
            )
        pull_ids.append(pull_id)
    session.commit()
    return pull_ids
