"""Pool listing and member status routes."""

from __future__ import annotations

from flask import Blueprint, request

from gacha.db import get_session
from gacha.schemas.pool import (
    PoolItemSchema,
    PoolItemsQuerySchema,
    PoolSchema,
    StatusQuerySchema,
    StatusSchema,
)
from gacha.services.status_service import StatusService
from gacha.utils.identity import current_user_id
from gacha.utils.responses import ok

pools_bp = Blueprint("pools", __name__)

_pools_schema = PoolSchema(many=True)
_items_query_schema = PoolItemsQuerySchema()
_items_schema = PoolItemSchema(many=True)
_status_query_schema = StatusQuerySchema()
_status_schema = StatusSchema()
_service = StatusService()


@pools_bp.get("/pools")
def list_pools():
    """Active pools, most recently updated first."""

    current_user_id()
    pools = _service.list_pools(get_session())
    return ok({"pools": _pools_schema.dump(pools)})


@pools_bp.get("/pool-items")
def list_pool_items():
    current_user_id()
    data = _items_query_schema.load(request.args)

    items = _service.list_pool_items(get_session(), data["pool_id"])
    return ok({"items": _items_schema.dump(items)})


@pools_bp.get("/status")
def get_status():
    user_id = current_user_id()
    data = _status_query_schema.load(request.args)

    status = _service.get_status(get_session(), user_id, data.get("pool_id"))
    return ok(_status_schema.dump(status))
