"""Schemas for the pull history API."""

from __future__ import annotations

import math

from marshmallow import EXCLUDE, Schema, fields, post_load, pre_load, validate

from gacha.services.types import HistoryQuery, Rarity

UUID_PATTERN = r"(?i)^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$"

DEFAULT_LIMIT = 30
MAX_LIMIT = 50
MAX_OFFSET = 100_000
MAX_QUERY_LENGTH = 120


def _int_in_range(raw: object, fallback: int, lo: int, hi: int) -> int:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return fallback
    try:
        value = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return fallback
    if not math.isfinite(value):
        return fallback
    return max(lo, min(hi, int(value)))


def _parse_rarities(raw: str | None) -> frozenset[str]:
    if not raw:
        return frozenset()
    allowed = {r.value for r in Rarity}
    return frozenset(token for token in (part.strip() for part in raw.split(",")) if token in allowed)


class PoolIdQuerySchema(Schema):
    """Query string schema where an empty ``poolId`` counts as absent."""

    class Meta:
        unknown = EXCLUDE

    @pre_load
    def _drop_blank_pool_id(self, data, **kwargs):  # type: ignore[no-untyped-def]
        params = dict(data.items())
        if not str(params.get("poolId") or "").strip():
            params.pop("poolId", None)
        return params


class HistoryQuerySchema(PoolIdQuerySchema):
    """Load history query parameters.

    Numbers are clamped, unknown rarities are dropped; only a malformed
    ``poolId`` is an error.
    """

    limit = fields.Raw(load_default=None)
    offset = fields.Raw(load_default=None)
    pool_id = fields.String(
        data_key="poolId",
        load_default=None,
        allow_none=True,
        validate=validate.Regexp(UUID_PATTERN, error="POOL_ID_INVALID"),
    )
    rarities = fields.String(load_default=None, allow_none=True)
    pity = fields.String(load_default=None, allow_none=True)
    q = fields.String(load_default="", allow_none=True)

    @post_load
    def _to_query(self, data, **kwargs):  # type: ignore[no-untyped-def]
        return HistoryQuery(
            limit=_int_in_range(data.get("limit"), DEFAULT_LIMIT, 1, MAX_LIMIT),
            offset=_int_in_range(data.get("offset"), 0, 0, MAX_OFFSET),
            pool_id=data.get("pool_id") or None,
            rarities=_parse_rarities(data.get("rarities")),
            pity_only=data.get("pity") == "1",
            q=(data.get("q") or "").strip()[:MAX_QUERY_LENGTH].lower(),
        )


class PoolRefSchema(Schema):
    pool_id = fields.String(data_key="poolId")
    name = fields.String(allow_none=True)
    kind = fields.String(allow_none=True)


class PullResultSchema(Schema):
    item_id = fields.String(data_key="itemId")
    name = fields.String(allow_none=True)
    rarity = fields.String(allow_none=True)
    role_id = fields.String(data_key="discordRoleId", allow_none=True)
    reward_points = fields.Integer(data_key="rewardPoints")
    qty = fields.Integer()
    is_pity = fields.Boolean(data_key="isPity")
    is_variant = fields.Boolean(data_key="isVariant")


class HistoryEntrySchema(Schema):
    pull_id = fields.String(data_key="pullId")
    created_at = fields.DateTime(data_key="createdAt")
    pool = fields.Nested(PoolRefSchema)
    is_free = fields.Boolean(data_key="isFree")
    spent_points = fields.Integer(data_key="spentPoints")
    result = fields.Nested(PullResultSchema, allow_none=True)


class HistoryPageSchema(Schema):
    entries = fields.List(fields.Nested(HistoryEntrySchema))
    next_offset = fields.Integer(data_key="nextOffset")
    exhausted = fields.Boolean()
