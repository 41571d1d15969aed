"""Schemas for the draw API."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, post_dump, post_load

from gacha.services.types import clamp_amount


class DrawRequestSchema(Schema):
    """Load the draw body.

    ``amount`` is clamped into 1..10 instead of being rejected.
    """

    class Meta:
        unknown = EXCLUDE

    pool_id = fields.String(data_key="poolId", required=False, load_default=None, allow_none=True)
    amount = fields.Raw(required=False, load_default=1, allow_none=True)

    @post_load
    def _normalize(self, data, **kwargs):  # type: ignore[no-untyped-def]
        pool_id = (data.get("pool_id") or "").strip() or None
        return {"pool_id": pool_id, "amount": clamp_amount(data.get("amount"))}


class DrawUnitOutcomeSchema(Schema):
    item_id = fields.String(data_key="itemId")
    name = fields.String()
    rarity = fields.String()
    role_id = fields.String(data_key="discordRoleId", allow_none=True)
    reward_points = fields.Integer(data_key="rewardPoints")
    is_variant = fields.Boolean(data_key="isVariant")
    is_free = fields.Boolean(data_key="isFree")
    refund_points = fields.Integer(data_key="refundPoints")
    new_balance = fields.Integer(data_key="newBalance", allow_none=True)


class BatchOutcomeSchema(Schema):
    results = fields.List(fields.Nested(DrawUnitOutcomeSchema))
    requested_amount = fields.Integer(data_key="requestedAmount")
    completed_amount = fields.Integer(data_key="completedAmount")
    partial = fields.Boolean()
    warning = fields.String(allow_none=True)

    @post_dump
    def _drop_empty_warning(self, data, **kwargs):  # type: ignore[no-untyped-def]
        if data.get("warning") is None:
            data.pop("warning", None)
        return data
