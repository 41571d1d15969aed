"""Marshmallow schemas for pools and member status."""

from __future__ import annotations

from marshmallow import Schema, fields, post_dump, validate

from gacha.schemas.history import UUID_PATTERN, PoolIdQuerySchema


class PoolSchema(Schema):
    """Serialize an active pool."""

    pool_id = fields.String(data_key="poolId")
    name = fields.String()
    kind = fields.String()
    is_active = fields.Boolean(data_key="isActive")
    banner_image_url = fields.String(data_key="bannerImageUrl", allow_none=True)
    cost_points = fields.Integer(data_key="costPoints")
    free_pull_interval_seconds = fields.Integer(data_key="freePullIntervalSeconds", allow_none=True)
    paid_pull_cooldown_seconds = fields.Integer(data_key="paidPullCooldownSeconds")
    pity_threshold = fields.Integer(data_key="pityThreshold", allow_none=True)
    pity_rarity = fields.String(data_key="pityRarity", allow_none=True)
    rate_r = fields.Float(data_key="rateR")
    rate_s = fields.Float(data_key="rateS")
    rate_ss = fields.Float(data_key="rateSS")
    rate_sss = fields.Float(data_key="rateSSS")


class PoolItemsQuerySchema(PoolIdQuerySchema):
    pool_id = fields.String(
        data_key="poolId",
        required=True,
        error_messages={"required": "POOL_ID_REQUIRED"},
        validate=validate.Regexp(UUID_PATTERN, error="POOL_ID_INVALID"),
    )


class PoolItemSchema(Schema):
    """Serialize an item drawable from a pool."""

    item_id = fields.String(data_key="itemId")
    name = fields.String(allow_none=True)
    rarity = fields.String(allow_none=True)
    discord_role_id = fields.String(data_key="discordRoleId", allow_none=True)
    reward_points = fields.Integer(data_key="rewardPoints", allow_none=True)

    @post_dump
    def _default_reward(self, data, **kwargs):  # type: ignore[no-untyped-def]
        if data.get("rewardPoints") is None:
            data["rewardPoints"] = 0
        return data


class StatusQuerySchema(PoolIdQuerySchema):
    pool_id = fields.String(
        data_key="poolId",
        load_default=None,
        allow_none=True,
        validate=validate.Regexp(UUID_PATTERN, error="POOL_ID_INVALID"),
    )


class StatusSchema(Schema):
    balance = fields.Integer()
    pity_counter = fields.Integer(data_key="pityCounter")
    free_available_at = fields.DateTime(data_key="freeAvailableAt", allow_none=True)
    paid_available_at = fields.DateTime(data_key="paidAvailableAt", allow_none=True)
