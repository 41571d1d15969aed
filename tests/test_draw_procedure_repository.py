import pytest
from sqlalchemy.exc import OperationalError

from gacha.repositories.draw_procedure_repository import (
    DrawProcedureRepository,
    _to_outcome,
    remote_error_from,
)
from gacha.services.error_classifier import ErrorCode, ErrorKind, RemoteDrawError, classify


class FakeDriverError(Exception):
    def __init__(self, text: str, pgcode: str | None = None) -> None:
        super().__init__(text)
        self.pgcode = pgcode


def test_remote_error_keeps_sqlstate_and_first_line() -> None:
    orig = FakeDriverError("could not obtain lock on row\nCONTEXT: PL/pgSQL function perform_gacha_draw", "55P03")

    error = remote_error_from(OperationalError("SELECT 1", {}, orig))

    assert error.code == "55P03"
    assert error.message == "could not obtain lock on row"
    assert classify(error).code is ErrorCode.LOCK_NOT_AVAILABLE


def test_raised_business_token_is_classified_from_text() -> None:
    orig = FakeDriverError("PAID_COOLDOWN\nCONTEXT: PL/pgSQL function perform_gacha_draw", "P0001")

    error = remote_error_from(OperationalError("SELECT 1", {}, orig))

    assert classify(error).is_cooldown


def test_row_mapping() -> None:
    outcome = _to_outcome(
        {
            "out_item_id": "a1",
            "out_name": "Golden Cat",
            "out_rarity": "SSS",
            "out_discord_role_id": "998877",
            "out_is_free": True,
            "out_refund_points": 0,
            "out_reward_points": -4,
            "out_new_balance": 320,
            "out_is_variant": True,
        }
    )

    assert outcome.item_id == "a1"
    assert outcome.role_id == "998877"
    assert outcome.reward_points == 0
    assert outcome.is_variant is True
    assert outcome.is_free is True
    assert outcome.new_balance == 320


def test_driver_failure_surfaces_as_remote_error(app) -> None:
    # sqlite has no perform_gacha_draw, which is as good as any broken remote.
    repository = DrawProcedureRepository(app.extensions["engine"], statement_timeout_ms=500)

    with pytest.raises(RemoteDrawError) as info:
        repository.draw("member-1", None)

    assert classify(info.value).kind is ErrorKind.UNCLASSIFIED
