import pytest

from conftest import RecordingSleep, ScriptedProcedure, unit
from gacha.errors import DrawAbortedError, DrawUnavailableError
from gacha.services.draw_orchestrator import DrawOrchestrator
from gacha.services.error_classifier import RemoteDrawError
from gacha.services.types import DrawRequest


def _cooldown() -> RemoteDrawError:
    return RemoteDrawError("PAID_COOLDOWN", code="P0001")


def _lock() -> RemoteDrawError:
    return RemoteDrawError("could not obtain lock on row in relation \"gacha_user_state\"", code="55P03")


@pytest.mark.parametrize("amount", range(1, 11))
def test_full_success_for_every_amount(amount: int) -> None:
    procedure = ScriptedProcedure()
    orchestrator = DrawOrchestrator(procedure, sleep=RecordingSleep())

    outcome = orchestrator.execute_batch(DrawRequest(user_id="u1", pool_id="p1", amount=amount))

    assert outcome.completed_amount == amount
    assert outcome.requested_amount == amount
    assert outcome.partial is False
    assert outcome.warning is None
    assert len(procedure.calls) == amount


@pytest.mark.parametrize("raw, expected", [(0, 1), (-5, 1), (11, 10), (99, 10), (None, 1), ("3", 3), ("abc", 1)])
def test_amount_is_clamped_not_rejected(raw, expected) -> None:
    procedure = ScriptedProcedure()
    orchestrator = DrawOrchestrator(procedure, sleep=RecordingSleep())

    outcome = orchestrator.execute_batch(DrawRequest(user_id="u1", pool_id=None, amount=raw))

    assert outcome.requested_amount == expected
    assert len(procedure.calls) == expected


def test_results_keep_request_order() -> None:
    procedure = ScriptedProcedure([unit(1, "R"), _lock(), unit(2, "SSS"), unit(3, "S")])
    orchestrator = DrawOrchestrator(procedure, sleep=RecordingSleep())

    outcome = orchestrator.execute_batch(DrawRequest(user_id="u1", pool_id="p1", amount=3))

    assert [r.item_id for r in outcome.results] == ["item-1", "item-2", "item-3"]
    assert [r.rarity for r in outcome.results] == ["R", "SSS", "S"]


def test_retry_exhaustion_on_unit_three_returns_partial_batch() -> None:
    steps = [unit(1), unit(2)] + [_lock() for _ in range(11)]
    procedure = ScriptedProcedure(steps)
    sleep = RecordingSleep()
    orchestrator = DrawOrchestrator(procedure, sleep=sleep)

    outcome = orchestrator.execute_batch(DrawRequest(user_id="u1", pool_id="p1", amount=5))

    assert len(outcome.results) == 2
    assert outcome.completed_amount == 2
    assert outcome.partial is True
    assert outcome.warning is not None
    assert "Unit 3" in outcome.warning
    assert "could not obtain lock" in outcome.warning
    # 2 successes + 11 attempts on unit 3, nothing after.
    assert len(procedure.calls) == 13
    assert len(sleep.delays) == 10


def test_fatal_error_discards_earlier_units() -> None:
    procedure = ScriptedProcedure([unit(1), RemoteDrawError("INSUFFICIENT_POINTS", code="P0001")])
    sleep = RecordingSleep()
    orchestrator = DrawOrchestrator(procedure, sleep=sleep)

    with pytest.raises(DrawAbortedError) as info:
        orchestrator.execute_batch(DrawRequest(user_id="u1", pool_id="p1", amount=5))

    assert info.value.code == "insufficient_points"
    assert info.value.status_code == 400
    # The committed first unit only survives on the exception, for logs.
    assert [r.item_id for r in info.value.completed] == ["item-1"]
    assert len(procedure.calls) == 2
    assert sleep.delays == []


def test_fatal_error_on_first_unit() -> None:
    procedure = ScriptedProcedure([RemoteDrawError("NO_ACTIVE_POOL")])
    orchestrator = DrawOrchestrator(procedure, sleep=RecordingSleep())

    with pytest.raises(DrawAbortedError) as info:
        orchestrator.execute_batch(DrawRequest(user_id="u1", pool_id=None, amount=5))

    assert info.value.code == "no_active_pool"
    assert info.value.completed == []


def test_cooldown_retries_follow_cooldown_track() -> None:
    procedure = ScriptedProcedure([_cooldown() for _ in range(11)])
    sleep = RecordingSleep()
    orchestrator = DrawOrchestrator(procedure, sleep=sleep)

    with pytest.raises(DrawUnavailableError):
        orchestrator.execute_batch(DrawRequest(user_id="u1", pool_id="p1", amount=1))

    expected_ms = [min(1600, 280 + 140 * r) for r in range(1, 11)]
    assert sleep.delays == pytest.approx([ms / 1000 for ms in expected_ms])


def test_contention_retries_follow_contention_track() -> None:
    procedure = ScriptedProcedure([unit(1)] + [_lock() for _ in range(11)])
    sleep = RecordingSleep()
    orchestrator = DrawOrchestrator(procedure, sleep=sleep)

    outcome = orchestrator.execute_batch(DrawRequest(user_id="u1", pool_id="p1", amount=2))

    expected_ms = [min(900, 120 + 90 * r) for r in range(1, 11)]
    assert sleep.delays == pytest.approx([ms / 1000 for ms in expected_ms])
    assert outcome.completed_amount == 1
    assert "Unit 2 of 2" in (outcome.warning or "")


def test_retry_counter_resets_per_unit() -> None:
    steps = [_cooldown(), _cooldown(), unit(1), _cooldown(), unit(2)]
    sleep = RecordingSleep()
    orchestrator = DrawOrchestrator(ScriptedProcedure(steps), sleep=sleep)

    outcome = orchestrator.execute_batch(DrawRequest(user_id="u1", pool_id="p1", amount=2))

    assert outcome.partial is False
    assert sleep.delays == pytest.approx([0.42, 0.56, 0.42])


def test_unclassified_error_stops_after_one_observation() -> None:
    procedure = ScriptedProcedure([unit(1), RemoteDrawError("server closed the connection unexpectedly")])
    sleep = RecordingSleep()
    orchestrator = DrawOrchestrator(procedure, sleep=sleep)

    outcome = orchestrator.execute_batch(DrawRequest(user_id="u1", pool_id="p1", amount=4))

    assert outcome.completed_amount == 1
    assert outcome.partial is True
    assert "Unit 2 of 4" in (outcome.warning or "")
    assert sleep.delays == []
    assert len(procedure.calls) == 2


def test_nothing_completed_raises_unavailable_with_warning() -> None:
    procedure = ScriptedProcedure([RemoteDrawError("boom")])
    orchestrator = DrawOrchestrator(procedure, sleep=RecordingSleep())

    with pytest.raises(DrawUnavailableError) as info:
        orchestrator.execute_batch(DrawRequest(user_id="u1", pool_id="p1", amount=3))

    assert info.value.status_code == 503
    assert info.value.details == {"failedUnit": 1, "requestedAmount": 3}
    assert str(info.value.__cause__) == "boom"
    assert "boom" not in repr(info.value.details)


def test_pool_and_user_are_forwarded() -> None:
    procedure = ScriptedProcedure()
    DrawOrchestrator(procedure, sleep=RecordingSleep()).execute_batch(
        DrawRequest(user_id="member-9", pool_id="pool-x", amount=2)
    )

    assert procedure.calls == [("member-9", "pool-x"), ("member-9", "pool-x")]
