"""Turns a request for N pulls into N sequential, individually retried draws."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from gacha.errors import DrawAbortedError, DrawUnavailableError
from gacha.services.error_classifier import (
    ErrorCode,
    ErrorKind,
    RemoteDrawError,
    classify,
    retry_delay_ms,
)
from gacha.services.types import BatchOutcome, DrawRequest, DrawUnitOutcome

logger = logging.getLogger(__name__)

DrawProcedure = Callable[[str, str | None], DrawUnitOutcome]

MAX_RETRIES_PER_UNIT = 10

FATAL_MESSAGES = {
    ErrorCode.INSUFFICIENT_POINTS: "Not enough points for this pull",
    ErrorCode.NO_ACTIVE_POOL: "No active pool is available",
}


class DrawOrchestrator:
    """Run a batch of pulls against ``perform_gacha_draw``.

    Units run strictly in order, one remote transaction each. A fatal error
    aborts the whole batch with ``DrawAbortedError``; a retryable error is
    retried on the same unit with class-specific backoff until the budget is
    spent, after which the batch stops and reports what completed.

    Each call may already have debited points upstream. Nothing here undoes a
    committed unit, and a retry relies on the procedure rejecting a duplicate
    inside the same cooldown/pity window.
    """

    def __init__(
        self,
        procedure: DrawProcedure,
        sleep: Callable[[float], None] = time.sleep,
        max_retries: int = MAX_RETRIES_PER_UNIT,
    ) -> None:
        self._procedure = procedure
        self._sleep = sleep
        self._max_retries = max_retries

    def execute_batch(self, request: DrawRequest) -> BatchOutcome:
        amount = request.amount
        results: list[DrawUnitOutcome] = []
        warning: str | None = None
        failure: RemoteDrawError | None = None

        for index in range(amount):
            outcome, failure = self._run_unit(request, index, results)
            if outcome is None:
                warning = f"Unit {index + 1} of {amount} failed: {failure}"
                break
            results.append(outcome)

        batch = BatchOutcome(results=tuple(results), requested_amount=amount, warning=warning)

        if batch.partial:
            logger.warning(
                "Partial draw batch user=%s pool=%s completed=%d requested=%d: %s",
                request.user_id,
                request.pool_id,
                batch.completed_amount,
                batch.requested_amount,
                warning,
            )
        if batch.completed_amount == 0:
            # Driver text stays in the server log, chained as the cause.
            raise DrawUnavailableError(
                details={"failedUnit": 1, "requestedAmount": amount}
            ) from failure

        return batch

    def _run_unit(
        self,
        request: DrawRequest,
        index: int,
        completed: list[DrawUnitOutcome],
    ) -> tuple[DrawUnitOutcome | None, RemoteDrawError | None]:
        """Draw one unit, retrying transient failures.

        Returns ``(outcome, None)`` on success or ``(None, last_error)`` when
        the batch has to stop here.
        """

        retry_count = 0
        while True:
            try:
                return self._procedure(request.user_id, request.pool_id), None
            except RemoteDrawError as exc:
                classification = classify(exc)

                if classification.kind is ErrorKind.FATAL:
                    logger.warning(
                        "Fatal draw error user=%s unit=%d code=%s; discarding %d completed unit(s)",
                        request.user_id,
                        index + 1,
                        classification.code.value,
                        len(completed),
                    )
                    raise DrawAbortedError(
                        code=classification.code.value.lower(),
                        message=FATAL_MESSAGES.get(classification.code, "Draw failed"),
                        status_code=400,
                        completed=list(completed),
                    ) from exc

                if classification.kind is ErrorKind.RETRYABLE:
                    retry_count += 1
                    if retry_count <= self._max_retries:
                        delay_ms = retry_delay_ms(classification, retry_count)
                        logger.info(
                            "Retrying draw unit=%d attempt=%d code=%s in %dms",
                            index + 1,
                            retry_count + 1,
                            classification.code.value,
                            delay_ms,
                        )
                        self._sleep(delay_ms / 1000.0)
                        continue

                return None, exc
