"""Classification of ``perform_gacha_draw`` failures and their retry delays.

The procedure signals business outcomes by raising one of a few fixed tokens
(``INSUFFICIENT_POINTS``, ``NO_ACTIVE_POOL``, ``PAID_COOLDOWN``). Contention is
reported by Postgres itself through SQLSTATE codes. Both are mapped onto
``ErrorCode`` first; only an unrecognized code falls back to matching the
message text.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorKind(str, Enum):
    FATAL = "fatal"
    RETRYABLE = "retryable"
    UNCLASSIFIED = "unclassified"


class ErrorCode(str, Enum):
    INSUFFICIENT_POINTS = "INSUFFICIENT_POINTS"
    NO_ACTIVE_POOL = "NO_ACTIVE_POOL"
    PAID_COOLDOWN = "PAID_COOLDOWN"
    LOCK_NOT_AVAILABLE = "LOCK_NOT_AVAILABLE"
    SERIALIZATION_FAILURE = "SERIALIZATION_FAILURE"
    DEADLOCK_DETECTED = "DEADLOCK_DETECTED"
    STATEMENT_TIMEOUT = "STATEMENT_TIMEOUT"
    UNKNOWN = "UNKNOWN"


FATAL_CODES = frozenset({ErrorCode.INSUFFICIENT_POINTS, ErrorCode.NO_ACTIVE_POOL})
COOLDOWN_CODES = frozenset({ErrorCode.PAID_COOLDOWN})
CONTENTION_CODES = frozenset(
    {
        ErrorCode.LOCK_NOT_AVAILABLE,
        ErrorCode.SERIALIZATION_FAILURE,
        ErrorCode.DEADLOCK_DETECTED,
        ErrorCode.STATEMENT_TIMEOUT,
    }
)

SQLSTATE_CODES: dict[str, ErrorCode] = {
    "55P03": ErrorCode.LOCK_NOT_AVAILABLE,
    "40001": ErrorCode.SERIALIZATION_FAILURE,
    "40P01": ErrorCode.DEADLOCK_DETECTED,
    "57014": ErrorCode.STATEMENT_TIMEOUT,
}

# Checked in order; fatal markers first so "insufficient ... lock" stays fatal.
MESSAGE_MARKERS: tuple[tuple[str, ErrorCode], ...] = (
    ("insufficient_points", ErrorCode.INSUFFICIENT_POINTS),
    ("insufficient", ErrorCode.INSUFFICIENT_POINTS),
    ("no_active_pool", ErrorCode.NO_ACTIVE_POOL),
    ("no active pool", ErrorCode.NO_ACTIVE_POOL),
    ("no eligible pool", ErrorCode.NO_ACTIVE_POOL),
    ("paid_cooldown", ErrorCode.PAID_COOLDOWN),
    ("cooldown", ErrorCode.PAID_COOLDOWN),
    ("deadlock", ErrorCode.DEADLOCK_DETECTED),
    ("could not serialize", ErrorCode.SERIALIZATION_FAILURE),
    ("serialization", ErrorCode.SERIALIZATION_FAILURE),
    ("statement timeout", ErrorCode.STATEMENT_TIMEOUT),
    ("canceling statement", ErrorCode.STATEMENT_TIMEOUT),
    ("timeout", ErrorCode.STATEMENT_TIMEOUT),
    ("lock", ErrorCode.LOCK_NOT_AVAILABLE),
)


class RemoteDrawError(Exception):
    """Failure reported by one ``perform_gacha_draw`` call.

    ``code`` is whatever structured code the remote boundary produced (a
    SQLSTATE, an ``ErrorCode`` value, or None).
    """

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code

    def __str__(self) -> str:
        return self.message or (self.code or "unknown error")


@dataclass(frozen=True)
class Classification:
    kind: ErrorKind
    code: ErrorCode

    @property
    def is_cooldown(self) -> bool:
        return self.code in COOLDOWN_CODES


def _code_from_structured(raw: str | None) -> ErrorCode | None:
    if not raw:
        return None
    token = raw.strip().upper()
    if token in SQLSTATE_CODES:
        return SQLSTATE_CODES[token]
    try:
        code = ErrorCode(token)
    except ValueError:
        return None
    return None if code is ErrorCode.UNKNOWN else code


def _code_from_message(message: str) -> ErrorCode:
    text = message.lower()
    for marker, code in MESSAGE_MARKERS:
        if marker in text:
            return code
    return ErrorCode.UNKNOWN


def resolve_code(error: RemoteDrawError) -> ErrorCode:
    structured = _code_from_structured(error.code)
    if structured is not None:
        return structured
    # Legacy path: user-defined RAISE EXCEPTION arrives as P0001 with the token
    # in the message, so the text is the only signal left.
    return _code_from_message(f"{error.message} {error.code or ''}")


def classify(error: RemoteDrawError) -> Classification:
    code = resolve_code(error)
    if code in FATAL_CODES:
        return Classification(ErrorKind.FATAL, code)
    if code in COOLDOWN_CODES or code in CONTENTION_CODES:
        return Classification(ErrorKind.RETRYABLE, code)
    return Classification(ErrorKind.UNCLASSIFIED, code)


@dataclass(frozen=True)
class BackoffTrack:
    base_ms: int
    step_ms: int
    cap_ms: int

    def delay_ms(self, retry_count: int) -> int:
        return min(self.cap_ms, self.base_ms + retry_count * self.step_ms)


# Cooldown waits on a time gate; contention waits on other transactions.
COOLDOWN_BACKOFF = BackoffTrack(base_ms=280, step_ms=140, cap_ms=1600)
CONTENTION_BACKOFF = BackoffTrack(base_ms=120, step_ms=90, cap_ms=900)


def retry_delay_ms(classification: Classification, retry_count: int) -> int:
    track = COOLDOWN_BACKOFF if classification.is_cooldown else CONTENTION_BACKOFF
    return track.delay_ms(retry_count)
