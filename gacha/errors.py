"""Custom exceptions for centralized error handling."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class AppError(Exception):
    """Base application error."""

    code: str
    message: str
    status_code: int
    details: Any | None = None


class ValidationError(AppError):
    """Input validation error."""

    def __init__(self, message: str = "Validation error", details: Any | None = None) -> None:
        super().__init__(code="validation_error", message=message, status_code=400, details=details)


class UnauthorizedError(AppError):
    """Caller identity missing."""

    def __init__(self, message: str = "Unauthorized", details: Any | None = None) -> None:
        super().__init__(code="unauthorized", message=message, status_code=401, details=details)


@dataclass
class DrawAbortedError(AppError):
    """A fatal remote error stopped the whole batch.

    ``completed`` holds the units that committed before the fatal one. They are
    kept for logging only and are never rendered to the caller.
    """

    completed: list[Any] = field(default_factory=list)


class DrawUnavailableError(AppError):
    """The batch stopped before a single unit completed."""

    def __init__(self, message: str = "Draw temporarily unavailable", details: Any | None = None) -> None:
        super().__init__(code="draw_unavailable", message=message, status_code=503, details=details)


class HistoryUnavailableError(AppError):
    """The pull ledger could not be read."""

    def __init__(self, message: str = "Failed to load history", details: Any | None = None) -> None:
        super().__init__(
            code="gacha_history_query_failed", message=message, status_code=500, details=details
        )
