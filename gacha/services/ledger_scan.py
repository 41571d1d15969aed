"""Bounded forward scan over the pull ledger."""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterator, Sequence

from gacha.services.types import HistoryEntry

FetchChunk = Callable[[int, int], Sequence[HistoryEntry]]

CHUNK_SIZE = 50
SCAN_BUDGET = 500


class CappedLedgerScan(Iterator[HistoryEntry]):
    """Lazy, finite, non-restartable iterator over ledger rows.

    Rows are pulled from ``fetch_chunk(offset, limit)`` in windows of
    ``chunk_size``. No new window is requested once ``scan_budget`` rows have
    been fetched or the ledger returned a short window.

    ``offset`` always points just past the last row handed out, so a new scan
    seeded with it resumes without skipping or repeating rows.
    """

    def __init__(
        self,
        fetch_chunk: FetchChunk,
        start_offset: int = 0,
        chunk_size: int = CHUNK_SIZE,
        scan_budget: int = SCAN_BUDGET,
    ) -> None:
        self._fetch_chunk = fetch_chunk
        self._chunk_size = chunk_size
        self._scan_budget = scan_budget
        self._buffer: deque[HistoryEntry] = deque()
        self._done = False

        self.offset = start_offset
        self.scanned = 0
        self.remote_exhausted = False

    @property
    def budget_spent(self) -> bool:
        return self.scanned >= self._scan_budget

    def __next__(self) -> HistoryEntry:
        if self._done:
            raise StopIteration

        if not self._buffer and not self._fill():
            self._done = True
            raise StopIteration

        self.offset += 1
        return self._buffer.popleft()

    def _fill(self) -> bool:
        if self.remote_exhausted or self.budget_spent:
            return False

        rows = list(self._fetch_chunk(self.offset, self._chunk_size))
        if not rows:
            self.remote_exhausted = True
            return False

        self.scanned += len(rows)
        if len(rows) < self._chunk_size:
            self.remote_exhausted = True

        self._buffer.extend(rows)
        return True
