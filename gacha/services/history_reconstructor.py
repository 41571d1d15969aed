"""Filtered, resumable pages over a member's pull history.

The ledger read returns each pull joined with one representative result row.
Rarity, pity and item-name filters apply to that nested row and cannot be sent
to the store in this shape, so rows are filtered here while scanning forward.
"""

from __future__ import annotations

import logging
from itertools import islice

from gacha.services.ledger_scan import CHUNK_SIZE, SCAN_BUDGET, CappedLedgerScan, FetchChunk
from gacha.services.types import HistoryEntry, HistoryPage, HistoryQuery

logger = logging.getLogger(__name__)


def entry_matches(entry: HistoryEntry, query: HistoryQuery) -> bool:
    if query.pool_id and entry.pool.pool_id != query.pool_id:
        return False

    result = entry.result
    if query.rarities and (result is None or result.rarity not in query.rarities):
        return False
    if query.pity_only and (result is None or not result.is_pity):
        return False
    if query.q:
        name = (result.name if result is not None else None) or ""
        if query.q.lower() not in name.lower():
            return False
    return True


class HistoryReconstructor:
    """Build one ``HistoryPage`` from a chunked ledger reader."""

    def __init__(
        self,
        fetch_chunk: FetchChunk,
        chunk_size: int = CHUNK_SIZE,
        scan_budget: int = SCAN_BUDGET,
    ) -> None:
        self._fetch_chunk = fetch_chunk
        self._chunk_size = chunk_size
        self._scan_budget = scan_budget

    def page(self, query: HistoryQuery) -> HistoryPage:
        scan = CappedLedgerScan(
            self._fetch_chunk,
            start_offset=query.offset,
            chunk_size=self._chunk_size,
            scan_budget=self._scan_budget,
        )
        matching = (entry for entry in scan if entry_matches(entry, query))
        entries = tuple(islice(matching, query.limit))

        if scan.budget_spent and len(entries) < query.limit:
            logger.info(
                "History scan budget spent offset=%d scanned=%d matched=%d",
                query.offset,
                scan.scanned,
                len(entries),
            )

        return HistoryPage(
            entries=entries,
            next_offset=scan.offset,
            exhausted=len(entries) < query.limit,
        )
