"""Client-side projections over query results.

latest_record is the last-wins "current lead" rule; sort_listings is the
public adoption order; OptimisticRecordView layers one speculative record
over a live subscription.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any

from apa.application.dtos.record import RecordResult


def _created_key(record: RecordResult, key: str) -> tuple[int, Any]:
    value = record.get(key)
    if isinstance(value, datetime):
        return (1, value)
    return (0, 0)


def latest_record(records: Sequence[RecordResult], key: str = "createdAt") -> RecordResult | None:
    """Return the most recent record by key; on ties the later one in input order wins."""
    best: RecordResult | None = None
    for record in records:
        if best is None or _created_key(record, key) >= _created_key(best, key):
            best = record
    return best


def _listing_key(record: RecordResult) -> tuple[float, float]:
    order = record.get("sortOrder")
    order_key = float(order) if isinstance(order, (int, float)) and not isinstance(order, bool) else float("inf")
    created = record.get("createdAt")
    created_key = -created.timestamp() if isinstance(created, datetime) else 0.0
    return (order_key, created_key)


def sort_listings(records: Iterable[RecordResult]) -> list[RecordResult]:
    """sortOrder ascending (unset last), then createdAt descending.

    Done in process because Firestore drops documents without the ordered
    field from an order_by query.
    """
    return sorted(records, key=_listing_key)


class OptimisticRecordView:
    """Current record for one subscriber: confirmed last-wins value plus an optional speculative one.

    show() displays a record before the store confirms it; the next
    authoritative snapshot (ready or empty) replaces it, whether or not it
    contains that record. Snapshots in an error state keep what is shown.
    """

    def __init__(self) -> None:
        self._confirmed: RecordResult | None = None
        self._optimistic: RecordResult | None = None

    @property
    def current(self) -> RecordResult | None:
        return self._optimistic if self._optimistic is not None else self._confirmed

    @property
    def is_optimistic(self) -> bool:
        return self._optimistic is not None

    def show(self, record: RecordResult) -> None:
        self._optimistic = record

    def discard(self) -> None:
        self._optimistic = None

    def apply(self, records: Sequence[RecordResult]) -> RecordResult | None:
        """Apply an authoritative snapshot and return what should be displayed."""
        self._confirmed = latest_record(records)
        self._optimistic = None
        return self.current
