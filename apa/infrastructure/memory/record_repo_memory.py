"""In-memory record repository (development and tests).

Same contract as FirestoreRecordRepository, including the parts of
Firestore's behaviour the services depend on: store-assigned timestamps that
follow commit order, documents missing an order_by field dropping out of
ordered queries, atomic batches, and (optionally) rejection of queries whose
composite index is not declared.
"""

from __future__ import annotations

import asyncio
import copy
from collections.abc import Iterable, Mapping
from datetime import datetime, timedelta
from typing import Any

from apa.application.dtos.record import DESCENDING, FieldFilter, RecordQuery, RecordResult
from apa.domain.exceptions import (
    ConfigurationException,
    RecordAlreadyExistsException,
    ResourceNotFoundException,
    TransientIOException,
)
from apa.infrastructure.change_signal import ChangeSignal
from apa.infrastructure.indexes import IndexSpec, required_index
from apa.shared.utils.datetime import utc_now
from apa.shared.utils.generators import generate_cuid


def _rank(value: Any) -> tuple[int, Any]:
    """Firestore-like cross-type ordering: null < bool < number < timestamp < string < other."""
    if value is None:
        return (0, 0)
    if isinstance(value, bool):
        return (1, value)
    if isinstance(value, (int, float)):
        return (2, value)
    if isinstance(value, datetime):
        return (3, value)
    if isinstance(value, str):
        return (4, value)
    return (5, repr(value))


def _matches(data: Mapping[str, Any], f: FieldFilter) -> bool:
    if f.field not in data:
        return False
    value = data[f.field]
    op = f.op
    if op == "==":
        return value == f.value
    if op == "!=":
        return value != f.value
    if op in ("<", "<=", ">", ">="):
        left, right = _rank(value), _rank(f.value)
        if left[0] != right[0]:
            return False
        return {
            "<": left < right,
            "<=": left <= right,
            ">": left > right,
            ">=": left >= right,
        }[op]
    if op == "in":
        return value in f.value
    if op == "not-in":
        return value not in f.value
    if op == "array-contains":
        return isinstance(value, list) and f.value in value
    if op == "array-contains-any":
        return isinstance(value, list) and any(v in value for v in f.value)
    raise ValueError(f"Unsupported filter operator: {op!r}")


class InMemoryRecordRepository:
    """Record repository for one collection held in process memory."""

    def __init__(
        self,
        collection: str,
        signal: ChangeSignal | None = None,
        *,
        indexes: Iterable[IndexSpec] | None = None,
    ) -> None:
        """Create an empty collection.

        Args:
            collection: Collection name.
            signal: Shared change signal (a private one is created if omitted).
            indexes: Declared composite indexes; when given, queries needing an
                undeclared one raise ConfigurationException like Firestore does.
        """
        self._collection = collection
        self._signal = signal or ChangeSignal()
        self._indexes = frozenset(indexes) if indexes is not None else None
        self._docs: dict[str, dict[str, Any]] = {}
        self._lock = asyncio.Lock()
        self._last_stamp: datetime | None = None
        self._unavailable = False

    @property
    def collection(self) -> str:
        return self._collection

    def set_unavailable(self, unavailable: bool = True) -> None:
        """Make every read and write fail with TransientIOException (outage emulation)."""
        self._unavailable = unavailable

    def _check_available(self, operation: str) -> None:
        if self._unavailable:
            raise TransientIOException(operation=f"{operation} {self._collection}")

    def _stamp(self) -> datetime:
        """Commit timestamp; strictly increasing so createdAt ordering follows commit order."""
        now = utc_now()
        if self._last_stamp is not None and now <= self._last_stamp:
            now = self._last_stamp + timedelta(microseconds=1)
        self._last_stamp = now
        return now

    async def get(self, record_id: str) -> RecordResult | None:
        self._check_available("get")
        data = self._docs.get(record_id)
        if data is None:
            return None
        return RecordResult(id=record_id, data=copy.deepcopy(data))

    async def add(self, data: Mapping[str, Any]) -> RecordResult:
        return await self.create(generate_cuid(), data)

    async def create(self, record_id: str, data: Mapping[str, Any]) -> RecordResult:
        self._check_available("create")
        async with self._lock:
            if record_id in self._docs:
                raise RecordAlreadyExistsException(self._collection, record_id)
            now = self._stamp()
            self._docs[record_id] = {**copy.deepcopy(dict(data)), "createdAt": now, "updatedAt": now}
            result = RecordResult(id=record_id, data=copy.deepcopy(self._docs[record_id]))
        await self._signal.notify()
        return result

    async def set(self, record_id: str, data: Mapping[str, Any]) -> RecordResult:
        self._check_available("set")
        async with self._lock:
            self._docs[record_id] = {**copy.deepcopy(dict(data)), "updatedAt": self._stamp()}
            result = RecordResult(id=record_id, data=copy.deepcopy(self._docs[record_id]))
        await self._signal.notify()
        return result

    async def update(self, record_id: str, fields: Mapping[str, Any]) -> RecordResult:
        self._check_available("update")
        async with self._lock:
            current = self._docs.get(record_id)
            if current is None:
                raise ResourceNotFoundException(self._collection, record_id)
            current.update(copy.deepcopy(dict(fields)))
            current["updatedAt"] = self._stamp()
            result = RecordResult(id=record_id, data=copy.deepcopy(current))
        await self._signal.notify()
        return result

    async def delete(self, record_id: str) -> None:
        self._check_available("delete")
        async with self._lock:
            existed = self._docs.pop(record_id, None) is not None
        if existed:
            await self._signal.notify()

    async def query(self, query: RecordQuery) -> list[RecordResult]:
        self._check_available("query")
        self._check_index(query)
        rows = [
            (record_id, data)
            for record_id, data in self._docs.items()
            if all(_matches(data, f) for f in query.filters)
        ]
        order_fields = [field_path for field_path, _ in query.order_by]
        rows = [r for r in rows if all(f in r[1] for f in order_fields)]
        rows.sort(key=lambda r: r[0])
        for field_path, direction in reversed(query.order_by):
            rows.sort(key=lambda r, fp=field_path: _rank(r[1][fp]), reverse=direction == DESCENDING)
        if query.limit:
            rows = rows[: query.limit]
        return [RecordResult(id=record_id, data=copy.deepcopy(data)) for record_id, data in rows]

    def _check_index(self, query: RecordQuery) -> None:
        if self._indexes is None:
            return
        needed = required_index(self._collection, query)
        if needed is not None and needed not in self._indexes:
            raise ConfigurationException(
                f"The query on {self._collection} requires a composite index",
                {
                    "operation": f"query {self._collection}",
                    "equality_fields": list(needed.equality_fields),
                    "order_by": [list(o) for o in needed.order_by],
                },
            )

    async def batch_update(self, updates: Mapping[str, Mapping[str, Any]]) -> None:
        """Apply every update under the lock, or none if any record is missing."""
        if not updates:
            return
        self._check_available("commit")
        async with self._lock:
            missing = [record_id for record_id in updates if record_id not in self._docs]
            if missing:
                raise ResourceNotFoundException(self._collection, ", ".join(missing))
            now = self._stamp()
            for record_id, fields in updates.items():
                self._docs[record_id].update(copy.deepcopy(dict(fields)))
                self._docs[record_id]["updatedAt"] = now
        await self._signal.notify()

    def change_token(self) -> int:
        return self._signal.version

    async def wait_for_change(self, since: int, timeout: float) -> None:
        await self._signal.wait(since, timeout)
