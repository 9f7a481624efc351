"""Live queries: subscribe(query) -> stream of snapshots + unsubscribe.

Each subscription is one asyncio task that re-reads the query whenever the
repository signals a change (writes made by this process) and at least every
poll interval (writes made elsewhere), and emits a snapshot when the result
differs from the last one it sent. Every snapshot carries an explicit state
so callers can tell "no data" from "index missing" from "store down".
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from apa.application.dtos.record import RecordQuery, RecordResult
from apa.application.interfaces.repositories import IRecordRepository
from apa.domain.exceptions import ConfigurationException, TransientIOException

logger = logging.getLogger(__name__)


class QueryState(str, Enum):
    READY = "ready"
    EMPTY = "empty"
    MISCONFIGURED = "misconfigured"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class QuerySnapshot:
    """One emission of a live query."""

    state: QueryState
    records: tuple[RecordResult, ...] = ()
    error: dict[str, Any] | None = None

    @property
    def authoritative(self) -> bool:
        """True when the snapshot reflects the store (ready or empty)."""
        return self.state in (QueryState.READY, QueryState.EMPTY)

    def fingerprint(self) -> str:
        return json.dumps(
            [self.state.value, [r.to_dict() for r in self.records], self.error],
            sort_keys=True,
            default=str,
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "state": self.state.value,
            "records": [r.to_dict() for r in self.records],
        }
        if self.error is not None:
            out["error"] = self.error
        return out


SnapshotCallback = Callable[[QuerySnapshot], Awaitable[None]]
RecordsTransform = Callable[[list[RecordResult]], Sequence[RecordResult]]


class Subscription:
    """Handle of a running live query. unsubscribe() stops it and waits for the task."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._task: asyncio.Task | None = None
        self._on_close: Callable[[Subscription], None] | None = None

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.done()

    async def unsubscribe(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        if self._on_close is not None:
            self._on_close(self)
            self._on_close = None
        logger.debug("Live query %s unsubscribed", self.name)


class LiveQueryService:
    """Runs and tracks live-query subscriptions for the process lifetime."""

    def __init__(self, poll_interval: float = 2.0) -> None:
        self._poll_interval = poll_interval
        self._subscriptions: set[Subscription] = set()

    @property
    def subscription_count(self) -> int:
        return len(self._subscriptions)

    async def fetch(
        self,
        repo: IRecordRepository,
        query: RecordQuery | None = None,
        *,
        record_id: str | None = None,
        transform: RecordsTransform | None = None,
    ) -> QuerySnapshot:
        """Read once and classify the outcome into a snapshot state."""
        try:
            if record_id is not None:
                record = await repo.get(record_id)
                records = [record] if record is not None else []
            else:
                records = await repo.query(query or RecordQuery())
        except ConfigurationException as e:
            return QuerySnapshot(QueryState.MISCONFIGURED, error=e.to_dict())
        except TransientIOException as e:
            return QuerySnapshot(QueryState.UNAVAILABLE, error=e.to_dict())
        if transform is not None:
            records = list(transform(records))
        state = QueryState.READY if records else QueryState.EMPTY
        return QuerySnapshot(state, tuple(records))

    def subscribe(
        self,
        repo: IRecordRepository,
        callback: SnapshotCallback,
        query: RecordQuery | None = None,
        *,
        record_id: str | None = None,
        transform: RecordsTransform | None = None,
        name: str | None = None,
    ) -> Subscription:
        """Start a live query; the first snapshot is emitted as soon as the first read returns.

        Args:
            repo: Collection to watch.
            callback: Awaited with each snapshot, in order.
            query: Filters/order/limit (ignored when record_id is given).
            record_id: Watch a single document instead of a query.
            transform: Optional in-process projection applied to each result.
            name: Label for logs.
        """
        subscription = Subscription(name or f"{repo.collection}:{record_id or 'query'}")

        async def _run() -> None:
            last: str | None = None
            while True:
                token = repo.change_token()
                snapshot = await self.fetch(repo, query, record_id=record_id, transform=transform)
                fingerprint = snapshot.fingerprint()
                if fingerprint != last:
                    last = fingerprint
                    try:
                        await callback(snapshot)
                    except Exception:
                        # One failed emission does not end the subscription.
                        logger.exception("Live query %s callback failed", subscription.name)
                await repo.wait_for_change(token, self._poll_interval)

        task = asyncio.create_task(_run(), name=f"live-query:{subscription.name}")
        task.add_done_callback(self._log_failure)
        subscription._task = task
        subscription._on_close = self._subscriptions.discard
        self._subscriptions.add(subscription)
        return subscription

    @staticmethod
    def _log_failure(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Live query %s stopped: %s", task.get_name(), exc, exc_info=exc)

    async def close(self) -> None:
        """Tear down every subscription (app shutdown)."""
        for subscription in list(self._subscriptions):
            await subscription.unsubscribe()
