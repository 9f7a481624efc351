"""Transition-completed events and the in-process bus that delivers them.

Handlers run as background tasks after the transition has been written.
A failing handler is logged and never affects the transition that emitted
the event.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from apa.application.dtos.record import RecordResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransitionCompleted:
    """Emitted once per non-idempotent transition."""

    workflow: str
    collection: str
    record: RecordResult
    from_state: str | None
    to_state: str
    actor_id: str
    context: Mapping[str, Any] = field(default_factory=dict)


TransitionHandler = Callable[[TransitionCompleted], Awaitable[None]]


class TransitionEventBus:
    """Fire-and-forget dispatch of TransitionCompleted to subscribed handlers."""

    def __init__(self) -> None:
        self._handlers: list[tuple[str, str | None, TransitionHandler]] = []
        self._tasks: set[asyncio.Task] = set()

    def subscribe(
        self,
        workflow: str,
        handler: TransitionHandler,
        to_state: str | None = None,
    ) -> Callable[[], None]:
        """Register handler for a workflow (optionally one target state). Returns an unsubscribe callable."""
        entry = (workflow, to_state, handler)
        self._handlers.append(entry)

        def _unsubscribe() -> None:
            if entry in self._handlers:
                self._handlers.remove(entry)

        return _unsubscribe

    def publish(self, event: TransitionCompleted) -> None:
        for workflow, to_state, handler in list(self._handlers):
            if workflow != event.workflow:
                continue
            if to_state is not None and to_state != event.to_state:
                continue
            task = asyncio.create_task(self._run(handler, event))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def _run(self, handler: TransitionHandler, event: TransitionCompleted) -> None:
        try:
            await handler(event)
        except Exception:
            logger.exception(
                "Transition handler %s failed for %s %s -> %s",
                getattr(handler, "__name__", handler),
                event.collection,
                event.record.id,
                event.to_state,
            )

    async def drain(self) -> None:
        """Wait for in-flight handlers (shutdown and tests)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
