"""Record store: one repository per collection for the configured backend.

Built once in the lifespan and kept on app.state.store; dependencies ask it
for the repository of a collection.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from apa.application.interfaces.repositories import IRecordRepository
from apa.core.config import Settings
from apa.infrastructure.change_signal import ChangeSignal

logger = logging.getLogger(__name__)

RepositoryFactory = Callable[[str, ChangeSignal], IRecordRepository]


class RecordStore:
    """Caches one repository (and one change signal) per collection."""

    def __init__(
        self,
        factory: RepositoryFactory,
        *,
        backend: str,
        on_close: Callable[[], Awaitable[None]] | None = None,
    ) -> None:
        self._factory = factory
        self._repos: dict[str, IRecordRepository] = {}
        self._on_close = on_close
        self.backend = backend

    def repo(self, collection: str) -> IRecordRepository:
        repo = self._repos.get(collection)
        if repo is None:
            repo = self._factory(collection, ChangeSignal())
            self._repos[collection] = repo
        return repo

    async def aclose(self) -> None:
        if self._on_close is not None:
            await self._on_close()


def build_record_store(settings: Settings) -> RecordStore:
    """Return the store for settings.store_backend.

    Raises:
        ConfigurationException: firestore backend selected with missing or invalid credentials.
    """
    if settings.store_backend == "memory":
        from apa.infrastructure.firebase.collections import COMPOSITE_INDEXES
        from apa.infrastructure.memory.record_repo_memory import InMemoryRecordRepository

        indexes = COMPOSITE_INDEXES if settings.memory_enforce_indexes else None
        logger.info("Using in-memory record store (indexes enforced: %s)", indexes is not None)
        return RecordStore(
            lambda collection, signal: InMemoryRecordRepository(collection, signal, indexes=indexes),
            backend="memory",
        )

    from apa.infrastructure.firebase.client import connect_firestore
    from apa.infrastructure.firebase.repositories.record_repo_firestore import (
        FirestoreRecordRepository,
    )

    client = connect_firestore(settings)
    return RecordStore(
        lambda collection, signal: FirestoreRecordRepository(client, collection, signal),
        backend="firestore",
        on_close=client.aclose,
    )
