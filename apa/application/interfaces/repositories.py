"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill.
One generic record repository per collection covers every entity kind;
entity rules live in the services.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from apa.application.dtos.record import RecordQuery, RecordResult


class IRecordRepository(Protocol):
    """Protocol for a document collection (Firestore or in-memory)."""

    @property
    def collection(self) -> str:
        """Collection name (e.g. 'leads_adoption')."""

    async def get(self, record_id: str) -> RecordResult | None:
        """Return the record or None when missing."""

    async def add(self, data: Mapping[str, Any]) -> RecordResult:
        """Create a record under a generated id; createdAt/updatedAt set by the store."""

    async def create(self, record_id: str, data: Mapping[str, Any]) -> RecordResult:
        """Create a record with a fixed id; raise RecordAlreadyExistsException if taken."""

    async def set(self, record_id: str, data: Mapping[str, Any]) -> RecordResult:
        """Create or fully replace the record (updatedAt set by the store)."""

    async def update(self, record_id: str, fields: Mapping[str, Any]) -> RecordResult:
        """Write the given fields; raise ResourceNotFoundException if missing. Return the record after the write."""

    async def delete(self, record_id: str) -> None:
        """Delete the record. Idempotent if already missing."""

    async def query(self, query: RecordQuery) -> list[RecordResult]:
        """Run a filtered/ordered query.

        Raises ConfigurationException when the store needs an index it does
        not have, TransientIOException when the store is unreachable.
        """

    async def batch_update(self, updates: Mapping[str, Mapping[str, Any]]) -> None:
        """Update several records atomically (all or nothing)."""

    def change_token(self) -> int:
        """Opaque counter that changes after every committed write seen by this process."""

    async def wait_for_change(self, since: int, timeout: float) -> None:
        """Return when change_token() differs from since, or after timeout seconds."""
