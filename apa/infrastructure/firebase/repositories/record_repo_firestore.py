"""Firestore-backed record repository (implements IRecordRepository)."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from apa.application.dtos.record import RecordQuery, RecordResult
from apa.domain.exceptions import (
    RecordAlreadyExistsException,
    ResourceNotFoundException,
)
from apa.infrastructure.change_signal import ChangeSignal
from apa.infrastructure.firebase._rest_client import (
    DocumentExistsError,
    DocumentMissingError,
    FirestoreRESTClient,
    create_write,
    document_id,
    set_write,
    update_write,
)
from apa.infrastructure.firebase._rest_encoding import decode_document, decode_value
from apa.shared.utils.generators import generate_cuid

_CREATE_STAMPS = ("createdAt", "updatedAt")
_UPDATE_STAMPS = ("updatedAt",)


def _stamps_from(write_results: list[dict], fields: tuple[str, ...]) -> dict[str, Any]:
    """Map REQUEST_TIME transform results back to their field names."""
    values = (write_results[0].get("transformResults") or []) if write_results else []
    return {f: decode_value(v) for f, v in zip(fields, values)}


def _without_stamps(data: Mapping[str, Any], stamps: tuple[str, ...]) -> dict[str, Any]:
    return {k: v for k, v in data.items() if k not in stamps}


def _record(document: dict) -> RecordResult:
    return RecordResult(id=document_id(document.get("name", "")), data=decode_document(document))


class FirestoreRecordRepository:
    """Record repository for one Firestore collection. Same contract as InMemoryRecordRepository."""

    def __init__(
        self,
        client: FirestoreRESTClient,
        collection: str,
        signal: ChangeSignal | None = None,
    ) -> None:
        self._client = client
        self._collection = collection
        self._signal = signal or ChangeSignal()

    @property
    def collection(self) -> str:
        return self._collection

    def _name(self, record_id: str) -> str:
        return self._client.document_name(self._collection, record_id)

    async def get(self, record_id: str) -> RecordResult | None:
        document = await self._client.get_document(self._collection, record_id)
        if not document:
            return None
        return RecordResult(id=record_id, data=decode_document(document))

    async def add(self, data: Mapping[str, Any]) -> RecordResult:
        """Create under a new CUID; createdAt/updatedAt are server request time."""
        return await self.create(generate_cuid(), data)

    async def create(self, record_id: str, data: Mapping[str, Any]) -> RecordResult:
        clean = _without_stamps(data, _CREATE_STAMPS)
        write = create_write(self._name(record_id), clean, _CREATE_STAMPS)
        try:
            results = await self._client.commit([write], f"create {self._collection}")
        except DocumentExistsError:
            raise RecordAlreadyExistsException(self._collection, record_id) from None
        await self._signal.notify()
        return RecordResult(id=record_id, data={**clean, **_stamps_from(results, _CREATE_STAMPS)})

    async def set(self, record_id: str, data: Mapping[str, Any]) -> RecordResult:
        clean = _without_stamps(data, _UPDATE_STAMPS)
        write = set_write(self._name(record_id), clean, _UPDATE_STAMPS)
        results = await self._client.commit([write], f"set {self._collection}")
        await self._signal.notify()
        return RecordResult(id=record_id, data={**clean, **_stamps_from(results, _UPDATE_STAMPS)})

    async def update(self, record_id: str, fields: Mapping[str, Any]) -> RecordResult:
        """Masked update with an exists precondition, then re-read the document."""
        await self.batch_update({record_id: fields})
        record = await self.get(record_id)
        if record is None:
            raise ResourceNotFoundException(self._collection, record_id)
        return record

    async def delete(self, record_id: str) -> None:
        await self._client.delete_document(self._collection, record_id)
        await self._signal.notify()

    async def query(self, query: RecordQuery) -> list[RecordResult]:
        """Run filters/order/limit server side (runQuery)."""
        documents = await self._client.run_query(self._collection, query)
        return [_record(document) for document in documents]

    async def batch_update(self, updates: Mapping[str, Mapping[str, Any]]) -> None:
        """One commit for every record: readers never see a partial application."""
        if not updates:
            return
        writes = [
            update_write(self._name(record_id), _without_stamps(fields, _UPDATE_STAMPS), _UPDATE_STAMPS)
            for record_id, fields in updates.items()
        ]
        try:
            await self._client.commit(writes, f"update {self._collection}")
        except DocumentMissingError:
            raise ResourceNotFoundException(self._collection, ", ".join(updates)) from None
        await self._signal.notify()

    def change_token(self) -> int:
        return self._signal.version

    async def wait_for_change(self, since: int, timeout: float) -> None:
        """Local writes wake waiters immediately; other writers are seen on the next poll."""
        await self._signal.wait(since, timeout)
