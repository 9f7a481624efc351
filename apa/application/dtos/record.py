"""Record DTOs returned by repositories and services, plus the query description.

Repositories return these; services and endpoints never see store-specific
snapshot types.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

ASCENDING = "ASCENDING"
DESCENDING = "DESCENDING"


@dataclass(frozen=True)
class RecordResult:
    """A stored document: id plus its field data."""

    id: str
    data: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def with_updates(self, updates: Mapping[str, Any]) -> RecordResult:
        return RecordResult(id=self.id, data={**self.data, **updates})

    def to_dict(self) -> dict[str, Any]:
        """Flatten to the API shape: {"id": ..., **fields}."""
        return {"id": self.id, **self.data}


@dataclass(frozen=True)
class FieldFilter:
    """Single field comparison (op uses Firestore client syntax: ==, !=, <, in, ...)."""

    field: str
    op: str
    value: Any


@dataclass(frozen=True)
class RecordQuery:
    """Filters (AND-ed), ordering and limit for a collection query."""

    filters: tuple[FieldFilter, ...] = ()
    order_by: tuple[tuple[str, str], ...] = ()
    limit: int | None = None

    def where(self, field_path: str, op: str, value: Any) -> RecordQuery:
        return replace(self, filters=(*self.filters, FieldFilter(field_path, op, value)))

    def ordered(self, field_path: str, direction: str = ASCENDING) -> RecordQuery:
        return replace(self, order_by=(*self.order_by, (field_path, direction)))

    def limited(self, n: int) -> RecordQuery:
        return replace(self, limit=n)
