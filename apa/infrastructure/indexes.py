"""Composite index requirements of collection queries.

Firestore serves single-field queries and pure equality filters without a
composite index; any query that mixes a filter with an ordering on another
field (or several orderings) needs one declared in firestore.indexes.json.
The in-memory store uses the same rule to emulate a missing index.
"""

from __future__ import annotations

from dataclasses import dataclass

from apa.application.dtos.record import RecordQuery

_EQUALITY_OPS = frozenset({"==", "in", "array-contains"})


@dataclass(frozen=True)
class IndexSpec:
    """Composite index: equality fields (sorted) plus ordered fields with direction."""

    collection: str
    equality_fields: tuple[str, ...]
    order_by: tuple[tuple[str, str], ...]


def required_index(collection: str, query: RecordQuery) -> IndexSpec | None:
    """Return the composite index the query needs, or None when single-field indexes suffice."""
    equality = sorted({f.field for f in query.filters if f.op in _EQUALITY_OPS})
    ranged = [f.field for f in query.filters if f.op not in _EQUALITY_OPS]
    order = list(query.order_by)
    for field_path in ranged:
        if field_path not in [o[0] for o in order]:
            order.insert(0, (field_path, "ASCENDING"))
    involved = set(equality) | {o[0] for o in order}
    if len(involved) <= 1:
        return None
    if not order:
        return None
    return IndexSpec(collection, tuple(equality), tuple(order))
