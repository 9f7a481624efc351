"""CSV rendering for admin spreadsheet exports.

Every cell is quoted and embedded quotes are doubled, so free-text fields
(messages, notes) with commas or line breaks stay in one cell.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Column:
    """One export column: header text and a value getter over the record dict."""

    header: str
    value: Callable[[Mapping[str, Any]], Any]


def field_column(header: str, key: str, default: str = "") -> Column:
    """Column that reads one key, rendering None as default."""

    def _get(row: Mapping[str, Any]) -> Any:
        value = row.get(key)
        return default if value is None else value

    return Column(header, _get)


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Sim" if value else "Não"
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value)


def to_csv(rows: Iterable[Mapping[str, Any]], columns: Sequence[Column]) -> str:
    """Render rows as CSV text with a header line and all cells quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow([c.header for c in columns])
    for row in rows:
        writer.writerow([_cell(c.value(row)) for c in columns])
    return buffer.getvalue()
