"""Firestore REST typed values <-> Python values.

Documents travel as {"fields": {name: Value}} where each Value is a one-key
object naming its type (stringValue, timestampValue, mapValue, ...).
Enums are stored by value and bare dates as ISO strings; timestamps always
go out in UTC.
"""

import base64
import re
from collections.abc import Callable, Mapping
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any

_SECONDS_FRACTION = re.compile(r"\.(\d+)")


def parse_timestamp(raw: str) -> datetime:
    """Parse a timestampValue; fractions beyond microseconds are dropped."""
    normalized = _SECONDS_FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), raw, count=1)
    return datetime.fromisoformat(normalized.replace("Z", "+00:00"))


def _timestamp(moment: datetime) -> str:
    if moment.tzinfo is not None:
        moment = moment.astimezone(UTC)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def encode_value(value: Any) -> dict:
    """One Python value as a Firestore Value object."""
    if isinstance(value, Enum):
        value = value.value
    if value is None:
        return {"nullValue": None}
    # bool before int, datetime before date: subclass order matters.
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, datetime):
        return {"timestampValue": _timestamp(value)}
    if isinstance(value, date):
        return {"stringValue": value.isoformat()}
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, bytes):
        return {"bytesValue": base64.standard_b64encode(value).decode("ascii")}
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [encode_value(item) for item in value]}}
    if isinstance(value, Mapping):
        return {"mapValue": encode_document(value)}
    raise TypeError(f"Cannot store {type(value).__name__} in Firestore")


def encode_document(data: Mapping[str, Any]) -> dict:
    return {"fields": {name: encode_value(value) for name, value in data.items()}}


def _array(raw: dict) -> list:
    return [decode_value(item) for item in raw.get("values") or []]


_DECODERS: dict[str, Callable[[Any], Any]] = {
    "nullValue": lambda _: None,
    "booleanValue": bool,
    "integerValue": int,
    "doubleValue": float,
    "timestampValue": parse_timestamp,
    "stringValue": str,
    "bytesValue": base64.standard_b64decode,
    "referenceValue": str,
    "geoPointValue": dict,
    "arrayValue": _array,
    "mapValue": lambda raw: decode_document(raw),
}


def decode_value(obj: Mapping[str, Any]) -> Any:
    """One Firestore Value object as a Python value (unknown types decode to None)."""
    for kind, raw in obj.items():
        decoder = _DECODERS.get(kind)
        if decoder is not None:
            return decoder(raw)
    return None


def decode_document(document: Mapping[str, Any] | None) -> dict:
    """Fields of a Document (or a mapValue) as a plain dict."""
    if not document:
        return {}
    return {name: decode_value(value) for name, value in (document.get("fields") or {}).items()}
