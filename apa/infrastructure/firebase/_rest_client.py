"""Firestore REST v1 over httpx, authenticated with google-auth.

Only the calls the record repository needs: read one document, delete one
document, runQuery, and documents:commit for every write (so creates carry an
exists=false precondition, updates an exists=true one, and createdAt /
updatedAt are set to the server's request time).

Failures are translated here. A query that needs a composite index that was
never deployed, or credentials Firestore refuses, raise
ConfigurationException (the index link from the error message goes into
details). Timeouts, throttling and 5xx raise TransientIOException.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any
from urllib.parse import quote

import httpx

from apa.application.dtos.record import RecordQuery
from apa.domain.exceptions import ConfigurationException, TransientIOException
from apa.infrastructure.firebase._rest_encoding import encode_document, encode_value

logger = logging.getLogger(__name__)

_FIRESTORE_SCOPE = "https://www.googleapis.com/auth/datastore"
_API_ROOT = "https://firestore.googleapis.com/v1"

_RETRYABLE_HTTP = frozenset({408, 429, 500, 502, 503, 504})
_RETRYABLE_RPC = frozenset({"UNAVAILABLE", "RESOURCE_EXHAUSTED", "DEADLINE_EXCEEDED"})
_SETUP_RPC = frozenset({"FAILED_PRECONDITION", "PERMISSION_DENIED", "UNAUTHENTICATED"})
_CONSOLE_LINK = re.compile(r"https://console\.firebase\.google\.com/\S+")
_PLAIN_FIELD = re.compile(r"^[A-Za-z_][A-Za-z_0-9]*$")

_OPERATORS: dict[str, str] = {
    "==": "EQUAL",
    "!=": "NOT_EQUAL",
    "<": "LESS_THAN",
    "<=": "LESS_THAN_OR_EQUAL",
    ">": "GREATER_THAN",
    ">=": "GREATER_THAN_OR_EQUAL",
    "in": "IN",
    "not-in": "NOT_IN",
    "array-contains": "ARRAY_CONTAINS",
    "array-contains-any": "ARRAY_CONTAINS_ANY",
}


class DocumentExistsError(Exception):
    """A create precondition failed: the document id is taken."""


class DocumentMissingError(Exception):
    """An update precondition failed: the document does not exist."""


def _get_credentials(service_account: Mapping[str, Any]):
    from google.oauth2 import service_account as sa

    return sa.Credentials.from_service_account_info(
        dict(service_account), scopes=[_FIRESTORE_SCOPE]
    )


def _fresh_token(credentials) -> str:
    from google.auth.transport.requests import Request

    if not credentials.valid:
        credentials.refresh(Request())
    return credentials.token


def field_path(name: str) -> str:
    """Backtick-quote a field name that is not a plain identifier."""
    if _PLAIN_FIELD.match(name):
        return name
    return "`" + name.replace("\\", "\\\\").replace("`", "\\`") + "`"


def document_id(name: str) -> str:
    """Last segment of a document resource name."""
    return name.rsplit("/", 1)[-1] if name else ""


def _rpc_error(resp: httpx.Response) -> dict:
    try:
        body = resp.json()
    except ValueError:
        return {}
    if isinstance(body, list):
        body = body[0] if body else {}
    error = body.get("error") if isinstance(body, dict) else None
    return error if isinstance(error, dict) else {}


def _raise_store_error(resp: httpx.Response, operation: str) -> None:
    error = _rpc_error(resp)
    rpc_status = error.get("status", "")
    message = error.get("message") or resp.reason_phrase or "Firestore request failed"
    if resp.status_code in _RETRYABLE_HTTP or rpc_status in _RETRYABLE_RPC:
        logger.warning("Firestore %s unavailable (%s): %s", operation, resp.status_code, message)
        raise TransientIOException(operation=operation)
    if rpc_status in _SETUP_RPC or resp.status_code in (401, 403):
        details: dict[str, Any] = {"operation": operation, "status": rpc_status or resp.status_code}
        link = _CONSOLE_LINK.search(message)
        if link:
            details["index_url"] = link.group(0)
        logger.error("Firestore %s needs setup: %s", operation, message)
        raise ConfigurationException(message, details)
    resp.raise_for_status()


def _filter(field: str, op: str, value: Any) -> dict:
    path = {"fieldPath": field_path(field)}
    if value is None and op in ("==", "!="):
        return {"unaryFilter": {"field": path, "op": "IS_NULL" if op == "==" else "IS_NOT_NULL"}}
    return {"fieldFilter": {"field": path, "op": _OPERATORS.get(op, op), "value": encode_value(value)}}


def structured_query(collection: str, query: RecordQuery) -> dict[str, Any]:
    """RecordQuery as a runQuery structuredQuery; filters are AND-ed."""
    structured: dict[str, Any] = {"from": [{"collectionId": collection}]}
    filters = [_filter(f.field, f.op, f.value) for f in query.filters]
    if len(filters) == 1:
        structured["where"] = filters[0]
    elif filters:
        structured["where"] = {"compositeFilter": {"op": "AND", "filters": filters}}
    if query.order_by:
        structured["orderBy"] = [
            {"field": {"fieldPath": field_path(name)}, "direction": direction}
            for name, direction in query.order_by
        ]
    if query.limit:
        structured["limit"] = query.limit
    return structured


def _stamped(write: dict, stamps: Iterable[str]) -> dict:
    transforms = [{"fieldPath": field_path(f), "setToServerValue": "REQUEST_TIME"} for f in stamps]
    if transforms:
        write["updateTransforms"] = transforms
    return write


def create_write(name: str, data: Mapping[str, Any], stamps: Iterable[str] = ()) -> dict:
    """Write that fails with DocumentExistsError when the document exists."""
    return _stamped(
        {"update": {"name": name, **encode_document(data)}, "currentDocument": {"exists": False}},
        stamps,
    )


def set_write(name: str, data: Mapping[str, Any], stamps: Iterable[str] = ()) -> dict:
    """Full replace, creating the document when missing."""
    return _stamped({"update": {"name": name, **encode_document(data)}}, stamps)


def update_write(name: str, fields: Mapping[str, Any], stamps: Iterable[str] = ()) -> dict:
    """Masked write of fields that fails with DocumentMissingError when the document is missing."""
    return _stamped(
        {
            "update": {"name": name, **encode_document(fields)},
            "updateMask": {"fieldPaths": [field_path(k) for k in fields]},
            "currentDocument": {"exists": True},
        },
        stamps,
    )


class FirestoreRESTClient:
    """Authenticated access to one project's (default) database."""

    def __init__(
        self,
        project_id: str,
        credentials,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.project_id = project_id
        self._credentials = credentials
        self.root = f"projects/{project_id}/databases/(default)/documents"
        self._http = http_client if http_client is not None else httpx.AsyncClient(timeout=30.0)
        self._owns_http = http_client is None

    def document_name(self, collection: str, record_id: str) -> str:
        return f"{self.root}/{collection}/{quote(record_id, safe='')}"

    async def aclose(self) -> None:
        """Close the connection pool unless it was passed in."""
        if self._owns_http:
            await self._http.aclose()

    async def _call(
        self,
        method: str,
        path: str,
        operation: str,
        body: dict | None = None,
    ) -> Any:
        """Send one request; returns parsed JSON, or None on 404."""
        # google-auth refreshes synchronously.
        token = await asyncio.to_thread(_fresh_token, self._credentials)
        try:
            resp = await self._http.request(
                method,
                f"{_API_ROOT}/{path}",
                headers={"Authorization": f"Bearer {token}"},
                json=body,
            )
        except httpx.TransportError as e:
            logger.warning("Firestore %s transport error: %s", operation, e)
            raise TransientIOException(operation=operation) from e
        if resp.status_code == 404:
            return None
        if resp.status_code == 409:
            raise DocumentExistsError(operation)
        if resp.status_code not in (200, 204):
            _raise_store_error(resp, operation)
        return resp.json() if resp.content else {}

    async def get_document(self, collection: str, record_id: str) -> dict | None:
        return await self._call("GET", self.document_name(collection, record_id), f"get {collection}")

    async def delete_document(self, collection: str, record_id: str) -> None:
        """Idempotent: deleting a missing document succeeds."""
        await self._call("DELETE", self.document_name(collection, record_id), f"delete {collection}")

    async def run_query(self, collection: str, query: RecordQuery) -> list[dict]:
        """Documents matching query, in server order."""
        rows = await self._call(
            "POST",
            f"{self.root}:runQuery",
            f"query {collection}",
            {"structuredQuery": structured_query(collection, query)},
        )
        if not rows:
            return []
        if isinstance(rows, dict):
            rows = [rows]
        return [row["document"] for row in rows if "document" in row]

    async def commit(self, writes: list[dict], operation: str = "commit") -> list[dict]:
        """Apply writes atomically and return their writeResults in order.

        Raises:
            DocumentExistsError: a create precondition failed.
            DocumentMissingError: an update precondition failed.
        """
        if not writes:
            return []
        out = await self._call("POST", f"{self.root}:commit", operation, {"writes": writes})
        if out is None:
            raise DocumentMissingError(operation)
        return out.get("writeResults", [])
