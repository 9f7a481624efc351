"""Tests for the Firestore REST client and repository against a mocked HTTP transport."""

import json
from datetime import UTC, datetime

import httpx
import pytest

from apa.application.dtos.record import DESCENDING, RecordQuery
from apa.core.config import Settings
from apa.domain.exceptions import (
    ConfigurationException,
    RecordAlreadyExistsException,
    ResourceNotFoundException,
    TransientIOException,
)
from apa.infrastructure.firebase._rest_client import FirestoreRESTClient
from apa.infrastructure.firebase._rest_encoding import decode_document, encode_document
from apa.infrastructure.firebase.client import load_service_account
from apa.infrastructure.firebase.repositories.record_repo_firestore import FirestoreRecordRepository

PREFIX = "projects/demo/databases/(default)/documents"
INDEX_URL = "https://console.firebase.google.com/v1/r/project/demo/firestore/indexes?create_composite=abc"


class _Credentials:
    valid = True
    token = "access-token"


def _repo(handler, requests: list[httpx.Request] | None = None) -> FirestoreRecordRepository:
    def _record(request: httpx.Request) -> httpx.Response:
        if requests is not None:
            requests.append(request)
        return handler(request)

    http = httpx.AsyncClient(transport=httpx.MockTransport(_record))
    client = FirestoreRESTClient("demo", _Credentials(), http_client=http)
    return FirestoreRecordRepository(client, "pets")


def _error(status_code: int, status: str, message: str = "error") -> httpx.Response:
    return httpx.Response(status_code, json={"error": {"code": status_code, "status": status, "message": message}})


def test_document_encoding_keeps_types() -> None:
    stamp = datetime(2024, 3, 1, 12, 30, tzinfo=UTC)
    data = {"name": "Rex", "order": 2, "weight": 4.5, "active": True, "photos": ["a"], "at": stamp, "x": None}
    assert decode_document(encode_document(data)) == data


def test_nanosecond_timestamps_are_truncated() -> None:
    doc = {"fields": {"at": {"timestampValue": "2024-03-01T12:30:00.123456789Z"}}}
    assert decode_document(doc)["at"] == datetime(2024, 3, 1, 12, 30, 0, 123456, tzinfo=UTC)


async def test_create_sends_precondition_and_server_timestamps() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "writeResults": [
                    {
                        "transformResults": [
                            {"timestampValue": "2024-03-01T12:00:00.000001Z"},
                            {"timestampValue": "2024-03-01T12:00:00.000001Z"},
                        ]
                    }
                ]
            },
        )

    record = await _repo(handler, requests).create("p1", {"name": "Rex", "createdAt": "ignored"})

    request = requests[0]
    assert request.url.path.endswith(f"{PREFIX}:commit")
    assert request.headers["Authorization"] == "Bearer access-token"
    write = json.loads(request.content)["writes"][0]
    assert write["currentDocument"] == {"exists": False}
    assert write["update"]["name"] == f"{PREFIX}/pets/p1"
    assert "createdAt" not in write["update"]["fields"]
    assert [t["fieldPath"] for t in write["updateTransforms"]] == ["createdAt", "updatedAt"]
    assert record.get("createdAt") == datetime(2024, 3, 1, 12, 0, 0, 1, tzinfo=UTC)


async def test_create_conflict_is_record_already_exists() -> None:
    repo = _repo(lambda request: _error(409, "ALREADY_EXISTS"))
    with pytest.raises(RecordAlreadyExistsException):
        await repo.create("p1", {"name": "Rex"})


async def test_update_of_missing_document_is_not_found() -> None:
    repo = _repo(lambda request: _error(404, "NOT_FOUND"))
    with pytest.raises(ResourceNotFoundException):
        await repo.update("p1", {"order": 1})


async def test_get_missing_document_returns_none() -> None:
    repo = _repo(lambda request: httpx.Response(404))
    assert await repo.get("nope") is None


async def test_query_builds_structured_query_and_decodes_rows() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json=[
                {"document": {"name": f"{PREFIX}/pets/p2", "fields": {"name": {"stringValue": "Mel"}}}},
                {"readTime": "2024-03-01T12:00:00Z"},
            ],
        )

    query = RecordQuery().where("status", "==", "disponivel").ordered("order", DESCENDING).limited(5)
    records = await _repo(handler, requests).query(query)

    assert [(r.id, r.get("name")) for r in records] == [("p2", "Mel")]
    structured = json.loads(requests[0].content)["structuredQuery"]
    assert structured["from"] == [{"collectionId": "pets"}]
    assert structured["where"]["fieldFilter"]["op"] == "EQUAL"
    assert structured["orderBy"] == [{"field": {"fieldPath": "order"}, "direction": "DESCENDING"}]
    assert structured["limit"] == 5


async def test_missing_index_is_configuration_error_with_link() -> None:
    repo = _repo(
        lambda request: _error(400, "FAILED_PRECONDITION", f"The query requires an index. You can create it here: {INDEX_URL}")
    )
    with pytest.raises(ConfigurationException) as exc_info:
        await repo.query(RecordQuery().where("userId", "==", "u1").ordered("createdAt", DESCENDING))
    assert exc_info.value.details["index_url"] == INDEX_URL
    assert exc_info.value.error_code == "CONFIGURATION_PENDING"


@pytest.mark.parametrize("status_code, status", [(503, "UNAVAILABLE"), (429, "RESOURCE_EXHAUSTED")])
async def test_outage_is_transient(status_code: int, status: str) -> None:
    repo = _repo(lambda request: _error(status_code, status))
    with pytest.raises(TransientIOException):
        await repo.get("p1")


async def test_network_failure_is_transient() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransientIOException):
        await _repo(handler).query(RecordQuery())


def _firestore_settings(**overrides) -> Settings:
    return Settings(
        store_backend="firestore",
        auth_backend="local",
        secret_key="test-secret",
        **overrides,
    )


def test_service_account_file_must_exist(tmp_path) -> None:
    settings = _firestore_settings(firebase_service_account_path=str(tmp_path / "missing.json"))
    with pytest.raises(ConfigurationException) as exc_info:
        load_service_account(settings)
    assert exc_info.value.error_code == "CONFIGURATION_PENDING"


def test_service_account_key_must_be_json() -> None:
    settings = _firestore_settings(firebase_service_account_key="{not json")
    with pytest.raises(ConfigurationException):
        load_service_account(settings)


def test_service_account_key_wins_over_path(tmp_path) -> None:
    path = tmp_path / "account.json"
    path.write_text(json.dumps({"project_id": "from-file"}), encoding="utf-8")
    settings = _firestore_settings(
        firebase_service_account_key=json.dumps({"project_id": "from-key"}),
        firebase_service_account_path=str(path),
    )
    assert load_service_account(settings)["project_id"] == "from-key"
