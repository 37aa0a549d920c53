"""Tests for the HTTP surface with mocked services."""

import logging
from collections.abc import Generator
from unittest.mock import AsyncMock
from uuid import UUID

import pytest
from fastapi.testclient import TestClient

from server.api_server import app
from shared.helper.HelperConfig import HelperConfig
from shared.models.indexing import HealthStatus, IndexMetadata, IndexOperationResult
from shared.models.searching import Document, KeywordFilter, SearchResult

API_KEY = "test-key"
HEADERS = {"X-Api-Key": API_KEY}
KEY = UUID("0f0e0d0c-0b0a-4908-8706-050403020100")


@pytest.fixture
def mock_indexer() -> AsyncMock:
    mock = AsyncMock()
    mock.do_add_or_update.return_value = IndexOperationResult(operation="add_or_update", index="docs")
    mock.do_delete.return_value = IndexOperationResult(operation="delete", index="docs")
    mock.do_reset.return_value = IndexOperationResult(operation="reset", index="docs")
    mock.do_ensure.return_value = IndexOperationResult(operation="ensure", index="docs", success=False, detail="500 boom")
    mock.get_metadata.return_value = IndexMetadata(document_count=3, health_status=HealthStatus.HEALTHY)
    return mock


@pytest.fixture
def mock_searcher() -> AsyncMock:
    mock = AsyncMock()
    mock.do_search.return_value = SearchResult(total=1, documents=[Document(id=KEY, object_type="Document")])
    return mock


@pytest.fixture
def client(monkeypatch, mock_indexer, mock_searcher) -> Generator[TestClient, None, None]:
    """Test client with mocked services; the lifespan is not run."""
    monkeypatch.setenv("API_SERVER_API_KEY", API_KEY)
    app.state.helper_config = HelperConfig(logger=logging.getLogger("tests"))
    app.state.indexer_service = mock_indexer
    app.state.searcher_service = mock_searcher
    yield TestClient(app)


def test_requests_need_api_key(client):
    assert client.post("/search/docs", json={"query": "x"}).status_code == 401
    assert client.post("/search/docs", json={"query": "x"}, headers={"X-Api-Key": "wrong"}).status_code == 401


def test_search(client, mock_searcher):
    response = client.post(
        "/search/docs",
        headers=HEADERS,
        json={
            "query": "hello",
            "filters": [{"kind": "keyword", "field_name": "color", "values": ["red"]}],
            "take": 5,
        },
    )
    assert response.status_code == 200
    assert response.json()["total"] == 1
    assert response.json()["documents"] == [{"id": str(KEY), "object_type": "Document"}]

    index_alias, request = mock_searcher.do_search.call_args.args
    assert index_alias == "docs"
    assert request.filters == [KeywordFilter(field_name="color", values=["red"])]
    assert request.take == 5


def test_search_rejects_unknown_filter_kind(client):
    response = client.post(
        "/search/docs",
        headers=HEADERS,
        json={"filters": [{"kind": "geo", "field_name": "location"}]},
    )
    assert response.status_code == 422


def test_add_or_update(client, mock_indexer):
    response = client.put(
        "/indexes/docs/documents",
        headers=HEADERS,
        json={
            "key": str(KEY),
            "object_type": "Document",
            "variations": [{"culture": "en-US"}],
            "fields": [{"field_name": "title", "value": {"texts": ["Hello"]}, "culture": "en-US"}],
        },
    )
    assert response.status_code == 200
    kwargs = mock_indexer.do_add_or_update.call_args.kwargs
    assert kwargs["key"] == KEY
    assert kwargs["fields"][0].value.texts == ["Hello"]


def test_add_or_update_contract_violation(client, mock_indexer):
    mock_indexer.do_add_or_update.side_effect = ValueError("The public access key is reserved")
    response = client.put(
        "/indexes/docs/documents",
        headers=HEADERS,
        json={"key": str(KEY), "object_type": "Document", "variations": [{}]},
    )
    assert response.status_code == 422


def test_delete(client, mock_indexer):
    response = client.post("/indexes/docs/documents/delete", headers=HEADERS, json={"keys": [str(KEY)]})
    assert response.status_code == 200
    assert mock_indexer.do_delete.call_args.args == ("docs", [KEY])


def test_reset(client, mock_indexer):
    assert client.post("/indexes/docs/reset", headers=HEADERS).json()["operation"] == "reset"


def test_failed_operation_is_flagged_by_status(client):
    response = client.post("/indexes/docs/ensure", headers=HEADERS)
    assert response.status_code == 502
    assert response.json()["detail"] == "500 boom"


def test_metadata(client):
    response = client.get("/indexes/docs", headers=HEADERS)
    assert response.json() == {"document_count": 3, "health_status": "Healthy"}
