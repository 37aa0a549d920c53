"""Tests for the index runner command."""

import logging

import httpx
import pytest

from maintenance import index_runner
from shared.clients.search.elasticsearch.SearchClientElasticsearch import SearchClientElasticsearch
from shared.logging.logging_setup import ColorLogger


@pytest.fixture
def runner_env(search_env, backend, monkeypatch):
    """Run the command against the recording backend, logging into the test logger."""

    class RecordedElasticsearch(SearchClientElasticsearch):
        async def boot(self, transport=None):
            await super().boot(transport=httpx.MockTransport(backend))

    class Manager:
        def __init__(self, helper_config):
            self.helper_config = helper_config

        def get_client(self):
            return RecordedElasticsearch(helper_config=self.helper_config)

    monkeypatch.setattr(index_runner, "SearchClientManager", Manager)
    monkeypatch.setattr(index_runner, "setup_logging", lambda: ColorLogger(logging.getLogger("tests.runner")))
    monkeypatch.setenv("SEARCH_INDEXES", "[docs]")


async def test_unreachable_backend_exits_with_error(runner_env, backend, caplog):
    backend.route("GET", "/", 503, {"error": "unavailable"})

    with caplog.at_level(logging.ERROR, logger="tests.runner"):
        assert await index_runner.main() == 1

    assert "not reachable" in caplog.text
    assert "503" in caplog.text
    assert backend.find("PUT", "/docs") == []


async def test_missing_indexes_are_created(runner_env, backend):
    backend.route("GET", "/", 200, {"version": {"number": "8.13.0"}})
    backend.route("PUT", "/docs", 200, {"acknowledged": True})

    assert await index_runner.main() == 0

    (create,) = backend.find("PUT", "/docs")
    assert backend.json_body(create)["mappings"]["date_detection"] is False


async def test_failed_index_operation_exits_with_error(runner_env, backend):
    backend.route("GET", "/", 200, {"version": {"number": "8.13.0"}})
    backend.route("PUT", "/docs", 400, {"error": "invalid mapping"})

    assert await index_runner.main() == 1


async def test_nothing_configured(runner_env, backend, monkeypatch):
    monkeypatch.delenv("SEARCH_INDEXES")

    assert await index_runner.main() == 0
    assert backend.requests == []
