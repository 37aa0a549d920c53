"""Pytest configuration and fixtures."""

import json
import logging
import os

import httpx
import pytest

from shared.clients.search.elasticsearch.SearchClientElasticsearch import SearchClientElasticsearch
from shared.helper.HelperConfig import HelperConfig

BASE_URL = "http://search.test:9200"


@pytest.fixture(autouse=True)
def isolate_environment():
    """Isolate environment variables for each test."""
    original_env = os.environ.copy()

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def search_env(monkeypatch):
    """Minimal environment of an Elasticsearch backed node."""
    monkeypatch.setenv("SEARCH_ENGINE", "Elasticsearch")
    monkeypatch.setenv("SEARCH_ELASTICSEARCH_BASE_URL", BASE_URL)
    for key in ("API_KEY", "USERNAME", "PASSWORD", "ENVIRONMENT", "REFRESH"):
        monkeypatch.delenv(f"SEARCH_ELASTICSEARCH_{key}", raising=False)
    monkeypatch.delenv("SERVER_ROLE", raising=False)


@pytest.fixture
def helper_config():
    return HelperConfig(logger=logging.getLogger("tests"))


class RecordingBackend:
    """Stand-in search backend; answers requests from a route table and records them.

    Routes map "<METHOD> <path>" to a status code and JSON body, or to a callable
    taking the request and returning an httpx.Response.
    """

    def __init__(self):
        self.routes: dict = {}
        self.requests: list[httpx.Request] = []

    def route(self, method: str, path: str, status: int = 200, body=None, handler=None) -> None:
        self.routes[f"{method} {path}"] = handler or (status, body if body is not None else {})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(f"{request.method} {request.url.path}")
        if route is None:
            return httpx.Response(404, json={"error": f"no route for {request.method} {request.url.path}"})
        if callable(route):
            return route(request)
        status, body = route
        return httpx.Response(status, json=body)

    def find(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    @staticmethod
    def json_body(request: httpx.Request):
        return json.loads(request.content)

    @staticmethod
    def ndjson_body(request: httpx.Request) -> list:
        return [json.loads(line) for line in request.content.decode("utf-8").splitlines() if line]


@pytest.fixture
def backend():
    return RecordingBackend()


@pytest.fixture
async def search_client(search_env, helper_config, backend):
    client = SearchClientElasticsearch(helper_config=helper_config)
    await client.boot(transport=httpx.MockTransport(backend))
    yield client
    await client.close()
