"""Fixtures running against a real Elasticsearch node.

Skipped unless INTEGRATION_SEARCH_BASE_URL points to a node, e.g.
INTEGRATION_SEARCH_BASE_URL=http://localhost:9200 pytest tests/integration
"""

import os
import uuid

import pytest

from services.search_indexing.IndexerService import IndexerService
from services.search_query.SearcherService import SearcherService
from shared.clients.search.elasticsearch.SearchClientElasticsearch import SearchClientElasticsearch
from shared.models.options import IndexerOptions, SearcherOptions

INTEGRATION_BASE_URL = os.getenv("INTEGRATION_SEARCH_BASE_URL")


@pytest.fixture
async def live_client(monkeypatch, helper_config):
    monkeypatch.setenv("SEARCH_ELASTICSEARCH_BASE_URL", INTEGRATION_BASE_URL or "http://localhost:9200")
    monkeypatch.setenv("SEARCH_ELASTICSEARCH_REFRESH", "true")
    for key in ("API_KEY", "USERNAME", "PASSWORD", "ENVIRONMENT"):
        monkeypatch.setenv(f"SEARCH_ELASTICSEARCH_{key}", os.getenv(f"INTEGRATION_SEARCH_{key}", ""))
    client = SearchClientElasticsearch(helper_config=helper_config)
    await client.boot()
    yield client
    await client.close()


@pytest.fixture
async def index_alias(live_client):
    alias = f"test_{uuid.uuid4().hex[:12]}"
    yield alias
    await live_client.do_delete_index(live_client.get_index_name(alias))


@pytest.fixture
async def indexer(helper_config, live_client, index_alias):
    service = IndexerService(
        helper_config=helper_config,
        search_client=live_client,
        options=IndexerOptions(),
        can_mutate_indexes=lambda: True,
    )
    result = await service.do_ensure(index_alias)
    assert result.success, result.detail
    return service


@pytest.fixture
def searcher(helper_config, live_client):
    return SearcherService(helper_config=helper_config, search_client=live_client, options=SearcherOptions())
