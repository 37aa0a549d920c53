"""FastAPI application entry point for search_bridge."""

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.logging.logging_setup import setup_logging
from shared.helper.HelperConfig import HelperConfig
from shared.clients.search.SearchClientInterface import SearchClientInterface
from shared.clients.search.SearchClientManager import SearchClientManager
from services.search_indexing.IndexerService import IndexerService
from services.search_query.SearcherService import SearcherService
from server.routers.IndexRouter import router as index_router
from server.routers.SearchRouter import router as search_router

logging = setup_logging()
app_version = os.getenv("APP_VERSION", "unknown")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # when the app starts
    app.state.logging = logging
    app.state.helper_config = HelperConfig(logger=logging)

    search_client = SearchClientManager(helper_config=app.state.helper_config).get_client()

    logging.info("Booting search client...")
    await search_client.boot()
    logging.info("Search client booted successfully.")

    app.state.search_client = search_client
    app.state.indexer_service = IndexerService(
        helper_config=app.state.helper_config,
        search_client=search_client,
    )
    app.state.searcher_service = SearcherService(
        helper_config=app.state.helper_config,
        search_client=search_client,
    )

    await check_connection(search_client)
    await ensure_indexes(app.state.indexer_service, app.state.helper_config)

    # while the app is running...
    yield

    # when the app shuts down, close the client connection
    logging.info("Shutting down, closing search client...")
    await search_client.close()
    logging.info("Search client closed.")


app = FastAPI(
    title="search_bridge",
    description=(
        "Search provider for a content management host. Content items are indexed "
        "as one document per culture and segment variation into Elasticsearch and "
        "searched with free text, filters, facets and sorters via POST /search/{index}."
    ),
    version=app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(search_router)
app.include_router(index_router)


async def check_connection(search_client: SearchClientInterface) -> None:
    """Check connectivity to the search backend on startup.

    Raises:
        SearchBackendError: If the search backend is not reachable. Nothing can be served without it.
    """
    await search_client.do_healthcheck()
    logging.info("Search backend '%s' is reachable.", search_client.get_engine_name(), color="green")


async def ensure_indexes(indexer_service: IndexerService, helper_config: HelperConfig) -> None:
    """Create the configured indexes that do not exist yet. Failures are logged, the server stays up."""
    for index_alias in helper_config.get_list_val("SEARCH_INDEXES", default=[]):
        result = await indexer_service.do_ensure(index_alias)
        if not result.success:
            logging.warning("Index '%s' could not be ensured. Indexing into it will fail.", index_alias)


if __name__ == "__main__":
    import uvicorn

    logging.info(
        "Starting search_bridge API Server v%s from root dir: %s on port 8000...",
        app_version,
        os.environ.get("ROOT_DIR", "unknown"),
    )
    uvicorn.run(app, host="0.0.0.0", port=8000)
