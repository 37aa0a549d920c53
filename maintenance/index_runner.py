"""Index runner entry point.

Ensures every index listed in SEARCH_INDEXES exists, or drops and recreates
them with --reset. Exits non-zero if any index operation failed.

Usage:
    python -m maintenance.index_runner [--reset]
"""

import argparse
import asyncio
import sys

from services.search_indexing.IndexerService import IndexerService
from shared.clients.search.SearchClientManager import SearchClientManager
from shared.helper.HelperConfig import HelperConfig
from shared.models.errors import SearchBackendError
from shared.logging.logging_setup import setup_logging


async def main(reset: bool = False) -> int:
    """Ensure (or reset) all configured indexes.

    Args:
        reset (bool): Drop and recreate the indexes instead of ensuring them.

    Returns:
        int: Process exit code.
    """
    logger = setup_logging()
    config = HelperConfig(logger=logger)

    index_aliases = config.get_list_val("SEARCH_INDEXES", default=[])
    if not index_aliases:
        logger.warning("No indexes configured in SEARCH_INDEXES. Nothing to do.")
        return 0

    search_client = SearchClientManager(helper_config=config).get_client()
    indexer_service = IndexerService(helper_config=config, search_client=search_client)

    failed = 0
    try:
        await search_client.boot()
        try:
            await search_client.do_healthcheck()
        except SearchBackendError as e:
            logger.error(
                "Search backend '%s' is not reachable. Debug info from backend: %s",
                search_client.get_engine_name(),
                e.describe(),
            )
            return 1

        for index_alias in index_aliases:
            if reset:
                result = await indexer_service.do_reset(index_alias)
            else:
                result = await indexer_service.do_ensure(index_alias)
            if result.skipped:
                logger.info("Skipped %s of index '%s', this node may not mutate indexes.", result.operation, index_alias)
            elif result.success:
                logger.info("Index '%s' (%s) is ready.", index_alias, result.index, color="green")
            else:
                failed += 1
    finally:
        await search_client.close()

    return 1 if failed else 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Ensure or reset the configured search indexes.")
    parser.add_argument("--reset", action="store_true", help="drop and recreate the indexes, deleting all documents")
    args = parser.parse_args()
    sys.exit(asyncio.run(main(reset=args.reset)))
