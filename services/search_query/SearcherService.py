"""Searcher service.

Plans a logical search request, executes it against the search backend and
projects the response. A failing backend degrades to an empty result.
"""

from services.search_query.query_planner import build_search_body
from services.search_query.result_projector import project_result
from shared.clients.search.SearchClientInterface import SearchClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.errors import SearchBackendError
from shared.models.options import SearcherOptions
from shared.models.searching import SearchQuery, SearchResult


class SearcherService:
    def __init__(
        self,
        helper_config: HelperConfig,
        search_client: SearchClientInterface,
        options: SearcherOptions | None = None,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._search_client = search_client
        self._options = options or SearcherOptions.from_config(helper_config)

    async def do_search(self, index_alias: str, request: SearchQuery) -> SearchResult:
        """Run a search against an index.

        Args:
            index_alias (str): The index alias.
            request (SearchQuery): The logical search request.

        Returns:
            SearchResult: The result; empty if the request asks for nothing or the backend fails.

        Raises:
            ValueError: If the request contains an unsupported filter or sorter type.
        """
        if request.is_empty():
            return SearchResult()

        index = self._search_client.get_index_name(index_alias)
        plan = build_search_body(request, self._options)

        try:
            response = await self._search_client.do_search(index, plan.body)
        except SearchBackendError as e:
            self.logging.error(
                "Could not execute a search. Search index: %s. Debug info from backend: %s",
                index,
                e.describe(),
            )
            return SearchResult()

        result = project_result(response, plan.facets)
        self.logging.debug(
            "Search in index %s matched %d document(s), returned %d.",
            index,
            result.total,
            len(result.documents),
        )
        return result
