from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface
from shared.clients.search.models.Bulk import BulkResult
from shared.helper.HelperConfig import HelperConfig
from shared.models.errors import SearchBackendError


class SearchClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        """
        Returns the type of the client. E.g. "search"
        """
        return "search"

    @abstractmethod
    def get_index_name(self, alias: str) -> str:
        """
        Resolves the physical index name of an index alias.

        Args:
            alias (str): The index alias as used by the caller.

        Returns:
            str: The physical index name.
        """
        pass

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_index(self, index: str) -> str:
        """
        Returns the endpoint path addressing a whole index (existence check, create, drop).
        """
        pass

    @abstractmethod
    def _get_endpoint_bulk(self) -> str:
        """
        Returns the endpoint path for bulk write requests.
        """
        pass

    @abstractmethod
    def _get_endpoint_delete_by_query(self, index: str) -> str:
        """
        Returns the endpoint path for deleting all documents matching a query.
        """
        pass

    @abstractmethod
    def _get_endpoint_search(self, index: str) -> str:
        """
        Returns the endpoint path for search requests.
        """
        pass

    @abstractmethod
    def _get_endpoint_document_count(self, index: str) -> str:
        """
        Returns the endpoint path for the document statistics of an index.
        """
        pass

    @abstractmethod
    def _get_endpoint_index_health(self, index: str) -> str:
        """
        Returns the endpoint path for the health state of an index.
        """
        pass

    ##########################################
    ########### PAYLOAD BUILDER ##############
    ##########################################

    @abstractmethod
    def get_create_index_payload(self, mappings: dict) -> dict:
        """
        Builds the backend-specific request payload for creating an index.

        Args:
            mappings (dict): The index mappings.

        Returns:
            dict: The payload for the create request.
        """
        pass

    @abstractmethod
    def get_bulk_payload(self, index: str, documents: list[tuple[str, dict]]) -> str:
        """
        Builds the backend-specific body of a bulk write.

        Args:
            index (str): Physical index name.
            documents (list[tuple[str, dict]]): Pairs of document id and document source.

        Returns:
            str: The serialised bulk body.
        """
        pass

    @abstractmethod
    def get_write_params(self, by_query: bool = False) -> dict:
        """
        Returns the URL parameters applied to every write, e.g. the refresh policy.

        Args:
            by_query (bool): True for query-driven writes, which may support a narrower set of parameters.
        """
        pass

    @abstractmethod
    def get_search_params(self) -> dict:
        """
        Returns the URL parameters applied to every search request.
        """
        pass

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    @abstractmethod
    def extract_bulk_result(self, raw_response: dict) -> BulkResult:
        """
        Splits a raw bulk response into written and rejected documents.
        """
        pass

    @abstractmethod
    def extract_document_count(self, raw_response: dict) -> int:
        """
        Extracts the number of documents from a raw statistics response.
        """
        pass

    @abstractmethod
    def extract_index_health(self, raw_response: dict) -> str | None:
        """
        Extracts the health state (e.g. "green") from a raw health response.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_index_exists(self, index: str) -> bool:
        """Check if an index exists in the search backend.

        Args:
            index (str): Physical index name.

        Returns:
            bool: True if the index exists, False otherwise.

        Raises:
            SearchBackendError: If the backend answers with anything but found or not found.
        """
        resp = await self.do_request(method="HEAD", endpoint=self._get_endpoint_index(index))
        if resp.status_code == 404:
            return False
        if resp.status_code >= 300:
            raise SearchBackendError(
                f"Existence check of index {index} failed with status {resp.status_code}",
                status_code=resp.status_code,
                debug_info=resp.text,
            )
        return True

    async def do_create_index(self, index: str, mappings: dict) -> None:
        """Create an index with the given mappings.

        Args:
            index (str): Physical index name.
            mappings (dict): The index mappings.
        """
        await self.do_request(
            method="PUT",
            json=self.get_create_index_payload(mappings),
            endpoint=self._get_endpoint_index(index),
            raise_on_error=True,
        )

    async def do_delete_index(self, index: str) -> bool:
        """Drop an index including all of its documents.

        Args:
            index (str): Physical index name.

        Returns:
            bool: True if the index was dropped, False if it did not exist.
        """
        resp = await self.do_request(method="DELETE", endpoint=self._get_endpoint_index(index))
        if resp.status_code == 404:
            return False
        if resp.status_code >= 300:
            raise SearchBackendError(
                f"Deleting index {index} failed with status {resp.status_code}",
                status_code=resp.status_code,
                debug_info=resp.text,
            )
        return True

    async def do_bulk_index(self, index: str, documents: list[tuple[str, dict]]) -> BulkResult:
        """Write (insert or replace) documents in a single bulk request.

        The bulk is not atomic. Rejected items do not raise, they are reported in the result.

        Args:
            index (str): Physical index name.
            documents (list[tuple[str, dict]]): Pairs of document id and document source.

        Returns:
            BulkResult: Ids written and items rejected.
        """
        if not documents:
            return BulkResult()
        resp = await self.do_request(
            method="POST",
            content=self.get_bulk_payload(index, documents),
            params=self.get_write_params(),
            endpoint=self._get_endpoint_bulk(),
            additional_headers={"Content-Type": "application/x-ndjson"},
            raise_on_error=True,
        )
        return self.extract_bulk_result(resp.json())

    async def do_delete_by_query(self, index: str, query: dict) -> int:
        """Delete all documents matching a query.

        Args:
            index (str): Physical index name.
            query (dict): The query selecting the documents to delete.

        Returns:
            int: Number of deleted documents.
        """
        resp = await self.do_request(
            method="POST",
            json={"query": query},
            params=self.get_write_params(by_query=True),
            endpoint=self._get_endpoint_delete_by_query(index),
            raise_on_error=True,
        )
        return resp.json().get("deleted", 0)

    async def do_search(self, index: str, body: dict) -> dict:
        """Run a search request.

        Args:
            index (str): Physical index name.
            body (dict): The complete search body.

        Returns:
            dict: The raw search response.
        """
        resp = await self.do_request(
            method="POST",
            json=body,
            params=self.get_search_params(),
            endpoint=self._get_endpoint_search(index),
            raise_on_error=True,
        )
        return resp.json()

    async def do_document_count(self, index: str) -> int:
        """Count the documents stored in an index."""
        resp = await self.do_request(
            method="GET",
            endpoint=self._get_endpoint_document_count(index),
            raise_on_error=True,
        )
        return self.extract_document_count(resp.json())

    async def do_index_health(self, index: str) -> str | None:
        """Fetch the health state of an index."""
        resp = await self.do_request(
            method="GET",
            endpoint=self._get_endpoint_index_health(index),
            raise_on_error=True,
        )
        return self.extract_index_health(resp.json())
