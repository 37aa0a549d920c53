from shared.helper.field_encoding import base_mappings
from services.search_indexing.IndexingServiceBase import IndexingServiceBase
from shared.models.errors import SearchBackendError
from shared.models.indexing import HealthStatus, IndexMetadata, IndexOperationResult


class IndexManager(IndexingServiceBase):
    """Creates, drops and inspects whole indexes."""

    async def do_ensure(self, index_alias: str) -> IndexOperationResult:
        """Create the index with its base mappings if it does not exist yet.

        Args:
            index_alias (str): The index alias.

        Returns:
            IndexOperationResult: Outcome of the operation; never raises for backend rejections.
        """
        index = self._search_client.get_index_name(index_alias)
        skipped = self._skip_if_not_allowed("ensure", index)
        if skipped:
            return skipped

        try:
            if await self._search_client.do_index_exists(index):
                self.logging.debug("Index %s already exists.", index)
                return IndexOperationResult(operation="ensure", index=index)
            await self._search_client.do_create_index(index, base_mappings())
        except SearchBackendError as e:
            return self._failed("ensure", index, "Could not ensure index", e)

        self.logging.info("Created index %s.", index)
        return IndexOperationResult(operation="ensure", index=index)

    async def do_reset(self, index_alias: str) -> IndexOperationResult:
        """Drop the index with all of its documents and recreate it with its base mappings.

        Args:
            index_alias (str): The index alias.

        Returns:
            IndexOperationResult: Outcome of the operation; never raises for backend rejections.
        """
        index = self._search_client.get_index_name(index_alias)
        skipped = self._skip_if_not_allowed("reset", index)
        if skipped:
            return skipped

        try:
            dropped = await self._search_client.do_delete_index(index)
            await self._search_client.do_create_index(index, base_mappings())
        except SearchBackendError as e:
            return self._failed("reset", index, "Could not reset index", e)

        self.logging.info("Reset index %s (existing index dropped: %s).", index, dropped)
        return IndexOperationResult(operation="reset", index=index)

    async def get_metadata(self, index_alias: str) -> IndexMetadata:
        """Document count and health of an index. Failures degrade to an unknown health state.

        Args:
            index_alias (str): The index alias.

        Returns:
            IndexMetadata: The metadata of the index.
        """
        index = self._search_client.get_index_name(index_alias)
        try:
            if not await self._search_client.do_index_exists(index):
                return IndexMetadata()
            document_count = await self._search_client.do_document_count(index)
            health = await self._search_client.do_index_health(index)
        except SearchBackendError as e:
            self._log_backend_failure("Could not read index metadata", index, e)
            return IndexMetadata()

        if health in ("green", "yellow"):
            status = HealthStatus.HEALTHY if document_count > 0 else HealthStatus.EMPTY
        elif health == "red":
            status = HealthStatus.CORRUPTED
        else:
            status = HealthStatus.UNKNOWN
        return IndexMetadata(document_count=document_count, health_status=status)
