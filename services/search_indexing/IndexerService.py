"""Indexer service.

Writes content items as physical per-variation documents, removes content
(including descendants through the ancestry field) and delegates whole
index operations to the IndexManager.
"""

from typing import Callable
from uuid import UUID

from services.search_indexing.IndexManager import IndexManager
from services.search_indexing.IndexingServiceBase import IndexingServiceBase
from services.search_indexing.materializer import build_documents
from shared.clients.search.SearchClientInterface import SearchClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.helper.field_encoding import FieldNames, ValueKind, field_path
from shared.models.errors import SearchBackendError
from shared.models.indexing import (
    ContentProtection,
    IndexField,
    IndexMetadata,
    IndexOperationResult,
    Variation,
)
from shared.models.options import IndexerOptions


class IndexerService(IndexingServiceBase):
    def __init__(
        self,
        helper_config: HelperConfig,
        search_client: SearchClientInterface,
        options: IndexerOptions | None = None,
        can_mutate_indexes: Callable[[], bool] | None = None,
    ) -> None:
        super().__init__(helper_config, search_client, can_mutate_indexes)
        self._options = options or IndexerOptions.from_config(helper_config)
        self._index_manager = IndexManager(helper_config, search_client, self._can_mutate_indexes)

    ##########################################
    ############### DOCUMENTS ################
    ##########################################

    async def do_add_or_update(
        self,
        index_alias: str,
        key: UUID,
        object_type: str,
        variations: list[Variation],
        fields: list[IndexField],
        protection: ContentProtection | None = None,
    ) -> IndexOperationResult:
        """Write one physical document per declared variation of a content item.

        Physical documents of the same key that belong to variations no longer
        declared are deleted afterwards.

        Args:
            index_alias (str): The index alias.
            key (UUID): Content key.
            object_type (str): Object type tag of the content item.
            variations (list[Variation]): Declared variations.
            fields (list[IndexField]): Every logical field value of the item.
            protection (ContentProtection | None): Access restriction, None for public content.

        Returns:
            IndexOperationResult: Outcome including the ids of rejected documents.

        Raises:
            ValueError: If the content cannot be materialised (contract violation).
        """
        index = self._search_client.get_index_name(index_alias)
        skipped = self._skip_if_not_allowed("add_or_update", index)
        if skipped:
            return skipped

        documents = build_documents(key, object_type, variations, fields, protection, self._options)
        document_ids = [document.id for document in documents]

        try:
            bulk_result = await self._search_client.do_bulk_index(
                index, [(document.id, document.to_source()) for document in documents]
            )
        except SearchBackendError as e:
            return self._failed("add_or_update", index, f"Could not write documents of content {key}", e)

        for failure in bulk_result.failures:
            self.logging.error(
                "Could not write document %s. Search index: %s. Debug info from backend: %s %s",
                failure.id,
                index,
                failure.status,
                failure.reason,
            )

        try:
            removed = await self._search_client.do_delete_by_query(index, self._stale_variations_query(key, document_ids))
        except SearchBackendError as e:
            self._log_backend_failure(f"Could not remove stale variations of content {key}", index, e)
            return IndexOperationResult(
                operation="add_or_update",
                index=index,
                success=False,
                failed_ids=bulk_result.failed_ids,
                detail=e.describe(),
            )
        if removed:
            self.logging.debug("Removed %d stale variation(s) of content %s from index %s.", removed, key, index)

        self.logging.debug("Indexed %d variation(s) of content %s into index %s.", len(bulk_result.succeeded_ids), key, index)
        return IndexOperationResult(
            operation="add_or_update",
            index=index,
            success=not bulk_result.has_failures,
            failed_ids=bulk_result.failed_ids,
            detail="Some documents were rejected by the backend." if bulk_result.has_failures else None,
        )

    async def do_delete(self, index_alias: str, keys: list[UUID]) -> IndexOperationResult:
        """Delete every physical document of the given keys and of their descendants.

        Args:
            index_alias (str): The index alias.
            keys (list[UUID]): Content keys to delete.

        Returns:
            IndexOperationResult: Outcome of the operation; never raises for backend rejections.
        """
        index = self._search_client.get_index_name(index_alias)
        skipped = self._skip_if_not_allowed("delete", index)
        if skipped:
            return skipped
        if not keys:
            return IndexOperationResult(operation="delete", index=index)

        try:
            removed = await self._search_client.do_delete_by_query(index, self._delete_query(keys))
        except SearchBackendError as e:
            return self._failed("delete", index, "Could not delete content", e)

        self.logging.debug("Deleted %d document(s) for %d key(s) from index %s.", removed, len(keys), index)
        return IndexOperationResult(operation="delete", index=index)

    ##########################################
    ################ INDEXES #################
    ##########################################

    async def do_reset(self, index_alias: str) -> IndexOperationResult:
        return await self._index_manager.do_reset(index_alias)

    async def do_ensure(self, index_alias: str) -> IndexOperationResult:
        return await self._index_manager.do_ensure(index_alias)

    async def get_metadata(self, index_alias: str) -> IndexMetadata:
        return await self._index_manager.get_metadata(index_alias)

    ##########################################
    ################ QUERIES #################
    ##########################################

    def _delete_query(self, keys: list[UUID]) -> dict:
        values = [str(key) for key in dict.fromkeys(keys)]
        return {
            "bool": {
                "should": [
                    {"terms": {FieldNames.KEY: values}},
                    {"terms": {field_path(self._options.path_field_name, ValueKind.KEYWORDS): values}},
                ],
                "minimum_should_match": 1,
            }
        }

    @staticmethod
    def _stale_variations_query(key: UUID, document_ids: list[str]) -> dict:
        query: dict = {"bool": {"filter": [{"term": {FieldNames.KEY: str(key)}}]}}
        if document_ids:
            query["bool"]["must_not"] = [{"ids": {"values": document_ids}}]
        return query
