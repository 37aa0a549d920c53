"""Shared behaviour of the index-mutating services.

Mutations are gated by a topology predicate: a node that may not mutate
indexes (a subscriber in a load balanced setup) turns every mutating call
into a no-op that reports ``skipped``.
"""

from typing import Callable

from shared.clients.search.SearchClientInterface import SearchClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.errors import SearchBackendError
from shared.models.indexing import IndexOperationResult

SERVER_ROLES = ("single", "primary", "subscriber")


def role_can_mutate_indexes(helper_config: HelperConfig) -> Callable[[], bool]:
    """Build the topology predicate from the SERVER_ROLE setting.

    Raises:
        ValueError: If SERVER_ROLE is not a known role.
    """
    role = helper_config.get_choice_val("SERVER_ROLE", SERVER_ROLES, default="single")
    return lambda: role != "subscriber"


class IndexingServiceBase:
    def __init__(
        self,
        helper_config: HelperConfig,
        search_client: SearchClientInterface,
        can_mutate_indexes: Callable[[], bool] | None = None,
    ) -> None:
        self.logging = helper_config.get_logger()
        self._helper_config = helper_config
        self._search_client = search_client
        self._can_mutate_indexes = can_mutate_indexes or role_can_mutate_indexes(helper_config)

    def _skip_if_not_allowed(self, operation: str, index: str) -> IndexOperationResult | None:
        """Return a skipped result if this node may not mutate indexes, otherwise None."""
        if self._can_mutate_indexes():
            return None
        self.logging.debug("Skipping %s on index %s, this node is not allowed to mutate indexes.", operation, index)
        return IndexOperationResult(operation=operation, index=index, skipped=True)

    def _log_backend_failure(self, message: str, index: str, error: SearchBackendError) -> None:
        self.logging.error(
            "%s. Search index: %s. Debug info from backend: %s",
            message,
            index,
            error.describe(),
        )

    def _failed(self, operation: str, index: str, message: str, error: SearchBackendError) -> IndexOperationResult:
        """Log a rejected operation and build its failure result."""
        self._log_backend_failure(message, index, error)
        return IndexOperationResult(operation=operation, index=index, success=False, detail=error.describe())
