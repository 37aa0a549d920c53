import base64
import json

from shared.helper.HelperConfig import HelperConfig
from shared.clients.search.SearchClientInterface import SearchClientInterface
from shared.clients.search.models.Bulk import BulkItemFailure, BulkResult
from shared.models.config import EnvConfig

REFRESH_POLICIES = ("false", "true", "wait_for")


class SearchClientElasticsearch(SearchClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default="", val_type="string")
        self._username = self.get_config_val("USERNAME", default="", val_type="string")
        self._password = self.get_config_val("PASSWORD", default="", val_type="string")
        self._environment = self.get_config_val("ENVIRONMENT", default="", val_type="string")
        self._refresh = self.get_config_val("REFRESH", default="false", val_type="string").lower()
        if self._refresh not in REFRESH_POLICIES:
            raise ValueError(f"Unsupported refresh policy '{self._refresh}'. Use one of {', '.join(REFRESH_POLICIES)}.")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Elasticsearch"

    def get_index_name(self, alias: str) -> str:
        alias = alias.strip()
        if not alias:
            raise ValueError("Index alias must not be empty.")
        if self._environment:
            return f"{alias}_{self._environment}".lower()
        return alias.lower()

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
            EnvConfig(env_key="API_KEY", val_type="string", default=""),
            EnvConfig(env_key="USERNAME", val_type="string", default=""),
            EnvConfig(env_key="PASSWORD", val_type="string", default=""),
            EnvConfig(env_key="ENVIRONMENT", val_type="string", default=""),
            EnvConfig(env_key="REFRESH", val_type="string", default="false"),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        if self._api_key:
            return {"Authorization": f"ApiKey {self._api_key}"}
        elif self._username:
            token = base64.b64encode(f"{self._username}:{self._password}".encode("utf-8")).decode("ascii")
            return {"Authorization": f"Basic {token}"}
        else:
            return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return "/"

    def _get_endpoint_index(self, index: str) -> str:
        return f"/{index}"

    def _get_endpoint_bulk(self) -> str:
        return "/_bulk"

    def _get_endpoint_delete_by_query(self, index: str) -> str:
        return f"/{index}/_delete_by_query"

    def _get_endpoint_search(self, index: str) -> str:
        return f"/{index}/_search"

    def _get_endpoint_document_count(self, index: str) -> str:
        return f"/{index}/_stats/docs"

    def _get_endpoint_index_health(self, index: str) -> str:
        return f"/_cluster/health/{index}"

    ##########################################
    ########### PAYLOAD BUILDER ##############
    ##########################################

    def get_create_index_payload(self, mappings: dict) -> dict:
        return {"mappings": mappings}

    def get_bulk_payload(self, index: str, documents: list[tuple[str, dict]]) -> str:
        lines = []
        for doc_id, source in documents:
            lines.append(json.dumps({"index": {"_index": index, "_id": doc_id}}))
            lines.append(json.dumps(source))
        # the bulk body must end with a newline
        return "\n".join(lines) + "\n"

    def get_write_params(self, by_query: bool = False) -> dict:
        if by_query:
            params = {"conflicts": "proceed"}
            # delete by query knows no wait_for
            if self._refresh != "false":
                params["refresh"] = "true"
            return params
        if self._refresh == "false":
            return {}
        return {"refresh": self._refresh}

    def get_search_params(self) -> dict:
        # prefixes aggregation names with their type, e.g. "sterms#color_KeywordFacet"
        return {"typed_keys": "true"}

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    def extract_bulk_result(self, raw_response: dict) -> BulkResult:
        result = BulkResult()
        for item in raw_response.get("items", []):
            # every item is keyed by its action
            action = next(iter(item.values()), {})
            doc_id = str(action.get("_id", ""))
            status = int(action.get("status", 0))
            error = action.get("error")
            if error or status >= 300:
                reason = error.get("reason", "") if isinstance(error, dict) else str(error or "")
                result.failures.append(BulkItemFailure(id=doc_id, status=status, reason=reason))
            else:
                result.succeeded_ids.append(doc_id)
        return result

    def extract_document_count(self, raw_response: dict) -> int:
        return raw_response.get("_all", {}).get("primaries", {}).get("docs", {}).get("count", 0)

    def extract_index_health(self, raw_response: dict) -> str | None:
        return raw_response.get("status")
