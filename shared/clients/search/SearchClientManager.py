from shared.helper.HelperConfig import HelperConfig
from shared.clients.search.SearchClientInterface import SearchClientInterface


class SearchClientManager:
    """
    Manager class to instantiate the search client of the configured engine.
    """

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.client = self._initialize_client()

    def _get_engine_from_env(self) -> str:
        """
        Reads the search engine from ENV configuration.

        Returns:
            str: The engine name, capitalised. E.g. "Elasticsearch"

        Raises:
            ValueError: If no search engine is specified in the configuration.
        """
        engine = self.helper_config.get_string_val("SEARCH_ENGINE")
        if not engine.strip():
            raise ValueError("No search engine specified in configuration.")
        return engine.strip().lower().capitalize()

    def _initialize_client(self) -> SearchClientInterface:
        """
        Instantiates the search client of the configured engine.

        Returns:
            SearchClientInterface: The client instance.

        Raises:
            ValueError: If the engine is not supported.
        """
        engine = self._get_engine_from_env()
        className = f"SearchClient{engine}"
        # import the class from shared.clients.search.{engine}
        try:
            module = __import__(
                f"shared.clients.search.{engine.lower()}.{className}",
                fromlist=[className],
            )
            client_class = getattr(module, className)
        except (ImportError, AttributeError) as e:
            raise ValueError(f"Unsupported search engine specified: '{engine}'. Error: {e}")
        client_instance = client_class(helper_config=self.helper_config)
        self.logging.debug(f"Instantiated search client for engine: {engine}")
        return client_instance

    def get_client(self) -> SearchClientInterface:
        """
        Returns the instantiated search client.

        Returns:
            SearchClientInterface: The search client instance.
        """
        return self.client
