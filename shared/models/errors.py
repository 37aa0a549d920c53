class SearchBackendError(Exception):
    """A request to the search backend failed or was rejected.

    Attributes:
        status_code (int | None): HTTP status of the rejection, None for transport failures.
        debug_info (str): Raw backend diagnostic (response body or transport error).
    """

    def __init__(self, message: str, status_code: int | None = None, debug_info: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.debug_info = debug_info

    def describe(self) -> str:
        """Return the backend diagnostic in the form "<status> <body>"."""
        status = self.status_code if self.status_code is not None else "n/a"
        return f"{status} {self.debug_info}".strip()
