from pydantic import BaseModel


class BulkItemFailure(BaseModel):
    """A single document the backend rejected inside a bulk request.

    Attributes:
        id:     Physical document id.
        status: HTTP status of the item.
        reason: Backend error reason for the item.
    """

    id: str
    status: int
    reason: str = ""


class BulkResult(BaseModel):
    """Parsed outcome of a bulk write. A bulk is never atomic, so items succeed or fail individually.

    Attributes:
        succeeded_ids: Ids of the documents written.
        failures:      Rejected items with their diagnostics.
    """

    succeeded_ids: list[str] = []
    failures: list[BulkItemFailure] = []

    @property
    def failed_ids(self) -> list[str]:
        return [failure.id for failure in self.failures]

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)
