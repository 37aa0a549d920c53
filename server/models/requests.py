from uuid import UUID

from pydantic import BaseModel

from shared.models.indexing import ContentProtection, IndexField, Variation


class AddOrUpdateRequest(BaseModel):
    """A content item to (re)index with all of its variations."""

    key: UUID
    object_type: str
    variations: list[Variation]
    fields: list[IndexField] = []
    protection: ContentProtection | None = None


class DeleteRequest(BaseModel):
    keys: list[UUID]
