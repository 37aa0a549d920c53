"""Pydantic models describing content handed to the indexer.

Hierarchy:
  IndexValue: typed, multi-valued slots of one field for one variation scope.
  IndexField: a named IndexValue scoped to an optional culture and segment.
  Variation: a (culture, segment) pair that must exist as a physical document.
  ContentProtection: principal/group ids allowed to see protected content.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, field_validator

from shared.helper.field_encoding import FieldNames


class IndexValue(BaseModel):
    """Typed value slots of a single logical field.

    An empty slot is normalised to None, so "no values of that type" has
    exactly one representation.
    """

    texts: list[str] | None = None
    texts_r1: list[str] | None = None
    texts_r2: list[str] | None = None
    texts_r3: list[str] | None = None
    keywords: list[str] | None = None
    integers: list[int] | None = None
    decimals: list[Decimal] | None = None
    date_time_offsets: list[datetime] | None = None

    @field_validator("*", mode="after")
    @classmethod
    def _none_if_empty(cls, value: list | None) -> list | None:
        return value or None

    @field_validator("date_time_offsets", mode="after")
    @classmethod
    def _require_offset(cls, value: list[datetime] | None) -> list[datetime] | None:
        if value and any(dt.tzinfo is None for dt in value):
            raise ValueError("date_time_offsets values must carry a UTC offset")
        return value

    def has_texts(self) -> bool:
        return any((self.texts, self.texts_r1, self.texts_r2, self.texts_r3))


class IndexField(BaseModel):
    """A logical field value, optionally scoped to a culture and/or a segment.

    culture None means invariant, segment None means the value does not vary by segment.
    """

    field_name: str
    value: IndexValue
    culture: str | None = None
    segment: str | None = None


class Variation(BaseModel):
    culture: str | None = None
    segment: str | None = None


class ContentProtection(BaseModel):
    """Access ids (principals and groups) allowed to see a protected content item. Empty means public."""

    access_ids: list[UUID] = []


class IndexOperationResult(BaseModel):
    """Outcome of an index-mutating operation.

    Backend rejections never raise; they are reported here.

    Attributes:
        operation:  Name of the attempted operation (e.g. "add_or_update").
        index:      Resolved physical index name.
        success:    False if the backend rejected the operation or any part of it.
        skipped:    True when this node is not allowed to mutate indexes.
        failed_ids: Physical document ids the backend rejected (bulk writes only).
        detail:     Backend diagnostic for the failure, if any.
    """

    operation: str
    index: str
    success: bool = True
    skipped: bool = False
    failed_ids: list[str] = []
    detail: str | None = None


class HealthStatus(str, Enum):
    HEALTHY = "Healthy"
    EMPTY = "Empty"
    CORRUPTED = "Corrupted"
    UNKNOWN = "Unknown"


class IndexMetadata(BaseModel):
    document_count: int = 0
    health_status: HealthStatus = HealthStatus.UNKNOWN


# physical values are one of a small closed set of homogeneous arrays
FieldValues = list[str] | list[int] | list[float]


class PhysicalDocument(BaseModel):
    """The unit written to the store, one per (content key, culture, segment).

    Attributes:
        id:           Store document id, "<key>.<culture>.<segment>".
        object_type:  Object type tag of the content item.
        key:          Content key shared by all variations of the item.
        culture:      Index culture tag ("inv" for invariant).
        segment:      Index segment tag ("def" for the default segment).
        access_keys:  Principal/group ids allowed to see the document, or the public key.
        aggregates:   Free text blob per relevance tier, keyed by (segment qualified) aggregate name.
        fields:       Physical field values keyed by "<field name><postfix>".
    """

    id: str
    object_type: str
    key: UUID
    culture: str
    segment: str
    access_keys: list[str]
    aggregates: dict[str, str] = {}
    fields: dict[str, FieldValues] = {}

    def to_source(self) -> dict:
        """Return the JSON source stored for this document."""
        source = {
            FieldNames.ID: self.id,
            FieldNames.OBJECT_TYPE: self.object_type,
            FieldNames.KEY: str(self.key),
            FieldNames.CULTURE: self.culture,
            FieldNames.SEGMENT: self.segment,
            FieldNames.ACCESS_KEYS: list(self.access_keys),
        }
        source.update(self.aggregates)
        source[FieldNames.FIELDS] = {name: list(values) for name, values in self.fields.items()}
        return source
