"""Pydantic models for search requests and results.

Filters, facets, sorters and facet values are closed sets. Each member carries
a literal ``kind`` so request bodies can be parsed as discriminated unions,
and every translation point dispatches over the full set and ends in
:func:`unsupported`, which type checkers flag when a member is left unhandled.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Never, NoReturn, Union
from uuid import UUID

from pydantic import BaseModel, Field


def unsupported(category: str, value: Never) -> NoReturn:
    """Reject a filter/facet/sorter outside the supported set.

    Raises:
        ValueError: Always.
    """
    raise ValueError(f"Encountered an unsupported {category} type: {type(value).__name__}")


class Direction(str, Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"


class AccessContext(BaseModel):
    """Identity of the caller used to reveal protected documents."""

    principal_id: UUID
    group_ids: list[UUID] | None = None


##########################################
################ FILTERS #################
##########################################

class FilterBase(BaseModel):
    field_name: str
    negate: bool = False


class TextFilter(FilterBase):
    """Prefix match against any relevance tier of a text field."""

    kind: Literal["text"] = "text"
    values: list[str]


class KeywordFilter(FilterBase):
    kind: Literal["keyword"] = "keyword"
    values: list[str]


class IntegerExactFilter(FilterBase):
    kind: Literal["integer_exact"] = "integer_exact"
    values: list[int]


class IntegerRangeFilterRange(BaseModel):
    min_value: int | None = None
    max_value: int | None = None


class IntegerRangeFilter(FilterBase):
    kind: Literal["integer_range"] = "integer_range"
    ranges: list[IntegerRangeFilterRange]


class DecimalExactFilter(FilterBase):
    kind: Literal["decimal_exact"] = "decimal_exact"
    values: list[Decimal]


class DecimalRangeFilterRange(BaseModel):
    min_value: Decimal | None = None
    max_value: Decimal | None = None


class DecimalRangeFilter(FilterBase):
    kind: Literal["decimal_range"] = "decimal_range"
    ranges: list[DecimalRangeFilterRange]


class DateTimeOffsetExactFilter(FilterBase):
    kind: Literal["datetimeoffset_exact"] = "datetimeoffset_exact"
    values: list[datetime]


class DateTimeOffsetRangeFilterRange(BaseModel):
    min_value: datetime | None = None
    max_value: datetime | None = None


class DateTimeOffsetRangeFilter(FilterBase):
    kind: Literal["datetimeoffset_range"] = "datetimeoffset_range"
    ranges: list[DateTimeOffsetRangeFilterRange]


Filter = Union[
    TextFilter,
    KeywordFilter,
    IntegerExactFilter,
    IntegerRangeFilter,
    DecimalExactFilter,
    DecimalRangeFilter,
    DateTimeOffsetExactFilter,
    DateTimeOffsetRangeFilter,
]
AnyFilter = Annotated[Filter, Field(discriminator="kind")]


##########################################
################# FACETS #################
##########################################

class FacetBase(BaseModel):
    field_name: str


class KeywordFacet(FacetBase):
    kind: Literal["keyword"] = "keyword"


class IntegerExactFacet(FacetBase):
    kind: Literal["integer_exact"] = "integer_exact"


class IntegerRangeFacetRange(BaseModel):
    key: str
    min_value: int | None = None
    max_value: int | None = None


class IntegerRangeFacet(FacetBase):
    kind: Literal["integer_range"] = "integer_range"
    ranges: list[IntegerRangeFacetRange] = []


class DecimalExactFacet(FacetBase):
    kind: Literal["decimal_exact"] = "decimal_exact"


class DecimalRangeFacetRange(BaseModel):
    key: str
    min_value: Decimal | None = None
    max_value: Decimal | None = None


class DecimalRangeFacet(FacetBase):
    kind: Literal["decimal_range"] = "decimal_range"
    ranges: list[DecimalRangeFacetRange] = []


class DateTimeOffsetExactFacet(FacetBase):
    kind: Literal["datetimeoffset_exact"] = "datetimeoffset_exact"


class DateTimeOffsetRangeFacetRange(BaseModel):
    key: str
    min_value: datetime | None = None
    max_value: datetime | None = None


class DateTimeOffsetRangeFacet(FacetBase):
    kind: Literal["datetimeoffset_range"] = "datetimeoffset_range"
    ranges: list[DateTimeOffsetRangeFacetRange] = []


Facet = Union[
    KeywordFacet,
    IntegerExactFacet,
    IntegerRangeFacet,
    DecimalExactFacet,
    DecimalRangeFacet,
    DateTimeOffsetExactFacet,
    DateTimeOffsetRangeFacet,
]
AnyFacet = Annotated[Facet, Field(discriminator="kind")]


##########################################
################ SORTERS #################
##########################################

class ScoreSorter(BaseModel):
    kind: Literal["score"] = "score"
    direction: Direction = Direction.DESCENDING


class FieldSorterBase(BaseModel):
    field_name: str
    direction: Direction = Direction.ASCENDING


class KeywordSorter(FieldSorterBase):
    kind: Literal["keyword"] = "keyword"


class TextSorter(FieldSorterBase):
    kind: Literal["text"] = "text"


class IntegerSorter(FieldSorterBase):
    kind: Literal["integer"] = "integer"


class DecimalSorter(FieldSorterBase):
    kind: Literal["decimal"] = "decimal"


class DateTimeOffsetSorter(FieldSorterBase):
    kind: Literal["datetimeoffset"] = "datetimeoffset"


Sorter = Union[
    ScoreSorter,
    KeywordSorter,
    TextSorter,
    IntegerSorter,
    DecimalSorter,
    DateTimeOffsetSorter,
]
AnySorter = Annotated[Sorter, Field(discriminator="kind")]


##########################################
############## FACET VALUES ##############
##########################################

class KeywordFacetValue(BaseModel):
    kind: Literal["keyword"] = "keyword"
    key: str
    count: int


class IntegerExactFacetValue(BaseModel):
    kind: Literal["integer_exact"] = "integer_exact"
    key: int
    count: int


class IntegerRangeFacetValue(BaseModel):
    kind: Literal["integer_range"] = "integer_range"
    key: str
    min_value: int | None = None
    max_value: int | None = None
    count: int


class DecimalExactFacetValue(BaseModel):
    kind: Literal["decimal_exact"] = "decimal_exact"
    key: Decimal
    count: int


class DecimalRangeFacetValue(BaseModel):
    kind: Literal["decimal_range"] = "decimal_range"
    key: str
    min_value: Decimal | None = None
    max_value: Decimal | None = None
    count: int


class DateTimeOffsetExactFacetValue(BaseModel):
    kind: Literal["datetimeoffset_exact"] = "datetimeoffset_exact"
    key: datetime
    count: int


class DateTimeOffsetRangeFacetValue(BaseModel):
    kind: Literal["datetimeoffset_range"] = "datetimeoffset_range"
    key: str
    min_value: datetime | None = None
    max_value: datetime | None = None
    count: int


FacetValue = Annotated[
    Union[
        KeywordFacetValue,
        IntegerExactFacetValue,
        IntegerRangeFacetValue,
        DecimalExactFacetValue,
        DecimalRangeFacetValue,
        DateTimeOffsetExactFacetValue,
        DateTimeOffsetRangeFacetValue,
    ],
    Field(discriminator="kind"),
]


##########################################
################ RESULTS #################
##########################################

class FacetResult(BaseModel):
    field_name: str
    values: list[FacetValue] = []


class Document(BaseModel):
    """A search hit reduced to its identity."""

    id: UUID
    object_type: str


class SearchResult(BaseModel):
    """Response of a search. Always well formed; an empty result signals no hits or a failed query."""

    total: int = 0
    documents: list[Document] = []
    facets: list[FacetResult] = []


##########################################
################ REQUEST #################
##########################################

class SearchQuery(BaseModel):
    """A logical search request.

    None and an empty list differ for filters, facets and sorters: a request
    where query, filters, facets and sorters are all None asks for nothing
    and yields an empty result.
    """

    query: str | None = None
    filters: list[AnyFilter] | None = None
    facets: list[AnyFacet] | None = None
    sorters: list[AnySorter] | None = None
    culture: str | None = None
    segment: str | None = None
    access_context: AccessContext | None = None
    skip: int = Field(default=0, ge=0)
    take: int = Field(default=10, ge=0)

    def is_empty(self) -> bool:
        return self.query is None and self.filters is None and self.facets is None and self.sorters is None
