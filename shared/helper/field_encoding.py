"""Naming and typing convention for physical index fields.

Every logical field value lands under ``fields.<name><postfix>`` where the
postfix names the value kind. The store applies type-specific mappings by
postfix alone (see :func:`base_mappings`), so no field needs to be declared
up front.
"""

from enum import Enum
from uuid import UUID

INVARIANT_CULTURE = "inv"
DEFAULT_SEGMENT = "def"

# the reserved access key of public content; never a real principal or group id
PUBLIC_ACCESS_KEY = UUID(int=0)


class FieldNames:
    ID = "id"
    OBJECT_TYPE = "objectType"
    KEY = "key"
    CULTURE = "culture"
    SEGMENT = "segment"
    ACCESS_KEYS = "accessKeys"
    ALL_TEXTS = "allTexts"
    ALL_TEXTS_R1 = "allTextsR1"
    ALL_TEXTS_R2 = "allTextsR2"
    ALL_TEXTS_R3 = "allTextsR3"
    FIELDS = "fields"


class ValueKind(str, Enum):
    """Value kinds of a logical field, each bound to a unique physical postfix."""

    TEXTS = "_texts"
    TEXTS_R1 = "_texts_r1"
    TEXTS_R2 = "_texts_r2"
    TEXTS_R3 = "_texts_r3"
    KEYWORDS = "_keywords"
    INTEGERS = "_integers"
    DECIMALS = "_decimals"
    DATE_TIME_OFFSETS = "_datetimeoffsets"


SORTABLE_POSTFIX = "_sort"
# longest sortable composite kept, in characters
SORTABLE_MAX_LENGTH = 256

# free text aggregate per relevance tier, lowest tier first
ALL_TEXTS_BY_KIND: dict[ValueKind, str] = {
    ValueKind.TEXTS: FieldNames.ALL_TEXTS,
    ValueKind.TEXTS_R1: FieldNames.ALL_TEXTS_R1,
    ValueKind.TEXTS_R2: FieldNames.ALL_TEXTS_R2,
    ValueKind.TEXTS_R3: FieldNames.ALL_TEXTS_R3,
}

TEXT_KINDS = tuple(ALL_TEXTS_BY_KIND)


def index_culture(culture: str | None) -> str:
    return culture.lower() if culture else INVARIANT_CULTURE


def index_segment(segment: str | None) -> str:
    return segment.lower() if segment else DEFAULT_SEGMENT


def field_key(field_name: str, kind: ValueKind) -> str:
    """Key of a field value inside the document's ``fields`` object."""
    return f"{field_name}{kind.value}"


def field_path(field_name: str, kind: ValueKind) -> str:
    """Full dotted path of a field value, as used in queries, aggregations and sorting."""
    return f"{FieldNames.FIELDS}.{field_key(field_name, kind)}"


def sortable_key(field_name: str) -> str:
    return f"{field_key(field_name, ValueKind.TEXTS)}{SORTABLE_POSTFIX}"


def sortable_path(field_name: str) -> str:
    return f"{FieldNames.FIELDS}.{sortable_key(field_name)}"


def segmented_field(field_name: str, segment: str | None) -> str:
    """Qualify a top level aggregate field with its segment.

    The default segment keeps the bare name, so default and segment
    aggregates never share a path.
    """
    if not segment:
        return field_name
    return f"{index_segment(segment)}_{field_name}"


def document_id(key: UUID, culture: str | None, segment: str | None) -> str:
    return f"{key}.{index_culture(culture)}.{index_segment(segment)}"


def access_key(value: UUID) -> str:
    return str(value)


def base_mappings() -> dict:
    """Mapping of a freshly created index.

    The identity fields are explicit exact-match fields; everything under
    ``fields`` is typed by dynamic templates bound to the value postfixes.
    Type detection from content is off, so a text that looks like a date
    or a number still maps as text.
    """
    keyword = {"type": "keyword"}
    return {
        "date_detection": False,
        "numeric_detection": False,
        "properties": {
            FieldNames.KEY: keyword,
            FieldNames.OBJECT_TYPE: keyword,
            FieldNames.CULTURE: keyword,
            FieldNames.SEGMENT: keyword,
            FieldNames.ACCESS_KEYS: keyword,
        },
        "dynamic_templates": [
            {
                "sortable_texts_as_keywords": {
                    "match": f"*{ValueKind.TEXTS.value}{SORTABLE_POSTFIX}",
                    "mapping": {"type": "keyword", "ignore_above": SORTABLE_MAX_LENGTH},
                }
            },
            {
                "keyword_fields_as_keywords": {
                    "match": f"*{ValueKind.KEYWORDS.value}",
                    "mapping": keyword,
                }
            },
            {
                "decimal_fields_as_doubles": {
                    "match": f"*{ValueKind.DECIMALS.value}",
                    "mapping": {"type": "double"},
                }
            },
            {
                "integer_fields_as_longs": {
                    "match": f"*{ValueKind.INTEGERS.value}",
                    "mapping": {"type": "long"},
                }
            },
            {
                "datetimeoffset_fields_as_dates": {
                    "match": f"*{ValueKind.DATE_TIME_OFFSETS.value}",
                    "mapping": {"type": "date"},
                }
            },
        ],
    }
