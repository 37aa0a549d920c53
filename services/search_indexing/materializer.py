"""Expansion of one content item into its physical per-variation documents.

Pure functions only; writing the documents is the IndexerService's job.
"""

from uuid import UUID

from shared.helper.field_encoding import (
    ALL_TEXTS_BY_KIND,
    PUBLIC_ACCESS_KEY,
    SORTABLE_MAX_LENGTH,
    TEXT_KINDS,
    ValueKind,
    access_key,
    document_id,
    field_key,
    index_culture,
    index_segment,
    segmented_field,
    sortable_key,
)
from shared.helper.variance import resolve_variation, union_texts
from shared.models.indexing import (
    ContentProtection,
    FieldValues,
    IndexField,
    IndexValue,
    PhysicalDocument,
    Variation,
)
from shared.models.options import IndexerOptions

# IndexValue slot holding the values of each kind
VALUE_SLOTS: dict[ValueKind, str] = {
    ValueKind.TEXTS: "texts",
    ValueKind.TEXTS_R1: "texts_r1",
    ValueKind.TEXTS_R2: "texts_r2",
    ValueKind.TEXTS_R3: "texts_r3",
    ValueKind.KEYWORDS: "keywords",
    ValueKind.INTEGERS: "integers",
    ValueKind.DECIMALS: "decimals",
    ValueKind.DATE_TIME_OFFSETS: "date_time_offsets",
}


def _physical_values(kind: ValueKind, values: list) -> FieldValues:
    """Convert logical values of one kind to their stored representation.

    Raises:
        ValueError: If the kind has no stored representation.
    """
    if kind in TEXT_KINDS or kind is ValueKind.KEYWORDS:
        return [str(v) for v in values]
    elif kind is ValueKind.INTEGERS:
        return [int(v) for v in values]
    elif kind is ValueKind.DECIMALS:
        # the store compares decimals as doubles
        return [float(v) for v in values]
    elif kind is ValueKind.DATE_TIME_OFFSETS:
        return [v.isoformat() for v in values]
    raise ValueError(f"Encountered an unsupported field value kind: {kind!r}")


def _values(value: IndexValue, kind: ValueKind) -> list | None:
    return getattr(value, VALUE_SLOTS[kind])


def _access_keys(protection: ContentProtection | None) -> list[str]:
    """Access keys of a document; unprotected content gets the public key only.

    Raises:
        ValueError: If a protection id collides with the reserved public key.
    """
    if protection is None or not protection.access_ids:
        return [access_key(PUBLIC_ACCESS_KEY)]
    if PUBLIC_ACCESS_KEY in protection.access_ids:
        raise ValueError("The public access key is reserved and cannot be used as a protection id.")
    return [access_key(access_id) for access_id in dict.fromkeys(protection.access_ids)]


def _tier_texts(fields: list[IndexField], kind: ValueKind) -> list[str]:
    texts: list[str] = []
    for field in fields:
        texts.extend(_values(field.value, kind) or [])
    return texts


def _blob(texts: list[str]) -> str:
    return " ".join(texts).lower()


def build_field_values(fields: list[IndexField], options: IndexerOptions) -> dict[str, FieldValues]:
    """Physical field map of resolved fields, including the sortable text composites."""
    field_values: dict[str, FieldValues] = {}
    for field in fields:
        for kind in ValueKind:
            values = _values(field.value, kind)
            if values:
                field_values[field_key(field.field_name, kind)] = _physical_values(kind, values)

    for field in fields:
        if not field.value.has_texts():
            continue
        sortable = union_texts(
            field.value.texts_r1,
            field.value.texts_r2,
            field.value.texts_r3,
            field.value.texts,
        )[: options.sortable_text_count]
        if sortable:
            # longer composites would not be indexed for sorting at all
            field_values[sortable_key(field.field_name)] = [_blob(sortable)[:SORTABLE_MAX_LENGTH]]
    return field_values


def build_aggregates(
    resolved: list[IndexField],
    default_resolved: list[IndexField] | None,
    segment: str | None,
) -> dict[str, str]:
    """Free text blob per relevance tier.

    Args:
        resolved (list[IndexField]): Fields resolved for the document's variation.
        default_resolved (list[IndexField] | None): Fields resolved for the same culture without
            segment, to be merged into segment blobs. None keeps segment blobs isolated.
        segment (str | None): Segment of the document; qualifies the aggregate names.

    Returns:
        dict[str, str]: Aggregate name to lower-cased, space-joined text.
    """
    aggregates: dict[str, str] = {}
    for kind, aggregate_name in ALL_TEXTS_BY_KIND.items():
        texts = _tier_texts(resolved, kind)
        if segment and default_resolved is not None:
            texts = union_texts(texts, _tier_texts(default_resolved, kind))
        if texts:
            aggregates[segmented_field(aggregate_name, segment)] = _blob(texts)
    return aggregates


def build_document(
    key: UUID,
    object_type: str,
    variation: Variation,
    fields: list[IndexField],
    protection: ContentProtection | None,
    options: IndexerOptions,
) -> PhysicalDocument:
    """Materialise the physical document of a single variation."""
    resolved = resolve_variation(fields, variation)
    default_resolved = None
    if variation.segment and options.segment_text_union:
        default_resolved = resolve_variation(fields, Variation(culture=variation.culture, segment=None))

    return PhysicalDocument(
        id=document_id(key, variation.culture, variation.segment),
        object_type=object_type,
        key=key,
        culture=index_culture(variation.culture),
        segment=index_segment(variation.segment),
        access_keys=_access_keys(protection),
        aggregates=build_aggregates(resolved, default_resolved, variation.segment),
        fields=build_field_values(resolved, options),
    )


def build_documents(
    key: UUID,
    object_type: str,
    variations: list[Variation],
    fields: list[IndexField],
    protection: ContentProtection | None,
    options: IndexerOptions,
) -> list[PhysicalDocument]:
    """Materialise one physical document per distinct declared variation.

    Args:
        key (UUID): Content key.
        object_type (str): Object type tag of the content item.
        variations (list[Variation]): Declared variations; duplicates collapse into one document.
        fields (list[IndexField]): Every logical field value of the item.
        protection (ContentProtection | None): Access restriction, None for public content.
        options (IndexerOptions): Indexer tuning.

    Returns:
        list[PhysicalDocument]: Documents in declaration order.
    """
    documents: dict[str, PhysicalDocument] = {}
    for variation in variations:
        doc_id = document_id(key, variation.culture, variation.segment)
        if doc_id in documents:
            continue
        documents[doc_id] = build_document(key, object_type, variation, fields, protection, options)
    return list(documents.values())
