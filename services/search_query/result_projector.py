"""Mapping of a raw search response back into the logical search result.

Aggregations are requested with typed keys, so every aggregation name in the
response carries its type as prefix, e.g. ``sterms#color_KeywordFacet`` or
``filter#color_KeywordFacet``. A hit or facet that cannot be mapped is
logged and dropped; the rest of the result proceeds.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID

from services.search_query.query_planner import facet_name
from shared.helper.field_encoding import FieldNames
from shared.models.searching import (
    DateTimeOffsetExactFacet,
    DateTimeOffsetExactFacetValue,
    DateTimeOffsetRangeFacet,
    DateTimeOffsetRangeFacetValue,
    DecimalExactFacet,
    DecimalExactFacetValue,
    DecimalRangeFacet,
    DecimalRangeFacetValue,
    Document,
    Facet,
    FacetResult,
    IntegerExactFacet,
    IntegerExactFacetValue,
    IntegerRangeFacet,
    IntegerRangeFacetValue,
    KeywordFacet,
    KeywordFacetValue,
    SearchResult,
    unsupported,
)

logger = logging.getLogger(__name__)

UNKNOWN_OBJECT_TYPE = "Unknown"

# bucket set type each facet expects
EXPECTED_AGGREGATION_TYPES: dict[type, tuple[str, ...]] = {
    KeywordFacet: ("sterms",),
    IntegerExactFacet: ("lterms",),
    DecimalExactFacet: ("dterms",),
    DateTimeOffsetExactFacet: ("lterms",),
    IntegerRangeFacet: ("range",),
    DecimalRangeFacet: ("range",),
    DateTimeOffsetRangeFacet: ("range",),
}

# aggregation types of fields without any indexed value
EMPTY_TERMS_TYPES = ("sterms", "umterms")


def _first(values) -> str | None:
    if isinstance(values, list):
        return str(values[0]) if values else None
    return str(values) if values is not None else None


def _from_epoch_millis(value) -> datetime:
    return datetime.fromtimestamp(int(value) / 1000, tz=timezone.utc)


def project_documents(hits: list[dict]) -> list[Document]:
    """Logical documents of the hits. Hits without a valid content key are skipped."""
    documents = []
    for hit in hits:
        fields = hit.get("fields") or {}
        key = _first(fields.get(FieldNames.KEY))
        try:
            document_key = UUID(key) if key else None
        except ValueError:
            document_key = None
        if document_key is None:
            logger.warning("Required document fields were not found in search result hit: %s", hit.get("_id"))
            continue
        object_type = _first(fields.get(FieldNames.OBJECT_TYPE)) or UNKNOWN_OBJECT_TYPE
        documents.append(Document(id=document_key, object_type=object_type))
    return documents


def project_total(hits: dict) -> int:
    total = hits.get("total", 0)
    if isinstance(total, dict):
        return int(total.get("value", 0))
    return int(total or 0)


def find_aggregation(name: str, aggregations: dict) -> tuple[str, dict] | None:
    """Find a typed-key aggregation by name, unwrapping a filter wrapper.

    Returns:
        tuple[str, dict] | None: Aggregation type and body, None if not present.
    """
    for typed_name, body in aggregations.items():
        agg_type, _, agg_name = typed_name.partition("#")
        if agg_name != name:
            continue
        if agg_type == "filter":
            return find_aggregation(name, {k: v for k, v in body.items() if "#" in k})
        return agg_type, body
    return None


def facet_values(facet: Facet, buckets: list[dict]) -> list:
    """Typed facet values of a bucket set whose type matches the facet.

    Raises:
        ValueError: If the facet type is not supported.
    """
    if isinstance(facet, KeywordFacet):
        return [KeywordFacetValue(key=str(b.get("key", "-")), count=b["doc_count"]) for b in buckets]
    elif isinstance(facet, IntegerExactFacet):
        return [IntegerExactFacetValue(key=int(b["key"]), count=b["doc_count"]) for b in buckets]
    elif isinstance(facet, DecimalExactFacet):
        return [DecimalExactFacetValue(key=Decimal(str(b["key"])), count=b["doc_count"]) for b in buckets]
    elif isinstance(facet, DateTimeOffsetExactFacet):
        return [DateTimeOffsetExactFacetValue(key=_from_epoch_millis(b["key"]), count=b["doc_count"]) for b in buckets]
    elif isinstance(facet, IntegerRangeFacet):
        return [
            IntegerRangeFacetValue(
                key=str(b.get("key", "n/a")),
                min_value=int(b["from"]) if b.get("from") is not None else None,
                max_value=int(b["to"]) if b.get("to") is not None else None,
                count=b["doc_count"],
            )
            for b in buckets
        ]
    elif isinstance(facet, DecimalRangeFacet):
        return [
            DecimalRangeFacetValue(
                key=str(b.get("key", "n/a")),
                min_value=Decimal(str(b["from"])) if b.get("from") is not None else None,
                max_value=Decimal(str(b["to"])) if b.get("to") is not None else None,
                count=b["doc_count"],
            )
            for b in buckets
        ]
    elif isinstance(facet, DateTimeOffsetRangeFacet):
        return [
            DateTimeOffsetRangeFacetValue(
                key=str(b.get("key", "n/a")),
                min_value=_from_epoch_millis(b["from"]) if b.get("from") is not None else None,
                max_value=_from_epoch_millis(b["to"]) if b.get("to") is not None else None,
                count=b["doc_count"],
            )
            for b in buckets
        ]
    unsupported("facet", facet)


def project_facet(facet: Facet, aggregations: dict) -> FacetResult | None:
    """Facet result of one facet, None if its aggregation is missing or does not match the facet type."""
    found = find_aggregation(facet_name(facet), aggregations)
    if found is None:
        logger.warning(
            "Could not find any facet aggregation for facet: %s. Facet results might be incorrect.",
            facet.field_name,
        )
        return None

    agg_type, body = found
    buckets = body.get("buckets") or []
    # range buckets may be keyed
    if isinstance(buckets, dict):
        buckets = [{"key": key, **bucket} for key, bucket in buckets.items()]

    if agg_type not in EXPECTED_AGGREGATION_TYPES.get(type(facet), ()):
        if not (agg_type in EMPTY_TERMS_TYPES and not buckets):
            logger.warning(
                "Unable to extract facet results for facet: %s. Possible mismatch between the requested facet type "
                "and the indexed facet value. Facet results might be incorrect.",
                facet.field_name,
            )
        return None

    try:
        values = facet_values(facet, buckets)
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("Unable to extract facet results for facet: %s. %s", facet.field_name, e)
        return None
    return FacetResult(field_name=facet.field_name, values=values)


def project_facets(facets: list[Facet], aggregations: dict | None) -> list[FacetResult]:
    if not aggregations:
        if facets:
            logger.warning("Expected %d facet aggregations from the search backend, but got none.", len(facets))
        return []
    results = [project_facet(facet, aggregations) for facet in facets]
    return [result for result in results if result is not None]


def project_result(response: dict, facets: list[Facet]) -> SearchResult:
    """Map a raw search response to the logical search result.

    Args:
        response (dict): The raw search response.
        facets (list[Facet]): The facets the search aggregated, in request order.

    Returns:
        SearchResult: Total, documents and facet results.
    """
    hits = response.get("hits") or {}
    return SearchResult(
        total=project_total(hits),
        documents=project_documents(hits.get("hits") or []),
        facets=project_facets(facets, response.get("aggregations")),
    )
