"""Translation of a logical search request into a search body.

The body narrows the candidates with mandatory variance and access filters,
the free text query and all regular filters. Filters on faceted fields are
applied as a post filter instead, and every facet aggregation is wrapped in
the facet filters of the *other* faceted fields. That way a facet reports
counts as if its own selection was not applied, while the hits still honour
every filter.
"""

import logging
from datetime import datetime, timezone

from pydantic import BaseModel

from shared.helper.field_encoding import (
    ALL_TEXTS_BY_KIND,
    INVARIANT_CULTURE,
    PUBLIC_ACCESS_KEY,
    FieldNames,
    ValueKind,
    access_key,
    field_path,
    index_culture,
    index_segment,
    segmented_field,
    sortable_path,
)
from shared.models.options import SearcherOptions
from shared.models.searching import (
    AccessContext,
    AnyFacet,
    DateTimeOffsetExactFacet,
    DateTimeOffsetExactFilter,
    DateTimeOffsetRangeFacet,
    DateTimeOffsetRangeFilter,
    DateTimeOffsetSorter,
    DecimalExactFacet,
    DecimalExactFilter,
    DecimalRangeFacet,
    DecimalRangeFilter,
    DecimalSorter,
    Direction,
    Facet,
    Filter,
    IntegerExactFacet,
    IntegerExactFilter,
    IntegerRangeFacet,
    IntegerRangeFilter,
    IntegerSorter,
    KeywordFacet,
    KeywordFilter,
    KeywordSorter,
    ScoreSorter,
    SearchQuery,
    Sorter,
    TextFilter,
    TextSorter,
    unsupported,
)

logger = logging.getLogger(__name__)


class SearchPlan(BaseModel):
    """A search body plus the facets it aggregates, in request order and without duplicates."""

    body: dict
    facets: list[AnyFacet] = []


def facet_name(facet: Facet) -> str:
    """Name of the aggregation of a facet; also the key facets are deduplicated by."""
    return f"{facet.field_name}_{type(facet).__name__}"


def epoch_millis(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)


##########################################
############ MANDATORY FILTERS ###########
##########################################

def variance_filters(culture: str | None, segment: str | None) -> list[dict]:
    """Culture and segment filters. Invariant documents match every culture."""
    cultures = list(dict.fromkeys([index_culture(culture), INVARIANT_CULTURE]))
    return [
        {"terms": {FieldNames.CULTURE: cultures}},
        {"term": {FieldNames.SEGMENT: index_segment(segment)}},
    ]


def access_filter(access_context: AccessContext | None) -> dict:
    keys = [PUBLIC_ACCESS_KEY]
    if access_context is not None:
        keys.append(access_context.principal_id)
        keys.extend(access_context.group_ids or [])
    return {"terms": {FieldNames.ACCESS_KEYS: [access_key(key) for key in dict.fromkeys(keys)]}}


def tier_boosts(options: SearcherOptions) -> dict[ValueKind, float]:
    return {
        ValueKind.TEXTS: 1.0,
        ValueKind.TEXTS_R1: options.boost_factor_text_r1,
        ValueKind.TEXTS_R2: options.boost_factor_text_r2,
        ValueKind.TEXTS_R3: options.boost_factor_text_r3,
    }


def text_query(query: str, segment: str | None, options: SearcherOptions) -> dict:
    """Prefix tolerant match requiring all terms, against the free text aggregate of each tier."""
    should = [
        {
            "match_bool_prefix": {
                segmented_field(ALL_TEXTS_BY_KIND[kind], segment): {
                    "query": query,
                    "operator": "and",
                    "boost": boost,
                }
            }
        }
        for kind, boost in tier_boosts(options).items()
    ]
    return {"bool": {"should": should, "minimum_should_match": 1}}


##########################################
################ FILTERS #################
##########################################

def _range_clause(path: str, min_value, max_value) -> dict:
    # ranges are half-open, [min, max)
    bounds = {}
    if min_value is not None:
        bounds["gte"] = min_value
    if max_value is not None:
        bounds["lt"] = max_value
    if not bounds:
        return {"exists": {"field": path}}
    return {"range": {path: bounds}}


def _any_of(clauses: list[dict]) -> dict:
    return {"bool": {"should": clauses, "minimum_should_match": 1}}


def filter_query(filter: Filter, options: SearcherOptions) -> dict:
    """Query matching the documents a filter selects, ignoring its negation.

    Raises:
        ValueError: If the filter type is not supported.
    """
    name = filter.field_name
    if isinstance(filter, TextFilter):
        clauses = []
        for kind, boost in tier_boosts(options).items():
            for text in filter.values:
                clauses.append(
                    {
                        "wildcard": {
                            field_path(name, kind): {
                                "value": f"{text.replace('*', '').lower()}*",
                                "case_insensitive": True,
                                "boost": boost,
                            }
                        }
                    }
                )
        return _any_of(clauses)
    elif isinstance(filter, KeywordFilter):
        return {"terms": {field_path(name, ValueKind.KEYWORDS): list(filter.values)}}
    elif isinstance(filter, IntegerExactFilter):
        return {"terms": {field_path(name, ValueKind.INTEGERS): list(filter.values)}}
    elif isinstance(filter, IntegerRangeFilter):
        path = field_path(name, ValueKind.INTEGERS)
        return _any_of([_range_clause(path, r.min_value, r.max_value) for r in filter.ranges])
    elif isinstance(filter, DecimalExactFilter):
        return {"terms": {field_path(name, ValueKind.DECIMALS): [float(v) for v in filter.values]}}
    elif isinstance(filter, DecimalRangeFilter):
        path = field_path(name, ValueKind.DECIMALS)
        return _any_of(
            [
                _range_clause(
                    path,
                    float(r.min_value) if r.min_value is not None else None,
                    float(r.max_value) if r.max_value is not None else None,
                )
                for r in filter.ranges
            ]
        )
    elif isinstance(filter, DateTimeOffsetExactFilter):
        return {"terms": {field_path(name, ValueKind.DATE_TIME_OFFSETS): [v.isoformat() for v in filter.values]}}
    elif isinstance(filter, DateTimeOffsetRangeFilter):
        path = field_path(name, ValueKind.DATE_TIME_OFFSETS)
        return _any_of(
            [
                _range_clause(
                    path,
                    r.min_value.isoformat() if r.min_value is not None else None,
                    r.max_value.isoformat() if r.max_value is not None else None,
                )
                for r in filter.ranges
            ]
        )
    unsupported("filter", filter)


def split_by_negation(filters: list[Filter], options: SearcherOptions) -> tuple[list[dict], list[dict]]:
    """Translate filters into (must, must_not) clauses."""
    must = [filter_query(f, options) for f in filters if not f.negate]
    must_not = [filter_query(f, options) for f in filters if f.negate]
    return must, must_not


##########################################
################# FACETS #################
##########################################

def dedupe_facets(facets: list[Facet]) -> list[Facet]:
    """Drop repeated facets of the same field and type, first one wins."""
    unique: dict[str, Facet] = {}
    for facet in facets:
        unique.setdefault(facet_name(facet), facet)
    return list(unique.values())


def _range_aggregation(path: str, ranges: list[tuple[str, float | int | None, float | int | None]]) -> dict:
    buckets = []
    for key, min_value, max_value in ranges:
        bucket: dict = {"key": key}
        if min_value is not None:
            bucket["from"] = min_value
        if max_value is not None:
            bucket["to"] = max_value
        buckets.append(bucket)
    return {"range": {"field": path, "ranges": buckets}}


def facet_aggregation(facet: Facet, options: SearcherOptions) -> dict | None:
    """Aggregation computing the values of a facet, None if the facet has nothing to aggregate.

    Raises:
        ValueError: If the facet type is not supported.
    """
    name = facet.field_name
    if isinstance(facet, KeywordFacet):
        return {"terms": {"field": field_path(name, ValueKind.KEYWORDS), "size": options.max_facet_values}}
    elif isinstance(facet, IntegerExactFacet):
        return {"terms": {"field": field_path(name, ValueKind.INTEGERS), "size": options.max_facet_values}}
    elif isinstance(facet, DecimalExactFacet):
        return {"terms": {"field": field_path(name, ValueKind.DECIMALS), "size": options.max_facet_values}}
    elif isinstance(facet, DateTimeOffsetExactFacet):
        return {"terms": {"field": field_path(name, ValueKind.DATE_TIME_OFFSETS), "size": options.max_facet_values}}
    elif isinstance(facet, (IntegerRangeFacet, DecimalRangeFacet, DateTimeOffsetRangeFacet)):
        if not facet.ranges:
            logger.warning('The range facet for field "%s" had no ranges defined, so it was skipped.', name)
            return None
        if isinstance(facet, IntegerRangeFacet):
            path = field_path(name, ValueKind.INTEGERS)
            ranges = [(r.key, r.min_value, r.max_value) for r in facet.ranges]
        elif isinstance(facet, DecimalRangeFacet):
            path = field_path(name, ValueKind.DECIMALS)
            ranges = [
                (
                    r.key,
                    float(r.min_value) if r.min_value is not None else None,
                    float(r.max_value) if r.max_value is not None else None,
                )
                for r in facet.ranges
            ]
        else:
            path = field_path(name, ValueKind.DATE_TIME_OFFSETS)
            ranges = [
                (
                    r.key,
                    epoch_millis(r.min_value) if r.min_value is not None else None,
                    epoch_millis(r.max_value) if r.max_value is not None else None,
                )
                for r in facet.ranges
            ]
        return _range_aggregation(path, ranges)
    unsupported("facet", facet)


def facet_aggregations(facets: list[Facet], facet_filters: list[Filter], options: SearcherOptions) -> tuple[dict, list[Facet]]:
    """Aggregations of all facets, each narrowed by the facet filters on other fields.

    Facets that cannot be aggregated are logged and skipped.

    Returns:
        tuple[dict, list[Facet]]: The aggregations and the facets they cover.
    """
    aggregations: dict = {}
    planned: list[Facet] = []
    for facet in facets:
        try:
            aggregation = facet_aggregation(facet, options)
        except ValueError as e:
            logger.warning('Could not add a facet for field "%s", so it was skipped: %s', facet.field_name, e)
            continue
        if aggregation is None:
            continue

        name = facet_name(facet)
        other_filters = [f for f in facet_filters if f.field_name.lower() != facet.field_name.lower()]
        if other_filters:
            must, must_not = split_by_negation(other_filters, options)
            aggregation = {
                "filter": {"bool": {"must": must, "must_not": must_not}},
                "aggs": {name: aggregation},
            }
        aggregations[name] = aggregation
        planned.append(facet)
    return aggregations, planned


##########################################
################ SORTERS #################
##########################################

def sort_clause(sorter: Sorter) -> dict:
    """Sort clause of a sorter. Field sorters tolerate fields missing from the index.

    Raises:
        ValueError: If the sorter type is not supported.
    """
    order = "asc" if sorter.direction == Direction.ASCENDING else "desc"
    if isinstance(sorter, ScoreSorter):
        return {"_score": {"order": order}}
    elif isinstance(sorter, TextSorter):
        return {sortable_path(sorter.field_name): {"order": order, "unmapped_type": "keyword"}}
    elif isinstance(sorter, KeywordSorter):
        return {field_path(sorter.field_name, ValueKind.KEYWORDS): {"order": order, "unmapped_type": "keyword"}}
    elif isinstance(sorter, IntegerSorter):
        return {
            field_path(sorter.field_name, ValueKind.INTEGERS): {"order": order, "numeric_type": "long", "unmapped_type": "long"}
        }
    elif isinstance(sorter, DecimalSorter):
        return {
            field_path(sorter.field_name, ValueKind.DECIMALS): {"order": order, "numeric_type": "double", "unmapped_type": "double"}
        }
    elif isinstance(sorter, DateTimeOffsetSorter):
        return {
            field_path(sorter.field_name, ValueKind.DATE_TIME_OFFSETS): {"order": order, "numeric_type": "date", "unmapped_type": "date"}
        }
    unsupported("sorter", sorter)


##########################################
################## PLAN ##################
##########################################

def build_search_body(request: SearchQuery, options: SearcherOptions) -> SearchPlan:
    """Build the search body of a logical search request.

    Args:
        request (SearchQuery): The logical request.
        options (SearcherOptions): Searcher tuning.

    Returns:
        SearchPlan: The search body and the facets it aggregates.

    Raises:
        ValueError: If a filter or sorter type is not supported.
    """
    facets = dedupe_facets(request.facets or [])
    filters = request.filters or []

    # filters on faceted fields are applied after aggregation
    facet_field_names = {facet.field_name.lower() for facet in facets}
    facet_filters = [f for f in filters if f.field_name.lower() in facet_field_names]
    regular_filters = [f for f in filters if f.field_name.lower() not in facet_field_names]

    must = variance_filters(request.culture, request.segment)
    must.append(access_filter(request.access_context))
    if request.query and request.query.strip():
        must.append(text_query(request.query, request.segment, options))

    regular_must, regular_must_not = split_by_negation(regular_filters, options)
    must.extend(regular_must)

    sorters = request.sorters if request.sorters is not None else [ScoreSorter(direction=Direction.DESCENDING)]
    body: dict = {
        "from": request.skip,
        "size": request.take,
        "query": {"bool": {"must": must, "must_not": regular_must_not}},
        "sort": [sort_clause(sorter) for sorter in sorters],
        "_source": False,
        "fields": [FieldNames.KEY, FieldNames.OBJECT_TYPE],
        "track_total_hits": True,
    }

    aggregations, planned_facets = facet_aggregations(facets, facet_filters, options)
    if aggregations:
        body["aggs"] = aggregations

    if facet_filters:
        post_must, post_must_not = split_by_negation(facet_filters, options)
        body["post_filter"] = {"bool": {"must": post_must, "must_not": post_must_not}}

    return SearchPlan(body=body, facets=planned_facets)
