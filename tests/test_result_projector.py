"""Tests for mapping raw search responses to search results."""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID

from services.search_query.result_projector import find_aggregation, project_result
from shared.models.searching import (
    DateTimeOffsetExactFacet,
    DateTimeOffsetRangeFacet,
    DecimalExactFacet,
    DecimalRangeFacet,
    IntegerExactFacet,
    IntegerRangeFacet,
    KeywordFacet,
)

KEY_1 = UUID("c0ffee00-0000-4000-8000-000000000001")
KEY_2 = UUID("c0ffee00-0000-4000-8000-000000000002")


def _response(hits=None, aggregations=None, total=None):
    hits = hits or []
    response = {"hits": {"total": {"value": len(hits) if total is None else total, "relation": "eq"}, "hits": hits}}
    if aggregations is not None:
        response["aggregations"] = aggregations
    return response


def _hit(key, object_type="Document"):
    fields = {"key": [str(key)]}
    if object_type is not None:
        fields["objectType"] = [object_type]
    return {"_id": f"{key}.inv.def", "fields": fields}


class TestDocuments:
    def test_hits_become_documents(self):
        result = project_result(_response([_hit(KEY_1), _hit(KEY_2, "Media")], total=42), [])
        assert result.total == 42
        assert [(d.id, d.object_type) for d in result.documents] == [(KEY_1, "Document"), (KEY_2, "Media")]

    def test_missing_object_type_is_unknown(self):
        result = project_result(_response([_hit(KEY_1, object_type=None)]), [])
        assert result.documents[0].object_type == "Unknown"

    def test_hits_without_valid_key_are_skipped(self, caplog):
        hits = [{"_id": "broken", "fields": {}}, {"_id": "bad", "fields": {"key": ["not-a-uuid"]}}, _hit(KEY_1)]
        with caplog.at_level(logging.WARNING):
            result = project_result(_response(hits), [])
        assert [d.id for d in result.documents] == [KEY_1]
        assert "broken" in caplog.text


class TestFacets:
    def test_keyword_buckets(self):
        aggregations = {
            "sterms#color_KeywordFacet": {"buckets": [{"key": "red", "doc_count": 3}, {"key": "blue", "doc_count": 1}]}
        }
        (facet,) = project_result(_response(aggregations=aggregations), [KeywordFacet(field_name="color")]).facets
        assert facet.field_name == "color"
        assert [(v.key, v.count) for v in facet.values] == [("red", 3), ("blue", 1)]

    def test_filter_wrapper_is_unwrapped(self):
        aggregations = {
            "filter#count_IntegerExactFacet": {
                "doc_count": 10,
                "lterms#count_IntegerExactFacet": {"buckets": [{"key": 7, "doc_count": 2}]},
            }
        }
        (facet,) = project_result(_response(aggregations=aggregations), [IntegerExactFacet(field_name="count")]).facets
        assert [(v.key, v.count) for v in facet.values] == [(7, 2)]

    def test_decimal_buckets_keep_their_value(self):
        aggregations = {"dterms#price_DecimalExactFacet": {"buckets": [{"key": 9.95, "doc_count": 1}]}}
        (facet,) = project_result(_response(aggregations=aggregations), [DecimalExactFacet(field_name="price")]).facets
        assert facet.values[0].key == Decimal("9.95")

    def test_date_buckets_are_utc_instants(self):
        aggregations = {
            "lterms#created_DateTimeOffsetExactFacet": {
                "buckets": [{"key": 1704067200000, "key_as_string": "2024-01-01T00:00:00.000Z", "doc_count": 5}]
            }
        }
        (facet,) = project_result(
            _response(aggregations=aggregations), [DateTimeOffsetExactFacet(field_name="created")]
        ).facets
        assert facet.values[0].key == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_range_buckets(self):
        aggregations = {
            "range#count_IntegerRangeFacet": {
                "buckets": [
                    {"key": "low", "to": 10.0, "doc_count": 9},
                    {"key": "high", "from": 10.0, "doc_count": 91},
                ]
            },
            "range#price_DecimalRangeFacet": {"buckets": [{"key": "cheap", "from": 0.0, "to": 9.5, "doc_count": 4}]},
            "range#created_DateTimeOffsetRangeFacet": {
                "buckets": [{"key": "2024", "from": 1704067200000.0, "to": 1735689600000.0, "doc_count": 1}]
            },
        }
        facets = [
            IntegerRangeFacet(field_name="count"),
            DecimalRangeFacet(field_name="price"),
            DateTimeOffsetRangeFacet(field_name="created"),
        ]
        count, price, created = project_result(_response(aggregations=aggregations), facets).facets
        assert [(v.key, v.min_value, v.max_value, v.count) for v in count.values] == [
            ("low", None, 10, 9),
            ("high", 10, None, 91),
        ]
        assert (price.values[0].min_value, price.values[0].max_value) == (Decimal("0.0"), Decimal("9.5"))
        assert created.values[0].min_value == datetime(2024, 1, 1, tzinfo=timezone.utc)
        assert created.values[0].max_value == datetime(2025, 1, 1, tzinfo=timezone.utc)

    def test_mismatching_bucket_type_drops_only_that_facet(self, caplog):
        aggregations = {
            "sterms#count_IntegerExactFacet": {"buckets": [{"key": "seven", "doc_count": 1}]},
            "sterms#color_KeywordFacet": {"buckets": [{"key": "red", "doc_count": 1}]},
        }
        facets = [IntegerExactFacet(field_name="count"), KeywordFacet(field_name="color")]
        with caplog.at_level(logging.WARNING):
            result = project_result(_response(aggregations=aggregations), facets)
        assert [f.field_name for f in result.facets] == ["color"]
        assert "mismatch" in caplog.text

    def test_unindexed_field_yields_no_facet(self):
        aggregations = {"sterms#count_IntegerExactFacet": {"buckets": []}}
        result = project_result(_response(aggregations=aggregations), [IntegerExactFacet(field_name="count")])
        assert result.facets == []

    def test_missing_aggregations(self, caplog):
        with caplog.at_level(logging.WARNING):
            result = project_result(_response(), [KeywordFacet(field_name="color")])
        assert result.facets == []
        assert "got none" in caplog.text

    def test_find_aggregation_ignores_other_names(self):
        aggregations = {"sterms#colour_KeywordFacet": {"buckets": []}}
        assert find_aggregation("color_KeywordFacet", aggregations) is None
