"""Tests for the physical field naming convention."""

import itertools
from uuid import UUID

from shared.helper.field_encoding import (
    DEFAULT_SEGMENT,
    INVARIANT_CULTURE,
    SORTABLE_MAX_LENGTH,
    FieldNames,
    ValueKind,
    base_mappings,
    document_id,
    field_key,
    field_path,
    index_culture,
    index_segment,
    segmented_field,
    sortable_key,
    sortable_path,
)

KEY = UUID("7d8e1c2a-0b65-4c3e-9a51-2f0c9d4b8e11")


class TestVariationTags:
    def test_missing_culture_is_invariant(self):
        assert index_culture(None) == INVARIANT_CULTURE
        assert index_culture("") == INVARIANT_CULTURE

    def test_culture_is_lower_cased(self):
        assert index_culture("da-DK") == "da-dk"

    def test_missing_segment_is_default(self):
        assert index_segment(None) == DEFAULT_SEGMENT

    def test_segment_is_lower_cased(self):
        assert index_segment("Seg1") == "seg1"

    def test_document_id_combines_key_culture_and_segment(self):
        assert document_id(KEY, "en-US", None) == f"{KEY}.en-us.def"
        assert document_id(KEY, None, "seg1") == f"{KEY}.inv.seg1"


class TestFieldPaths:
    def test_field_path_is_prefixed_with_fields_object(self):
        assert field_path("price", ValueKind.DECIMALS) == "fields.price_decimals"

    def test_paths_never_collide_across_kinds(self):
        names = ["title", "title_texts", "tags"]
        paths = [field_path(name, kind) for name, kind in itertools.product(names, ValueKind)]
        assert len(paths) == len(set(paths))

    def test_same_input_yields_same_path(self):
        assert field_key("title", ValueKind.TEXTS_R1) == field_key("title", ValueKind.TEXTS_R1)

    def test_sortable_paths(self):
        assert sortable_key("title") == "title_texts_sort"
        assert sortable_path("title") == "fields.title_texts_sort"

    def test_segmented_field_keeps_default_name(self):
        assert segmented_field(FieldNames.ALL_TEXTS, None) == "allTexts"
        assert segmented_field(FieldNames.ALL_TEXTS, "Seg1") == "seg1_allTexts"


class TestBaseMappings:
    def test_identity_fields_are_keywords(self):
        properties = base_mappings()["properties"]
        assert set(properties) == {
            FieldNames.KEY,
            FieldNames.OBJECT_TYPE,
            FieldNames.CULTURE,
            FieldNames.SEGMENT,
            FieldNames.ACCESS_KEYS,
        }
        assert all(mapping == {"type": "keyword"} for mapping in properties.values())

    def test_dynamic_templates_bind_types_by_postfix(self):
        templates = {}
        for template in base_mappings()["dynamic_templates"]:
            (body,) = template.values()
            templates[body["match"]] = body["mapping"]["type"]
        assert templates == {
            "*_keywords": "keyword",
            "*_decimals": "double",
            "*_integers": "long",
            "*_datetimeoffsets": "date",
            "*_texts_sort": "keyword",
        }

    def test_sortable_composites_fit_their_keyword_field(self):
        templates = [t for t in base_mappings()["dynamic_templates"] if "sortable_texts_as_keywords" in t]
        (template,) = templates
        assert template["sortable_texts_as_keywords"]["mapping"]["ignore_above"] == SORTABLE_MAX_LENGTH

    def test_types_are_never_detected_from_content(self):
        mappings = base_mappings()
        assert mappings["date_detection"] is False
        assert mappings["numeric_detection"] is False
