"""Tests for the variation fallback rules."""

from shared.helper.variance import merge_values, resolve_field, resolve_variation, union_texts
from shared.models.indexing import IndexField, IndexValue, Variation


def _field(texts, culture=None, segment=None, name="title"):
    return IndexField(field_name=name, value=IndexValue(texts=texts), culture=culture, segment=segment)


ALL_SCOPES = [
    _field(["invariant"]),
    _field(["english"], culture="en-US"),
    _field(["segment"], segment="seg1"),
    _field(["english segment"], culture="en-US", segment="seg1"),
]


class TestResolveField:
    def test_exact_culture_and_segment_wins(self):
        resolved = resolve_field(ALL_SCOPES, Variation(culture="en-US", segment="seg1"))
        assert resolved.value.texts == ["english segment"]

    def test_culture_without_segment_is_second(self):
        resolved = resolve_field(ALL_SCOPES[:3], Variation(culture="en-US", segment="seg1"))
        assert resolved.value.texts == ["english"]

    def test_segment_without_culture_is_third(self):
        fields = [ALL_SCOPES[0], ALL_SCOPES[2]]
        resolved = resolve_field(fields, Variation(culture="en-US", segment="seg1"))
        assert resolved.value.texts == ["segment"]

    def test_invariant_is_last_resort(self):
        resolved = resolve_field([ALL_SCOPES[0]], Variation(culture="da-DK", segment="seg2"))
        assert resolved.value.texts == ["invariant"]

    def test_culture_match_is_case_insensitive(self):
        resolved = resolve_field(ALL_SCOPES, Variation(culture="EN-us"))
        assert resolved.value.texts == ["english"]

    def test_other_culture_never_applies(self):
        assert resolve_field([_field(["dansk"], culture="da-DK")], Variation(culture="en-US")) is None

    def test_other_segment_never_applies(self):
        assert resolve_field([_field(["seg"], segment="seg1")], Variation(segment="seg2")) is None

    def test_segmented_value_does_not_apply_to_default_segment(self):
        assert resolve_field([_field(["seg"], segment="seg1")], Variation()) is None

    def test_only_the_first_matching_tier_is_used(self):
        resolved = resolve_field(ALL_SCOPES, Variation(culture="en-US"))
        assert resolved.value.texts == ["english"]

    def test_candidates_of_the_same_tier_are_merged(self):
        fields = [_field(["one"], culture="en-US"), _field(["two"], culture="en-US")]
        resolved = resolve_field(fields, Variation(culture="en-US"))
        assert resolved.value.texts == ["one", "two"]

    def test_resolution_is_deterministic(self):
        variation = Variation(culture="en-US", segment="seg1")
        assert resolve_field(ALL_SCOPES, variation) == resolve_field(ALL_SCOPES, variation)


class TestResolveVariation:
    def test_fields_without_applicable_value_are_left_out(self):
        fields = [_field(["title"]), _field(["dansk"], culture="da-DK", name="body")]
        resolved = resolve_variation(fields, Variation(culture="en-US"))
        assert [f.field_name for f in resolved] == ["title"]

    def test_each_field_is_resolved_independently(self):
        fields = [_field(["title"], culture="en-US"), _field(["body"], name="body")]
        resolved = {f.field_name: f.value.texts for f in resolve_variation(fields, Variation(culture="en-US"))}
        assert resolved == {"title": ["title"], "body": ["body"]}


class TestValueHelpers:
    def test_merge_values_keeps_slots_apart(self):
        merged = merge_values([IndexValue(texts=["a"], integers=[1]), IndexValue(integers=[2])])
        assert merged.texts == ["a"]
        assert merged.integers == [1, 2]
        assert merged.keywords is None

    def test_union_texts_is_ordered_and_distinct(self):
        assert union_texts(["b", "a"], None, ["a", "c"]) == ["b", "a", "c"]
