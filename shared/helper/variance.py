"""Selection of the field values that apply to one document variation.

Fallback precedence, most specific first:
  1. culture and segment both match
  2. culture matches, candidate has no segment
  3. segment matches, candidate has no culture
  4. candidate is fully invariant

Only the first tier with any candidate is used.
"""

from itertools import chain

from shared.models.indexing import IndexField, IndexValue, Variation


def _same(left: str | None, right: str | None) -> bool:
    return (left or "").lower() == (right or "").lower()


def _tiers(variation: Variation):
    culture, segment = variation.culture, variation.segment
    yield lambda f: _same(f.culture, culture) and _same(f.segment, segment)
    if culture:
        yield lambda f: _same(f.culture, culture) and not f.segment
    if segment:
        yield lambda f: not f.culture and _same(f.segment, segment)
    yield lambda f: not f.culture and not f.segment


def merge_values(values: list[IndexValue]) -> IndexValue:
    """Concatenate the slots of several values, keeping their order."""
    merged = {}
    for slot in IndexValue.model_fields:
        merged[slot] = list(chain.from_iterable(getattr(v, slot) or [] for v in values))
    return IndexValue(**merged)


def resolve_field(fields: list[IndexField], variation: Variation) -> IndexField | None:
    """Resolve the value of one logical field for one variation.

    Args:
        fields (list[IndexField]): Every value of a single field name, across all cultures and segments.
        variation (Variation): The target document variation.

    Returns:
        IndexField | None: The applicable value scoped to the variation, or None if no tier matches.
    """
    if not fields:
        return None
    for matches in _tiers(variation):
        candidates = [f for f in fields if matches(f)]
        if candidates:
            return IndexField(
                field_name=candidates[0].field_name,
                value=candidates[0].value if len(candidates) == 1 else merge_values([c.value for c in candidates]),
                culture=candidates[0].culture,
                segment=candidates[0].segment,
            )
    return None


def group_fields_by_name(fields: list[IndexField]) -> dict[str, list[IndexField]]:
    """Group field values by field name, preserving first-seen order."""
    grouped: dict[str, list[IndexField]] = {}
    for field in fields:
        grouped.setdefault(field.field_name, []).append(field)
    return grouped


def resolve_variation(fields: list[IndexField], variation: Variation) -> list[IndexField]:
    """Resolve every field for one variation; fields without an applicable value are left out."""
    resolved = (resolve_field(group, variation) for group in group_fields_by_name(fields).values())
    return [field for field in resolved if field is not None]


def union_texts(*text_lists: list[str] | None) -> list[str]:
    """Ordered union of text lists without duplicates."""
    return list(dict.fromkeys(chain.from_iterable(texts or [] for texts in text_lists)))
