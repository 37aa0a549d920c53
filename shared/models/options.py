"""Immutable tuning options for the indexer and the searcher, read once from the environment."""

from pydantic import BaseModel, ConfigDict

from shared.helper.HelperConfig import HelperConfig


class IndexerOptions(BaseModel):
    """
    Attributes:
        segment_text_union:   Segment free text aggregates also contain the default segment text.
        path_field_name:      Logical keyword field holding the ancestry keys of a content item.
        sortable_text_count:  Number of distinct texts kept in the sortable text composite.
    """

    model_config = ConfigDict(frozen=True)

    segment_text_union: bool = True
    path_field_name: str = "pathIds"
    sortable_text_count: int = 5

    @classmethod
    def from_config(cls, helper_config: HelperConfig) -> "IndexerOptions":
        return cls(
            segment_text_union=helper_config.get_bool_val("INDEXER_SEGMENT_TEXT_UNION", default=True),
            path_field_name=helper_config.get_string_val("INDEXER_PATH_FIELD_NAME", default="pathIds"),
            sortable_text_count=int(helper_config.get_number_val("INDEXER_SORTABLE_TEXT_COUNT", default=5)),
        )


class SearcherOptions(BaseModel):
    """
    Attributes:
        max_facet_values:       Bucket count requested for exact value facets.
        boost_factor_text_r1:   Boost of the highest relevance text tier.
        boost_factor_text_r2:   Boost of the second relevance text tier.
        boost_factor_text_r3:   Boost of the third relevance text tier. The base tier always boosts by 1.0.
    """

    model_config = ConfigDict(frozen=True)

    max_facet_values: int = 100
    boost_factor_text_r1: float = 6.0
    boost_factor_text_r2: float = 4.0
    boost_factor_text_r3: float = 2.0

    @classmethod
    def from_config(cls, helper_config: HelperConfig) -> "SearcherOptions":
        return cls(
            max_facet_values=int(helper_config.get_number_val("SEARCHER_MAX_FACET_VALUES", default=100)),
            boost_factor_text_r1=float(helper_config.get_number_val("SEARCHER_BOOST_FACTOR_TEXT_R1", default=6.0)),
            boost_factor_text_r2=float(helper_config.get_number_val("SEARCHER_BOOST_FACTOR_TEXT_R2", default=4.0)),
            boost_factor_text_r3=float(helper_config.get_number_val("SEARCHER_BOOST_FACTOR_TEXT_R3", default=2.0)),
        )
