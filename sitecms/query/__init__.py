"""Query building for content reads.

Translates filters, sort, pagination, population and sparse fieldsets
into the backend's query-string format.
"""

from sitecms.query.builder import build_query_string, cache_key_params
from sitecms.query.filters import (
    And,
    Condition,
    FieldRef,
    FilterNode,
    Not,
    Operator,
    Or,
    all_of,
    any_of,
    render_filters,
    where,
)
from sitecms.query.params import Pagination, QueryParams, merge_params


__all__ = [
    # Builder
    "build_query_string",
    "cache_key_params",
    # Params
    "Pagination",
    "QueryParams",
    "merge_params",
    # Filters
    "And",
    "Condition",
    "FieldRef",
    "FilterNode",
    "Not",
    "Operator",
    "Or",
    "all_of",
    "any_of",
    "render_filters",
    "where",
]
