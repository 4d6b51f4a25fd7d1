"""Unit tests for query string rendering."""

import json
from urllib.parse import parse_qsl

from sitecms.query.builder import build_query_string, cache_key_params
from sitecms.query.filters import where
from sitecms.query.params import Pagination, QueryParams


def _decoded(query_string: str) -> list[tuple[str, str]]:
    return parse_qsl(query_string.removeprefix("?"))


class TestBuildQueryString:
    """Tests for build_query_string."""

    def test_empty_inputs(self) -> None:
        """Test that absent or empty params give an empty string."""
        assert build_query_string(None) == ""
        assert build_query_string(QueryParams()) == ""
        assert build_query_string({}) == ""

    def test_populate_list(self) -> None:
        """Test that populate lists are comma-joined."""
        result = build_query_string(QueryParams(populate=["images", "seo"]))

        assert result == "?populate=images,seo"

    def test_pagination_keys(self) -> None:
        """Test the bracketed pagination keys."""
        params = QueryParams(pagination=Pagination(page=2, page_size=10))

        assert build_query_string(params) == (
            "?pagination[page]=2&pagination[pageSize]=10"
        )

    def test_filters_json_encoded(self) -> None:
        """Test that filters travel as one JSON value."""
        params = QueryParams(filters=where("slug").eq("hello world"))

        pairs = _decoded(build_query_string(params))

        assert pairs[0][0] == "filters"
        assert json.loads(pairs[0][1]) == {"slug": {"$eq": "hello world"}}

    def test_parameter_order(self) -> None:
        """Test filters, sort, pagination, populate, fields, then extras."""
        params = QueryParams(
            limit=3,
            fields=["title"],
            populate=["seo"],
            pagination={"page": 1},
            sort=["publishedAt:desc"],
            filters={"featured": {"$eq": True}},
        )

        keys = [key for key, _ in _decoded(build_query_string(params))]

        assert keys == [
            "filters",
            "sort",
            "pagination[page]",
            "populate",
            "fields",
            "limit",
        ]

    def test_values_are_percent_encoded(self) -> None:
        """Test that reserved characters are escaped."""
        result = build_query_string({"q": "a&b=c"})

        assert result == "?q=a%26b%3Dc"
        assert _decoded(result) == [("q", "a&b=c")]

    def test_sort_string_and_list(self) -> None:
        """Test that both sort shapes produce the same wire value."""
        assert build_query_string({"sort": "title:asc"}) == "?sort=title%3Aasc"
        assert build_query_string({"sort": ["a:asc", "b:desc"]}) == (
            "?sort=a%3Aasc,b%3Adesc"
        )

    def test_boolean_extras(self) -> None:
        """Test that booleans render lowercase."""
        assert build_query_string({"preview": True}) == "?preview=true"

    def test_populate_mapping(self) -> None:
        """Test that structured populate is JSON-encoded."""
        pairs = _decoded(build_query_string({"populate": {"seo": {"populate": "*"}}}))

        assert pairs == [("populate", '{"seo":{"populate":"*"}}')]

    def test_pagination_extra_sub_keys(self) -> None:
        """Test that sub-keys beyond page/pageSize are sent too."""
        result = build_query_string({"pagination": {"page": 1, "withCount": False}})

        assert result == "?pagination[page]=1&pagination[withCount]=false"

    def test_page_zero_passed_through(self) -> None:
        """Test that paging values are not range-checked."""
        assert build_query_string({"pagination": {"page": 0}}) == (
            "?pagination[page]=0"
        )

    def test_list_filters_passed_through(self) -> None:
        """Test that unusual filter shapes reach JSON encoding as given."""
        pairs = _decoded(build_query_string({"filters": [{"slug": {"$eq": "x"}}]}))

        assert pairs == [("filters", '[{"slug":{"$eq":"x"}}]')]

    def test_fields_string(self) -> None:
        """Test that a single field name is sent as is."""
        assert build_query_string({"fields": "title"}) == "?fields=title"
        assert build_query_string({"fields": ["title", "slug"]}) == (
            "?fields=title,slug"
        )


class TestCacheKeyParams:
    """Tests for cache_key_params."""

    def test_absent_params(self) -> None:
        """Test the serialization of missing params."""
        assert cache_key_params(None) == "{}"
        assert cache_key_params(QueryParams()) == "{}"

    def test_plain_parameter(self) -> None:
        """Test the compact form used in cache keys."""
        assert cache_key_params(QueryParams(limit=5)) == '{"limit":5}'

    def test_key_order_independent(self) -> None:
        """Test that equal params serialize identically."""
        first = cache_key_params({"sort": "a:asc", "populate": ["seo"]})
        second = cache_key_params({"populate": ["seo"], "sort": "a:asc"})

        assert first == second
