"""Structured query parameters for content reads."""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sitecms.query.filters import render_filters


SORT_DIRECTIONS = frozenset({"asc", "desc"})


def _is_sort_pair(value: Any) -> bool:
    return (
        isinstance(value, list | tuple)
        and len(value) == 2  # noqa: PLR2004
        and isinstance(value[1], str)
        and value[1].lower() in SORT_DIRECTIONS
    )


class Pagination(BaseModel):
    """Page-based (``page``/``pageSize``) or offset-based (``start``/``limit``) paging.

    Field order is the wire order. Other sub-keys (``withCount``) are kept
    and sent after the declared ones. Values are not range-checked; the
    backend decides what a page of 0 means.
    """

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    page: int | str | None = None
    page_size: int | str | None = Field(default=None, alias="pageSize")
    start: int | str | None = None
    limit: int | str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return present keys under their wire names."""
        data = self.model_dump(
            by_alias=True, exclude_none=True, include=set(type(self).model_fields)
        )
        for key, value in (self.model_extra or {}).items():
            if value is not None:
                data[key] = value
        return data


class QueryParams(BaseModel):
    """Filters, sort, pagination, population and sparse fieldsets.

    Unknown keyword arguments are kept as endpoint-specific plain
    parameters (``QueryParams(limit=5)`` renders ``limit=5``). Filter
    shapes are not checked: anything that is not a filter node is passed
    through to JSON encoding as given.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    filters: Any = None
    sort: str | list[Any] | None = None
    pagination: Pagination | None = None
    populate: str | list[Any] | dict[str, Any] | None = None
    fields: str | list[Any] | None = None

    @field_validator("filters", mode="before")
    @classmethod
    def render_filter_nodes(cls, v: Any) -> Any:
        """Render filter-node trees to plain mappings."""
        if v is None:
            return None
        return render_filters(v)

    @field_validator("sort", mode="before")
    @classmethod
    def normalize_sort(cls, v: Any) -> Any:
        """Turn ``(field, direction)`` pairs into ``field:direction`` tokens."""
        if _is_sort_pair(v):
            return f"{v[0]}:{v[1]}"
        if isinstance(v, list | tuple):
            return [
                f"{item[0]}:{item[1]}" if _is_sort_pair(item) else item
                for item in v
            ]
        return v

    @field_validator("populate", "fields", mode="before")
    @classmethod
    def listify_tuples(cls, v: Any) -> Any:
        """Accept tuples wherever lists are accepted."""
        if isinstance(v, tuple):
            return list(v)
        return v

    @property
    def extras(self) -> dict[str, Any]:
        """Endpoint-specific plain parameters, in insertion order."""
        return dict(self.model_extra or {})

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready mapping with absent and empty values dropped.

        Returns:
            Mapping keyed by wire names (``pageSize`` rather than ``page_size``).
        """
        data: dict[str, Any] = {}
        if self.filters:
            data["filters"] = self.filters
        if self.sort:
            data["sort"] = self.sort
        if self.pagination is not None:
            pagination = self.pagination.to_dict()
            if pagination:
                data["pagination"] = pagination
        if self.populate:
            data["populate"] = self.populate
        if self.fields:
            data["fields"] = self.fields
        for key, value in self.extras.items():
            if value is not None:
                data[key] = render_filters(value)
        return data

    def is_empty(self) -> bool:
        """Check whether nothing would be sent on the wire."""
        return not self.to_dict()

    @classmethod
    def coerce(
        cls, value: "QueryParams | Mapping[str, Any] | None"
    ) -> "QueryParams | None":
        """Accept an instance, a plain mapping, or ``None``."""
        if value is None or isinstance(value, QueryParams):
            return value
        return cls.model_validate(dict(value))


def merge_params(
    defaults: QueryParams | Mapping[str, Any] | None,
    overrides: QueryParams | Mapping[str, Any] | None,
) -> QueryParams | None:
    """Shallow-merge two parameter sets; keys present in ``overrides`` win.

    Args:
        defaults: Endpoint defaults (e.g. population lists).
        overrides: Caller-supplied parameters.

    Returns:
        Merged parameters, or None if both inputs are None.
    """
    base = QueryParams.coerce(defaults)
    extra = QueryParams.coerce(overrides)
    if extra is None:
        return base
    if base is None:
        return extra
    merged = base.to_dict()
    merged.update(extra.to_dict())
    return QueryParams.model_validate(merged)
