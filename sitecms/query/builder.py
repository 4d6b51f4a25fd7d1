"""Render structured query parameters into wire query strings."""

import json
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

from sitecms.query.params import QueryParams


# Commas separate list items (sort, populate, fields) and stay readable.
_SAFE_CHARS = ","


def _encode(value: str) -> str:
    return quote(value, safe=_SAFE_CHARS)


def _to_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


def _render_scalar(value: Any) -> str:
    """Render a plain parameter value as text."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list | tuple):
        return ",".join(_render_scalar(item) for item in value)
    if isinstance(value, Mapping):
        return _to_json(value)
    return str(value)


def build_query_string(params: QueryParams | Mapping[str, Any] | None) -> str:
    """Build the query string for a content read.

    Order is filters, sort, pagination, populate, fields, then any
    endpoint-specific parameters. Every value is percent-encoded on its own.

    Args:
        params: Query parameters, a plain mapping, or None.

    Returns:
        ``"?a=1&b=2"``, or ``""`` when nothing is present.
    """
    query = QueryParams.coerce(params)
    if query is None:
        return ""

    data = query.to_dict()
    parts: list[str] = []

    filters = data.pop("filters", None)
    if filters:
        parts.append(f"filters={_encode(_to_json(filters))}")

    sort = data.pop("sort", None)
    if sort:
        parts.append(f"sort={_encode(_render_scalar(sort))}")

    pagination = data.pop("pagination", None)
    if pagination:
        parts.extend(
            f"pagination[{key}]={_encode(_render_scalar(value))}"
            for key, value in pagination.items()
        )

    populate = data.pop("populate", None)
    if populate:
        parts.append(f"populate={_encode(_render_scalar(populate))}")

    fields = data.pop("fields", None)
    if fields:
        parts.append(f"fields={_encode(_render_scalar(fields))}")

    # Remaining keys are endpoint-specific plain parameters.
    parts.extend(
        f"{_encode(key)}={_encode(_render_scalar(value))}"
        for key, value in data.items()
    )

    if not parts:
        return ""
    return "?" + "&".join(parts)


def cache_key_params(params: QueryParams | Mapping[str, Any] | None) -> str:
    """Serialize parameters deterministically for use in cache keys.

    Args:
        params: Query parameters, a plain mapping, or None.

    Returns:
        Compact JSON with sorted keys; ``"{}"`` when absent.
    """
    query = QueryParams.coerce(params)
    data = query.to_dict() if query is not None else {}
    return json.dumps(data, separators=(",", ":"), sort_keys=True, default=str)
