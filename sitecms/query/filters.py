"""Filter trees for collection queries.

Filters are rendered into the backend's nested operator mapping, e.g.
``where("categories.slug").eq("news")`` becomes
``{"categories": {"slug": {"$eq": "news"}}}``. Plain mappings are accepted
everywhere a node is, so callers can mix both styles.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any


class Operator(str, Enum):
    """Comparison operators understood by the content API."""

    EQ = "$eq"
    EQI = "$eqi"
    NE = "$ne"
    LT = "$lt"
    LTE = "$lte"
    GT = "$gt"
    GTE = "$gte"
    IN = "$in"
    NOT_IN = "$notIn"
    CONTAINS = "$contains"
    CONTAINSI = "$containsi"
    NOT_CONTAINS = "$notContains"
    STARTS_WITH = "$startsWith"
    ENDS_WITH = "$endsWith"
    NULL = "$null"
    NOT_NULL = "$notNull"
    BETWEEN = "$between"


class FilterNode:
    """Base class for filter tree nodes."""

    def to_dict(self) -> dict[str, Any]:
        """Render the node as a JSON-ready mapping."""
        raise NotImplementedError

    def __and__(self, other: "FilterNode | Mapping[str, Any]") -> "And":
        return And((self, other))

    def __or__(self, other: "FilterNode | Mapping[str, Any]") -> "Or":
        return Or((self, other))

    def __invert__(self) -> "Not":
        return Not(self)


@dataclass(frozen=True)
class Condition(FilterNode):
    """Leaf predicate on a field or dotted relation path.

    Attributes:
        path: Field name, or relation path such as ``categories.slug``.
        operator: Comparison operator.
        value: Operand, passed through to JSON as-is.
    """

    path: str
    operator: Operator | str
    value: Any

    def to_dict(self) -> dict[str, Any]:
        op = (
            self.operator.value
            if isinstance(self.operator, Operator)
            else self.operator
        )
        node: dict[str, Any] = {op: self.value}
        for segment in reversed(self.path.split(".")):
            node = {segment: node}
        return node


@dataclass(frozen=True)
class And(FilterNode):
    """All child nodes must match."""

    nodes: tuple["FilterNode | Mapping[str, Any]", ...]

    def to_dict(self) -> dict[str, Any]:
        return {"$and": [render_filters(node) for node in self.nodes]}


@dataclass(frozen=True)
class Or(FilterNode):
    """At least one child node must match."""

    nodes: tuple["FilterNode | Mapping[str, Any]", ...]

    def to_dict(self) -> dict[str, Any]:
        return {"$or": [render_filters(node) for node in self.nodes]}


@dataclass(frozen=True)
class Not(FilterNode):
    """Negates a child node."""

    node: "FilterNode | Mapping[str, Any]"

    def to_dict(self) -> dict[str, Any]:
        return {"$not": render_filters(self.node)}


class FieldRef:
    """Fluent builder for conditions on one path."""

    def __init__(self, path: str) -> None:
        self.path = path

    def _cond(self, operator: Operator, value: Any) -> Condition:
        return Condition(self.path, operator, value)

    def eq(self, value: Any) -> Condition:
        return self._cond(Operator.EQ, value)

    def eqi(self, value: str) -> Condition:
        return self._cond(Operator.EQI, value)

    def ne(self, value: Any) -> Condition:
        return self._cond(Operator.NE, value)

    def lt(self, value: Any) -> Condition:
        return self._cond(Operator.LT, value)

    def lte(self, value: Any) -> Condition:
        return self._cond(Operator.LTE, value)

    def gt(self, value: Any) -> Condition:
        return self._cond(Operator.GT, value)

    def gte(self, value: Any) -> Condition:
        return self._cond(Operator.GTE, value)

    def in_(self, values: list[Any]) -> Condition:
        return self._cond(Operator.IN, list(values))

    def not_in(self, values: list[Any]) -> Condition:
        return self._cond(Operator.NOT_IN, list(values))

    def contains(self, value: str, *, case_sensitive: bool = True) -> Condition:
        op = Operator.CONTAINS if case_sensitive else Operator.CONTAINSI
        return self._cond(op, value)

    def starts_with(self, value: str) -> Condition:
        return self._cond(Operator.STARTS_WITH, value)

    def ends_with(self, value: str) -> Condition:
        return self._cond(Operator.ENDS_WITH, value)

    def between(self, low: Any, high: Any) -> Condition:
        return self._cond(Operator.BETWEEN, [low, high])

    def is_null(self) -> Condition:
        return self._cond(Operator.NULL, True)  # noqa: FBT003

    def is_not_null(self) -> Condition:
        return self._cond(Operator.NOT_NULL, True)  # noqa: FBT003


def where(path: str) -> FieldRef:
    """Start a condition on ``path``."""
    return FieldRef(path)


def all_of(*nodes: FilterNode | Mapping[str, Any]) -> And:
    """Combine nodes with ``$and``."""
    return And(tuple(nodes))


def any_of(*nodes: FilterNode | Mapping[str, Any]) -> Or:
    """Combine nodes with ``$or``."""
    return Or(tuple(nodes))


def render_filters(value: FilterNode | Mapping[str, Any] | Any) -> Any:
    """Render a filter node (or a mapping containing nodes) to plain data.

    Values that are neither nodes nor mappings are returned unchanged, so
    malformed input reaches JSON encoding untouched.

    Args:
        value: Node, mapping, or arbitrary value.

    Returns:
        JSON-ready structure.
    """
    if isinstance(value, FilterNode):
        return value.to_dict()
    if isinstance(value, Mapping):
        return {key: render_filters(item) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [render_filters(item) for item in value]
    return value
