"""
Filter node types and leaf constructors for mongospec.

================================================================================
NODE VARIANTS
================================================================================

A filter is an immutable tree built from a fixed set of node types:

    LEAVES
        Comparison(field, op, value)     {"age": {"$gte": 18}}
        Pattern(field, pattern, flags)   {"name": {"$regex": "^jo", "$options": "i"}}
        ElemMatch(field, inner)          {"items": {"$elemMatch": {...}}}

    CONTAINERS
        AndFilter(children)              {"$and": [...]}
        OrFilter(children)               {"$or": [...]}
        NotFilter(inner)                 {"$nor": [...]}

Leaves are created with the constructor functions in this module (eq, gt, in_,
regex, ...). Containers are created with and_(), or_() and not_() from
mongospec.filters.logical, which keep them normalized:

    - None arguments are dropped
    - nested same-kind containers are flattened
    - a single remaining child is returned as-is (no wrapper)

Building an AndFilter/OrFilter directly skips that normalization and is not
recommended.

Nodes compare by value and hash by value. in_(), not_in() and all_() store
their values as a tuple, so those leaves hash like any other. A leaf built over
an unhashable value (eq("meta", {"k": 1})) compares fine but raises TypeError
from hash(), the same as a tuple holding a dict would.

================================================================================
OPERATOR OVERLOADS
================================================================================

    active & adult     ->  and_(active, adult)
    admin | moderator  ->  or_(admin, moderator)
    ~deleted           ->  not_(deleted)

Example:
    >>> f = eq("status", "active") & between("age", 18, 65)
    >>> f.to_query()
    {'$and': [{'status': 'active'}, {'age': {'$gte': 18}}, {'age': {'$lte': 65}}]}
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from mongospec import constants as C


class ComparisonOp(Enum):
    """Field-level comparison operators, valued with their wire key."""

    EQ = C.EQ  # compiled as plain {field: value}
    NE = C.NE
    GT = C.GT
    GTE = C.GTE
    LT = C.LT
    LTE = C.LTE
    IN = C.IN
    NIN = C.NIN
    EXISTS = C.EXISTS
    ALL = C.ALL
    SIZE = C.SIZE


class FilterNode:
    """Base class for every filter node."""

    __slots__ = ()

    def to_query(self) -> Dict[str, Any]:
        """Compile this filter to a MongoDB query document."""
        from mongospec.filters.compiler import to_query

        return to_query(self)

    def __and__(self, other: Optional["FilterNode"]) -> Optional["FilterNode"]:
        from mongospec.filters.logical import and_

        if not _is_operand(other):
            return NotImplemented
        return and_(self, other)

    def __rand__(self, other: Optional["FilterNode"]) -> Optional["FilterNode"]:
        from mongospec.filters.logical import and_

        if not _is_operand(other):
            return NotImplemented
        return and_(other, self)

    def __or__(self, other: Optional["FilterNode"]) -> Optional["FilterNode"]:
        from mongospec.filters.logical import or_

        if not _is_operand(other):
            return NotImplemented
        return or_(self, other)

    def __ror__(self, other: Optional["FilterNode"]) -> Optional["FilterNode"]:
        from mongospec.filters.logical import or_

        if not _is_operand(other):
            return NotImplemented
        return or_(other, self)

    def __invert__(self) -> "FilterNode":
        from mongospec.filters.logical import not_

        return not_(self)


def _is_operand(other: Any) -> bool:
    return other is None or isinstance(other, FilterNode)


# =============================================================================
# LEAVES
# =============================================================================


@dataclass(frozen=True)
class Comparison(FilterNode):
    """
    Single field compared against a value.

    Example:
        Comparison("age", ComparisonOp.GTE, 18)  ->  {"age": {"$gte": 18}}
    """

    field: str
    op: ComparisonOp
    value: Any


@dataclass(frozen=True)
class Pattern(FilterNode):
    """Regular expression match on a string field."""

    field: str
    pattern: str
    flags: Optional[str] = None


@dataclass(frozen=True)
class ElemMatch(FilterNode):
    """At least one array element satisfies ``inner`` (any element if None)."""

    field: str
    inner: Optional[FilterNode] = None


# =============================================================================
# CONTAINERS
# =============================================================================


@dataclass(frozen=True)
class AndFilter(FilterNode):
    children: Tuple[FilterNode, ...]


@dataclass(frozen=True)
class OrFilter(FilterNode):
    children: Tuple[FilterNode, ...]


@dataclass(frozen=True)
class NotFilter(FilterNode):
    inner: FilterNode


# =============================================================================
# LEAF CONSTRUCTORS
# =============================================================================


def _as_tuple(values: Any) -> Any:
    # Lists, sets and generators are frozen into a tuple so the node stays
    # hashable. The compiler emits it back as a list. Strings and mappings are
    # left alone.
    if isinstance(values, (str, bytes, Mapping)) or not isinstance(values, Iterable):
        return values
    return tuple(values)


def eq(field: str, value: Any) -> Comparison:
    """
    Match documents where ``field`` equals ``value``.

    Example:
        >>> eq("status", "active").to_query()
        {'status': 'active'}
    """
    return Comparison(field, ComparisonOp.EQ, value)


def ne(field: str, value: Any) -> Comparison:
    """``{field: {"$ne": value}}``"""
    return Comparison(field, ComparisonOp.NE, value)


def gt(field: str, value: Any) -> Comparison:
    """``{field: {"$gt": value}}``"""
    return Comparison(field, ComparisonOp.GT, value)


def gte(field: str, value: Any) -> Comparison:
    """``{field: {"$gte": value}}``"""
    return Comparison(field, ComparisonOp.GTE, value)


def lt(field: str, value: Any) -> Comparison:
    """``{field: {"$lt": value}}``"""
    return Comparison(field, ComparisonOp.LT, value)


def lte(field: str, value: Any) -> Comparison:
    """``{field: {"$lte": value}}``"""
    return Comparison(field, ComparisonOp.LTE, value)


def in_(field: str, values: Any) -> Comparison:
    """
    Match documents where ``field`` equals any of ``values``.

    Example:
        >>> in_("status", ("pending", "active")).to_query()
        {'status': {'$in': ['pending', 'active']}}
    """
    return Comparison(field, ComparisonOp.IN, _as_tuple(values))


def not_in(field: str, values: Any) -> Comparison:
    """Match documents where ``field`` equals none of ``values`` ($nin)."""
    return Comparison(field, ComparisonOp.NIN, _as_tuple(values))


nin = not_in


def exists(field: str, value: bool = True) -> Comparison:
    """Match on presence (``True``) or absence (``False``) of ``field``."""
    return Comparison(field, ComparisonOp.EXISTS, value)


def regex(field: str, pattern: str, flags: Optional[str] = None) -> Pattern:
    """
    Match ``field`` against a regular expression.

    Args:
        field: Field name (dotted paths allowed)
        pattern: Regular expression source
        flags: Optional MongoDB regex options such as "i" or "im". Omitted from
            the compiled query when empty.

    Example:
        >>> regex("name", "^john", "i").to_query()
        {'name': {'$regex': '^john', '$options': 'i'}}
    """
    return Pattern(field, pattern, flags)


def all_(field: str, values: Any) -> Comparison:
    """Array ``field`` contains every one of ``values``."""
    return Comparison(field, ComparisonOp.ALL, _as_tuple(values))


def size(field: str, length: int) -> Comparison:
    """Array ``field`` has exactly ``length`` elements."""
    return Comparison(field, ComparisonOp.SIZE, length)


def elem_match(field: str, inner: Optional[FilterNode] = None) -> ElemMatch:
    """
    At least one element of array ``field`` matches ``inner``.

    With ``inner=None`` the compiled form is ``{"$elemMatch": {}}``, which
    matches any non-empty array.

    Example:
        >>> elem_match("items", gte("price", 100) & gt("qty", 5)).to_query()
        {'items': {'$elemMatch': {'$and': [{'price': {'$gte': 100}}, {'qty': {'$gt': 5}}]}}}
    """
    return ElemMatch(field, inner)


def between(field: str, low: Any, high: Any) -> FilterNode:
    """Inclusive range, shorthand for ``and_(gte(field, low), lte(field, high))``."""
    from mongospec.filters.logical import and_

    return and_(gte(field, low), lte(field, high))
