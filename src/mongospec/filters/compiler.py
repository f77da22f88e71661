"""
Filter compiler: FilterNode tree -> MongoDB query document.

    Comparison (EQ)         {field: value}
    Comparison (other)      {field: {op: value}}
    Pattern                 {field: {"$regex": p}}  (+ "$options": flags if set)
    ElemMatch               {field: {"$elemMatch": <inner or {}>}}
    AndFilter / OrFilter    {"$and" | "$or": [<child>, ...]}
    NotFilter               {"$nor": [<inner>]}

Every call builds new dicts and lists and deep-copies leaf values, so compiled
output can be mutated by the caller, nested values included, without touching
the node tree. Tuples stored by in_/not_in/all_ are emitted as lists.
"""

from copy import deepcopy
from typing import Any, Dict, Optional

from mongospec import constants as C
from mongospec.filters.nodes import (
    AndFilter,
    Comparison,
    ComparisonOp,
    ElemMatch,
    FilterNode,
    NotFilter,
    OrFilter,
    Pattern,
)


def _copy_value(value: Any) -> Any:
    if isinstance(value, tuple):
        return [deepcopy(v) for v in value]
    return deepcopy(value)


def _compile_container(key: str, node: Any) -> Dict[str, Any]:
    parts = [to_query(child) for child in node.children]
    if len(parts) == 1:
        return parts[0]
    return {key: parts}


def to_query(node: Optional[FilterNode]) -> Dict[str, Any]:
    """
    Compile a filter tree to a query document.

    Args:
        node: Root of the filter tree, or None for "match everything"

    Returns:
        Query dict ready for find(), count_documents(), $match, ...

    Raises:
        TypeError: If ``node`` is not a filter node
    """
    if node is None:
        return {}

    if isinstance(node, Comparison):
        if node.op is ComparisonOp.EQ:
            return {node.field: deepcopy(node.value)}
        return {node.field: {node.op.value: _copy_value(node.value)}}

    if isinstance(node, Pattern):
        expr: Dict[str, Any] = {C.REGEX: node.pattern}
        if node.flags:
            expr[C.OPTIONS] = node.flags
        return {node.field: expr}

    if isinstance(node, ElemMatch):
        return {node.field: {C.ELEM_MATCH: to_query(node.inner)}}

    if isinstance(node, AndFilter):
        return _compile_container(C.AND, node)

    if isinstance(node, OrFilter):
        return _compile_container(C.OR, node)

    if isinstance(node, NotFilter):
        return {C.NOR: [to_query(node.inner)]}

    raise TypeError(f"Unsupported filter node: {node!r}")
