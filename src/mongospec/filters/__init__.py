"""
Composable query filters.

Provides leaf constructors (eq, gt, in_, regex, ...), logical combinators
(and_, or_, not_) and the compiler that turns a filter tree into a MongoDB
query document.
"""

from .compiler import to_query
from .logical import and_, not_, or_
from .nodes import (
    AndFilter,
    Comparison,
    ComparisonOp,
    ElemMatch,
    FilterNode,
    NotFilter,
    OrFilter,
    Pattern,
    all_,
    between,
    elem_match,
    eq,
    exists,
    gt,
    gte,
    in_,
    lt,
    lte,
    ne,
    nin,
    not_in,
    regex,
    size,
)

__all__ = [
    # Node types
    "FilterNode",
    "ComparisonOp",
    "Comparison",
    "Pattern",
    "ElemMatch",
    "AndFilter",
    "OrFilter",
    "NotFilter",
    # Leaf constructors
    "eq",
    "ne",
    "gt",
    "gte",
    "lt",
    "lte",
    "in_",
    "not_in",
    "nin",
    "exists",
    "regex",
    "all_",
    "size",
    "elem_match",
    "between",
    # Combinators
    "and_",
    "or_",
    "not_",
    # Compiler
    "to_query",
]
