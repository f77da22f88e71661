"""
Operator inspection for compiled mongospec output.

The compilers produce plain dicts and lists. This module looks back into that
wire form to answer simple questions about it without re-parsing anything:

    collect_operators({"$nor": [{"age": {"$lt": 18}}]})
        -> {"$nor", "$lt"}

    has_negation({"status": {"$in": ["a", "b"]}})
        -> False

================================================================================
OPERATOR CATEGORIES
================================================================================

    QUERY_OPERATORS      Field-level operators the filter compiler emits
    LOGICAL_OPERATORS    $and, $or, $nor
    NEGATION_OPERATORS   $ne, $nin, $not, $nor
    UPDATE_OPERATORS     Top-level keys the update compiler emits
    STAGE_OPERATORS      Stage keys the pipeline builder emits

A compiled document may hold operators outside these sets (raw stages, raw
$match queries, $expr inside a lookup); collect_operators() still reports them.
"""

from __future__ import annotations

from typing import Any, Set

from mongospec import constants as C

__all__ = [
    # Classification sets
    "QUERY_OPERATORS",
    "LOGICAL_OPERATORS",
    "NEGATION_OPERATORS",
    "UPDATE_OPERATORS",
    "STAGE_OPERATORS",
    # Inspection
    "collect_operators",
    "has_negation",
]

# =============================================================================
# OPERATOR CLASSIFICATION
# =============================================================================

QUERY_OPERATORS: frozenset[str] = frozenset(
    {
        # ── Comparison ──────────────────────────────────────────────────────────
        C.EQ,  # only seen in raw queries; eq() compiles to {field: value}
        C.NE,  # {"status": {"$ne": "deleted"}}
        C.GT,  # {"value": {"$gt": 100}}
        C.GTE,  # {"value": {"$gte": 100}}
        C.LT,  # {"value": {"$lt": 0}}
        C.LTE,  # {"value": {"$lte": 100}}
        C.IN,  # {"type": {"$in": ["A", "B"]}}
        C.NIN,  # {"type": {"$nin": ["X", "Y"]}}
        # ── Element ─────────────────────────────────────────────────────────────
        C.EXISTS,  # {"email": {"$exists": true}}
        # ── Array ───────────────────────────────────────────────────────────────
        C.ALL,  # {"tags": {"$all": ["a", "b"]}}
        C.SIZE,  # {"items": {"$size": 3}}
        C.ELEM_MATCH,  # {"readings": {"$elemMatch": {"value": {"$gt": 100}}}}
        # ── Evaluation ──────────────────────────────────────────────────────────
        C.REGEX,  # {"name": {"$regex": "^sensor_"}}
        C.OPTIONS,  # Modifier for $regex
    }
)

LOGICAL_OPERATORS: frozenset[str] = frozenset({C.AND, C.OR, C.NOR})

# not_() compiles to $nor; $ne/$nin come from ne()/not_in(); $not only appears
# in raw queries
NEGATION_OPERATORS: frozenset[str] = frozenset({C.NE, C.NIN, C.NOT, C.NOR})

UPDATE_OPERATORS: frozenset[str] = frozenset(
    {
        C.SET,
        C.INC,
        C.MUL,
        C.MIN,
        C.MAX,
        C.PUSH,
        C.PULL,
        C.ADD_TO_SET,
        C.POP,
        C.UNSET,
        C.RENAME,
    }
)

STAGE_OPERATORS: frozenset[str] = frozenset(
    {
        C.MATCH,
        C.PROJECT,
        C.GROUP,
        C.SORT,
        C.LIMIT,
        C.SKIP,
        C.UNWIND,
        C.LOOKUP,
        C.ADD_FIELDS,
        C.SET_STAGE,
        C.UNSET_STAGE,
        C.REPLACE_ROOT,
        C.COUNT,
        C.FACET,
        C.BUCKET,
        C.SAMPLE,
        C.OUT,
        C.MERGE,
    }
)


# =============================================================================
# INSPECTION
# =============================================================================


def collect_operators(compiled: Any) -> Set[str]:
    """
    Collect every operator key found at any nesting level.

    Args:
        compiled: A compiled query, update document or list of stages

    Returns:
        Set of "$"-prefixed keys

    Examples:
        >>> collect_operators({"$and": [{"a": 1}, {"b": {"$gt": 2}}]})
        {'$and', '$gt'}
        >>> collect_operators([{"$skip": 10}, {"$limit": 5}])
        {'$skip', '$limit'}
    """
    found: Set[str] = set()

    def _walk(obj: Any) -> None:
        if isinstance(obj, dict):
            for key, value in obj.items():
                if isinstance(key, str) and key.startswith(C.OPERATOR_PREFIX):
                    found.add(key)
                _walk(value)
        elif isinstance(obj, list):
            for item in obj:
                _walk(item)

    _walk(compiled)
    return found


def has_negation(compiled: Any) -> bool:
    """
    Check if a compiled document contains any negation operator.

    Examples:
        >>> has_negation({"field": {"$in": [1, 2, 3]}})
        False
        >>> has_negation({"$nor": [{"field": 5}]})
        True
    """
    return bool(NEGATION_OPERATORS & collect_operators(compiled))
