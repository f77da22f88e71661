"""
Inspection helpers for compiled mongospec output.

- Inspector: operator classification and lookup over compiled documents
- Fingerprint: deterministic hashing of compiled queries for caching
"""

from .fingerprint import hash_query
from .inspector import (
    LOGICAL_OPERATORS,
    NEGATION_OPERATORS,
    QUERY_OPERATORS,
    STAGE_OPERATORS,
    UPDATE_OPERATORS,
    collect_operators,
    has_negation,
)

__all__ = [
    "hash_query",
    "QUERY_OPERATORS",
    "LOGICAL_OPERATORS",
    "NEGATION_OPERATORS",
    "UPDATE_OPERATORS",
    "STAGE_OPERATORS",
    "collect_operators",
    "has_negation",
]
