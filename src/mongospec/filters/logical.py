"""
Logical combinators for filter nodes.

Normalization happens here, at construction time, so every container that
exists is already flat. A single pass per call is therefore enough: an
AndFilter argument can never itself contain an AndFilter.

    and_(None, a, None)          ->  a
    and_(and_(a, b), c)          ->  AndFilter((a, b, c))
    and_(None, None)             ->  None
    not_(None)                   ->  None
"""

from typing import List, Optional, Type, Union

from mongospec.filters.nodes import AndFilter, FilterNode, NotFilter, OrFilter


def _flatten(
    nodes: tuple, container: Type[Union[AndFilter, OrFilter]]
) -> Optional[FilterNode]:
    flat: List[FilterNode] = []
    for node in nodes:
        if node is None:
            continue
        if isinstance(node, container):
            flat.extend(node.children)
            continue
        flat.append(node)

    if not flat:
        return None
    if len(flat) == 1:
        return flat[0]
    return container(tuple(flat))


def and_(*nodes: Optional[FilterNode]) -> Optional[FilterNode]:
    """
    Combine filters with a logical AND.

    Behavior:
        - None arguments are ignored
        - nested and_() results are flattened into this one
        - a single remaining filter is returned directly (no $and wrapper)
        - returns None when nothing remains

    Example:
        >>> and_(eq("status", "active"), gte("age", 18)).to_query()
        {'$and': [{'status': 'active'}, {'age': {'$gte': 18}}]}
    """
    return _flatten(nodes, AndFilter)


def or_(*nodes: Optional[FilterNode]) -> Optional[FilterNode]:
    """Combine filters with a logical OR. Mirrors :func:`and_`."""
    return _flatten(nodes, OrFilter)


def not_(node: Optional[FilterNode]) -> Optional[FilterNode]:
    """
    Negate a filter.

    Compiles to ``{"$nor": [inner]}`` rather than pushing ``$not`` down to the
    leaves: ``$not`` only wraps a single field-level operator expression and
    cannot negate an $and/$or, whereas $nor negates any filter document.

    Example:
        >>> not_(and_(eq("status", "pending"), lt("priority", 3))).to_query()
        {'$nor': [{'$and': [{'status': 'pending'}, {'priority': {'$lt': 3}}]}]}
    """
    if node is None:
        return None
    return NotFilter(node)
