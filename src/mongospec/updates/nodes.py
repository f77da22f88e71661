"""
Update node types and constructors for mongospec.

================================================================================
NODE VARIANTS
================================================================================

    FieldUpdate(op, field, value)    {"$inc": {"visits": 1}}
    SetFields(pairs)                 {"$set": {"name": "Ann", "age": 30}}
    Rename(old_field, new_field)     {"$rename": {"user_name": "username"}}
    CombinedUpdate(children)         merged update document (see compiler)

combine() is the only sanctioned way to build a CombinedUpdate:

    combine(None, None)              ->  None
    combine(set_("a", 1))            ->  set_("a", 1)   (returned unchanged)
    combine(set_("a", 1), inc("b"))  ->  CombinedUpdate((...))

Example:
    >>> combine(set_("status", "active"), inc("login_count", 1)).to_update()
    {'$set': {'status': 'active'}, '$inc': {'login_count': 1}}
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from mongospec import constants as C


class UpdateOp(Enum):
    """Single-field update operators, valued with their wire key."""

    SET = C.SET
    INC = C.INC
    MUL = C.MUL
    MIN = C.MIN
    MAX = C.MAX
    PUSH = C.PUSH
    PULL = C.PULL
    ADD_TO_SET = C.ADD_TO_SET
    POP = C.POP
    UNSET = C.UNSET


class UpdateNode:
    """Base class for every update node."""

    __slots__ = ()

    def to_update(self) -> Dict[str, Any]:
        """Compile this update to a MongoDB update document."""
        from mongospec.updates.compiler import to_update

        return to_update(self)


@dataclass(frozen=True)
class FieldUpdate(UpdateNode):
    op: UpdateOp
    field: str
    value: Any = None


@dataclass(frozen=True)
class SetFields(UpdateNode):
    """
    $set over several fields at once.

    The fields are held as an ordered tuple of (field, value) pairs so the node
    stays immutable, and hashable whenever the values are. A mapping passed in
    is copied into pairs.
    """

    pairs: Tuple[Tuple[str, Any], ...]

    def __post_init__(self):
        pairs = self.pairs.items() if isinstance(self.pairs, Mapping) else self.pairs
        object.__setattr__(self, "pairs", tuple((field, value) for field, value in pairs))

    @property
    def fields(self) -> Dict[str, Any]:
        """Fresh dict of the fields to set."""
        return dict(self.pairs)


@dataclass(frozen=True)
class Rename(UpdateNode):
    old_field: str
    new_field: str


@dataclass(frozen=True)
class CombinedUpdate(UpdateNode):
    children: Tuple[UpdateNode, ...]


# =============================================================================
# SINGLE-FIELD CONSTRUCTORS
# =============================================================================


def set_(field: str, value: Any) -> FieldUpdate:
    """
    Set ``field`` to ``value``, creating it if missing.

    Example:
        >>> set_("nested.field", 42).to_update()
        {'$set': {'nested.field': 42}}
    """
    return FieldUpdate(UpdateOp.SET, field, value)


def inc(field: str, amount: Any = 1) -> FieldUpdate:
    """Increment a numeric field. Negative amounts decrement."""
    return FieldUpdate(UpdateOp.INC, field, amount)


def mul(field: str, factor: Any) -> FieldUpdate:
    """Multiply a numeric field, e.g. ``mul("price", 1.1)`` for +10%."""
    return FieldUpdate(UpdateOp.MUL, field, factor)


def min_(field: str, value: Any) -> FieldUpdate:
    """Set ``field`` to ``value`` only if ``value`` is lower than the current one."""
    return FieldUpdate(UpdateOp.MIN, field, value)


def max_(field: str, value: Any) -> FieldUpdate:
    """Set ``field`` to ``value`` only if ``value`` is greater than the current one."""
    return FieldUpdate(UpdateOp.MAX, field, value)


def push(field: str, value: Any) -> FieldUpdate:
    """Append ``value`` to array ``field``."""
    return FieldUpdate(UpdateOp.PUSH, field, value)


def pull(field: str, value: Any) -> FieldUpdate:
    """Remove every occurrence of ``value`` (or every element matching it) from ``field``."""
    return FieldUpdate(UpdateOp.PULL, field, value)


def add_to_set(field: str, value: Any) -> FieldUpdate:
    """Append ``value`` to array ``field`` unless already present."""
    return FieldUpdate(UpdateOp.ADD_TO_SET, field, value)


def pop_first(field: str) -> FieldUpdate:
    """Remove the first element of array ``field`` (queue behaviour)."""
    return FieldUpdate(UpdateOp.POP, field, C.POP_FIRST)


def pop_last(field: str) -> FieldUpdate:
    """Remove the last element of array ``field`` (stack behaviour)."""
    return FieldUpdate(UpdateOp.POP, field, C.POP_LAST)


def unset(field: str) -> FieldUpdate:
    """Remove ``field`` from the document."""
    return FieldUpdate(UpdateOp.UNSET, field, C.UNSET_VALUE)


# =============================================================================
# MULTI-FIELD CONSTRUCTORS
# =============================================================================


def set_fields(fields: Mapping[str, Any]) -> SetFields:
    """
    Set several fields in one $set.

    Example:
        >>> set_fields({"name": "John Doe", "email": "john@example.com"}).to_update()
        {'$set': {'name': 'John Doe', 'email': 'john@example.com'}}
    """
    return SetFields(tuple(fields.items()))


def rename(old_field: str, new_field: str) -> Rename:
    """Rename a field, keeping its value."""
    return Rename(old_field, new_field)


def combine(*updates: Optional[UpdateNode]) -> Optional[UpdateNode]:
    """
    Merge several updates into one update document.

    Behavior:
        - None arguments are ignored
        - returns None if nothing remains
        - a single remaining update is returned directly
        - otherwise the updates are merged at compile time, left to right:
          same operator keys share one field map and the later argument wins
          on a field collision

    Example:
        >>> combine(set_("name", "John"), set_("age", 30), inc("visits", 1)).to_update()
        {'$set': {'name': 'John', 'age': 30}, '$inc': {'visits': 1}}
    """
    remaining = tuple(u for u in updates if u is not None)
    if not remaining:
        return None
    if len(remaining) == 1:
        return remaining[0]
    return CombinedUpdate(remaining)
