"""
Composable update operations.
"""

from .compiler import to_update
from .nodes import (
    CombinedUpdate,
    FieldUpdate,
    Rename,
    SetFields,
    UpdateNode,
    UpdateOp,
    add_to_set,
    combine,
    inc,
    max_,
    min_,
    mul,
    pop_first,
    pop_last,
    pull,
    push,
    rename,
    set_,
    set_fields,
    unset,
)

__all__ = [
    # Node types
    "UpdateNode",
    "UpdateOp",
    "FieldUpdate",
    "SetFields",
    "Rename",
    "CombinedUpdate",
    # Constructors
    "set_",
    "inc",
    "mul",
    "min_",
    "max_",
    "push",
    "pull",
    "add_to_set",
    "pop_first",
    "pop_last",
    "unset",
    "set_fields",
    "rename",
    "combine",
    # Compiler
    "to_update",
]
