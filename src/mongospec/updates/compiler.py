"""
Update compiler: UpdateNode tree -> MongoDB update document.

Leaves compile to a single operator key. Values are deep-copied, so the
compiled document never shares containers with the node tree:

    FieldUpdate    {op: {field: value}}
    SetFields      {"$set": {field1: value1, ...}}
    Rename         {"$rename": {old_field: new_field}}

A CombinedUpdate folds its children left to right into one document:

    1. compile the child
    2. for each (operator key, payload) in the child's document:
       - key already present AND both payloads are field maps
             -> merge payload fields into the existing map (later wins)
       - otherwise
             -> set/replace the key wholesale

    combine(set_("a", 1), set_("b", 2))   ->  {"$set": {"a": 1, "b": 2}}
    combine(set_("a", 1), inc("b", 1))    ->  {"$set": {"a": 1}, "$inc": {"b": 1}}
    combine(set_("a", 1), set_("a", 2))   ->  {"$set": {"a": 2}}
"""

import logging
from collections.abc import Mapping
from copy import deepcopy
from typing import Any, Dict, Optional

from mongospec import constants as C
from mongospec.updates.nodes import (
    CombinedUpdate,
    FieldUpdate,
    Rename,
    SetFields,
    UpdateNode,
)

logger = logging.getLogger(__name__)


def _merge_into(result: Dict[str, Any], document: Dict[str, Any]) -> None:
    for key, payload in document.items():
        existing = result.get(key)
        if isinstance(existing, Mapping) and isinstance(payload, Mapping):
            # Every payload here was freshly built by to_update(), safe to mutate
            existing.update(payload)
            continue
        if key in result:
            logger.debug(f"Update key '{key}' replaced wholesale (non-mapping payload)")
        result[key] = payload


def to_update(node: Optional[UpdateNode]) -> Dict[str, Any]:
    """
    Compile an update tree to an update document.

    Args:
        node: Root update node, or None (compiles to an empty document)

    Returns:
        Update dict for update_one(), update_many(), find_one_and_update(), ...

    Raises:
        TypeError: If ``node`` is not an update node
    """
    if node is None:
        return {}

    if isinstance(node, FieldUpdate):
        return {node.op.value: {node.field: deepcopy(node.value)}}

    if isinstance(node, SetFields):
        return {C.SET: {field: deepcopy(value) for field, value in node.pairs}}

    if isinstance(node, Rename):
        return {C.RENAME: {node.old_field: node.new_field}}

    if isinstance(node, CombinedUpdate):
        result: Dict[str, Any] = {}
        for child in node.children:
            _merge_into(result, to_update(child))
        return result

    raise TypeError(f"Unsupported update node: {node!r}")
