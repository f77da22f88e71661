"""
Deterministic fingerprints for compiled mongospec output.

hash_query() turns a compiled filter (plus optional update document and
pipeline) into a stable hex digest:

1. Normalization:
   - datetimes -> ISO strings, ObjectIds -> hex strings
   - dict keys sorted recursively, except inside $sort where order matters
   - list order kept ($and/$or children and stage order are significant)

2. Hashing:
   - canonical JSON (sorted keys, compact separators)
   - MD5 hex digest

Because filters and updates are normalized when they are built, equivalent
compositions hash identically:

    hash_query(to_query(and_(and_(a, b), c))) == hash_query(to_query(and_(a, b, c)))

Usage:
    key = hash_query(to_query(f), pipeline=p.to_stages())
    cache.setdefault(key, run(...))
"""

import hashlib
import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from bson import ObjectId

from mongospec.constants import SORT


def _normalize_value(obj: Any) -> Any:
    """
    Recursively normalize compiled values for deterministic hashing.

    Converts datetimes to ISO strings, ObjectIds to strings,
    and sorts dict keys to ensure the same document always hashes identically.
    """
    if isinstance(obj, datetime):
        return obj.isoformat()
    elif isinstance(obj, ObjectId):
        return str(obj)
    elif isinstance(obj, dict):
        normalized = {}
        for key, value in obj.items():
            if key == SORT and isinstance(value, dict):
                # $sort key order is significant, keep it as a list of pairs
                normalized[key] = [[str(k), _normalize_value(v)] for k, v in value.items()]
            else:
                normalized[str(key)] = _normalize_value(value)
        return normalized
    elif isinstance(obj, (list, tuple)):
        return [_normalize_value(v) for v in obj]
    return obj


def hash_query(
    filter_dict: Dict[str, Any],
    update: Optional[Dict[str, Any]] = None,
    pipeline: Optional[List[Dict[str, Any]]] = None,
) -> str:
    """
    Create deterministic hash of compiled query parameters.

    Args:
        filter_dict: Compiled filter (``to_query()`` output)
        update: Compiled update document
        pipeline: Compiled stage list (``Pipeline.to_stages()`` output)

    Returns:
        Hex string hash (32 characters)

    Example:
        >>> len(hash_query({"status": "active"}))
        32
    """
    query_repr: Dict[str, Any] = {
        "filter": _normalize_value(filter_dict),
    }

    if update:
        query_repr["update"] = _normalize_value(update)

    if pipeline:
        query_repr["pipeline"] = _normalize_value(pipeline)

    # default=str covers values JSON cannot encode natively (Decimal128, Regex, ...)
    json_str = json.dumps(query_repr, sort_keys=True, separators=(",", ":"), default=str)

    return hashlib.md5(json_str.encode("utf-8")).hexdigest()
