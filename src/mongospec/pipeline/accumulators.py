"""
Accumulator expressions for $group and $bucket stages.

Pure helpers: each wraps an expression in a single-key dict.

    sum_("$amount")   ->  {"$sum": "$amount"}
    sum_(1)           ->  {"$sum": 1}        (document count)
"""

from typing import Any, Dict

from mongospec import constants as C


def sum_(expr: Any) -> Dict[str, Any]:
    return {C.SUM: expr}


def avg(expr: Any) -> Dict[str, Any]:
    return {C.AVG: expr}


def min_acc(expr: Any) -> Dict[str, Any]:
    return {C.MIN: expr}


def max_acc(expr: Any) -> Dict[str, Any]:
    return {C.MAX: expr}


def first(expr: Any) -> Dict[str, Any]:
    return {C.FIRST: expr}


def last(expr: Any) -> Dict[str, Any]:
    return {C.LAST: expr}


def push_acc(expr: Any) -> Dict[str, Any]:
    """Collect values into an array, duplicates kept."""
    return {C.PUSH: expr}


def add_to_set_acc(expr: Any) -> Dict[str, Any]:
    """Collect distinct values into an array."""
    return {C.ADD_TO_SET: expr}
