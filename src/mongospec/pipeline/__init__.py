"""
Aggregation pipeline builder and accumulator helpers.
"""

from mongospec.pipeline.accumulators import (
    add_to_set_acc,
    avg,
    first,
    last,
    max_acc,
    min_acc,
    push_acc,
    sum_,
)
from mongospec.pipeline.builder import Pipeline, Stage

__all__ = [
    "Pipeline",
    "Stage",
    # accumulators.py exports
    "sum_",
    "avg",
    "min_acc",
    "max_acc",
    "first",
    "last",
    "push_acc",
    "add_to_set_acc",
]
