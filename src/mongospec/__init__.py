"""
mongospec - composable MongoDB filters, updates and aggregation pipelines.

Build immutable filter and update trees with small constructor functions,
combine them, and compile them to the plain dicts/lists pymongo expects:

    from mongospec import and_, or_, eq, gte, set_, inc, combine, Pipeline

    query = and_(
        eq("status", "active"),
        gte("age", 18),
        or_(eq("role", "admin"), eq("role", "moderator")),
    ).to_query()

    update = combine(set_("status", "active"), inc("login_count", 1)).to_update()

    stages = Pipeline().match(eq("status", "paid")).group_by("$region").to_stages()

    collection.update_many(query, update)
    collection.aggregate(stages)
"""

from mongospec.filters import (
    AndFilter,
    Comparison,
    ComparisonOp,
    ElemMatch,
    FilterNode,
    NotFilter,
    OrFilter,
    Pattern,
    all_,
    and_,
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
    not_,
    not_in,
    or_,
    regex,
    size,
    to_query,
)
from mongospec.pipeline import (
    Pipeline,
    Stage,
    add_to_set_acc,
    avg,
    first,
    last,
    max_acc,
    min_acc,
    push_acc,
    sum_,
)
from mongospec.updates import (
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
    to_update,
    unset,
)

__version__ = "0.1.0"

__all__ = [
    # Filters
    "FilterNode",
    "ComparisonOp",
    "Comparison",
    "Pattern",
    "ElemMatch",
    "AndFilter",
    "OrFilter",
    "NotFilter",
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
    "and_",
    "or_",
    "not_",
    "to_query",
    # Updates
    "UpdateNode",
    "UpdateOp",
    "FieldUpdate",
    "SetFields",
    "Rename",
    "CombinedUpdate",
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
    "to_update",
    # Pipeline
    "Pipeline",
    "Stage",
    "sum_",
    "avg",
    "min_acc",
    "max_acc",
    "first",
    "last",
    "push_acc",
    "add_to_set_acc",
]
