"""
Aggregation pipeline builder for mongospec.

================================================================================
MODEL
================================================================================

A Pipeline is an ordered list of Stage descriptors, appended in place by
fluent calls and read back with to_stages():

    Pipeline()                                  stages = []
        .match(eq("status", "paid"))            + Stage("$match", {...})
        .group_by("$category", {"n": sum_(1)})  + Stage("$group", {...})
        .sort_by("n", DESCENDING)               + Stage("$sort", {"n": -1})
        .limit(10)                              + Stage("$limit", 10)

    .to_stages() ->
        [
            {"$match": {"status": "paid"}},
            {"$group": {"_id": "$category", "n": {"$sum": 1}}},
            {"$sort": {"n": -1}},
            {"$limit": 10},
        ]

to_stages() never reorders, deduplicates or validates stages. Terminal stages
($out, $merge) belong at the end by MongoDB's rules but the builder does not
enforce it.

================================================================================
OWNERSHIP
================================================================================

A Pipeline is mutable and meant for a single owner. Build it fully before
sharing it between threads; use one builder per concurrent operation.
to_stages() returns deep copies, so the compiled list can be handed to
collection.aggregate() or edited freely.

================================================================================
"""

import logging
from collections.abc import Mapping
from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Union

from pymongo import ASCENDING

from mongospec import constants as C
from mongospec.filters.compiler import to_query
from mongospec.filters.nodes import FilterNode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Stage:
    """
    One pipeline step.

    ``operator`` is the stage key ("$match", "$limit", ...). A raw stage has
    ``operator=None`` and ``spec`` holds the complete stage document.
    """

    operator: Optional[str]
    spec: Any

    def to_mapping(self) -> Dict[str, Any]:
        if self.operator is None:
            return deepcopy(dict(self.spec))
        return {self.operator: deepcopy(self.spec)}


StagesLike = Union["Pipeline", Sequence[Mapping[str, Any]]]


def _as_stage_list(stages: StagesLike) -> List[Dict[str, Any]]:
    if isinstance(stages, Pipeline):
        return stages.to_stages()
    return [dict(stage) for stage in stages]


class Pipeline:
    """
    Fluent builder for MongoDB aggregation pipelines.

    Example:
        >>> p = Pipeline().skip(10).limit(5)
        >>> p.to_stages()
        [{'$skip': 10}, {'$limit': 5}]
    """

    def __init__(self):
        self._stages: List[Stage] = []

    def __len__(self) -> int:
        return len(self._stages)

    def __repr__(self) -> str:
        ops = ", ".join(s.operator or "<raw>" for s in self._stages)
        return f"Pipeline([{ops}])"

    def _append(self, operator: Optional[str], spec: Any) -> "Pipeline":
        self._stages.append(Stage(operator, spec))
        return self

    @property
    def stages(self) -> List[Stage]:
        """Stage descriptors in insertion order (a copy of the list)."""
        return list(self._stages)

    def to_stages(self) -> List[Dict[str, Any]]:
        """
        Compile to a list of stage documents for ``collection.aggregate()``.

        Returns:
            New list of new dicts, in insertion order
        """
        compiled = [stage.to_mapping() for stage in self._stages]
        logger.debug(f"Compiled pipeline with {len(compiled)} stages")
        return compiled

    # -------------------------------------------------------------------------
    # Filtering
    # -------------------------------------------------------------------------

    def match(self, node: Optional[FilterNode]) -> "Pipeline":
        """
        Add a $match stage from a filter tree.

        A None filter adds no stage at all, so an absent filter can never turn
        into a match-nothing stage.
        """
        if node is None:
            logger.debug("Skipping $match stage for empty filter")
            return self
        return self._append(C.MATCH, to_query(node))

    def match_raw(self, query: Optional[Mapping[str, Any]]) -> "Pipeline":
        """Add a $match stage from a ready-made query dict. None adds nothing."""
        if query is None:
            return self
        return self._append(C.MATCH, dict(query))

    # -------------------------------------------------------------------------
    # Reshaping
    # -------------------------------------------------------------------------

    def project(self, projection: Mapping[str, Any]) -> "Pipeline":
        """e.g. ``project({"name": 1, "total": 1, "_id": 0})``"""
        return self._append(C.PROJECT, projection)

    def add_fields(self, fields: Mapping[str, Any]) -> "Pipeline":
        return self._append(C.ADD_FIELDS, fields)

    def set(self, fields: Mapping[str, Any]) -> "Pipeline":
        """$set stage, the MongoDB 4.2+ alias of $addFields."""
        return self._append(C.SET_STAGE, fields)

    def unset(self, *fields: str) -> "Pipeline":
        """
        Remove fields from documents.

        One field is emitted as a bare string, several as a list:

            unset("password")          ->  {"$unset": "password"}
            unset("password", "salt")  ->  {"$unset": ["password", "salt"]}
        """
        if len(fields) == 1:
            return self._append(C.UNSET_STAGE, fields[0])
        return self._append(C.UNSET_STAGE, list(fields))

    def replace_root(self, new_root: Any) -> "Pipeline":
        return self._append(C.REPLACE_ROOT, {"newRoot": new_root})

    # -------------------------------------------------------------------------
    # Grouping
    # -------------------------------------------------------------------------

    def group(self, spec: Mapping[str, Any]) -> "Pipeline":
        """
        Add a $group stage. ``spec`` must contain "_id".

        Example:
            >>> Pipeline().group({"_id": "$category", "total": sum_("$amount")})
        """
        return self._append(C.GROUP, spec)

    def group_by(
        self, id_expr: Any, accumulators: Optional[Mapping[str, Any]] = None
    ) -> "Pipeline":
        """
        Group by ``id_expr``, merging ``accumulators`` into the same $group stage.

        Example:
            >>> Pipeline().group_by("$status", {"count": sum_(1)}).to_stages()
            [{'$group': {'_id': '$status', 'count': {'$sum': 1}}}]
        """
        spec: Dict[str, Any] = {C.GROUP_ID: id_expr}
        if accumulators:
            spec.update(accumulators)
        return self._append(C.GROUP, spec)

    def count(self, field: str) -> "Pipeline":
        return self._append(C.COUNT, field)

    def bucket(
        self,
        group_by: Any,
        boundaries: Sequence[Any],
        default: Any = None,
        output: Optional[Mapping[str, Any]] = None,
    ) -> "Pipeline":
        """
        Categorize documents into buckets by ``boundaries``.

        Args:
            group_by: Expression to bucket on, e.g. "$price"
            boundaries: Sorted bucket lower bounds
            default: Bucket id for values outside the boundaries (omitted if None)
            output: Accumulators per bucket (omitted if None)
        """
        spec: Dict[str, Any] = {"groupBy": group_by, "boundaries": list(boundaries)}
        if default is not None:
            spec["default"] = default
        if output is not None:
            spec["output"] = output
        return self._append(C.BUCKET, spec)

    def facet(self, facets: Mapping[str, StagesLike]) -> "Pipeline":
        """Run several sub-pipelines; values may be stage lists or Pipelines."""
        return self._append(
            C.FACET, {name: _as_stage_list(sub) for name, sub in facets.items()}
        )

    # -------------------------------------------------------------------------
    # Ordering and paging
    # -------------------------------------------------------------------------

    def sort(self, spec: Union[Mapping[str, Any], Sequence[tuple]]) -> "Pipeline":
        """
        Add a $sort stage.

        Accepts a mapping or pymongo-style ``[(field, direction), ...]`` pairs;
        key order is preserved either way.
        """
        if not isinstance(spec, Mapping):
            spec = dict(spec)
        return self._append(C.SORT, spec)

    def sort_by(self, field: str, direction: int = ASCENDING) -> "Pipeline":
        """Sort on a single field (``ASCENDING`` = 1, ``DESCENDING`` = -1)."""
        return self._append(C.SORT, {field: direction})

    def limit(self, n: int) -> "Pipeline":
        return self._append(C.LIMIT, n)

    def skip(self, n: int) -> "Pipeline":
        return self._append(C.SKIP, n)

    def sample(self, size: int) -> "Pipeline":
        """Randomly select ``size`` documents."""
        return self._append(C.SAMPLE, {"size": size})

    # -------------------------------------------------------------------------
    # Arrays and joins
    # -------------------------------------------------------------------------

    def unwind(self, path: str) -> "Pipeline":
        """e.g. ``unwind("$items")``"""
        return self._append(C.UNWIND, path)

    def unwind_with_options(
        self,
        path: str,
        preserve_null_and_empty: bool = False,
        include_array_index: Optional[str] = None,
    ) -> "Pipeline":
        """$unwind in document form; option keys are only emitted when set."""
        spec: Dict[str, Any] = {"path": path}
        if preserve_null_and_empty:
            spec["preserveNullAndEmptyArrays"] = True
        if include_array_index:
            spec["includeArrayIndex"] = include_array_index
        return self._append(C.UNWIND, spec)

    def lookup(
        self, from_: str, local_field: str, foreign_field: str, as_: str
    ) -> "Pipeline":
        """Left outer join on equality of ``local_field`` and ``foreign_field``."""
        return self._append(
            C.LOOKUP,
            {
                "from": from_,
                "localField": local_field,
                "foreignField": foreign_field,
                "as": as_,
            },
        )

    def lookup_with_pipeline(
        self,
        from_: str,
        pipeline: StagesLike,
        as_: str,
        let: Optional[Mapping[str, Any]] = None,
    ) -> "Pipeline":
        """
        Join through a sub-pipeline, optionally binding variables with ``let``.

        Example:
            >>> sub = Pipeline().match_raw({"$expr": {"$eq": ["$user_id", "$$uid"]}})
            >>> Pipeline().lookup_with_pipeline("orders", sub, "orders", let={"uid": "$_id"})
        """
        spec: Dict[str, Any] = {
            "from": from_,
            "pipeline": _as_stage_list(pipeline),
            "as": as_,
        }
        if let is not None:
            spec["let"] = let
        return self._append(C.LOOKUP, spec)

    # -------------------------------------------------------------------------
    # Output
    # -------------------------------------------------------------------------

    def out(self, collection: str) -> "Pipeline":
        """Write results to ``collection``. Must be the last stage."""
        return self._append(C.OUT, collection)

    def merge(
        self,
        into: str,
        on: Optional[Sequence[str]] = None,
        when_matched: Optional[str] = None,
        when_not_matched: Optional[str] = None,
    ) -> "Pipeline":
        """Merge results into ``into`` (MongoDB 4.2+). Must be the last stage."""
        spec: Dict[str, Any] = {"into": into}
        if on:
            spec["on"] = list(on)
        if when_matched:
            spec["whenMatched"] = when_matched
        if when_not_matched:
            spec["whenNotMatched"] = when_not_matched
        return self._append(C.MERGE, spec)

    def raw(self, stage: Mapping[str, Any]) -> "Pipeline":
        """Append a stage document the builder has no method for."""
        return self._append(None, stage)
