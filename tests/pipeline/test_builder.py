"""
Tests for mongospec.pipeline.builder.

Covers:
- Insertion order and fluent chaining
- $match from filter trees, raw queries, and the None no-op
- Every stage method's compiled shape
- to_stages() freshness
"""

import pytest
from pymongo import ASCENDING, DESCENDING

from mongospec.filters import and_, eq, gte
from mongospec.pipeline import Pipeline, Stage, avg, sum_


@pytest.fixture
def pipeline():
    return Pipeline()


class TestOrdering:
    """Test stage order and chaining."""

    def test_empty_pipeline(self, pipeline):
        assert pipeline.to_stages() == []
        assert len(pipeline) == 0

    def test_skip_then_limit(self):
        assert Pipeline().skip(10).limit(5).to_stages() == [{"$skip": 10}, {"$limit": 5}]

    def test_limit_then_skip_is_not_reordered(self):
        assert Pipeline().limit(5).skip(10).to_stages() == [{"$limit": 5}, {"$skip": 10}]

    def test_methods_return_same_builder(self, pipeline):
        assert pipeline.limit(1) is pipeline
        assert pipeline.match(None) is pipeline

    def test_duplicate_stages_are_kept(self):
        assert Pipeline().limit(5).limit(5).to_stages() == [{"$limit": 5}, {"$limit": 5}]

    def test_chaining(self):
        stages = (
            Pipeline()
            .match(eq("status", "completed"))
            .group_by("$category", {"total": sum_("$amount")})
            .sort_by("total", DESCENDING)
            .limit(10)
            .to_stages()
        )

        assert stages == [
            {"$match": {"status": "completed"}},
            {"$group": {"_id": "$category", "total": {"$sum": "$amount"}}},
            {"$sort": {"total": -1}},
            {"$limit": 10},
        ]

    def test_stage_descriptors(self):
        p = Pipeline().limit(3).raw({"$indexStats": {}})

        assert p.stages == [Stage("$limit", 3), Stage(None, {"$indexStats": {}})]


class TestMatch:
    """Test $match stages."""

    def test_match_filter(self):
        assert Pipeline().match(eq("status", "active")).to_stages() == [
            {"$match": {"status": "active"}}
        ]

    def test_match_composite_filter(self):
        stages = Pipeline().match(and_(eq("a", 1), gte("b", 2))).to_stages()

        assert stages == [{"$match": {"$and": [{"a": 1}, {"b": {"$gte": 2}}]}}]

    def test_match_none_adds_no_stage(self):
        p = Pipeline().limit(1)

        p.match(None)

        assert len(p) == 1
        assert p.to_stages() == [{"$limit": 1}]

    def test_match_of_all_none_combination_adds_no_stage(self):
        assert len(Pipeline().match(and_(None, None))) == 0

    def test_match_raw(self):
        assert Pipeline().match_raw({"status": "active"}).to_stages() == [
            {"$match": {"status": "active"}}
        ]

    def test_match_raw_none_adds_no_stage(self):
        assert len(Pipeline().match_raw(None)) == 0

    def test_match_raw_empty_mapping_adds_stage(self):
        assert Pipeline().match_raw({}).to_stages() == [{"$match": {}}]


class TestReshapingStages:
    def test_project(self):
        assert Pipeline().project({"name": 1, "_id": 0}).to_stages() == [
            {"$project": {"name": 1, "_id": 0}}
        ]

    def test_add_fields(self):
        expr = {"$concat": ["$first", " ", "$last"]}

        assert Pipeline().add_fields({"full": expr}).to_stages() == [
            {"$addFields": {"full": expr}}
        ]

    def test_set_alias(self):
        assert Pipeline().set({"x": 1}).to_stages() == [{"$set": {"x": 1}}]

    def test_unset_single_field_is_bare_string(self):
        assert Pipeline().unset("password").to_stages() == [{"$unset": "password"}]

    def test_unset_many_fields_is_list(self):
        assert Pipeline().unset("password", "salt").to_stages() == [
            {"$unset": ["password", "salt"]}
        ]

    def test_replace_root(self):
        assert Pipeline().replace_root("$embedded").to_stages() == [
            {"$replaceRoot": {"newRoot": "$embedded"}}
        ]


class TestGroupingStages:
    def test_group(self):
        spec = {"_id": "$category", "total": {"$sum": "$amount"}}

        assert Pipeline().group(spec).to_stages() == [{"$group": spec}]

    def test_group_by_merges_accumulators(self):
        stages = Pipeline().group_by(
            "$status", {"count": sum_(1), "avg": avg("$amount")}
        ).to_stages()

        assert stages == [
            {
                "$group": {
                    "_id": "$status",
                    "count": {"$sum": 1},
                    "avg": {"$avg": "$amount"},
                }
            }
        ]

    def test_group_by_without_accumulators(self):
        assert Pipeline().group_by(None).to_stages() == [{"$group": {"_id": None}}]

    def test_group_by_does_not_mutate_accumulators(self):
        accumulators = {"count": sum_(1)}

        Pipeline().group_by("$status", accumulators)

        assert accumulators == {"count": {"$sum": 1}}

    def test_count(self):
        assert Pipeline().count("total").to_stages() == [{"$count": "total"}]

    def test_bucket_minimal(self):
        stages = Pipeline().bucket("$price", [0, 100, 200]).to_stages()

        assert stages == [{"$bucket": {"groupBy": "$price", "boundaries": [0, 100, 200]}}]

    def test_bucket_with_default_and_output(self):
        stages = Pipeline().bucket(
            "$price", [0, 100], default="other", output={"n": sum_(1)}
        ).to_stages()

        assert stages == [
            {
                "$bucket": {
                    "groupBy": "$price",
                    "boundaries": [0, 100],
                    "default": "other",
                    "output": {"n": {"$sum": 1}},
                }
            }
        ]

    def test_facet_accepts_lists_and_pipelines(self):
        stages = Pipeline().facet(
            {
                "byCategory": [{"$group": {"_id": "$category"}}],
                "top": Pipeline().sort_by("total", DESCENDING).limit(3),
            }
        ).to_stages()

        assert stages == [
            {
                "$facet": {
                    "byCategory": [{"$group": {"_id": "$category"}}],
                    "top": [{"$sort": {"total": -1}}, {"$limit": 3}],
                }
            }
        ]


class TestOrderingStages:
    def test_sort_mapping(self):
        assert Pipeline().sort({"total": -1, "name": 1}).to_stages() == [
            {"$sort": {"total": -1, "name": 1}}
        ]

    def test_sort_pairs_keep_order(self):
        stages = Pipeline().sort([("total", DESCENDING), ("name", ASCENDING)]).to_stages()

        assert list(stages[0]["$sort"].items()) == [("total", -1), ("name", 1)]

    def test_sort_by_defaults_to_ascending(self):
        assert Pipeline().sort_by("created_at").to_stages() == [
            {"$sort": {"created_at": 1}}
        ]

    def test_sort_by_descending(self):
        assert Pipeline().sort_by("created_at", -1).to_stages() == [
            {"$sort": {"created_at": -1}}
        ]

    def test_sample(self):
        assert Pipeline().sample(5).to_stages() == [{"$sample": {"size": 5}}]


class TestArrayAndJoinStages:
    def test_unwind(self):
        assert Pipeline().unwind("$items").to_stages() == [{"$unwind": "$items"}]

    def test_unwind_with_options(self):
        stages = Pipeline().unwind_with_options("$items", True, "itemIndex").to_stages()

        assert stages == [
            {
                "$unwind": {
                    "path": "$items",
                    "preserveNullAndEmptyArrays": True,
                    "includeArrayIndex": "itemIndex",
                }
            }
        ]

    def test_unwind_with_default_options_only_has_path(self):
        assert Pipeline().unwind_with_options("$items").to_stages() == [
            {"$unwind": {"path": "$items"}}
        ]

    def test_lookup(self):
        stages = Pipeline().lookup("orders", "customer_id", "_id", "customerOrders").to_stages()

        assert stages == [
            {
                "$lookup": {
                    "from": "orders",
                    "localField": "customer_id",
                    "foreignField": "_id",
                    "as": "customerOrders",
                }
            }
        ]

    def test_lookup_with_pipeline_and_let(self):
        sub = Pipeline().match_raw({"$expr": {"$eq": ["$user_id", "$$uid"]}})

        stages = Pipeline().lookup_with_pipeline(
            "orders", sub, "orders", let={"uid": "$_id"}
        ).to_stages()

        assert stages == [
            {
                "$lookup": {
                    "from": "orders",
                    "pipeline": [{"$match": {"$expr": {"$eq": ["$user_id", "$$uid"]}}}],
                    "as": "orders",
                    "let": {"uid": "$_id"},
                }
            }
        ]

    def test_lookup_with_pipeline_omits_missing_let(self):
        stages = Pipeline().lookup_with_pipeline("orders", [], "orders").to_stages()

        assert "let" not in stages[0]["$lookup"]


class TestOutputStages:
    def test_out(self):
        assert Pipeline().out("archive").to_stages() == [{"$out": "archive"}]

    def test_merge_minimal(self):
        assert Pipeline().merge("summary").to_stages() == [{"$merge": {"into": "summary"}}]

    def test_merge_with_options(self):
        stages = Pipeline().merge(
            "summary", on=["_id"], when_matched="replace", when_not_matched="insert"
        ).to_stages()

        assert stages == [
            {
                "$merge": {
                    "into": "summary",
                    "on": ["_id"],
                    "whenMatched": "replace",
                    "whenNotMatched": "insert",
                }
            }
        ]

    def test_raw_passthrough(self):
        stage = {"$geoNear": {"near": [0, 0], "distanceField": "dist"}}

        assert Pipeline().raw(stage).limit(1).to_stages() == [stage, {"$limit": 1}]


class TestToStages:
    """Test compiled output ownership."""

    def test_returns_fresh_structures(self):
        p = Pipeline().project({"a": 1}).limit(2)

        first = p.to_stages()
        first[0]["$project"]["b"] = 1
        first.append({"$skip": 1})

        assert p.to_stages() == [{"$project": {"a": 1}}, {"$limit": 2}]

    def test_caller_mutation_after_append_does_not_leak(self):
        projection = {"a": 1}
        p = Pipeline().project(projection)

        stages = p.to_stages()
        stages[0]["$project"]["a"] = 0

        assert projection == {"a": 1}

    def test_repr_lists_operators(self):
        assert repr(Pipeline().skip(1).raw({"$x": 1})) == "Pipeline([$skip, <raw>])"
