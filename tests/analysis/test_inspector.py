"""
Tests for mongospec.analysis.inspector.

Covers:
- collect_operators() over queries, updates and stage lists
- has_negation() at any nesting level
- Classification sets line up with what the compilers emit
"""

from mongospec.analysis import (
    LOGICAL_OPERATORS,
    NEGATION_OPERATORS,
    QUERY_OPERATORS,
    STAGE_OPERATORS,
    UPDATE_OPERATORS,
    collect_operators,
    has_negation,
)
from mongospec.filters import and_, elem_match, eq, gt, in_, ne, not_, not_in, or_, regex
from mongospec.pipeline import Pipeline, sum_
from mongospec.updates import combine, inc, rename, set_


class TestCollectOperators:
    def test_plain_equality_has_no_operators(self):
        assert collect_operators(eq("a", 1).to_query()) == set()

    def test_nested_query(self):
        query = and_(eq("a", 1), or_(gt("b", 2), regex("c", "^x", "i"))).to_query()

        assert collect_operators(query) == {"$and", "$or", "$gt", "$regex", "$options"}

    def test_update_document(self):
        update = combine(set_("a", 1), inc("b", 1)).to_update()

        assert collect_operators(update) == {"$set", "$inc"}

    def test_stage_list(self):
        stages = (
            Pipeline()
            .match(in_("s", [1, 2]))
            .group_by("$s", {"n": sum_(1)})
            .limit(3)
            .to_stages()
        )

        assert collect_operators(stages) == {"$match", "$in", "$group", "$sum", "$limit"}

    def test_field_path_values_are_not_operators(self):
        """'$category' as a value is a field path, not an operator key."""
        assert collect_operators({"$group": {"_id": "$category"}}) == {"$group"}


class TestHasNegation:
    def test_positive_filter(self):
        assert not has_negation(in_("field", [1, 2, 3]).to_query())

    def test_ne(self):
        assert has_negation(ne("field", 5).to_query())

    def test_not_in(self):
        assert has_negation(not_in("field", [1]).to_query())

    def test_not_compiles_to_nor(self):
        assert has_negation(not_(eq("field", 5)).to_query())

    def test_deeply_nested(self):
        query = and_(eq("a", 1), elem_match("items", ne("qty", 0))).to_query()

        assert has_negation(query)

    def test_raw_not(self):
        assert has_negation({"value": {"$not": {"$lt": 0}}})

    def test_inside_stage_list(self):
        stages = Pipeline().match(not_(eq("a", 1))).to_stages()

        assert has_negation(stages)

    def test_agrees_with_collected_operators(self):
        documents = [
            and_(eq("a", 1), in_("b", [2])).to_query(),
            or_(ne("a", 1), gt("b", 2)).to_query(),
            combine(set_("a", 1), rename("b", "c")).to_update(),
        ]

        for document in documents:
            assert has_negation(document) == bool(
                collect_operators(document) & NEGATION_OPERATORS
            )


class TestClassification:
    def test_compiled_filters_use_known_operators(self):
        query = and_(
            ne("a", 1), in_("b", [1]), elem_match("c", gt("d", 1)), not_(eq("e", 1))
        ).to_query()

        assert collect_operators(query) <= QUERY_OPERATORS | LOGICAL_OPERATORS

    def test_compiled_updates_use_known_operators(self):
        update = combine(set_("a", 1), rename("b", "c")).to_update()

        assert collect_operators(update) <= UPDATE_OPERATORS

    def test_negation_set(self):
        assert NEGATION_OPERATORS == {"$ne", "$nin", "$not", "$nor"}

    def test_stage_set_covers_builder(self):
        stages = (
            Pipeline()
            .project({"a": 1})
            .unwind("$a")
            .sample(1)
            .count("n")
            .out("x")
            .to_stages()
        )

        assert {next(iter(s)) for s in stages} <= STAGE_OPERATORS
