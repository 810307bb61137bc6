"""Tests for generation planning."""

import logging

import pytest

from conftest import make_column, make_table, pk
from fraiseql_synth import SeedBuilder
from fraiseql_synth.exceptions import (
    ArrayRefinementError,
    CyclicNotNullError,
    GeneratorConfigError,
    MissingForeignTableError,
    MissingIdentifyingColumnError,
    NotNullRefinementError,
    SharedCompositeKeyError,
    UnsupportedColumnTypeError,
    WithRelationError,
)
from fraiseql_synth.generators import IntGenerator, StringGenerator
from fraiseql_synth.generators.wrappers import (
    CompositeUniqueKeyGenerator,
    DefaultGenerator,
    HollowGenerator,
)
from fraiseql_synth.models import Relation, WeightedCount
from fraiseql_synth.planner import describe_plan, filter_cyclic_tables


def kinds(plan) -> dict[str, str]:
    return {c.column_name: c.generator.kind for c in plan.columns}


def test_default_generators(users_table):
    """Columns get generators from their types and names."""
    (plan,) = SeedBuilder([users_table], []).plan()

    assert kinds(plan) == {
        "id": "int_primary_key",
        "name": "first_name",
        "email": "email",
        "score": "int",
        "created_at": "timestamp",
    }


def test_unique_column_gets_unique_variant():
    """Unique columns swap to the unique version of their generator."""
    table = make_table("t", [pk(), make_column("code", "integer", is_unique=True)])
    (plan,) = SeedBuilder([table], []).plan()
    assert plan.get_column("code").generator.kind == "unique_int"


def test_generators_resolved_to_version():
    """Older API versions get the older implementations."""
    table = make_table("t", [pk(), make_column("note", "text")])
    (old,) = SeedBuilder([table], []).options(version=1).plan()
    (new,) = SeedBuilder([table], []).plan()

    assert old.get_column("note").generator.version == 1
    assert new.get_column("note").generator.version == 2


def test_refined_column():
    """Refinements replace the default generator and are marked refined."""
    table = make_table("t", [pk(), make_column("score", "integer")])
    builder = SeedBuilder([table], []).refine(
        "t", columns={"score": IntGenerator(min_value=1, max_value=5)}
    )
    column_plan = builder.plan()[0].get_column("score")

    assert column_plan.was_refined is True
    assert column_plan.generator.params == {"min_value": 1, "max_value": 5}


def test_refine_false_omits_column():
    """A column refined to False is left to the database."""
    table = make_table("t", [pk(), make_column("note", "text")])
    (plan,) = SeedBuilder([table], []).refine("t", columns={"note": False}).plan()
    assert plan.get_column("note") is None


def test_refine_false_on_not_null_column():
    """Not-null columns without a default can't be left out."""
    table = make_table("t", [pk(), make_column("note", "text", not_null=True)])
    builder = SeedBuilder([table], []).refine("t", columns={"note": False})

    with pytest.raises(NotNullRefinementError, match="not null constraint"):
        builder.plan()


def test_refine_false_on_not_null_column_with_default():
    """Not-null columns with a default can be left out."""
    table = make_table("t", [pk(), make_column("note", "text", not_null=True, has_default=True)])
    (plan,) = SeedBuilder([table], []).refine("t", columns={"note": False}).plan()
    assert plan.get_column("note") is None


def test_unsupported_column_type():
    """Columns no generator handles must be refined."""
    table = make_table("t", [pk(), make_column("search", "tsvector")])
    with pytest.raises(UnsupportedColumnTypeError):
        SeedBuilder([table], []).plan()


def test_multi_dimensional_array_refinement():
    """Refining a multi-dimensional array column is rejected."""
    table = make_table("t", [pk(), make_column("grid", "integer[][]")])
    builder = SeedBuilder([table], []).refine("t", columns={"grid": IntGenerator()})
    with pytest.raises(ArrayRefinementError):
        builder.plan()


def test_array_column_default_generator():
    """Array columns get nested array generators."""
    table = make_table("t", [pk(), make_column("tags", "text[]"), make_column("grid", "integer[][]")])
    (plan,) = SeedBuilder([table], []).plan()

    tags = plan.get_column("tags").generator
    grid = plan.get_column("grid").generator
    assert tags.kind == "array"
    assert tags.params["base_column_gen"].kind == "string"
    assert grid.params["base_column_gen"].kind == "array"


class TestForeignKeys:
    def test_reachable_foreign_key_is_hollow(self, parent_child_schema):
        """Foreign keys to seeded tables are filled by the engine."""
        tables, relations = parent_child_schema
        plans = SeedBuilder(tables, relations).plan()

        assert [p.table_name for p in plans] == ["a", "b"]
        assert isinstance(plans[1].get_column("a_id").generator, HollowGenerator)

    def test_missing_not_null_parent(self):
        """A not-null key to a table that isn't seeded is an error."""
        child = make_table("b", [pk(), make_column("a_id", "integer", not_null=True)])
        relations = [Relation(table="b", columns=["a_id"], ref_table="a", ref_columns=["id"])]

        with pytest.raises(MissingForeignTableError):
            SeedBuilder([child], relations).plan()

    def test_missing_nullable_parent(self, caplog):
        """A nullable key to a table that isn't seeded is filled with nulls."""
        child = make_table("b", [pk(), make_column("a_id", "integer")])
        relations = [Relation(table="b", columns=["a_id"], ref_table="a", ref_columns=["id"])]

        with caplog.at_level(logging.WARNING):
            (plan,) = SeedBuilder([child], relations).plan()

        column_plan = plan.get_column("a_id")
        assert isinstance(column_plan.generator, DefaultGenerator)
        assert column_plan.was_defined_before is True
        assert "filled with Null values" in caplog.text

    def test_cyclic_nullable_key_deferred(self, cyclic_schema, caplog):
        """Nullable cyclic keys are null in the first pass, without a warning."""
        tables, relations = cyclic_schema
        with caplog.at_level(logging.WARNING):
            plans = SeedBuilder(tables, relations).plan()

        a_plan = next(p for p in plans if p.table_name == "a")
        b_id = a_plan.get_column("b_id")
        assert b_id.is_cyclic and b_id.was_defined_before
        assert caplog.text == ""

    def test_cyclic_not_null(self):
        """Cycles closed by not-null keys are rejected."""
        a = make_table("a", [pk(), make_column("b_id", "integer", not_null=True)])
        b = make_table("b", [pk(), make_column("a_id", "integer", not_null=True)])
        relations = [
            Relation(table="a", columns=["b_id"], ref_table="b", ref_columns=["id"]),
            Relation(table="b", columns=["a_id"], ref_table="a", ref_columns=["id"]),
        ]
        with pytest.raises(CyclicNotNullError):
            SeedBuilder([a, b], relations).plan()


class TestWithRefinement:
    def test_child_count_from_ratio(self, parent_child_schema):
        """The child's count is the parent's count times the ratio."""
        tables, relations = parent_child_schema
        plans = SeedBuilder(tables, relations).refine("a", count=3, with_={"b": 2}).plan()

        b_plan = next(p for p in plans if p.table_name == "b")
        assert b_plan.with_count == 6
        assert b_plan.with_from_table["a"].repeated_values_count == 2

    def test_weighted_ratio(self, parent_child_schema):
        """Weighted ratios draw a count per parent row, reproducibly."""
        tables, relations = parent_child_schema
        with_ = {"b": [WeightedCount(weight=0.5, count=1), WeightedCount(weight=0.5, count=[3, 4])]}

        def b_plan():
            plans = SeedBuilder(tables, relations).refine("a", count=10, with_=with_).plan()
            return next(p for p in plans if p.table_name == "b")

        first, second = b_plan(), b_plan()
        assert 10 <= first.with_count <= 40
        assert first.with_count == second.with_count
        assert first.with_from_table["a"].weighted_count_seed is not None

    def test_ratio_to_non_dependant(self, parent_child_schema):
        """A ratio towards a table that doesn't reference this one is rejected."""
        tables, relations = parent_child_schema
        builder = SeedBuilder(tables, relations).refine("b", with_={"a": 2})
        with pytest.raises(WithRelationError):
            builder.plan()


class TestCompositeKeys:
    def test_columns_share_a_composite_generator(self):
        """Columns of a multi-column unique constraint share one generator."""
        table = make_table(
            "enrollments",
            [
                make_column("student", "integer", not_null=True),
                make_column("course", "integer", not_null=True),
            ],
            unique_constraints=[["student", "course"]],
        )
        (plan,) = SeedBuilder([table], []).plan()

        student = plan.get_column("student").generator
        assert isinstance(student, CompositeUniqueKeyGenerator)
        assert plan.get_column("course").generator is student
        assert student.unique_key == "student_course"

    def test_unique_column_leaves_the_constraint(self):
        """A column unique on its own makes the constraint trivially unique."""
        table = make_table(
            "t",
            [make_column("code", "integer", is_unique=True), make_column("other", "integer")],
            unique_constraints=[["code", "other"]],
        )
        (plan,) = SeedBuilder([table], []).plan()
        assert plan.get_column("code").generator.kind == "unique_int"

    def test_column_in_two_constraints(self):
        """A column in two composite keys is rejected."""
        table = make_table(
            "t",
            [
                make_column("a", "integer"),
                make_column("b", "integer"),
                make_column("c", "integer"),
            ],
            unique_constraints=[["a", "b"], ["a", "c"]],
        )
        with pytest.raises(SharedCompositeKeyError):
            SeedBuilder([table], []).plan()

    def test_generator_without_unique_version(self):
        """Key columns need generators with a unique variant."""
        table = make_table(
            "t",
            [make_column("flag", "boolean"), make_column("other", "integer")],
            unique_constraints=[["flag", "other"]],
        )
        with pytest.raises(GeneratorConfigError, match="composite unique key"):
            SeedBuilder([table], []).plan()

    def test_explicitly_non_unique_generator(self):
        """Refining a key column with is_unique=False is rejected."""
        table = make_table(
            "t",
            [make_column("a", "text"), make_column("b", "integer")],
            unique_constraints=[["a", "b"]],
        )
        builder = SeedBuilder([table], []).refine("t", columns={"a": StringGenerator(is_unique=False)})
        with pytest.raises(GeneratorConfigError):
            builder.plan()


class TestFilterCyclicTables:
    def test_keeps_deferred_columns_and_key(self, cyclic_schema):
        """Second-pass plans hold the deferred keys plus the identifying column."""
        tables, relations = cyclic_schema
        plans = SeedBuilder(tables, relations).plan()

        filtered, identifying = filter_cyclic_tables(plans)

        assert [p.table_name for p in filtered] == ["a"]
        assert identifying == {"a": "id"}
        assert [c.column_name for c in filtered[0].columns] == ["id", "b_id"]
        assert not any(c.was_defined_before for c in filtered[0].columns)

    def test_missing_identifying_column(self):
        """Tables on a cycle need a key to update rows by."""
        a = make_table("a", [make_column("id", "integer"), make_column("b_id", "integer")])
        b = make_table("b", [pk(), make_column("a_id", "integer", not_null=True)])
        relations = [
            Relation(table="a", columns=["b_id"], ref_table="b", ref_columns=["id"]),
            Relation(table="b", columns=["a_id"], ref_table="a", ref_columns=["id"]),
        ]
        plans = SeedBuilder([a, b], relations).plan()

        with pytest.raises(MissingIdentifyingColumnError):
            filter_cyclic_tables(plans)


def test_describe_plan(users_table):
    """Plans summarize to plain data."""
    description = describe_plan(SeedBuilder([users_table], []).refine("users", count=4).plan())
    assert description[0]["table"] == "users"
    assert description[0]["count"] == 4
    assert description[0]["columns"]["id"] == "int_primary_key"


def test_single_column_constraint_identifies_cyclic_rows():
    """A not-null column with its own unique constraint keys the cyclic update."""
    a = make_table(
        "a",
        [make_column("code", "text", not_null=True), make_column("b_id", "integer")],
        unique_constraints=[["code"]],
    )
    b = make_table("b", [pk(), make_column("a_code", "text", not_null=True)])
    relations = [
        Relation(table="a", columns=["b_id"], ref_table="b", ref_columns=["id"]),
        Relation(table="b", columns=["a_code"], ref_table="a", ref_columns=["code"]),
    ]
    plans = SeedBuilder([a, b], relations).plan()

    a_plan = next(p for p in plans if p.table_name == "a")
    assert a_plan.get_column("code").is_unique is True

    _, identifying = filter_cyclic_tables(plans)
    assert identifying == {"a": "code"}
