"""
Generation planning: pick a generator for every column of every table.

The plan is a pure transformation of the schema, the relations and the user
refinements. The row-production engine consumes it.
"""

import copy
import dataclasses
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from fraiseql_synth.exceptions import (
    ArrayRefinementError,
    GeneratorConfigError,
    InvalidVersionError,
    MissingForeignTableError,
    MissingIdentifyingColumnError,
    NotNullRefinementError,
    SharedCompositeKeyError,
    UnsupportedColumnTypeError,
    WithRelationError,
)
from fraiseql_synth.generators.base import AbstractGenerator
from fraiseql_synth.generators.registry import LATEST_VERSION, resolve_generator
from fraiseql_synth.generators.wrappers import (
    CompositeUniqueKeyGenerator,
    DefaultGenerator,
    HashFromStringGenerator,
    HollowGenerator,
    ValuesFromArrayGenerator,
    get_weighted_with_count,
)
from fraiseql_synth.models import Column, Relation, Table, TableRefinement, WeightedCount
from fraiseql_synth.relations import get_info_from_relations, sort_tables

logger = logging.getLogger(__name__)

DEFAULT_COUNT = 10

ColumnGeneratorSelector = Callable[[Table, Column], AbstractGenerator | None]


@dataclass
class GenerationContext:
    """
    Per-run settings threaded through planning and row production.

    Attributes:
        api_version: Generator API version every generator is resolved to
        seed_hasher: String hash generator for that version
    """

    api_version: int
    seed_hasher: AbstractGenerator

    @classmethod
    def create(cls, version: int | None = None) -> "GenerationContext":
        """
        Build a context for ``version`` (latest when omitted).

        Raises:
            InvalidVersionError: If version is outside ``[1, LATEST_VERSION]``
        """
        if version is None:
            version = LATEST_VERSION
        if isinstance(version, bool) or not isinstance(version, int):
            raise InvalidVersionError(version, LATEST_VERSION)
        if version < 1 or version > LATEST_VERSION:
            raise InvalidVersionError(version, LATEST_VERSION)

        seed_hasher = resolve_generator(HashFromStringGenerator(), version)
        seed_hasher.init()
        return cls(api_version=version, seed_hasher=seed_hasher)

    def hash(self, text: str) -> int:
        return self.seed_hasher.generate(text=text)

    def resolve(self, generator: AbstractGenerator) -> AbstractGenerator:
        return resolve_generator(generator, self.api_version)


@dataclass
class ColumnPlan:
    """
    Generator choice for one column.

    Attributes:
        column_name: Column name
        generator: Generator producing the column values
        is_unique: Column is unique on its own
        not_null: Column rejects NULL
        primary: Column is part of the primary key
        generated_identity_type: ``always`` or ``byDefault`` for identity columns
        identity: Column is an auto-increment column
        is_cyclic: Column is a foreign key on a cyclic relation
        was_defined_before: Generator is final in the first pass (nulls for
            cyclic or unreachable foreign keys)
        was_refined: Generator came from the user's refinements
        column_type: Wire type of the column
    """

    column_name: str
    generator: AbstractGenerator
    is_unique: bool = False
    not_null: bool = False
    primary: bool = False
    generated_identity_type: str | None = None
    identity: bool = False
    is_cyclic: bool = False
    was_defined_before: bool = False
    was_refined: bool = False
    column_type: str | None = None


@dataclass
class WithFromTable:
    """How a parent's ``with`` refinement shapes a child's foreign key values."""

    repeated_values_count: int | list[WeightedCount]
    weighted_count_seed: int | None = None


@dataclass
class TablePlan:
    """
    Generation plan for one table.

    Attributes:
        table_name: Table name
        columns: Column plans, in column order
        count: Row count from refinements, if any
        with_count: Row count forced by a parent's ``with`` refinement
        with_from_table: Parent table -> its ``with`` ratio for this table
    """

    table_name: str
    columns: list[ColumnPlan] = field(default_factory=list)
    count: int | None = None
    with_count: int | None = None
    with_from_table: dict[str, WithFromTable] = field(default_factory=dict)

    def get_column(self, name: str) -> ColumnPlan | None:
        for column_plan in self.columns:
            if column_plan.column_name == name:
                return column_plan
        return None

    @property
    def has_cyclic_columns(self) -> bool:
        return any(column_plan.is_cyclic for column_plan in self.columns)


def _apply_with_refinement(
    plan: TablePlan,
    refinement: TableRefinement,
    plans_by_name: dict[str, TablePlan],
    info: dict,
    context: GenerationContext,
    count: int | None,
    seed: int,
) -> None:
    if refinement.count is not None:
        plan.count = refinement.count
    else:
        plan.count = DEFAULT_COUNT if count is None else count
    table_info = info.get(plan.table_name)

    for child_name, repeated in refinement.with_.items():
        if table_info is None or child_name not in table_info.dependant_tables:
            raise WithRelationError(
                plan.table_name,
                child_name,
                has_self_relation=table_info is not None and table_info.self_relation,
            )

        child_plan = plans_by_name.get(child_name)
        if child_plan is None:
            continue

        parent_count = plan.with_count or plan.count
        weighted_count_seed = None
        if isinstance(repeated, int):
            child_count = parent_count * repeated
        else:
            weighted_count_seed = seed + context.hash(f"{plan.table_name}.{child_name}")
            child_count = get_weighted_with_count(repeated, weighted_count_seed, parent_count)

        # Several parents may shape the same child; the largest count wins.
        if child_plan.with_count is None or child_count > child_plan.with_count:
            child_plan.with_count = child_count

        child_plan.with_from_table[plan.table_name] = WithFromTable(
            repeated_values_count=repeated,
            weighted_count_seed=weighted_count_seed,
        )


def _pick_column_generator(
    table: Table,
    column: Column,
    column_plan: ColumnPlan,
    refinement: TableRefinement | None,
    foreign_keys: dict[str, Relation],
    relations: list[Relation],
    table_names: set[str],
    select_generator: ColumnGeneratorSelector,
) -> AbstractGenerator | None:
    if refinement is not None and column.name in refinement.columns:
        generator = refinement.columns[column.name]
        if (column.type_params.dimensions or 0) > 1:
            raise ArrayRefinementError(table.name, column.name)
        generator.column_data_type = column.data_type
        column_plan.was_refined = True
        return generator

    relation = foreign_keys.get(column.name)
    if relation is not None:
        is_cyclic = any(
            rel.table == table.name and rel.is_cyclic and column.name in rel.columns
            for rel in relations
        )
        column_plan.is_cyclic = is_cyclic
        reachable = relation.ref_table in table_names

        if not reachable and column.not_null:
            raise MissingForeignTableError(table.name, column.name, relation.ref_table)

        if (is_cyclic or not reachable) and not column.not_null:
            if not reachable:
                logger.warning(
                    f"Column '{column.name}' in '{table.name}' table will be filled with Null "
                    f"values because you specified neither a table for foreign key on column "
                    f"'{column.name}' nor a function for '{column.name}' column in refinements."
                )
            column_plan.was_defined_before = True
            return DefaultGenerator(default_value=None)
        return HollowGenerator()

    return select_generator(table, column)


def _composite_key_for(
    table: Table,
    column: Column,
    generator: AbstractGenerator,
    unique_constraints: list[list[str]],
) -> tuple[list[str] | None, list[list[str]]]:
    """Return the composite key ``column`` belongs to and the updated constraints."""
    keys = [names for names in unique_constraints if column.name in names]
    if any(len(names) == 1 for names in keys):
        generator.is_unique = True

    # A unique column already makes every constraint it is part of unique.
    if generator.is_unique and keys:
        remaining = []
        for names in unique_constraints:
            if column.name in names:
                names = [name for name in names if name != column.name]
                if not names:
                    continue
            remaining.append(names)
        unique_constraints = remaining
        keys = [names for names in unique_constraints if column.name in names]

    if len(keys) > 1:
        raise SharedCompositeKeyError(table.name, column.name)
    return (keys[0] if keys else None), unique_constraints


def build_table_plans(
    tables: list[Table],
    relations: list[Relation],
    context: GenerationContext,
    *,
    count: int | None = None,
    seed: int = 0,
    refinements: dict[str, TableRefinement] | None = None,
    select_generator: ColumnGeneratorSelector,
) -> list[TablePlan]:
    """
    Build generation plans for ``tables``, returned in fill order.

    For each column the generator comes from, in order: a ``false``
    refinement (the column is left out), an explicit refinement, the foreign
    key rules, then ``select_generator``. Every chosen generator is then
    array-wrapped, folded into a composite unique key, swapped for its unique
    variant and resolved to ``context.api_version``.

    Args:
        tables: Tables to seed
        relations: Relations with ``ref_table_rels`` and ``is_cyclic`` set
        context: Generation context
        count: Default rows per table
        seed: User seed
        refinements: Table name -> refinement
        select_generator: Dialect dispatcher ``(table, column) -> generator``

    Returns:
        Table plans in fill order

    Raises:
        ConfigurationError: For refinements that can't be satisfied
        SchemaInfeasibleError: For schemas that can't be seeded
    """
    refinements = refinements or {}
    info = get_info_from_relations(relations)
    tables = sort_tables(tables, relations)
    table_names = {table.name for table in tables}

    plans = [TablePlan(table_name=table.name) for table in tables]
    plans_by_name = {plan.table_name: plan for plan in plans}

    for table, plan in zip(tables, plans):
        foreign_keys: dict[str, Relation] = {}
        for relation in relations:
            if relation.table == table.name:
                for column_name in relation.columns:
                    foreign_keys[column_name] = relation

        refinement = refinements.get(table.name)
        if refinement is not None:
            if refinement.count is not None:
                plan.count = refinement.count
            if refinement.with_:
                _apply_with_refinement(
                    plan, refinement, plans_by_name, info, context, count, seed
                )

        unique_constraints = [list(names) for names in table.unique_constraints]
        composite_generators: dict[str, CompositeUniqueKeyGenerator] = {}

        for column in table.columns:
            if refinement is not None and refinement.columns.get(column.name) is False:
                if column.not_null and not column.has_default:
                    raise NotNullRefinementError(table.name, column.name)
                # Left out of the rows so the database fills in null or its default.
                continue

            column_plan = ColumnPlan(
                column_name=column.name,
                generator=HollowGenerator(),
                is_unique=column.is_unique,
                not_null=column.not_null,
                primary=column.primary or column.name in table.primary_keys,
                generated_identity_type=column.generated_identity_type,
                identity=column.identity,
                column_type=column.column_type,
            )

            generator = _pick_column_generator(
                table,
                column,
                column_plan,
                refinement,
                foreign_keys,
                relations,
                table_names,
                select_generator,
            )
            if generator is None:
                raise UnsupportedColumnTypeError(table.name, column.name, column.column_type)

            generator.type_params = copy.copy(column.type_params)
            if generator.string_length is None:
                generator.string_length = column.type_params.length

            array_generator = generator.replace_if_array()
            if array_generator is not None:
                generator = array_generator

            generator.is_unique = column.is_unique
            composite_key, unique_constraints = _composite_key_for(
                table, column, generator, unique_constraints
            )
            if generator.is_unique:
                column_plan.is_unique = True
            if composite_key is not None:
                if generator.params.get("is_unique") is False:
                    raise GeneratorConfigError(
                        f"To handle the composite unique key on columns: {composite_key}, "
                        f"column: {column.name} should either be assigned a generator with "
                        f"is_unique set to true, or have is_unique omitted."
                    )
                generator.params["is_unique"] = True

            unique_generator = generator.replace_if_unique()
            if unique_generator is not None:
                generator = unique_generator

            if (
                composite_key is not None
                and not generator.is_generator_unique
                and not isinstance(generator, ValuesFromArrayGenerator)
            ):
                raise GeneratorConfigError(
                    f"To handle the composite unique key on columns: {composite_key}, "
                    f"column: {column.name} should be assigned a generator with its own "
                    f"unique version."
                )

            generator = context.resolve(generator)
            generator.not_null = column.not_null
            generator.data_type = column.data_type

            if composite_key is not None:
                key = "_".join(composite_key)
                if key not in composite_generators:
                    composite = context.resolve(CompositeUniqueKeyGenerator())
                    composite.unique_key = key
                    composite_generators[key] = composite
                composite_generators[key].add_generator(column.name, generator)
                generator = composite_generators[key]

            column_plan.generator = generator
            plan.columns.append(column_plan)

    return plans


def filter_cyclic_tables(plans: list[TablePlan]) -> tuple[list[TablePlan], dict[str, str]]:
    """
    Reduce plans to what the second (update) pass needs.

    Keeps the tables with deferred cyclic foreign keys, and in each only those
    columns plus one identifying column (primary, or unique and not-null) to
    key the updates on. Deferred columns are marked as not yet defined so the
    engine resolves them from the retained parent rows.

    Returns:
        Tuple of (reduced plans, table name -> identifying column name)

    Raises:
        MissingIdentifyingColumnError: If a table has no identifying column
    """
    filtered: list[TablePlan] = []
    identifying_columns: dict[str, str] = {}

    for plan in plans:
        if not any(c.is_cyclic and c.was_defined_before for c in plan.columns):
            continue

        key_column = next(
            (
                c.column_name
                for c in plan.columns
                if c.primary or (c.is_unique and c.not_null)
            ),
            None,
        )
        if key_column is None:
            raise MissingIdentifyingColumnError(plan.table_name)
        identifying_columns[plan.table_name] = key_column

        columns = [
            dataclasses.replace(c, was_defined_before=False)
            for c in plan.columns
            if (c.is_cyclic and c.was_defined_before) or c.column_name == key_column
        ]
        filtered.append(dataclasses.replace(plan, columns=columns))

    return filtered, identifying_columns


def describe_plan(plans: list[TablePlan]) -> list[dict[str, Any]]:
    """Plain-data summary of plans, for display."""
    return [
        {
            "table": plan.table_name,
            "count": plan.with_count or plan.count,
            "columns": {c.column_name: c.generator.kind for c in plan.columns},
        }
        for plan in plans
    ]
