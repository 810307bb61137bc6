"""
Row production: turn table plans into rows and write them in batches.

Tables are processed in plan order. A table's foreign keys are filled from
the rows retained for the tables it references, so those are kept in memory
until their last dependant has been generated.
"""

import logging
from dataclasses import dataclass
from typing import Any, Protocol

from fraiseql_synth.dialects import DialectKind
from fraiseql_synth.dialects.postgres import is_int_like
from fraiseql_synth.exceptions import ForeignKeyResolutionError, StoreNotConfiguredError
from fraiseql_synth.generators.base import AbstractGenerator
from fraiseql_synth.generators.wrappers import (
    SelfRelationsValuesFromArrayGenerator,
    ValuesFromArrayGenerator,
)
from fraiseql_synth.models import Relation, TableRows
from fraiseql_synth.planner import (
    DEFAULT_COUNT,
    ColumnPlan,
    GenerationContext,
    TablePlan,
    filter_cyclic_tables,
)
from fraiseql_synth.relations import get_info_from_relations

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 10000


class Store(Protocol):
    """Write interface the engine flushes batches into."""

    def insert(self, table: str, rows: list[dict[str, Any]], override: bool = False) -> int: ...

    def update(self, table: str, rows: list[dict[str, Any]], key_column: str) -> int: ...

    def advance_sequence(self, table: str, column: str, value: int) -> None: ...

    def reset(self, tables: list[str]) -> None: ...


@dataclass
class ColumnGenerator:
    """A column plan bound to the generator and seed used for this table run."""

    column_plan: ColumnPlan
    generator: AbstractGenerator
    seed: int


class RowProductionEngine:
    """
    Generate rows for table plans and optionally write them to a store.

    Args:
        relations: All relations, with ``is_cyclic`` set
        context: Generation context (API version and seed hasher)
        dialect: Target dialect; sets the parameter limit and sequence handling
        store: Where rows are written; rows stay in memory when omitted
        batch_size: Requested rows per insert, capped by the dialect limit
    """

    def __init__(
        self,
        relations: list[Relation],
        context: GenerationContext,
        dialect: DialectKind = DialectKind.POSTGRESQL,
        store: Store | None = None,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        self.relations = relations
        self.context = context
        self.dialect = DialectKind(dialect)
        self.store = store
        self.batch_size = batch_size
        self.inserted: dict[str, int] = {}

    def seed_tables(
        self,
        plans: list[TablePlan],
        *,
        count: int | None = None,
        seed: int = 0,
        preserve_data: bool | None = None,
    ) -> list[TableRows]:
        """
        Run the full two-pass generation.

        The first pass generates every table with cyclic foreign keys left
        null. The second pass regenerates only those columns, resolved from
        the retained rows, and updates the rows keyed by their identifying
        column.

        Returns:
            Retained rows per table
        """
        preserve_cyclic = any(relation.is_cyclic for relation in self.relations)
        tables_values = self.generate_tables_values(
            plans,
            count=count,
            seed=seed,
            preserve_data=preserve_data,
            preserve_cyclic_tables_data=preserve_cyclic,
        )

        cyclic_plans, identifying_columns = filter_cyclic_tables(plans)
        if cyclic_plans:
            logger.info(f"Filling cyclic foreign keys of {len(cyclic_plans)} table(s)")
            tables_values = self.generate_tables_values(
                cyclic_plans,
                count=count,
                seed=seed,
                update_data=True,
                tables_values=tables_values,
                identifying_columns=identifying_columns,
            )
        return tables_values

    def generate_tables_values(
        self,
        plans: list[TablePlan],
        *,
        count: int | None = None,
        seed: int = 0,
        preserve_data: bool | None = None,
        preserve_cyclic_tables_data: bool = False,
        insert_data: bool | None = None,
        update_data: bool = False,
        tables_values: list[TableRows] | None = None,
        identifying_columns: dict[str, str] | None = None,
    ) -> list[TableRows]:
        """
        Generate rows for every plan, in order.

        Args:
            plans: Table plans in fill order
            count: Default rows per table (10 when omitted)
            seed: User seed
            preserve_data: Keep every table's rows; by default only tables
                still referenced by a later table are kept
            preserve_cyclic_tables_data: Also keep tables with cyclic columns
            insert_data: Insert rows into the store (default: when a store is set)
            update_data: Update existing rows instead of inserting (second pass)
            tables_values: Rows retained by an earlier run
            identifying_columns: Table -> column keying the updates

        Returns:
            Retained rows per table

        Raises:
            StoreNotConfiguredError: If inserting without a store
            ForeignKeyResolutionError: If a referenced table has no retained rows
        """
        if insert_data is None:
            insert_data = self.store is not None
        if update_data:
            insert_data = False
        if insert_data and self.store is None:
            raise StoreNotConfiguredError()

        identifying_columns = identifying_columns or {}
        tables_values = list(tables_values or [])
        info = get_info_from_relations(self.relations)
        pinned: set[str] = set()
        default_count = DEFAULT_COUNT if count is None else count

        for plan in plans:
            table_count = plan.count if plan.count is not None else default_count
            table_relations = [r for r in self.relations if r.table == plan.table_name]

            column_generators = {
                column_plan.column_name: ColumnGenerator(
                    column_plan=column_plan,
                    generator=column_plan.generator,
                    seed=self._column_seed(plan, column_plan, table_relations, seed),
                )
                for column_plan in plan.columns
            }

            for relation in table_relations:
                if relation.ref_table in plan.with_from_table and plan.with_count is not None:
                    table_count = plan.with_count
                self._resolve_relation(
                    plan, relation, column_generators, table_count, tables_values
                )

            if update_data:
                preserve = True
            else:
                table_info = info.get(plan.table_name)
                if preserve_data is None:
                    preserve = table_info is not None and table_info.in_ > 0
                else:
                    preserve = preserve_data
                if preserve_cyclic_tables_data and plan.has_cyclic_columns:
                    preserve = True
                    pinned.add(plan.table_name)

            logger.info(
                f"{'Updating' if update_data else 'Generating'} {table_count} rows "
                f"for '{plan.table_name}'"
            )
            rows = self.generate_columns_values(
                column_generators,
                table_name=plan.table_name,
                count=table_count,
                preserve_data=preserve,
                insert_data=insert_data,
                update_data=update_data,
                key_column=identifying_columns.get(plan.table_name),
            )

            if update_data:
                if self.store is None:
                    self._apply_updates(
                        tables_values, plan.table_name, rows, identifying_columns[plan.table_name]
                    )
                continue

            if preserve:
                tables_values.append(TableRows(table_name=plan.table_name, rows=rows))

            for relation in table_relations:
                info[relation.ref_table].in_ -= 1

            if not preserve:
                tables_values = [
                    table_rows
                    for table_rows in tables_values
                    if table_rows.table_name in pinned
                    or (
                        table_rows.table_name in info
                        and info[table_rows.table_name].in_ > 0
                    )
                ]

        return tables_values

    def generate_columns_values(
        self,
        column_generators: dict[str, ColumnGenerator],
        *,
        table_name: str | None = None,
        count: int = DEFAULT_COUNT,
        preserve_data: bool = True,
        insert_data: bool = False,
        update_data: bool = False,
        key_column: str | None = None,
        batch_size: int | None = None,
    ) -> list[dict[str, Any]]:
        """
        Generate ``count`` rows for one table and flush them in batches.

        Rows are produced in index order. With a store, a batch is written
        every ``batch_size`` rows and after the last row; updates are written
        one row at a time.

        Returns:
            The generated rows when ``preserve_data``, else an empty list
        """
        writing = (insert_data or update_data) and self.store is not None
        if insert_data and (self.store is None or table_name is None):
            raise StoreNotConfiguredError()

        batch_size = 1 if update_data else (batch_size or self.batch_size)
        max_batch_size = max(self.dialect.max_parameters // max(len(column_generators), 1), 1)
        batch_size = min(batch_size, max_batch_size)

        override = False
        for name, column_generator in column_generators.items():
            column_plan = column_generator.column_plan
            if column_plan.generated_identity_type == "always" or column_plan.identity:
                override = self.dialect.override_identity
            column_generator.generator.init(count, column_generator.seed)

        sequence_values: dict[str, int | None] = {}
        if insert_data and count > 0 and not self.dialect.maintains_sequences:
            for name, column_generator in column_generators.items():
                column_plan = column_generator.column_plan
                if column_plan.column_type and is_int_like(column_plan.column_type) and (
                    column_plan.primary or column_plan.generated_identity_type or column_plan.identity
                ):
                    sequence_values[name] = None

        rows: list[dict[str, Any]] = []
        batch: list[dict[str, Any]] = []
        for i in range(count):
            row = {
                name: column_generator.generator.generate(i, column_name=name)
                for name, column_generator in column_generators.items()
            }

            for name, current in sequence_values.items():
                value = row[name]
                if value is not None and (current is None or value > current):
                    sequence_values[name] = value

            if preserve_data:
                rows.append(row)

            if writing:
                batch.append(row)
                if len(batch) == batch_size or i == count - 1:
                    self._flush(table_name, batch, override, update_data, key_column)
                    batch = []

        for name, value in sequence_values.items():
            if value is not None:
                self.store.advance_sequence(table_name, name, value)

        return rows

    def _column_seed(
        self,
        plan: TablePlan,
        column_plan: ColumnPlan,
        table_relations: list[Relation],
        seed: int,
    ) -> int:
        relation = next(
            (r for r in table_relations if column_plan.column_name in r.columns), None
        )
        # Columns of one composite foreign key share a seed so their values line up.
        if relation is not None and len(relation.columns) >= 2:
            return seed + self.context.hash(f"{relation.table}.{'_'.join(relation.columns)}")
        if column_plan.generator.unique_key is not None:
            return seed + self.context.hash(column_plan.generator.unique_key)
        return seed + self.context.hash(f"{plan.table_name}.{column_plan.column_name}")

    def _resolve_relation(
        self,
        plan: TablePlan,
        relation: Relation,
        column_generators: dict[str, ColumnGenerator],
        table_count: int,
        tables_values: list[TableRows],
    ) -> None:
        for index, column_name in enumerate(relation.columns):
            column_generator = column_generators.get(column_name)
            if column_generator is None:
                continue
            column_plan = column_generator.column_plan
            ref_column = relation.ref_columns[index]

            if relation.is_self_relation and not column_plan.was_refined:
                referenced = column_generators.get(ref_column)
                if referenced is None:
                    raise ForeignKeyResolutionError(column_name, relation.ref_table)
                values = self.generate_columns_values(
                    {ref_column: referenced}, count=table_count, preserve_data=True
                )
                generator = self.context.resolve(
                    SelfRelationsValuesFromArrayGenerator(values=[row[ref_column] for row in values])
                )
            elif not column_plan.was_defined_before and not column_plan.was_refined:
                parent = next(
                    (t for t in tables_values if t.table_name == relation.ref_table), None
                )
                if parent is None:
                    raise ForeignKeyResolutionError(column_name, relation.ref_table)

                generator = ValuesFromArrayGenerator(
                    values=[row[ref_column] for row in parent.rows]
                )
                generator.is_unique = column_plan.is_unique
                generator.not_null = column_plan.not_null
                with_from_table = plan.with_from_table.get(relation.ref_table)
                if with_from_table is not None:
                    generator.max_repeated_values_count = with_from_table.repeated_values_count
                    generator.weighted_count_seed = with_from_table.weighted_count_seed
            else:
                continue

            column_generator.generator = generator

    def _flush(
        self,
        table_name: str,
        batch: list[dict[str, Any]],
        override: bool,
        update_data: bool,
        key_column: str | None,
    ) -> None:
        if update_data:
            self.store.update(table_name, batch, key_column)
        else:
            inserted = self.store.insert(table_name, batch, override)
            self.inserted[table_name] = self.inserted.get(table_name, 0) + inserted
        logger.debug(f"Flushed {len(batch)} rows into '{table_name}'")

    @staticmethod
    def _apply_updates(
        tables_values: list[TableRows],
        table_name: str,
        rows: list[dict[str, Any]],
        key_column: str,
    ) -> None:
        retained = next((t for t in tables_values if t.table_name == table_name), None)
        if retained is None:
            return
        by_key = {row[key_column]: row for row in retained.rows}
        for row in rows:
            target = by_key.get(row[key_column])
            if target is not None:
                target.update(row)
