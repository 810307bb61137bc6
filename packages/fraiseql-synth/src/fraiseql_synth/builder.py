"""SeedBuilder API for declarative seed generation."""

import copy
import logging
from collections.abc import Iterable
from typing import Any

from psycopg import Connection

from fraiseql_synth.backends.direct import DirectBackend
from fraiseql_synth.dialects import DialectKind, dispatcher_for
from fraiseql_synth.engine import DEFAULT_BATCH_SIZE, RowProductionEngine, Store
from fraiseql_synth.exceptions import StoreNotConfiguredError, TableNotFoundError
from fraiseql_synth.generators.base import AbstractGenerator
from fraiseql_synth.introspection import SchemaIntrospector
from fraiseql_synth.models import Relation, Seeds, Table, TableRefinement, WeightedCount
from fraiseql_synth.planner import (
    ColumnGeneratorSelector,
    GenerationContext,
    TablePlan,
    build_table_plans,
)
from fraiseql_synth.relations import annotate_cyclic, link_relations, merge_declared_relations

logger = logging.getLogger(__name__)


class SeedBuilder:
    """
    Declarative API for building and executing seed data plans.

    Example:
        >>> builder = SeedBuilder.from_connection(conn, "public")
        >>> builder.options(count=20, seed=42).refine("users", with_={"posts": 3})
        >>> builder.execute()
        {'users': 20, 'posts': 60}
    """

    def __init__(
        self,
        tables: list[Table],
        relations: list[Relation],
        dialect: DialectKind | str = DialectKind.POSTGRESQL,
        backend: Store | None = None,
        dispatcher: ColumnGeneratorSelector | None = None,
        declared_relations: list[Relation] | None = None,
    ):
        """
        Initialize SeedBuilder.

        Args:
            tables: Tables to seed
            relations: Physical foreign keys between them
            dialect: Target dialect
            backend: Store rows are written to by ``execute``
            dispatcher: Column type -> generator function; defaults to the
                dialect's bundled one
            declared_relations: One-to-many relations not backed by a
                foreign key constraint

        Raises:
            ConfigurationError: If the dialect has no bundled dispatcher and
                none was given
        """
        self.tables = tables
        relations = list(relations)
        if declared_relations:
            relations = merge_declared_relations(relations, declared_relations)
        self.relations = annotate_cyclic(link_relations(relations))
        self.dialect = DialectKind(dialect)
        self.backend = backend
        self.select_generator = dispatcher_for(self.dialect, dispatcher)

        self._count: int | None = None
        self._seed = 0
        self._version: int | None = None
        self._batch_size = DEFAULT_BATCH_SIZE
        self._refinements: dict[str, TableRefinement] = {}

    @classmethod
    def from_connection(cls, conn: Connection, schema: str = "public", **kwargs: Any) -> "SeedBuilder":
        """
        Introspect ``schema`` and build a SeedBuilder writing back to it.

        Raises:
            SchemaNotFoundError: If schema doesn't exist
        """
        introspector = SchemaIntrospector(conn, schema)
        kwargs.setdefault("backend", DirectBackend(conn, schema))
        return cls(introspector.get_tables(), introspector.get_relations(), **kwargs)

    def options(
        self,
        count: int | None = None,
        seed: int | None = None,
        version: int | None = None,
        batch_size: int | None = None,
    ) -> "SeedBuilder":
        """
        Set run options. Omitted options keep their current value.

        Raises:
            InvalidVersionError: If version is outside the supported range
        """
        if version is not None:
            GenerationContext.create(version)
            self._version = version
        if count is not None:
            self._count = count
        if seed is not None:
            self._seed = seed
        if batch_size is not None:
            self._batch_size = batch_size
        return self

    def refine(
        self,
        table: str,
        count: int | None = None,
        columns: dict[str, AbstractGenerator | bool] | None = None,
        with_: dict[str, int | list[WeightedCount]] | None = None,
    ) -> "SeedBuilder":
        """
        Refine how one table is seeded.

        Repeated calls for the same table merge into one refinement.

        Args:
            table: Table name
            count: Rows to generate
            columns: Column name -> generator, or False to leave the column
                to the database default
            with_: Child table -> rows per row of this table

        Returns:
            Self for chaining

        Raises:
            TableNotFoundError: If table is not one of the builder's tables
        """
        if not any(t.name == table for t in self.tables):
            raise TableNotFoundError(table, self._schema())

        refinement = self._refinements.setdefault(table, TableRefinement())
        if count is not None:
            refinement.count = count
        refinement.columns.update(columns or {})
        refinement.with_.update(with_ or {})
        return self

    def refine_all(self, refinements: dict[str, TableRefinement]) -> "SeedBuilder":
        for table, refinement in refinements.items():
            self.refine(table, refinement.count, refinement.columns, refinement.with_)
        return self

    def plan(self) -> list[TablePlan]:
        """Table plans in fill order, without generating anything."""
        return self._build_plans(GenerationContext.create(self._version))

    def generate(self) -> Seeds:
        """
        Generate every table in memory.

        Returns:
            Seeds object with generated data accessible by table name
        """
        context = GenerationContext.create(self._version)
        plans = self._build_plans(context)
        engine = RowProductionEngine(
            self.relations, context, dialect=self.dialect, batch_size=self._batch_size
        )
        tables_values = engine.seed_tables(
            plans, count=self._count, seed=self._seed, preserve_data=True
        )

        seeds = Seeds()
        for table_rows in tables_values:
            seeds.add_table(table_rows.table_name, table_rows.rows)
        return seeds

    def execute(self) -> dict[str, int]:
        """
        Generate every table and write it to the backend.

        Returns:
            Inserted row count per table, in fill order

        Raises:
            StoreNotConfiguredError: If the builder has no backend
        """
        if self.backend is None:
            raise StoreNotConfiguredError()

        context = GenerationContext.create(self._version)
        plans = self._build_plans(context)
        engine = RowProductionEngine(
            self.relations,
            context,
            dialect=self.dialect,
            store=self.backend,
            batch_size=self._batch_size,
        )
        engine.seed_tables(plans, count=self._count, seed=self._seed)

        inserted = {plan.table_name: engine.inserted.get(plan.table_name, 0) for plan in plans}
        logger.info(f"Inserted {sum(inserted.values())} rows into {len(inserted)} tables")
        return inserted

    def reset(self, tables: Iterable[str] | None = None) -> None:
        """
        Delete rows from the builder's tables (or ``tables``) in the backend.

        Raises:
            StoreNotConfiguredError: If the builder has no backend
        """
        if self.backend is None:
            raise StoreNotConfiguredError()
        names = list(tables) if tables is not None else [t.name for t in self.tables]
        logger.info(f"Resetting {len(names)} tables")
        self.backend.reset(names)

    def _build_plans(self, context: GenerationContext) -> list[TablePlan]:
        # Planning mutates generator flags; keep the user's refinements intact.
        return build_table_plans(
            self.tables,
            self.relations,
            context,
            count=self._count,
            seed=self._seed,
            refinements=copy.deepcopy(self._refinements),
            select_generator=self.select_generator,
        )

    def _schema(self) -> str:
        return next((t.schema for t in self.tables if t.schema), "public")
