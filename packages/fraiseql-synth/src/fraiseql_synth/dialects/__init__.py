"""SQL dialects: parameter limits, sequence behavior and column type dispatch."""

from enum import Enum

from fraiseql_synth.dialects.postgres import select_generator_for_postgres_column
from fraiseql_synth.dialects.sqlite import select_generator_for_sqlite_column
from fraiseql_synth.exceptions import ConfigurationError
from fraiseql_synth.planner import ColumnGeneratorSelector


class DialectKind(str, Enum):
    """Target store family, passed in explicitly by the caller."""

    POSTGRESQL = "postgresql"
    PGLITE = "pglite"
    MYSQL = "mysql"
    SQLITE = "sqlite"
    MSSQL = "mssql"

    @property
    def max_parameters(self) -> int:
        """Bound parameters allowed in one statement."""
        return _MAX_PARAMETERS[self]

    @property
    def maintains_sequences(self) -> bool:
        """Whether explicit key inserts advance the column's sequence by themselves."""
        return self not in (DialectKind.POSTGRESQL, DialectKind.PGLITE)

    @property
    def override_identity(self) -> bool:
        """Whether inserting into identity columns needs an explicit override."""
        return self in (DialectKind.POSTGRESQL, DialectKind.PGLITE, DialectKind.MSSQL)


_MAX_PARAMETERS = {
    DialectKind.POSTGRESQL: 65535,
    DialectKind.PGLITE: 32740,
    # MySQL has no hard limit; this is a practical ceiling.
    DialectKind.MYSQL: 100000,
    # SQLITE_MAX_VARIABLE_NUMBER since 3.32.0.
    DialectKind.SQLITE: 32766,
    DialectKind.MSSQL: 2100,
}


def dispatcher_for(
    dialect: DialectKind | str,
    dispatcher: ColumnGeneratorSelector | None = None,
) -> ColumnGeneratorSelector:
    """
    Column type -> generator function for ``dialect``.

    A caller-supplied ``dispatcher`` always wins.

    Raises:
        ConfigurationError: If no dispatcher is bundled for the dialect
    """
    if dispatcher is not None:
        return dispatcher

    dialect = DialectKind(dialect)
    if dialect in (DialectKind.POSTGRESQL, DialectKind.PGLITE):
        return select_generator_for_postgres_column
    if dialect is DialectKind.SQLITE:
        return select_generator_for_sqlite_column

    raise ConfigurationError(
        f"No column generator dispatcher is bundled for the '{dialect.value}' dialect.\n\n"
        f"Suggestions:\n"
        f"1. Pass one: SeedBuilder(..., dispatcher=my_select_generator)\n"
        f"2. Refine every column with an explicit generator"
    )


__all__ = ["ColumnGeneratorSelector", "DialectKind", "dispatcher_for"]
