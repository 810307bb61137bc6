"""Custom exceptions with helpful error messages."""


class FraiseQLSynthError(Exception):
    """Base exception for fraiseql-synth errors."""

    pass


# Configuration errors


class ConfigurationError(FraiseQLSynthError):
    """Invalid options, refinements or generator parameters."""

    pass


class InvalidVersionError(ConfigurationError):
    """Requested generator API version is out of range."""

    def __init__(self, version: int, latest: int):
        self.version = version
        super().__init__(
            f"Version should be in range [1, {latest}]. Got {version}.\n\n"
            f"Suggestions:\n"
            f"1. Omit the version to use the latest generators ({latest})\n"
            f"2. Pin the version used to produce existing fixtures"
        )


class WithRelationError(ConfigurationError):
    """A 'with' refinement names a table that does not reference its parent."""

    def __init__(self, table: str, child: str, has_self_relation: bool = False):
        self.table = table
        self.child = child
        if has_self_relation:
            reason = (
                f"'{table}' table has a self relation, "
                f"so '{child}' can't be seeded with '{table}' in 'with'"
            )
        else:
            reason = f"'{child}' table doesn't have a reference to '{table}' table"
        super().__init__(
            f"{reason}.\n\n"
            f"Suggestions:\n"
            f"1. Check the foreign keys of '{child}'\n"
            f"2. Remove '{child}' from the 'with' refinement of '{table}'"
        )


class NotNullRefinementError(ConfigurationError):
    """Column refined to false is not-null and has no default."""

    def __init__(self, table: str, column: str):
        self.table = table
        self.column = column
        super().__init__(
            f"You cannot set the '{column}' column in the '{table}' table to false "
            f"in your refinements. The column has a not null constraint and no "
            f"default value.\n\n"
            f"Suggestions:\n"
            f"1. Give '{column}' a generator instead of false\n"
            f"2. Add a database default to '{table}.{column}'"
        )


class ArrayRefinementError(ConfigurationError):
    """Multi-dimensional array columns cannot be refined."""

    def __init__(self, table: str, column: str):
        super().__init__(
            f"Column '{column}' in '{table}' is a multi-dimensional array, "
            f"which can't be refined.\n\n"
            f"Suggestions:\n"
            f"1. Drop the refinement and let the column type pick a generator"
        )


class UnsupportedColumnTypeError(ConfigurationError):
    """No generator could be selected for the column type."""

    def __init__(self, table: str, column: str, column_type: str):
        self.column = column
        super().__init__(
            f"Could not pick a generator for column '{column}' "
            f"(type: {column_type}) in table '{table}'.\n\n"
            f"Suggestions:\n"
            f"1. Refine the column with an explicit generator:\n"
            f"   builder.refine('{table}', columns={{'{column}': build_generator('string')}})\n"
            f"2. Refine the column to false if it has a default"
        )


class GeneratorConfigError(ConfigurationError):
    """Generator parameters are contradictory or out of range."""

    pass


class WeightsSumError(GeneratorConfigError):
    """Weights of a weighted list don't add up to 1."""

    def __init__(self, total: float):
        self.total = total
        super().__init__(
            f"The weights for the Weighted Random feature must add up to exactly 1. "
            f"Got {total}.\n\n"
            f"Suggestions:\n"
            f"1. Check each weight in the weighted list\n"
            f"2. Use fractions that sum cleanly, e.g. 0.25, 0.25, 0.5"
        )


class UnknownGeneratorError(ConfigurationError):
    """Generator kind is not registered."""

    def __init__(self, kind: str, available: list[str] | None = None):
        self.kind = kind
        message = f"Generator '{kind}' is not registered."
        if available:
            message += f"\n\nAvailable generators: {', '.join(sorted(available))}"
        super().__init__(message)


# Schema infeasibility errors


class SchemaInfeasibleError(FraiseQLSynthError):
    """Schema cannot be seeded as declared."""

    pass


class CyclicNotNullError(SchemaInfeasibleError):
    """Both legs of a cyclic relation are not-null."""

    def __init__(self, table1: str, table2: str):
        super().__init__(
            f"The '{table1}' and '{table2}' tables reference each other "
            f"through not null foreign keys. Can't seed tables with cyclic "
            f"not null relations.\n\n"
            f"Suggestions:\n"
            f"1. Make one of the foreign key columns nullable\n"
            f"2. Refine one foreign key column with an explicit generator"
        )


class MissingForeignTableError(SchemaInfeasibleError):
    """Not-null FK column references a table that is not being seeded."""

    def __init__(self, table: str, column: str, ref_table: str):
        super().__init__(
            f"Column '{column}' in '{table}' table has not null constraint "
            f"and references '{ref_table}', which is not being seeded.\n\n"
            f"Suggestions:\n"
            f"1. Include '{ref_table}' in the tables to seed\n"
            f"2. Refine '{column}' with an explicit generator"
        )


class MissingIdentifyingColumnError(SchemaInfeasibleError):
    """A table on a cycle has nothing to key its updates on."""

    def __init__(self, table: str):
        self.table = table
        super().__init__(
            f"Table '{table}' does not have primary or (unique and notNull) column. "
            f"Can't seed table with cyclic relation.\n\n"
            f"Suggestions:\n"
            f"1. Add a primary key to '{table}'"
        )


class SharedCompositeKeyError(SchemaInfeasibleError):
    """A column belongs to more than one composite unique key."""

    def __init__(self, table: str, column: str):
        super().__init__(
            f"Column '{column}' in '{table}' table belongs to more than one "
            f"composite unique key, which is not supported.\n\n"
            f"Suggestions:\n"
            f"1. Refine '{column}' with an explicit generator"
        )


class ForeignKeyResolutionError(SchemaInfeasibleError):
    """Could not resolve foreign key reference."""

    def __init__(self, fk_column: str, referenced_table: str):
        super().__init__(
            f"Could not resolve foreign key '{fk_column}' referencing '{referenced_table}'.\n\n"
            f"Suggestions:\n"
            f"1. Ensure '{referenced_table}' is seeded before this table\n"
            f"2. Check that '{referenced_table}' has generated data\n"
            f"3. Verify foreign key constraint is correct"
        )


# Capacity errors


class CapacityError(FraiseQLSynthError):
    """Requested count can't be reached with the generator's domain."""

    pass


class UniqueCountExceededError(CapacityError):
    """Requested count is larger than the number of unique values."""

    def __init__(self, what: str, max_count: int | float | None = None):
        self.max_count = max_count
        message = f"count exceeds max number of unique {what}"
        if max_count is not None:
            message += f" ({max_count})"
        super().__init__(message + ".")


# Runtime errors


class GeneratorStateError(FraiseQLSynthError):
    """Generator used before init() or after its pool emptied."""

    def __init__(self, message: str = "state is not defined."):
        super().__init__(message)


class StoreNotConfiguredError(FraiseQLSynthError):
    """Writing was requested without a store."""

    def __init__(self) -> None:
        super().__init__(
            "db or schema or tableName is undefined.\n\n"
            "Suggestions:\n"
            "1. Pass a backend: SeedBuilder(..., backend=DirectBackend(conn, schema))\n"
            "2. Use builder.generate() to keep rows in memory"
        )


# Introspection errors


class SchemaNotFoundError(FraiseQLSynthError):
    """Schema does not exist in database."""

    def __init__(self, schema: str):
        super().__init__(
            f"Schema '{schema}' not found in database.\n\n"
            f"Suggestions:\n"
            f"1. Check schema name spelling\n"
            f"2. Ensure schema exists: CREATE SCHEMA {schema};\n"
            f"3. Check database connection settings"
        )


class TableNotFoundError(FraiseQLSynthError):
    """Table does not exist in schema."""

    def __init__(self, table: str, schema: str):
        super().__init__(
            f"Table '{table}' not found in schema '{schema}'.\n\n"
            f"Suggestions:\n"
            f"1. Check table name spelling\n"
            f"2. Use SchemaIntrospector.get_tables() to see available tables"
        )
