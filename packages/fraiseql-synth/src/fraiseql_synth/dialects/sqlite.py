"""SQLite column type -> generator mapping.

SQLite has few storage classes, so ``Column.data_type`` tells apart integer
columns holding booleans or timestamps and text columns holding JSON.
"""

from fraiseql_synth.generators.base import AbstractGenerator
from fraiseql_synth.generators.numeric import (
    BooleanGenerator,
    IntGenerator,
    IntPrimaryKeyGenerator,
    NumberGenerator,
)
from fraiseql_synth.generators.people import EmailGenerator, FirstNameGenerator
from fraiseql_synth.generators.strings import JsonGenerator, StringGenerator, UniqueStringGenerator
from fraiseql_synth.generators.temporal import TimestampGenerator
from fraiseql_synth.generators.wrappers import DefaultGenerator
from fraiseql_synth.models import Column, Table


def _pick_generator(table: Table, column: Column) -> AbstractGenerator | None:
    column_type = column.column_type.lower()
    is_primary = column.name in table.primary_keys

    if column_type in ("integer", "numeric") and is_primary:
        return IntPrimaryKeyGenerator()

    if column_type == "integer" and column.data_type == "boolean":
        return BooleanGenerator()

    if column_type == "integer" and column.data_type == "date":
        return TimestampGenerator()

    if column_type == "integer" or (column.data_type == "bigint" and column_type == "blob"):
        return IntGenerator()

    if column_type.startswith("real") or column_type.startswith("numeric"):
        precision = column.type_params.precision
        if precision is not None:
            scale = column.type_params.scale or 0
            max_absolute_value = 10 ** (precision - scale) - 10 ** (-scale)
            return NumberGenerator(
                min_value=-max_absolute_value,
                max_value=max_absolute_value,
                precision=10**scale,
            )
        return NumberGenerator()

    if column_type.startswith(("text", "blob")):
        if column.data_type == "json":
            return JsonGenerator()
        if is_primary:
            return UniqueStringGenerator()
        lowered = column.name.lower()
        if "name" in lowered:
            return FirstNameGenerator()
        if "email" in lowered:
            return EmailGenerator()
        return StringGenerator()

    if column.has_default and column.default is not None:
        return DefaultGenerator(default_value=column.default)

    return None


def select_generator_for_sqlite_column(table: Table, column: Column) -> AbstractGenerator | None:
    """Constructed but uninitialized generator for a SQLite column, or None."""
    generator = _pick_generator(table, column)
    if generator is not None:
        generator.is_unique = column.is_unique
        generator.data_type = column.data_type
        generator.string_length = column.type_params.length
    return generator
