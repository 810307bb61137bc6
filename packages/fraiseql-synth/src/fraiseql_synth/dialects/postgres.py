"""PostgreSQL column type -> generator mapping."""

import dataclasses
import re

from fraiseql_synth.generators.base import AbstractGenerator
from fraiseql_synth.generators.geometry import (
    GeometryGenerator,
    InetGenerator,
    LineGenerator,
    PointGenerator,
    VectorGenerator,
)
from fraiseql_synth.generators.numeric import (
    BitStringGenerator,
    BooleanGenerator,
    IntGenerator,
    IntPrimaryKeyGenerator,
    NumberGenerator,
)
from fraiseql_synth.generators.people import EmailGenerator, FirstNameGenerator
from fraiseql_synth.generators.strings import (
    EnumGenerator,
    JsonGenerator,
    StringGenerator,
    UniqueStringGenerator,
    UUIDGenerator,
)
from fraiseql_synth.generators.temporal import (
    DateGenerator,
    IntervalGenerator,
    TimeGenerator,
    TimestampGenerator,
)
from fraiseql_synth.generators.wrappers import ArrayGenerator, DefaultGenerator
from fraiseql_synth.models import Column, Table, TypeParams

ARRAY_SUFFIX = re.compile(r"\[\d*\]")
TYPE_ARGUMENTS = re.compile(r"\(([^)]*)\)")

# Spelled-out names returned by format_type() -> short names.
TYPE_ALIASES = {
    "character varying": "varchar",
    "character": "char",
    "bit varying": "varbit",
    "int2": "smallint",
    "int4": "integer",
    "int": "integer",
    "int8": "bigint",
    "serial4": "serial",
    "serial8": "bigserial",
    "serial2": "smallserial",
    "float4": "real",
    "float8": "double precision",
    "bool": "boolean",
}

INT_RANGES = {
    "smallint": (-32768, 32767),
    "integer": (-2147483648, 2147483647),
    "bigint": (-9223372036854775808, 9223372036854775807),
}

SERIAL_MAX = {
    "smallserial": 32767,
    "serial": 2147483647,
    "bigserial": 9223372036854775807,
}

STRING_TYPES = ("text", "varchar", "char", "citext")


def base_type(column_type: str) -> str:
    """Type name without arguments or array suffixes, with aliases resolved."""
    name = ARRAY_SUFFIX.sub("", column_type)
    name = TYPE_ARGUMENTS.sub("", name).strip().lower()
    for long_name, short_name in TYPE_ALIASES.items():
        if name == long_name or name.startswith(long_name + " "):
            return short_name + name[len(long_name) :]
    return name


def parse_type_params(column_type: str) -> TypeParams:
    """
    Parse parameters out of a PostgreSQL type string.

    Example:
        >>> parse_type_params("numeric(10,2)")
        TypeParams(precision=10, scale=2, length=None, dimensions=None, vector_value_type=None)
        >>> parse_type_params("character varying(64)[]").length
        64
    """
    params = TypeParams()
    dimensions = len(ARRAY_SUFFIX.findall(column_type))
    if dimensions:
        params.dimensions = dimensions

    name = base_type(column_type)
    match = TYPE_ARGUMENTS.search(column_type)
    arguments = [arg.strip() for arg in match.group(1).split(",")] if match else []

    if name in ("numeric", "decimal") and arguments:
        params.precision = int(arguments[0])
        if len(arguments) > 1:
            params.scale = int(arguments[1])
    elif name in ("varchar", "char", "bit", "varbit") and arguments:
        params.length = int(arguments[0])
    elif name in ("vector", "halfvec", "sparsevec") and arguments:
        params.length = int(arguments[0])
        params.vector_value_type = "number"
    return params


def data_type_for(column_type: str) -> str:
    """Logical data type of a PostgreSQL column type."""
    if ARRAY_SUFFIX.search(column_type):
        return "array"
    name = base_type(column_type)
    if name in ("json", "jsonb"):
        return "json"
    if name == "bytea":
        return "buffer"
    if name in ("bigint", "bigserial"):
        return "bigint"
    if name in INT_RANGES or name in SERIAL_MAX or name in ("real", "double precision", "numeric", "decimal"):
        return "number"
    if name == "boolean":
        return "boolean"
    if name == "date" or name.startswith("timestamp"):
        return "date"
    # point, line, geometry and vector values are written as text literals
    return "string"


def is_int_like(column_type: str) -> bool:
    """Whether the type is a plain or serial integer type."""
    name = base_type(column_type)
    return name in INT_RANGES or name in SERIAL_MAX


def _pick_generator(table: Table, column: Column) -> AbstractGenerator | None:
    column_type = column.column_type
    name = base_type(column_type)
    is_primary = column.name in table.primary_keys

    if ARRAY_SUFFIX.search(column_type):
        if column.base_column is not None:
            base_column = column.base_column
        else:
            element_type = ARRAY_SUFFIX.sub("", column_type)
            base_column = dataclasses.replace(
                column,
                column_type=element_type,
                data_type=data_type_for(element_type) if column.data_type == "array" else column.data_type,
                type_params=dataclasses.replace(column.type_params, dimensions=None),
                is_unique=False,
            )
        base_generator = select_generator_for_postgres_column(table, base_column)
        if base_generator is None:
            return None
        base_generator.is_unique = False

        generator = ArrayGenerator(base_column_gen=base_generator, size=column.size)
        for _ in range((column.type_params.dimensions or 1) - 1):
            generator = ArrayGenerator(base_column_gen=generator)
        return generator

    if column.enum_values:
        return EnumGenerator(enum_values=list(column.enum_values))

    # INT
    if is_int_like(column_type) and is_primary:
        max_value = SERIAL_MAX[name] if name in SERIAL_MAX else INT_RANGES[name][1]
        return IntPrimaryKeyGenerator(max_value=max_value)

    if name in SERIAL_MAX:
        return IntPrimaryKeyGenerator(max_value=SERIAL_MAX[name])

    if name in INT_RANGES:
        min_value, max_value = INT_RANGES[name]
        return IntGenerator(min_value=min_value, max_value=max_value)

    # NUMBER
    if name in ("real", "double precision", "numeric", "decimal"):
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

    # STRING
    if name in STRING_TYPES:
        if is_primary:
            return UniqueStringGenerator()
        lowered = column.name.lower()
        if "name" in lowered:
            return FirstNameGenerator()
        if "email" in lowered:
            return EmailGenerator()
        return StringGenerator()

    if name == "uuid":
        return UUIDGenerator()

    if name == "boolean":
        return BooleanGenerator()

    # DATE, TIME, TIMESTAMP
    if name == "date":
        return DateGenerator()

    if name.startswith("timestamp"):
        return TimestampGenerator()

    if name.startswith("time"):
        return TimeGenerator()

    if name in ("json", "jsonb"):
        return JsonGenerator()

    if name.startswith("interval"):
        fields = name[len("interval") :].strip()
        return IntervalGenerator(fields=fields or None)

    # GEOMETRY
    if name == "point":
        return PointGenerator()

    if name in ("line", "lseg"):
        return LineGenerator()

    if name == "geometry":
        match = TYPE_ARGUMENTS.search(column_type)
        arguments = [arg.strip() for arg in match.group(1).split(",")] if match else []
        srid = int(arguments[1]) if len(arguments) > 1 and arguments[1].isdigit() else None
        return GeometryGenerator(type="point", srid=srid)

    if name in ("vector", "halfvec"):
        return VectorGenerator()

    if name in ("bit", "varbit"):
        return BitStringGenerator()

    if name in ("inet", "cidr"):
        return InetGenerator(include_cidr=name == "cidr")

    if column.has_default and column.default is not None:
        return DefaultGenerator(default_value=column.default)

    return None


def select_generator_for_postgres_column(table: Table, column: Column) -> AbstractGenerator | None:
    """
    Constructed but uninitialized generator for a PostgreSQL column, or None.

    Integer primary keys count up from 1, text primary keys get unique
    strings, and text columns named like ``*name*`` or ``*email*`` get
    realistic values.
    """
    generator = _pick_generator(table, column)
    if generator is not None:
        generator.is_unique = column.is_unique
        generator.data_type = column.data_type
        generator.string_length = column.type_params.length
    return generator
