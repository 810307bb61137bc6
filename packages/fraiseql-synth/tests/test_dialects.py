"""Tests for dialect properties and column type dispatch."""

import pytest

from conftest import make_column, make_table, pk
from fraiseql_synth.dialects import DialectKind, dispatcher_for
from fraiseql_synth.dialects.postgres import (
    base_type,
    data_type_for,
    is_int_like,
    parse_type_params,
    select_generator_for_postgres_column,
)
from fraiseql_synth.dialects.sqlite import select_generator_for_sqlite_column
from fraiseql_synth.exceptions import ConfigurationError
from fraiseql_synth.generators.geometry import GeometryGenerator, InetGenerator
from fraiseql_synth.generators.numeric import (
    BooleanGenerator,
    IntGenerator,
    IntPrimaryKeyGenerator,
    NumberGenerator,
)
from fraiseql_synth.generators.people import EmailGenerator, FirstNameGenerator
from fraiseql_synth.generators.strings import (
    EnumGenerator,
    StringGenerator,
    UniqueStringGenerator,
    UUIDGenerator,
)
from fraiseql_synth.generators.temporal import IntervalGenerator, TimestampGenerator
from fraiseql_synth.generators.wrappers import ArrayGenerator
from fraiseql_synth.models import Column


def pick(column: Column, primary: bool = False):
    columns = [column] if primary else [pk(), column]
    table = make_table("t", columns, primary_keys=[column.name] if primary else ["id"])
    return select_generator_for_postgres_column(table, column)


class TestTypeParsing:
    @pytest.mark.parametrize(
        "column_type,expected",
        [
            ("character varying(64)", "varchar"),
            ("timestamp without time zone", "timestamp without time zone"),
            ("integer[]", "integer"),
            ("int8", "bigint"),
            ("numeric(10,2)", "numeric"),
        ],
    )
    def test_base_type(self, column_type, expected):
        assert base_type(column_type) == expected

    def test_numeric_params(self):
        params = parse_type_params("numeric(10,2)")
        assert (params.precision, params.scale) == (10, 2)

    def test_length_and_dimensions(self):
        params = parse_type_params("character varying(64)[][]")
        assert params.length == 64
        assert params.dimensions == 2

    def test_vector_params(self):
        params = parse_type_params("vector(3)")
        assert params.length == 3
        assert params.vector_value_type == "number"

    def test_plain_type_has_no_params(self):
        params = parse_type_params("text")
        assert params.length is None
        assert params.dimensions is None

    @pytest.mark.parametrize(
        "column_type,expected",
        [
            ("integer", "number"),
            ("serial", "number"),
            ("numeric(10,2)", "number"),
            ("bigint", "bigint"),
            ("bigserial", "bigint"),
            ("boolean", "boolean"),
            ("jsonb", "json"),
            ("bytea", "buffer"),
            ("date", "date"),
            ("timestamp with time zone", "date"),
            ("text[]", "array"),
            ("point", "string"),
            ("uuid", "string"),
        ],
    )
    def test_data_type_for(self, column_type, expected):
        assert data_type_for(column_type) == expected

    def test_is_int_like(self):
        assert is_int_like("smallint")
        assert is_int_like("bigserial")
        assert not is_int_like("numeric")


class TestPostgresDispatch:
    def test_integer_primary_key(self):
        generator = pick(pk(column_type="smallint"), primary=True)
        assert isinstance(generator, IntPrimaryKeyGenerator)
        assert generator.params["max_value"] == 32767

    def test_serial_outside_key(self):
        generator = pick(make_column("n", "serial"))
        assert isinstance(generator, IntPrimaryKeyGenerator)
        assert generator.params["max_value"] == 2147483647

    def test_integer_range(self):
        generator = pick(make_column("n", "smallint"))
        assert isinstance(generator, IntGenerator)
        assert (generator.params["min_value"], generator.params["max_value"]) == (-32768, 32767)

    def test_numeric_bounds(self):
        """numeric(5,2) stays within +-999.99 at two decimals."""
        generator = pick(make_column("price", "numeric(5,2)"))
        assert isinstance(generator, NumberGenerator)
        assert generator.params["max_value"] == pytest.approx(999.99)
        assert generator.params["min_value"] == pytest.approx(-999.99)
        assert generator.params["precision"] == 100

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("first_name", FirstNameGenerator),
            ("contact_email", EmailGenerator),
            ("bio", StringGenerator),
        ],
    )
    def test_string_columns_by_name(self, name, expected):
        assert isinstance(pick(make_column(name, "character varying(64)")), expected)

    def test_string_length_copied(self):
        generator = pick(make_column("bio", "character varying(64)"))
        assert generator.string_length == 64

    def test_text_primary_key(self):
        assert isinstance(pick(pk(column_type="text"), primary=True), UniqueStringGenerator)

    def test_unique_flag_copied(self):
        generator = pick(make_column("code", "uuid", is_unique=True))
        assert isinstance(generator, UUIDGenerator)
        assert generator.is_unique

    def test_enum(self):
        generator = pick(make_column("mood", "mood", enum_values=["sad", "ok", "happy"]))
        assert isinstance(generator, EnumGenerator)
        assert generator.params["enum_values"] == ["sad", "ok", "happy"]

    def test_interval_fields(self):
        generator = pick(make_column("span", "interval day to second"))
        assert isinstance(generator, IntervalGenerator)
        assert generator.params["fields"] == "day to second"

    def test_geometry_srid(self):
        generator = pick(make_column("location", "geometry(Point,4326)"))
        assert isinstance(generator, GeometryGenerator)
        assert generator.params["srid"] == 4326

    def test_inet_and_cidr(self):
        assert pick(make_column("ip", "inet")).params["include_cidr"] is False
        assert pick(make_column("net", "cidr")).params["include_cidr"] is True
        assert isinstance(pick(make_column("ip", "inet")), InetGenerator)

    def test_array_element_generator(self):
        """Array columns wrap the element type's generator."""
        generator = pick(make_column("tags", "text[]"))
        assert isinstance(generator, ArrayGenerator)
        base = generator.params["base_column_gen"]
        assert isinstance(base, StringGenerator)
        assert base.data_type == "string"
        assert not base.is_unique

    def test_nested_arrays(self):
        generator = pick(make_column("grid", "integer[][]"))
        inner = generator.params["base_column_gen"]
        assert isinstance(inner, ArrayGenerator)
        assert isinstance(inner.params["base_column_gen"], IntGenerator)

    def test_unsupported_type(self):
        assert pick(make_column("doc", "tsvector")) is None


class TestSqliteDispatch:
    def table(self, *columns: Column):
        return make_table("t", [pk(), *columns])

    def test_primary_key(self):
        column = pk()
        assert isinstance(
            select_generator_for_sqlite_column(self.table(), column), IntPrimaryKeyGenerator
        )

    def test_integer_storing_boolean(self):
        column = make_column("active", "integer", data_type="boolean")
        assert isinstance(
            select_generator_for_sqlite_column(self.table(column), column), BooleanGenerator
        )

    def test_integer_storing_timestamp(self):
        column = make_column("created_at", "integer", data_type="date")
        assert isinstance(
            select_generator_for_sqlite_column(self.table(column), column), TimestampGenerator
        )

    def test_text_name(self):
        column = make_column("name", "text")
        assert isinstance(
            select_generator_for_sqlite_column(self.table(column), column), FirstNameGenerator
        )


class TestDialectKind:
    @pytest.mark.parametrize(
        "dialect,limit",
        [
            (DialectKind.POSTGRESQL, 65535),
            (DialectKind.PGLITE, 32740),
            (DialectKind.SQLITE, 32766),
            (DialectKind.MSSQL, 2100),
        ],
    )
    def test_parameter_limits(self, dialect, limit):
        assert dialect.max_parameters == limit

    def test_sequences(self):
        """Only PostgreSQL-family stores need sequences moved by hand."""
        assert not DialectKind.POSTGRESQL.maintains_sequences
        assert not DialectKind.PGLITE.maintains_sequences
        assert DialectKind.MYSQL.maintains_sequences
        assert DialectKind.SQLITE.maintains_sequences

    def test_override_identity(self):
        assert DialectKind.POSTGRESQL.override_identity
        assert DialectKind.MSSQL.override_identity
        assert not DialectKind.SQLITE.override_identity

    def test_from_string(self):
        assert DialectKind("pglite") is DialectKind.PGLITE


class TestDispatcherFor:
    def test_bundled(self):
        assert dispatcher_for("postgresql") is select_generator_for_postgres_column
        assert dispatcher_for(DialectKind.PGLITE) is select_generator_for_postgres_column
        assert dispatcher_for("sqlite") is select_generator_for_sqlite_column

    def test_caller_dispatcher_wins(self):
        def custom(table, column):
            return None

        assert dispatcher_for("postgresql", custom) is custom
        assert dispatcher_for("mysql", custom) is custom

    @pytest.mark.parametrize("dialect", ["mysql", "mssql"])
    def test_missing_dispatcher(self, dialect):
        with pytest.raises(ConfigurationError, match="dispatcher"):
            dispatcher_for(dialect)
