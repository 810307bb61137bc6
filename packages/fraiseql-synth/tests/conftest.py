"""Pytest configuration and shared fixtures."""

from typing import Any

import pytest

from fraiseql_synth import clear_generators
from fraiseql_synth.dialects.postgres import data_type_for, parse_type_params
from fraiseql_synth.models import Column, Relation, Table


def make_column(name: str, column_type: str, **kwargs: Any) -> Column:
    """Build a column the way introspection would for a PostgreSQL type."""
    kwargs.setdefault("data_type", data_type_for(column_type))
    kwargs.setdefault("type_params", parse_type_params(column_type))
    return Column(name=name, column_type=column_type, **kwargs)


def make_table(name: str, columns: list[Column], **kwargs: Any) -> Table:
    primary_keys = kwargs.pop("primary_keys", None)
    if primary_keys is None:
        primary_keys = [column.name for column in columns if column.primary]
    return Table(name=name, columns=columns, primary_keys=primary_keys, schema="public", **kwargs)


def pk(name: str = "id", column_type: str = "integer", **kwargs: Any) -> Column:
    return make_column(name, column_type, primary=True, not_null=True, **kwargs)


@pytest.fixture(autouse=True)
def reset_generators():
    """Keep custom generator registrations from leaking between tests."""
    yield
    clear_generators()


@pytest.fixture
def users_table() -> Table:
    """Stand-alone table covering the common column types."""
    return make_table(
        "users",
        [
            pk(),
            make_column("name", "text", not_null=True),
            make_column("email", "character varying(64)", is_unique=True),
            make_column("score", "integer"),
            make_column("created_at", "timestamp without time zone", not_null=True),
        ],
    )


@pytest.fixture
def self_relation_schema() -> tuple[list[Table], list[Relation]]:
    """``users.parent_id`` references ``users.id``."""
    users = make_table("users", [pk(), make_column("parent_id", "integer")])
    relations = [Relation(table="users", columns=["parent_id"], ref_table="users", ref_columns=["id"])]
    return [users], relations


@pytest.fixture
def parent_child_schema() -> tuple[list[Table], list[Relation]]:
    """``b.a_id`` (not null) references ``a.id``."""
    a = make_table("a", [pk(), make_column("label", "text")])
    b = make_table("b", [pk(), make_column("a_id", "integer", not_null=True)])
    relations = [Relation(table="b", columns=["a_id"], ref_table="a", ref_columns=["id"])]
    return [b, a], relations


@pytest.fixture
def cyclic_schema() -> tuple[list[Table], list[Relation]]:
    """``a.b_id`` (nullable) -> ``b.id`` and ``b.a_id`` (not null) -> ``a.id``."""
    a = make_table("a", [pk(), make_column("b_id", "integer")])
    b = make_table("b", [pk(), make_column("a_id", "integer", not_null=True)])
    relations = [
        Relation(table="a", columns=["b_id"], ref_table="b", ref_columns=["id"]),
        Relation(table="b", columns=["a_id"], ref_table="a", ref_columns=["id"]),
    ]
    return [b, a], relations


class FakeCursor:
    """Cursor recording statements; results come from the connection's handler."""

    def __init__(self, conn: "FakeConnection"):
        self.conn = conn
        self.rowcount = -1
        self._rows: list[tuple] = []

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def execute(self, sql: str, params: Any = None) -> None:
        self.conn.executed.append((sql, params))
        self._rows = self.conn.handler(sql, params) if self.conn.handler else []
        self.rowcount = self.conn.rowcount

    def fetchone(self):
        return self._rows[0] if self._rows else None

    def fetchall(self):
        return list(self._rows)


class FakeConnection:
    """Minimal stand-in for ``psycopg.Connection``."""

    def __init__(self, handler=None, rowcount: int = 1):
        self.handler = handler
        self.rowcount = rowcount
        self.executed: list[tuple[str, Any]] = []
        self.commits = 0

    def cursor(self) -> FakeCursor:
        return FakeCursor(self)

    def commit(self) -> None:
        self.commits += 1


@pytest.fixture
def fake_conn() -> FakeConnection:
    return FakeConnection()
