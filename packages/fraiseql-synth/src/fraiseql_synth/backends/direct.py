"""Direct backend - writes generated rows to PostgreSQL."""

from typing import Any

from psycopg import Connection
from psycopg.types.json import Jsonb


def quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


def _adapt(value: Any) -> Any:
    # psycopg has no default dumper for dicts; json columns take Jsonb.
    if isinstance(value, dict):
        return Jsonb(value)
    return value


class DirectBackend:
    """
    Write seed rows with multi-row INSERT statements.

    Each call is one statement followed by a commit, so rows from earlier
    batches stay written if a later batch fails.
    """

    def __init__(self, conn: Connection, schema: str = "public"):
        """
        Initialize backend.

        Args:
            conn: PostgreSQL connection
            schema: Schema name for qualified table names
        """
        self.conn = conn
        self.schema = schema

    def _table(self, table: str) -> str:
        return f"{quote_identifier(self.schema)}.{quote_identifier(table)}"

    def insert(self, table: str, rows: list[dict[str, Any]], override: bool = False) -> int:
        """
        Insert rows in one statement.

        Args:
            table: Table name
            rows: Rows sharing the same columns
            override: Add ``OVERRIDING SYSTEM VALUE`` so ``GENERATED ALWAYS``
                identity columns accept the generated keys

        Returns:
            Number of inserted rows
        """
        if not rows:
            return 0

        columns = list(rows[0])
        columns_list = ", ".join(quote_identifier(column) for column in columns)
        single_placeholder = f"({', '.join(['%s'] * len(columns))})"
        placeholders = ", ".join([single_placeholder] * len(rows))
        overriding = " OVERRIDING SYSTEM VALUE" if override else ""

        sql = f"INSERT INTO {self._table(table)} ({columns_list}){overriding} VALUES {placeholders}"

        # Flatten values: [row1_col1, row1_col2, row2_col1, row2_col2, ...]
        values = [_adapt(row.get(column)) for row in rows for column in columns]

        with self.conn.cursor() as cur:
            cur.execute(sql, values)
            inserted = cur.rowcount

        self.conn.commit()
        return inserted

    def update(self, table: str, rows: list[dict[str, Any]], key_column: str) -> int:
        """
        Update rows one by one, matched on ``key_column``.

        Returns:
            Number of updated rows
        """
        updated = 0
        with self.conn.cursor() as cur:
            for row in rows:
                columns = [column for column in row if column != key_column]
                if not columns:
                    continue
                assignments = ", ".join(f"{quote_identifier(column)} = %s" for column in columns)
                sql = (
                    f"UPDATE {self._table(table)} SET {assignments} "
                    f"WHERE {quote_identifier(key_column)} = %s"
                )
                cur.execute(sql, [_adapt(row[column]) for column in columns] + [row[key_column]])
                updated += cur.rowcount

        self.conn.commit()
        return updated

    def advance_sequence(self, table: str, column: str, value: int) -> None:
        """Move the column's sequence to ``value`` so later inserts don't collide."""
        with self.conn.cursor() as cur:
            cur.execute(
                "SELECT setval(pg_get_serial_sequence(%s, %s), %s, true)",
                [self._table(table), column, value],
            )
        self.conn.commit()

    def reset(self, tables: list[str]) -> None:
        """Delete all rows from ``tables`` (and tables referencing them)."""
        if not tables:
            return
        tables_list = ", ".join(self._table(table) for table in tables)
        with self.conn.cursor() as cur:
            cur.execute(f"TRUNCATE {tables_list} RESTART IDENTITY CASCADE")
        self.conn.commit()
