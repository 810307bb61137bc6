"""Schema introspection with caching."""

from psycopg import Connection

from fraiseql_synth.dialects.postgres import data_type_for, parse_type_params
from fraiseql_synth.exceptions import SchemaNotFoundError, TableNotFoundError
from fraiseql_synth.models import Column, Relation, Table
from fraiseql_synth.relations import annotate_cyclic, link_relations

IDENTITY_TYPES = {"a": "always", "d": "byDefault"}


class SchemaIntrospector:
    """
    Read tables and foreign keys of a PostgreSQL schema.

    Queries ``pg_catalog`` so column types come back as written in DDL
    (``format_type``), with identity kinds, enum labels and constraint
    column order intact. Results are cached per instance.
    """

    def __init__(self, conn: Connection, schema: str = "public"):
        self.conn = conn
        self.schema = schema
        self._table_cache: dict[str, Table] = {}
        self._relations_cache: list[Relation] | None = None

        # Validate schema exists
        self._validate_schema()

    def _validate_schema(self) -> None:
        """Validate that schema exists in database."""
        with self.conn.cursor() as cur:
            cur.execute(
                "SELECT EXISTS(SELECT 1 FROM pg_namespace WHERE nspname = %s)",
                (self.schema,),
            )
            exists = cur.fetchone()[0]
            if not exists:
                raise SchemaNotFoundError(self.schema)

    def get_table_names(self) -> list[str]:
        with self.conn.cursor() as cur:
            cur.execute(
                """
                SELECT c.relname
                FROM pg_class c
                JOIN pg_namespace n ON n.oid = c.relnamespace
                WHERE n.nspname = %s
                  AND c.relkind IN ('r', 'p')
                  AND NOT c.relispartition
                ORDER BY c.relname
                """,
                (self.schema,),
            )
            return [row[0] for row in cur.fetchall()]

    def get_tables(self) -> list[Table]:
        """Get all tables in schema (cached)."""
        return [self.get_table(name) for name in self.get_table_names()]

    def get_table(self, table_name: str) -> Table:
        """Get complete table information (cached)."""
        if table_name in self._table_cache:
            return self._table_cache[table_name]

        columns = self.get_columns(table_name)
        if not columns:
            raise TableNotFoundError(table_name, self.schema)

        primary_keys, unique_constraints = self.get_key_constraints(table_name)
        for column in columns:
            column.primary = column.name in primary_keys
            if [column.name] in unique_constraints:
                column.is_unique = True

        table = Table(
            name=table_name,
            columns=columns,
            primary_keys=primary_keys,
            unique_constraints=[names for names in unique_constraints if len(names) > 1],
            schema=self.schema,
        )
        self._table_cache[table_name] = table
        return table

    def get_columns(self, table_name: str) -> list[Column]:
        """Get all columns for a table, with enum labels, in a single query."""
        with self.conn.cursor() as cur:
            cur.execute(
                """
                SELECT
                    a.attname,
                    format_type(a.atttypid, a.atttypmod),
                    a.attnotnull,
                    d.adbin IS NOT NULL AS has_default,
                    a.attidentity,
                    (
                        SELECT array_agg(e.enumlabel ORDER BY e.enumsortorder)
                        FROM pg_enum e
                        WHERE e.enumtypid = a.atttypid
                    ) AS enum_labels
                FROM pg_attribute a
                JOIN pg_class c ON c.oid = a.attrelid
                JOIN pg_namespace n ON n.oid = c.relnamespace
                LEFT JOIN pg_attrdef d ON d.adrelid = a.attrelid AND d.adnum = a.attnum
                WHERE n.nspname = %s
                  AND c.relname = %s
                  AND a.attnum > 0
                  AND NOT a.attisdropped
                ORDER BY a.attnum
                """,
                (self.schema, table_name),
            )
            rows = cur.fetchall()

        columns = []
        for name, column_type, not_null, has_default, identity, enum_labels in rows:
            generated_identity_type = IDENTITY_TYPES.get(identity or "")
            columns.append(
                Column(
                    name=name,
                    column_type=column_type,
                    data_type=data_type_for(column_type),
                    type_params=parse_type_params(column_type),
                    has_default=has_default or generated_identity_type is not None,
                    enum_values=list(enum_labels) if enum_labels else None,
                    not_null=not_null,
                    generated_identity_type=generated_identity_type,
                    identity=generated_identity_type is not None,
                )
            )
        return columns

    def get_key_constraints(self, table_name: str) -> tuple[list[str], list[list[str]]]:
        """Primary key columns and unique constraint column groups, in key order."""
        with self.conn.cursor() as cur:
            cur.execute(
                """
                SELECT con.contype, array_agg(a.attname ORDER BY k.ordinality)
                FROM pg_constraint con
                JOIN pg_class c ON c.oid = con.conrelid
                JOIN pg_namespace n ON n.oid = c.relnamespace
                CROSS JOIN LATERAL unnest(con.conkey) WITH ORDINALITY AS k(attnum, ordinality)
                JOIN pg_attribute a ON a.attrelid = con.conrelid AND a.attnum = k.attnum
                WHERE n.nspname = %s
                  AND c.relname = %s
                  AND con.contype IN ('p', 'u')
                GROUP BY con.oid, con.contype
                ORDER BY con.conname
                """,
                (self.schema, table_name),
            )
            rows = cur.fetchall()

        primary_keys: list[str] = []
        unique_constraints: list[list[str]] = []
        for constraint_type, column_names in rows:
            if constraint_type == "p":
                primary_keys = list(column_names)
            else:
                unique_constraints.append(list(column_names))
        return primary_keys, unique_constraints

    def get_foreign_keys(self, table_name: str) -> list[Relation]:
        """Get all foreign keys for a table, one relation per constraint."""
        with self.conn.cursor() as cur:
            cur.execute(
                """
                SELECT
                    rc.relname,
                    array_agg(a.attname ORDER BY k.ordinality),
                    array_agg(ra.attname ORDER BY k.ordinality)
                FROM pg_constraint con
                JOIN pg_class c ON c.oid = con.conrelid
                JOIN pg_namespace n ON n.oid = c.relnamespace
                JOIN pg_class rc ON rc.oid = con.confrelid
                CROSS JOIN LATERAL unnest(con.conkey, con.confkey)
                    WITH ORDINALITY AS k(attnum, ref_attnum, ordinality)
                JOIN pg_attribute a ON a.attrelid = con.conrelid AND a.attnum = k.attnum
                JOIN pg_attribute ra ON ra.attrelid = con.confrelid AND ra.attnum = k.ref_attnum
                WHERE n.nspname = %s
                  AND c.relname = %s
                  AND con.contype = 'f'
                GROUP BY con.oid, con.conname, rc.relname
                ORDER BY con.conname
                """,
                (self.schema, table_name),
            )
            rows = cur.fetchall()

        return [
            Relation(
                table=table_name,
                columns=list(columns),
                ref_table=ref_table,
                ref_columns=list(ref_columns),
            )
            for ref_table, columns, ref_columns in rows
        ]

    def get_relations(self) -> list[Relation]:
        """All foreign keys of the schema, linked and annotated with cycles (cached)."""
        if self._relations_cache is not None:
            return self._relations_cache

        relations: list[Relation] = []
        for table_name in self.get_table_names():
            relations.extend(self.get_foreign_keys(table_name))

        self._relations_cache = annotate_cyclic(link_relations(relations))
        return self._relations_cache

    def clear_cache(self) -> None:
        """Clear cached introspection data."""
        self._table_cache.clear()
        self._relations_cache = None
