"""In-memory store: rows, updates and sequence values kept in dicts."""

from typing import Any


class StagingBackend:
    """
    In-memory store for seed generation without a database.

    Records what a database would receive:
    - Inserted rows per table, in insert order
    - Updates applied in place, matched on the key column
    - The last sequence value set per ``table.column``

    Use case: Fast unit tests, offline development, previewing seed data.
    """

    def __init__(self):
        self._data: dict[str, list[dict[str, Any]]] = {}
        self._sequences: dict[str, int] = {}
        self.insert_calls: list[tuple[str, int, bool]] = []

    def insert(self, table: str, rows: list[dict[str, Any]], override: bool = False) -> int:
        """
        Store rows in memory.

        Args:
            table: Table name
            rows: Row dicts
            override: Recorded only; staging has no identity columns

        Returns:
            Number of stored rows
        """
        if not rows:
            return 0
        self._data.setdefault(table, []).extend(dict(row) for row in rows)
        self.insert_calls.append((table, len(rows), override))
        return len(rows)

    def update(self, table: str, rows: list[dict[str, Any]], key_column: str) -> int:
        updated = 0
        stored = self._data.get(table, [])
        for row in rows:
            for existing in stored:
                if existing.get(key_column) == row[key_column]:
                    existing.update(row)
                    updated += 1
        return updated

    def advance_sequence(self, table: str, column: str, value: int) -> None:
        self._sequences[f"{table}.{column}"] = value

    def reset(self, tables: list[str]) -> None:
        for table in tables:
            self._data.pop(table, None)
            for key in [k for k in self._sequences if k.startswith(f"{table}.")]:
                del self._sequences[key]

    def get_data(self, table_name: str) -> list[dict[str, Any]]:
        """Rows stored for ``table_name`` so far (empty list if none)."""
        return self._data.get(table_name, [])

    def get_sequence(self, table_name: str, column: str) -> int | None:
        return self._sequences.get(f"{table_name}.{column}")

    def clear(self):
        """Forget all stored state."""
        self._data.clear()
        self._sequences.clear()
        self.insert_calls.clear()
