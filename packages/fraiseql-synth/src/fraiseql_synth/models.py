"""Data models and type definitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from fraiseql_synth.generators.base import AbstractGenerator


@dataclass
class TypeParams:
    """
    Parameters parsed from a wire column type such as ``numeric(10, 2)``.

    Attributes:
        precision: Total digits for numeric types
        scale: Digits after the decimal point
        length: Declared length (varchar, bit, vector dimensions, ...)
        dimensions: Array dimensions (``integer[][]`` -> 2)
        vector_value_type: Element type of vector columns
    """

    precision: int | None = None
    scale: int | None = None
    length: int | None = None
    dimensions: int | None = None
    vector_value_type: str | None = None


@dataclass
class Column:
    """
    Column metadata in dialect-neutral form.

    Attributes:
        name: Column name
        column_type: Wire type string, e.g. ``varchar(256)`` or ``integer[]``
        data_type: Logical type: number, bigint, string, boolean, date,
            json, array, buffer or object
        type_params: Parsed type parameters
        size: Fixed array size, when declared
        has_default: Whether the database supplies a default
        default: Default value, if known
        enum_values: Labels of an enum column
        is_unique: Whether the column alone is unique
        not_null: Whether NULL is rejected
        primary: Whether the column is (part of) the primary key
        generated_identity_type: ``always`` or ``byDefault`` for identity columns
        identity: Whether the column is an auto-increment column
        base_column: Element column for array columns
    """

    name: str
    column_type: str
    data_type: str = "string"
    type_params: TypeParams = field(default_factory=TypeParams)
    size: int | None = None
    has_default: bool = False
    default: Any = None
    enum_values: list[Any] | None = None
    is_unique: bool = False
    not_null: bool = False
    primary: bool = False
    generated_identity_type: str | None = None
    identity: bool = False
    base_column: Column | None = None


@dataclass
class Table:
    """
    Table metadata.

    Attributes:
        name: Table name
        columns: Ordered columns
        primary_keys: Names of primary key columns
        unique_constraints: Column groups of multi-column unique constraints
        schema: Database schema the table lives in
    """

    name: str
    columns: list[Column]
    primary_keys: list[str] = field(default_factory=list)
    unique_constraints: list[list[str]] = field(default_factory=list)
    schema: str | None = None

    def get_column(self, name: str) -> Column | None:
        for column in self.columns:
            if column.name == name:
                return column
        return None


@dataclass
class Relation:
    """
    Directed foreign key edge.

    Attributes:
        table: Referencing table
        columns: Referencing columns, in constraint order
        ref_table: Referenced table
        ref_columns: Referenced columns, in constraint order
        ref_table_rels: Relations going out of ``ref_table``
        type: ``one`` for physical foreign keys, ``many`` for declared ones
        is_cyclic: Whether the edge lies on a cycle back to ``table``
    """

    table: str
    columns: list[str]
    ref_table: str
    ref_columns: list[str]
    ref_table_rels: list[Relation] = field(default_factory=list, repr=False, compare=False)
    type: str = "one"
    is_cyclic: bool = False

    @property
    def is_self_relation(self) -> bool:
        return self.table == self.ref_table


@dataclass
class WeightedCount:
    """One bucket of a weighted count: ``count`` is an int or a list to pick from."""

    weight: float
    count: int | list[int]


@dataclass
class TableRefinement:
    """
    User refinement for one table.

    Attributes:
        count: Rows to generate for the table
        columns: Column name -> generator, or False to leave it to the database
        with_: Child table -> rows per parent row (number or weighted counts)
    """

    count: int | None = None
    columns: dict[str, AbstractGenerator | bool] = field(default_factory=dict)
    with_: dict[str, int | list[WeightedCount]] = field(default_factory=dict)


@dataclass
class TableRows:
    """Rows produced for one table."""

    table_name: str
    rows: list[dict[str, Any]]


@dataclass
class SeedRow:
    """
    A single row of seed data with attribute access.

    Allows accessing column values as attributes:
        row.id        # Access column value
        row.email     # Access email column

    Attributes:
        _data: Raw column data dict
    """

    _data: dict[str, Any]

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(f"No attribute '{name}'")
        if name in self._data:
            return self._data[name]
        raise AttributeError(f"No column '{name}' in seed data")

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)


class Seeds:
    """
    Container for generated seed data with attribute access.

    Allows accessing tables as attributes:
        seeds.users   # List of SeedRow objects
        seeds.posts   # List of SeedRow objects
    """

    def __init__(self):
        self._tables: dict[str, list[SeedRow]] = {}

    def add_table(self, table_name: str, rows: list[dict[str, Any]]) -> None:
        """
        Add seed data for a table.

        Args:
            table_name: Table name
            rows: List of row dicts with column data
        """
        self._tables[table_name] = [SeedRow(_data=row) for row in rows]

    def table_names(self) -> list[str]:
        return list(self._tables)

    def __getattr__(self, name: str) -> list[SeedRow]:
        if name.startswith("_"):
            raise AttributeError(f"No attribute '{name}'")
        if name in self._tables:
            return self._tables[name]
        raise AttributeError(f"No table '{name}' in seeds")

    def __getitem__(self, name: str) -> list[SeedRow]:
        return self._tables[name]
