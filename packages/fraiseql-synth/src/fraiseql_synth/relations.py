"""Relationship analysis: cycle detection, in/out degrees and fill order."""

import functools
import logging
from collections import deque
from dataclasses import dataclass, field

from fraiseql_synth.exceptions import CyclicNotNullError
from fraiseql_synth.models import Relation, Table

logger = logging.getLogger(__name__)


@dataclass
class TableRelationInfo:
    """
    Degree bookkeeping for one table.

    Attributes:
        out: Relations going out of the table (self-relations included)
        in_: Relations pointing at the table (self-relations included)
        self_relation: Whether the table references itself
        self_relation_count: Number of self-referencing relations
        required_tables: Tables this table's foreign keys point to (self excluded)
        dependant_tables: Tables whose foreign keys point to this table (self excluded)
    """

    out: int = 0
    in_: int = 0
    self_relation: bool = False
    self_relation_count: int = 0
    required_tables: set[str] = field(default_factory=set)
    dependant_tables: set[str] = field(default_factory=set)


def link_relations(relations: list[Relation]) -> list[Relation]:
    """Fill ``ref_table_rels`` of every relation with the referenced table's relations."""
    by_table: dict[str, list[Relation]] = {}
    for relation in relations:
        by_table.setdefault(relation.table, []).append(relation)
    for relation in relations:
        relation.ref_table_rels = by_table.get(relation.ref_table, [])
    return relations


def is_relation_cyclic(start: Relation) -> bool:
    """
    Whether ``start`` lies on a directed cycle leading back to its table.

    Depth-first walk over ``ref_table_rels`` keeping the current path, so
    cycles that don't include ``start.table`` are skipped. Self-relations are
    never cyclic.
    """
    if start.is_self_relation:
        return False

    target_table = start.table
    stack: deque[Relation] = deque([start])
    path: list[str] = []
    while stack:
        current = stack.popleft()
        if current.table in path:
            path = path[: path.index(current.table)]
        path.append(current.table)

        for relation in current.ref_table_rels:
            if relation.is_self_relation:
                continue
            if relation.ref_table == target_table:
                return True
            # A cycle, but not through the start table.
            if relation.ref_table in path:
                continue
            stack.appendleft(relation)

    return False


def annotate_cyclic(relations: list[Relation]) -> list[Relation]:
    """Set ``is_cyclic`` on every relation."""
    for relation in relations:
        relation.is_cyclic = is_relation_cyclic(relation)
    return relations


def merge_declared_relations(physical: list[Relation], declared: list[Relation]) -> list[Relation]:
    """
    Combine foreign keys with declared one-to-many relations.

    A declared relation from A to B is dropped when B already has a foreign
    key referencing A; the foreign key wins.
    """
    merged = list(physical)
    for relation in declared:
        reverse = next(
            (
                fk
                for fk in physical
                if fk.table == relation.ref_table and fk.ref_table == relation.table
            ),
            None,
        )
        if reverse is not None:
            logger.warning(
                f"You are providing a one-to-many relation between the '{relation.table}' "
                f"and '{relation.ref_table}' tables, while the '{relation.ref_table}' table "
                f"object already has foreign key constraint in the schema referencing "
                f"'{relation.table}' table. In this case, the foreign key constraint will be used."
            )
            continue
        merged.append(relation)
    return merged


def get_info_from_relations(relations: list[Relation]) -> dict[str, TableRelationInfo]:
    """Per-table degrees and required/dependant table sets."""
    info: dict[str, TableRelationInfo] = {}
    for relation in relations:
        table_info = info.setdefault(relation.table, TableRelationInfo())
        ref_info = info.setdefault(relation.ref_table, TableRelationInfo())

        table_info.out += 1
        ref_info.in_ += 1

        if relation.is_self_relation:
            table_info.self_relation = True
            table_info.self_relation_count += 1
        else:
            table_info.required_tables.add(relation.ref_table)
            ref_info.dependant_tables.add(relation.table)
    return info


def get_ordered_tables_list(info: dict[str, TableRelationInfo]) -> list[str]:
    """
    Order tables so that referenced tables come before the tables referencing them.

    Starts from leaf tables (no outgoing relations other than self-relations).
    A table whose outstanding required tables equal its dependant tables is a
    cyclic pair member and is placed anyway. Longer cycles stall the walk: it
    stops once a table comes back round with nothing placed in between, and
    the unplaced tables are left to the caller.
    """
    required = {name: set(table_info.required_tables) for name, table_info in info.items()}
    queue = deque(
        name
        for name, table_info in info.items()
        if table_info.out == 0 or table_info.self_relation_count == table_info.out
    )

    ordered: list[str] = []
    deferred: set[str] = set()
    while queue:
        parent = queue.popleft()
        if parent in ordered:
            continue
        if parent not in info:
            ordered.append(parent)
            deferred.clear()
            continue

        required[parent].difference_update(ordered)
        if not required[parent] or required[parent] == info[parent].dependant_tables:
            ordered.append(parent)
            deferred.clear()
        else:
            if parent in deferred:
                break
            deferred.add(parent)
            queue.extend(sorted(required[parent]))
            queue.append(parent)
            continue

        queue.extend(sorted(info[parent].dependant_tables))
    return ordered


def _has_not_null_columns(table: Table, columns: list[str]) -> bool:
    for name in columns:
        column = table.get_column(name)
        if column is not None and column.not_null:
            return True
    return False


def cyclic_tables_compare(
    table1: Table,
    table2: Table,
    relation: Relation,
    reverse_relation: Relation | None,
) -> int:
    """
    Order two tables joined by a cyclic relation (``relation``: table1 -> table2).

    The table whose foreign key is not-null goes after its counterpart. When
    neither side is not-null the tables keep their relative order.

    Raises:
        CyclicNotNullError: If both foreign keys are not-null
    """
    table1_not_null = _has_not_null_columns(table1, relation.columns)

    if reverse_relation is not None:
        table2_not_null = _has_not_null_columns(table2, reverse_relation.columns)
        if table1_not_null and table2_not_null:
            raise CyclicNotNullError(table1.name, table2.name)
        if table1_not_null:
            return 1
        if table2_not_null:
            return -1
        return 0

    return 1 if table1_not_null else 0


def _order_cycle_members(
    tables: list[Table],
    relations: list[Relation],
    info: dict[str, TableRelationInfo],
    placed: list[str],
) -> list[str]:
    """
    Fill order for tables the leaf walk never reached (cycles with no way in).

    Nullable cyclic foreign keys are filled by the update pass, so only
    not-null or acyclic references have to point at earlier tables.
    """
    pending = [t for t in tables if t.name in info and t.name not in placed]
    pending_names = {t.name for t in pending}
    needs = {
        t.name: {
            r.ref_table
            for r in relations
            if r.table == t.name
            and r.ref_table in pending_names
            and not r.is_self_relation
            and (not r.is_cyclic or _has_not_null_columns(t, r.columns))
        }
        for t in pending
    }

    ordered: list[str] = []
    while pending:
        ready = next((t for t in pending if needs[t.name] <= set(ordered)), None)
        if ready is None:
            blocked = pending[0].name
            raise CyclicNotNullError(blocked, next(iter(needs[blocked])))
        ordered.append(ready.name)
        pending.remove(ready)
    return ordered


def sort_tables(tables: list[Table], relations: list[Relation]) -> list[Table]:
    """Sort tables into fill order, breaking cyclic pairs by not-null foreign keys."""
    info = get_info_from_relations(relations)
    ordered_names = get_ordered_tables_list(info)
    ordered_names += _order_cycle_members(tables, relations, info, ordered_names)
    positions = {name: index for index, name in enumerate(ordered_names)}

    def compare(table1: Table, table2: Table) -> int:
        relation = next(
            (r for r in relations if r.table == table1.name and r.ref_table == table2.name),
            None,
        )
        if relation is not None and relation.is_cyclic:
            reverse_relation = next(
                (r for r in relations if r.table == table2.name and r.ref_table == table1.name),
                None,
            )
            result = cyclic_tables_compare(table1, table2, relation, reverse_relation)
            if result:
                return result
        return positions.get(table1.name, -1) - positions.get(table2.name, -1)

    return sorted(tables, key=functools.cmp_to_key(compare))
