"""Refinement files: per-table counts, column generators and child ratios.

Example ``refinements.yaml``::

    users:
      count: 5
      columns:
        email:
          generator: email
        nickname: false
      with:
        posts: 2
    posts:
      columns:
        score:
          generator: weighted_random
          weighted_values:
            - weight: 0.5
              value: {generator: int, min_value: 0, max_value: 10}
            - weight: 0.5
              value: {generator: int, min_value: 90, max_value: 100}

A column mapped to ``false`` is left out of the rows so the database
supplies its default. Nested mappings with a ``generator`` key are built
too, so wrappers such as ``array`` or ``weighted_random`` can be configured.
"""

import logging
from pathlib import Path
from typing import Any

from fraiseql_synth.exceptions import ConfigurationError
from fraiseql_synth.generators.base import AbstractGenerator
from fraiseql_synth.generators.registry import build_generator
from fraiseql_synth.models import TableRefinement, WeightedCount

logger = logging.getLogger(__name__)

TABLE_KEYS = {"count", "columns", "with"}


def load_refinements(path: str | Path) -> dict[str, TableRefinement]:
    """
    Load refinements from a YAML file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ConfigurationError: If the file is not a valid refinement mapping
    """
    import yaml

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Refinements file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f)

    logger.info(f"Loading refinements from {path}")
    return parse_refinements(data or {})


def parse_refinements(data: dict[str, Any]) -> dict[str, TableRefinement]:
    """Build ``TableRefinement`` objects from plain data (parsed YAML or JSON)."""
    if not isinstance(data, dict):
        raise ConfigurationError("Refinements must be a mapping of table name to refinement.")

    refinements = {}
    for table_name, entry in data.items():
        if entry is None:
            entry = {}
        if not isinstance(entry, dict):
            raise ConfigurationError(f"Refinement for table '{table_name}' must be a mapping.")

        unknown = set(entry) - TABLE_KEYS
        if unknown:
            raise ConfigurationError(
                f"Unknown keys in refinement for table '{table_name}': {', '.join(sorted(unknown))}\n\n"
                f"Suggestions:\n"
                f"1. Allowed keys are: {', '.join(sorted(TABLE_KEYS))}"
            )

        count = entry.get("count")
        if count is not None and (isinstance(count, bool) or not isinstance(count, int) or count < 0):
            raise ConfigurationError(
                f"Count for table '{table_name}' must be a non-negative integer, got {count!r}."
            )

        refinements[table_name] = TableRefinement(
            count=count,
            columns={
                column_name: _parse_column(table_name, column_name, raw)
                for column_name, raw in (entry.get("columns") or {}).items()
            },
            with_={
                child: _parse_with(table_name, child, raw)
                for child, raw in (entry.get("with") or {}).items()
            },
        )
    return refinements


def _parse_column(table_name: str, column_name: str, raw: Any) -> AbstractGenerator | bool:
    if raw is False:
        return False
    if not isinstance(raw, dict) or "generator" not in raw:
        raise ConfigurationError(
            f"Column '{column_name}' of table '{table_name}' must map to false or to "
            f"a mapping with a 'generator' key.\n\n"
            f"Suggestions:\n"
            f"1. Use {{generator: <kind>, ...params}}, e.g. {{generator: int, min_value: 1}}"
        )
    return _build(raw)


def _build(raw: Any) -> Any:
    if isinstance(raw, dict) and "generator" in raw:
        params = {key: _build(value) for key, value in raw.items() if key != "generator"}
        return build_generator(raw["generator"], **params)
    if isinstance(raw, dict):
        return {key: _build(value) for key, value in raw.items()}
    if isinstance(raw, list):
        return [_build(value) for value in raw]
    return raw


def _parse_with(table_name: str, child: str, raw: Any) -> int | list[WeightedCount]:
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    if isinstance(raw, list) and all(
        isinstance(item, dict) and "weight" in item and "count" in item for item in raw
    ):
        return [WeightedCount(weight=float(item["weight"]), count=item["count"]) for item in raw]
    raise ConfigurationError(
        f"'with' ratio from table '{table_name}' to '{child}' must be a number or "
        f"a list of {{weight, count}} entries, got {raw!r}."
    )
