"""
fraiseql-synth - Deterministic Synthetic Data Generation

Fills relational schemas with reproducible fake data: the same schema, seed
and version always produce the same rows.
"""

from fraiseql_synth.builder import SeedBuilder
from fraiseql_synth.dialects import DialectKind
from fraiseql_synth.generators.base import AbstractGenerator
from fraiseql_synth.generators.registry import (
    LATEST_VERSION,
    build_generator,
    clear_generators,
    list_generators,
    register_generator,
)
from fraiseql_synth.models import (
    Column,
    Relation,
    SeedRow,
    Seeds,
    Table,
    TableRefinement,
    TypeParams,
    WeightedCount,
)
from fraiseql_synth.refinements import load_refinements

__version__ = "0.1.0"

__all__ = [
    "SeedBuilder",
    "DialectKind",
    "Seeds",
    "SeedRow",
    "Table",
    "Column",
    "TypeParams",
    "Relation",
    "TableRefinement",
    "WeightedCount",
    "AbstractGenerator",
    "LATEST_VERSION",
    "build_generator",
    "register_generator",
    "list_generators",
    "clear_generators",
    "load_refinements",
]
