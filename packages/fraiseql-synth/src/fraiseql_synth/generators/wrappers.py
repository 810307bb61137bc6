"""
Structural generators: placeholders, pools, weighted choice and composition.

These wrap values or other generators instead of encoding a column domain.
"""

import math
from typing import Any

from fraiseql_synth.exceptions import (
    CapacityError,
    GeneratorConfigError,
    GeneratorStateError,
)
from fraiseql_synth.generators.base import AbstractGenerator
from fraiseql_synth.generators.numeric import UniqueIntGenerator
from fraiseql_synth.models import WeightedCount
from fraiseql_synth.prng import Xoroshiro128Plus, uniform_int
from fraiseql_synth.utils import (
    fast_cartesian_product,
    get_weighted_indices,
    hash_from_string,
)


def _field(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item[name]
    return getattr(item, name)


class DefaultGenerator(AbstractGenerator):
    """Always returns ``default_value``."""

    kind = "default"

    def generate(self, i: int = 0, **context: Any) -> Any:
        return self.params.get("default_value")


class HollowGenerator(AbstractGenerator):
    """Placeholder for columns filled later or by the database."""

    kind = "hollow"

    def generate(self, i: int = 0, **context: Any) -> Any:
        return None


class HashFromStringGenerator(AbstractGenerator):
    """Rolling hash of ``context['text']``; used to derive column seeds."""

    kind = "hash_from_string"

    def init(self, count: int = 0, seed: int = 0) -> None:
        super().init(count, seed)

    def generate(self, i: int = 0, **context: Any) -> Any:
        return hash_from_string(context["text"], version=1)


class HashFromStringGeneratorV3(HashFromStringGenerator):
    """Hash with the total reduced modulo m, keeping seeds in a bounded range."""

    version = 3

    def generate(self, i: int = 0, **context: Any) -> Any:
        return hash_from_string(context["text"], version=3)


class ArrayGenerator(AbstractGenerator):
    """
    Fixed-length arrays built from ``base_column_gen``.

    The base generator is initialized for ``count * size`` values, so a unique
    base stays unique across every element of every row.
    """

    kind = "array"

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        size = self.params.get("size") or 10
        base = self.params["base_column_gen"]
        base.init(count * size, seed)
        self.state.update(size=size, base=base)

    def generate(self, i: int = 0, **context: Any) -> Any:
        state = self._require_state()
        size = state["size"]
        base = state["base"]
        return [base.generate(i * size + k, **context) for k in range(size)]


class WeightedCountGenerator(AbstractGenerator):
    """
    Draws a count from ``weighted_count``: a list of ``{weight, count}`` where
    ``count`` is an int or a list of ints to pick from uniformly.
    """

    kind = "weighted_count"

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        buckets = self.params["weighted_count"]
        self.state["buckets"] = buckets
        self.state["weighted_indices"] = get_weighted_indices([_field(b, "weight") for b in buckets])

    def generate(self, i: int = 0, **context: Any) -> Any:
        state = self._require_state()
        bucket = state["buckets"][self._pick(state["weighted_indices"])]
        count = _field(bucket, "count")
        if isinstance(count, (list, tuple)):
            return self._pick(count)
        return count


def get_weighted_with_count(weighted_count: list[WeightedCount], seed: int, count: int) -> int:
    """Sum of ``count`` draws from a weighted count list, seeded by ``seed``."""
    generator = WeightedCountGenerator(weighted_count=weighted_count)
    generator.init(count, seed)
    return sum(generator.generate(i) for i in range(count))


class ValuesFromArrayGenerator(AbstractGenerator):
    """
    Picks values from ``values``.

    ``values`` is either a plain list, or a list of ``{weight, values}``
    groups. ``max_repeated_values_count`` (set on the instance) caps how many
    times each value can be returned: an int, or a weighted count list drawn
    per value with ``weighted_count_seed``.

    Params:
        values: Value list or weighted groups
        is_unique: Return each value at most once
    """

    kind = "values_from_array"

    def _is_weighted(self) -> bool:
        values = self.params.get("values") or []
        return bool(values) and isinstance(values[0], dict) and "weight" in values[0]

    def _values_count(self) -> int:
        values = self.params["values"]
        if self._is_weighted():
            return sum(len(group["values"]) for group in values)
        return len(values)

    def get_max_unique_count(self) -> int | float:
        return self._values_count()

    def checks(self, count: int) -> None:
        values = self.params.get("values")
        if not values:
            raise GeneratorConfigError("values length equals zero.")
        if self._is_weighted() and any(len(group["values"]) == 0 for group in values):
            raise GeneratorConfigError("one of weighted values length equals zero.")

        max_repeated = self.max_repeated_values_count
        if isinstance(max_repeated, int) and max_repeated <= 0:
            raise GeneratorConfigError("max_repeated_values_count should be greater than zero.")

        values_count = self._values_count()
        if (
            self.not_null
            and isinstance(max_repeated, int)
            and max_repeated * values_count < count
        ):
            raise CapacityError(
                "Can't fill notNull column with null values. "
                f"{values_count} values repeated at most {max_repeated} times "
                f"can't fill {count} rows."
            )
        if self.is_unique and isinstance(max_repeated, int) and max_repeated > 1:
            raise GeneratorConfigError(
                "max_repeated_values_count can't be greater than 1 if column is unique."
            )
        if self.is_unique and self.not_null and values_count < count:
            raise CapacityError("There are no enough values to fill unique column.")

    def init(self, count: int, seed: int) -> None:
        self.update_params()
        self.checks(count)
        super().init(count, seed)

        max_repeated = self.max_repeated_values_count
        if self.is_unique and max_repeated is None:
            max_repeated = 1

        gen_max_repeated = None
        if max_repeated is not None:
            if isinstance(max_repeated, int):
                gen_max_repeated = DefaultGenerator(default_value=max_repeated)
            else:
                gen_max_repeated = WeightedCountGenerator(weighted_count=max_repeated)
            count_seed = self.weighted_count_seed if self.weighted_count_seed is not None else seed
            gen_max_repeated.init(count, count_seed)

        values = self.params["values"]
        state = self.state
        state["values"] = values
        state["weighted"] = self._is_weighted()

        if not state["weighted"]:
            state["index_generator"] = None
            if gen_max_repeated is not None:
                index_generator = UniqueIntGenerator(
                    min_value=0,
                    max_value=len(values) - 1,
                    skip_check=True,
                    gen_max_repeated_values_count=gen_max_repeated,
                )
                index_generator.init(count, seed)
                state["index_generator"] = index_generator
            return

        state["weighted_indices"] = get_weighted_indices([group["weight"] for group in values])
        if self.is_unique and self.not_null:
            self._check_weighted_groups(count, seed, state["weighted_indices"])

        state["index_generators"] = None
        if gen_max_repeated is not None:
            generators = []
            for group in values:
                generator = UniqueIntGenerator(
                    min_value=0,
                    max_value=len(group["values"]) - 1,
                    skip_check=True,
                    gen_max_repeated_values_count=gen_max_repeated,
                )
                generator.init(count, seed)
                generators.append(generator)
            state["index_generators"] = generators

    def _check_weighted_groups(self, count: int, seed: int, weighted_indices: list[int]) -> None:
        # Replays the group draws generate() will make.
        rng = Xoroshiro128Plus.from_seed(seed)
        needed = [0] * len(self.params["values"])
        for _ in range(count):
            index, rng = uniform_int(0, len(weighted_indices) - 1, rng)
            needed[weighted_indices[index]] += 1
        for group, required in zip(self.params["values"], needed):
            if len(group["values"]) < required:
                raise CapacityError(
                    f"weighted group with weight {group['weight']} has "
                    f"{len(group['values'])} values, but {required} unique values "
                    f"are needed. There are no enough values to fill unique column."
                )

    def generate(self, i: int = 0, **context: Any) -> Any:
        state = self._require_state()
        if not state["weighted"]:
            values = state["values"]
            index_generator = state["index_generator"]
            if index_generator is None:
                return self._pick(values)
            index = index_generator.generate()
            return None if index is None else values[index]

        group_index = self._pick(state["weighted_indices"])
        group_values = state["values"][group_index]["values"]
        if state["index_generators"] is None:
            return self._pick(group_values)
        index = state["index_generators"][group_index].generate()
        return None if index is None else group_values[index]


class SelfRelationsValuesFromArrayGenerator(AbstractGenerator):
    """
    Values for a self-referencing foreign key.

    The first 20-40% of rows point at their own ``values[i]``; every later row
    points at one of those root values, which yields a shallow forest.
    """

    kind = "self_relations_values_from_array"

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        percent = self._draw(20, 40)
        first_values_count = math.floor(percent / 100 * count)
        if count > 0:
            first_values_count = max(1, first_values_count)
        self.state.update(first_values_count=first_values_count, first_values=[])

    def generate(self, i: int = 0, **context: Any) -> Any:
        state = self._require_state()
        if i < state["first_values_count"]:
            value = self.params["values"][i]
            state["first_values"].append(value)
            return value
        return self._pick(state["first_values"])


class WeightedRandomGenerator(AbstractGenerator):
    """
    Delegates each row to one of several generators chosen by weight.

    Params:
        weighted_values: List of ``{"weight": float, "value": AbstractGenerator}``
    """

    kind = "weighted_random"

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        entries = self.params["weighted_values"]
        weighted_indices = get_weighted_indices([entry["weight"] for entry in entries])

        # Replay the draws generate() will make to size every child.
        rng = Xoroshiro128Plus.from_seed(seed)
        counts = [0] * len(entries)
        for _ in range(count):
            index, rng = uniform_int(0, len(weighted_indices) - 1, rng)
            counts[weighted_indices[index]] += 1

        generators = []
        for entry, child_count in zip(entries, counts):
            generator = entry["value"]
            generator.is_unique = self.is_unique
            generator.not_null = self.not_null
            generator.data_type = self.data_type
            generator.type_params = self.type_params
            if self.is_unique:
                generator = generator.replace_if_unique() or generator
            generator.init(child_count, seed)
            generators.append(generator)

        self.state.update(weighted_indices=weighted_indices, generators=generators)

    def get_max_unique_count(self) -> int | float:
        return sum(entry["value"].get_max_unique_count() for entry in self.params["weighted_values"])

    def generate(self, i: int = 0, **context: Any) -> Any:
        state = self._require_state()
        generator = state["generators"][self._pick(state["weighted_indices"])]
        return generator.generate(i, **context)


class CompositeUniqueKeyGenerator(AbstractGenerator):
    """
    Joint values for the columns of a multi-column unique constraint.

    Each contributing generator produces a small pool of distinct values;
    row ``i`` gets the ``i``-th tuple of the pools' Cartesian product. Pool
    sizes start at the n-th root of ``count``; generators whose domain is
    smaller than that are saturated first and the remaining budget is spread
    over the rest.
    """

    kind = "composite_unique_key"
    is_generator_unique = True

    def __init__(self, **params: Any):
        super().__init__(**params)
        self.is_unique = True
        self.columns: list[tuple[str, AbstractGenerator]] = []

    def add_generator(self, column_name: str, generator: AbstractGenerator) -> None:
        self.columns.append((column_name, generator))

    def get_max_unique_count(self) -> int | float:
        return math.prod(generator.get_max_unique_count() for _, generator in self.columns)

    def init(self, count: int, seed: int) -> None:
        # Every contributing column calls init; only the first call builds state.
        if self.state is not None and self.state.get("init_args") == (count, seed):
            return
        if not self.columns:
            raise GeneratorConfigError("composite unique key has no generators.")

        super().init(count, seed)
        counts = self._distribute(count)

        pools: dict[str, list[Any]] = {}
        for column_name, generator in self.columns:
            generator.init(counts[column_name], seed)
            pools[column_name] = [generator.generate(j) for j in range(counts[column_name])]

        self.state.update(
            init_args=(count, seed),
            column_names=[name for name, _ in self.columns],
            pools=pools,
            current_index=None,
            current_tuple=None,
        )

    def _distribute(self, count: int) -> dict[str, int]:
        remaining = len(self.columns)
        count_per_gen = math.ceil(count ** (1 / remaining)) if count > 0 else 0
        current_count = count
        counts: dict[str, int] = {}

        ordered = sorted(self.columns, key=lambda item: item[1].get_max_unique_count())
        for column_name, generator in ordered:
            max_unique = generator.get_max_unique_count()
            if max_unique < count_per_gen:
                counts[column_name] = int(max_unique)
                current_count = math.ceil(current_count / max(max_unique, 1))
                remaining -= 1
                if remaining:
                    count_per_gen = math.ceil(current_count ** (1 / remaining))
            else:
                counts[column_name] = count_per_gen

        if math.prod(counts.values()) < count:
            raise CapacityError(
                f"There are no enough unique values in each generator to generate {count} values; "
                f"the columns ({', '.join(counts)}) can reach at most "
                f"{math.prod(counts.values())} combinations."
            )
        return counts

    def generate(self, i: int = 0, **context: Any) -> Any:
        state = self._require_state()
        column_name = context.get("column_name")
        if column_name not in state["pools"]:
            raise GeneratorStateError(f"column '{column_name}' is not part of this composite key.")

        if state["current_index"] != i:
            pools = [state["pools"][name] for name in state["column_names"]]
            state["current_tuple"] = fast_cartesian_product(pools, i)
            state["current_index"] = i
        return state["current_tuple"][state["column_names"].index(column_name)]


class CustomGenerator(AbstractGenerator):
    """
    Generator backed by user callables.

    Params:
        generate: ``callable(i, draw)`` returning the row value; ``draw(min, max)``
            gives seeded integers
        init: Optional ``callable(count, seed)`` run at init
    """

    kind = "custom"

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        init_func = self.params.get("init")
        if init_func is not None:
            init_func(count, seed)

    def generate(self, i: int = 0, **context: Any) -> Any:
        self._require_state()
        return self.params["generate"](i, self._draw)
