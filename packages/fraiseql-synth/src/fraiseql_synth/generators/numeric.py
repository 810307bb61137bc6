"""Integer, decimal, boolean and bit-string generators."""

import math
from typing import Any

from fraiseql_synth.exceptions import (
    CapacityError,
    GeneratorConfigError,
    GeneratorStateError,
    UniqueCountExceededError,
)
from fraiseql_synth.generators.base import AbstractGenerator
from fraiseql_synth.utils import fast_cartesian_product


class UniqueIntGenerator(AbstractGenerator):
    """
    Unique integers from ``[min_value, max_value]`` by shrinking-interval sampling.

    The state keeps a list of disjoint intervals. Each draw picks an interval,
    picks a number inside it, and splits the interval around that number.

    Params:
        min_value, max_value: Inclusive bounds (default ``±count * 10``)
        skip_check: Don't fail at init when count exceeds the range; return
            None once the pool is exhausted instead
        gen_max_repeated_values_count: Initialized generator giving how many
            times each number may be returned before it is removed
    """

    kind = "unique_int"
    is_generator_unique = True

    def __init__(self, **params: Any):
        super().__init__(**params)
        self.is_unique = True

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        min_value = self.params.get("min_value")
        max_value = self.params.get("max_value")
        if max_value is None:
            max_value = count * 10
        if min_value is None:
            min_value = -max_value
        min_value = math.ceil(min_value)
        max_value = math.floor(max_value)

        if not self.params.get("skip_check") and count > max_value - min_value + 1:
            raise CapacityError(
                f"count exceeds max number of unique integers in given range"
                f"(min: {min_value}, max: {max_value}), try to make range wider."
            )

        self.state["min_value"] = min_value
        self.state["max_value"] = max_value
        self.state["intervals"] = [(min_value, max_value)] if min_value <= max_value else []
        self.state["integers_count"] = {}
        self.state["gen_max_repeated"] = self.params.get("gen_max_repeated_values_count")

    def get_max_unique_count(self) -> int | float:
        min_value = self.params.get("min_value")
        max_value = self.params.get("max_value")
        if min_value is None or max_value is None:
            return math.inf
        return math.floor(max_value) - math.ceil(min_value) + 1

    def generate(self, i: int = 0, **context: Any) -> Any:
        state = self._require_state()
        intervals = state["intervals"]
        if not intervals:
            if self.params.get("skip_check"):
                return None
            raise GeneratorStateError("there are no more unique integers in the interval pool.")

        interval_index = self._draw(0, len(intervals) - 1)
        low, high = intervals[interval_index]
        number = self._draw(low, high)

        counts = state["integers_count"]
        gen_max_repeated = state["gen_max_repeated"]
        if gen_max_repeated is not None:
            if number not in counts:
                counts[number] = gen_max_repeated.generate()
            counts[number] -= 1

        if counts.get(number, 0) <= 0:
            counts.pop(number, None)
            intervals[interval_index] = intervals[-1]
            intervals.pop()
            if low <= number - 1:
                intervals.append((low, number - 1))
            if number + 1 <= high:
                intervals.append((number + 1, high))

        if self.data_type == "string":
            return str(number)
        return number


class IntGenerator(AbstractGenerator):
    """Integers from ``[min_value, max_value]`` (default ``[-1000, 1000]``)."""

    kind = "int"
    unique_version = UniqueIntGenerator

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        max_value = self.params.get("max_value")
        if max_value is None:
            max_value = 1000
        min_value = self.params.get("min_value")
        if min_value is None:
            min_value = -max_value
        self.state["min_value"] = math.ceil(min_value)
        self.state["max_value"] = math.floor(max_value)

    def generate(self, i: int = 0, **context: Any) -> Any:
        state = self._require_state()
        value = self._draw(state["min_value"], state["max_value"])
        if self.data_type == "string":
            return str(value)
        return value


class IntPrimaryKeyGenerator(AbstractGenerator):
    """Sequential ``1..count`` values for integer primary keys."""

    kind = "int_primary_key"
    is_generator_unique = True

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        max_value = self.params.get("max_value")
        if max_value is not None and count > max_value:
            raise CapacityError("count exceeds max number for this column type.")

    def generate(self, i: int = 0, **context: Any) -> Any:
        self._require_state()
        if self.data_type == "string":
            return str(i + 1)
        return i + 1


def _scaled_bounds(params: dict[str, Any], default_max: int) -> tuple[int, int, int]:
    precision = params.get("precision") or 100
    max_value = params.get("max_value")
    max_value = precision * default_max if max_value is None else round(max_value * precision)
    min_value = params.get("min_value")
    min_value = -max_value if min_value is None else round(min_value * precision)
    return min_value, max_value, precision


class UniqueNumberGenerator(AbstractGenerator):
    """
    Unique decimals with ``precision`` steps per unit.

    ``precision=100`` gives two decimal places. The scaled integers are drawn
    through :class:`UniqueIntGenerator`.
    """

    kind = "unique_number"
    is_generator_unique = True

    def __init__(self, **params: Any):
        super().__init__(**params)
        self.is_unique = True

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        precision = self.params.get("precision") or 100
        if self.params.get("max_value") is None:
            max_value = count * precision
            min_value = -max_value
        else:
            min_value, max_value, precision = _scaled_bounds(self.params, 1000)

        generator = UniqueIntGenerator(min_value=min_value, max_value=max_value)
        generator.init(count, seed)
        self.state["precision"] = precision
        self.state["generator"] = generator

    def get_max_unique_count(self) -> int | float:
        if self.params.get("max_value") is None:
            return math.inf
        min_value, max_value, _ = _scaled_bounds(self.params, 1000)
        return max_value - min_value + 1

    def generate(self, i: int = 0, **context: Any) -> Any:
        state = self._require_state()
        value = state["generator"].generate() / state["precision"]
        if self.data_type == "string":
            return str(value)
        return value


class NumberGenerator(AbstractGenerator):
    """Decimals in ``[min_value, max_value]`` with ``precision`` steps per unit."""

    kind = "number"
    unique_version = UniqueNumberGenerator

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        min_value, max_value, precision = _scaled_bounds(self.params, 1000)
        if min_value > max_value:
            raise GeneratorConfigError(
                f"min_value ({min_value / precision}) is greater than max_value ({max_value / precision})."
            )
        self.state.update(min_value=min_value, max_value=max_value, precision=precision)

    def generate(self, i: int = 0, **context: Any) -> Any:
        state = self._require_state()
        value = self._draw(state["min_value"], state["max_value"]) / state["precision"]
        if self.data_type == "string":
            return str(value)
        return value


class BooleanGenerator(AbstractGenerator):
    kind = "boolean"

    def generate(self, i: int = 0, **context: Any) -> Any:
        return self._draw(0, 1) == 1


def _bit_dimensions(generator: AbstractGenerator) -> int:
    return generator.params.get("dimensions") or generator.type_params.length or 11


class UniqueBitStringGenerator(AbstractGenerator):
    """Distinct bit strings of ``dimensions`` bits."""

    kind = "unique_bit_string"
    is_generator_unique = True

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        dimensions = _bit_dimensions(self)
        max_count = 2**dimensions
        if count > max_count:
            raise UniqueCountExceededError(f"bit strings of length {dimensions}", max_count)
        generator = UniqueIntGenerator(min_value=0, max_value=max_count - 1)
        generator.init(count, seed)
        self.state.update(dimensions=dimensions, generator=generator)

    def get_max_unique_count(self) -> int | float:
        return 2 ** _bit_dimensions(self)

    def generate(self, i: int = 0, **context: Any) -> Any:
        state = self._require_state()
        return format(state["generator"].generate(), f"0{state['dimensions']}b")


class BitStringGenerator(AbstractGenerator):
    kind = "bit_string"
    unique_version = UniqueBitStringGenerator

    def init(self, count: int, seed: int) -> None:
        super().init(count, seed)
        dimensions = _bit_dimensions(self)
        generator = IntGenerator(min_value=0, max_value=2**dimensions - 1)
        generator.init(count, seed)
        self.state.update(dimensions=dimensions, generator=generator)

    def generate(self, i: int = 0, **context: Any) -> Any:
        state = self._require_state()
        return format(state["generator"].generate(), f"0{state['dimensions']}b")


class CartesianIndexSampler:
    """
    Unique tuples drawn from one or more Cartesian pools.

    Each pool is a list of token sequences; a unique index into the pool's
    product is drawn with :class:`UniqueIntGenerator` and decoded back into
    tokens. Exhausted pools are dropped.
    """

    def __init__(self, pools: list[list]):
        self.pools = pools
        self.remaining: list[int] = []
        self.index_generators: list[UniqueIntGenerator] = []

    @staticmethod
    def pool_size(pool: list) -> int:
        return math.prod(len(tokens) for tokens in pool)

    @property
    def max_count(self) -> int:
        return sum(self.pool_size(pool) for pool in self.pools)

    def init(self, count: int, seed: int) -> None:
        self.remaining = list(range(len(self.pools)))
        self.index_generators = []
        for pool in self.pools:
            generator = UniqueIntGenerator(min_value=0, max_value=self.pool_size(pool) - 1, skip_check=True)
            generator.init(count, seed)
            self.index_generators.append(generator)

    def next(self, draw) -> tuple[int, list]:
        """Return ``(pool_index, tokens)`` using ``draw(min, max)`` to pick the pool."""
        while self.remaining:
            position = draw(0, len(self.remaining) - 1)
            pool_index = self.remaining[position]
            index = self.index_generators[pool_index].generate()
            if index is None:
                self.remaining.pop(position)
                continue
            return pool_index, fast_cartesian_product(self.pools[pool_index], index)
        raise GeneratorStateError("all unique combinations were used.")
