"""Base generator interface."""

from __future__ import annotations

import copy
import math
from abc import ABC, abstractmethod
from typing import Any, ClassVar

from fraiseql_synth.exceptions import GeneratorConfigError, GeneratorStateError
from fraiseql_synth.models import TypeParams
from fraiseql_synth.prng import Xoroshiro128Plus, uniform_int


class AbstractGenerator(ABC):
    """
    Base class for value generators.

    A generator is built with static parameters, then ``init(count, seed)``
    sets up a fresh pseudo-random stream and any precomputed pools, and then
    ``generate()`` is called once per row. The same seed and call sequence
    always give the same values.

    Subclasses set ``kind`` (the registry key) and optionally ``version``
    and ``unique_version`` (the class swapped in when the column is unique).

    Example:
        >>> class DiceGenerator(AbstractGenerator):
        ...     kind = "dice"
        ...
        ...     def init(self, count, seed):
        ...         super().init(count, seed)
        ...
        ...     def generate(self, i=0, **context):
        ...         return self._draw(1, 6)
        >>>
        >>> register_generator("dice", DiceGenerator)
        >>> builder.refine("rolls", columns={"value": DiceGenerator()})
    """

    kind: ClassVar[str] = "abstract"
    version: ClassVar[int] = 1
    unique_version: ClassVar[type[AbstractGenerator] | None] = None
    is_generator_unique: ClassVar[bool] = False

    def __init__(self, **params: Any):
        self.params: dict[str, Any] = params
        self.state: dict[str, Any] | None = None

        self.is_unique = False
        self.not_null = False
        self.data_type: str | None = None
        self.column_data_type: str | None = None
        self.string_length: int | None = None
        self.type_params = TypeParams()
        self.array_size: int | None = None
        self.unique_key: str | None = None
        self.weighted_count_seed: int | None = None
        self.max_repeated_values_count: Any = None

    def init(self, count: int, seed: int) -> None:
        """
        Prepare state for ``count`` values drawn from ``seed``.

        Subclasses call ``super().init(count, seed)`` first and then extend
        ``self.state``.
        """
        self.update_params()
        self.state = {"rng": Xoroshiro128Plus.from_seed(seed)}

    @abstractmethod
    def generate(self, i: int = 0, **context: Any) -> Any:
        """
        Generate the value for row ``i``.

        Args:
            i: Row index (0-based)
            **context: Additional context:
                - column_name: Column being generated (composite keys)
                - text: Input string (hash generator)

        Returns:
            Generated value appropriate for the column
        """
        pass

    def get_max_unique_count(self) -> int | float:
        return math.inf

    def update_params(self) -> None:
        array_size = self.params.get("array_size")
        if array_size is not None:
            self.array_size = array_size

        is_unique = self.params.get("is_unique")
        if is_unique is not None:
            if is_unique is False and self.is_unique:
                raise GeneratorConfigError("specifying non unique generator to unique column.")
            self.is_unique = is_unique

    def replace_if_unique(self) -> AbstractGenerator | None:
        """Return the unique variant of this generator when the column is unique."""
        self.update_params()
        if self.unique_version is not None and self.is_unique:
            unique = self.unique_version(**self.params)
            unique.is_unique = self.is_unique
            unique.data_type = self.data_type
            unique.string_length = self.string_length
            unique.type_params = copy.copy(self.type_params)
            return unique
        return None

    def replace_if_array(self) -> AbstractGenerator | None:
        """Wrap this generator in an array generator when the column is an array."""
        self.update_params()
        if self.kind == "array" or self.array_size is None:
            return None

        # Imported here: wrappers subclass this module's base class.
        from fraiseql_synth.generators.wrappers import ArrayGenerator

        base = self.replace_if_unique() or self
        base.data_type = self.column_data_type
        dimensions = self.type_params.dimensions
        base.type_params = copy.copy(self.type_params)
        base.type_params.dimensions = None

        array = ArrayGenerator(base_column_gen=base, size=self.array_size)
        array.type_params = TypeParams(dimensions=dimensions)
        return array

    def copy_flags_from(self, other: AbstractGenerator) -> None:
        """Copy column-derived flags from ``other`` onto this generator."""
        self.is_unique = other.is_unique
        self.not_null = other.not_null
        self.data_type = other.data_type
        self.column_data_type = other.column_data_type
        self.string_length = other.string_length
        self.type_params = copy.copy(other.type_params)
        self.array_size = other.array_size
        self.unique_key = other.unique_key
        self.weighted_count_seed = other.weighted_count_seed
        self.max_repeated_values_count = other.max_repeated_values_count

    def _check_string_length(self, what: str, max_length: int) -> None:
        if self.string_length is not None and self.string_length < max_length:
            raise GeneratorConfigError(
                f"You can't use {what} generator with a db column length restriction of "
                f"{self.string_length}. Set the maximum string length to at least {max_length}."
            )

    def _require_state(self) -> dict[str, Any]:
        if self.state is None:
            raise GeneratorStateError()
        return self.state

    def _draw(self, min_value: int, max_value: int) -> int:
        state = self._require_state()
        value, state["rng"] = uniform_int(min_value, max_value, state["rng"])
        return value

    def _pick(self, values):
        return values[self._draw(0, len(values) - 1)]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind!r}, version={self.version})"
