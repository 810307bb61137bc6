"""Helpers shared by generators, the plan builder and the engine."""

import math
from collections.abc import Sequence
from typing import Any

from fraiseql_synth.exceptions import WeightsSumError

# Slots in a weighted index pool; each bucket is accurate to about 1%.
WEIGHTED_POOL_SIZE = 100
WEIGHTS_TOLERANCE = 1e-9

HASH_BASE = 53
HASH_MODULUS = 28871271685163


def get_weighted_indices(weights: Sequence[float], accuracy: int = WEIGHTED_POOL_SIZE) -> list[int]:
    """
    Build a pool of indices where index ``k`` appears ``weights[k] * accuracy`` times.

    Drawing uniformly from the pool approximates weighted sampling.

    Raises:
        WeightsSumError: If weights don't sum to 1
    """
    total = math.fsum(weights)
    if not math.isclose(total, 1.0, rel_tol=0.0, abs_tol=WEIGHTS_TOLERANCE):
        raise WeightsSumError(total)

    indices: list[int] = []
    for index, weight in enumerate(weights):
        indices.extend([index] * int(round(weight * accuracy)))
    return indices


def fast_cartesian_product(sets: Sequence[Sequence[Any]], index: int) -> list[Any]:
    """
    Return the ``index``-th tuple of the Cartesian product of ``sets``.

    The last set varies fastest, matching nested-loop order.
    """
    result: list[Any] = []
    for values in reversed(sets):
        index, position = divmod(index, len(values))
        result.append(values[position])
    result.reverse()
    return result


def fill_template(
    template: str,
    values: Sequence[str],
    placeholders_count: int | None = None,
    default_value: str = " ",
    placeholder: str = "#",
) -> str:
    """
    Replace ``#`` placeholders in ``template`` with ``values`` in order.

    When fewer values than placeholders are given, the values are padded on
    the left with ``default_value``.

    Example:
        >>> fill_template("#####", list("42"), 5, "0")
        '00042'
    """
    if placeholders_count is None:
        placeholders_count = template.count(placeholder)
    padded = [default_value] * (placeholders_count - len(values)) + list(values)

    parts = []
    position = 0
    for char in template:
        if char == placeholder and position < len(padded):
            parts.append(str(padded[position]))
            position += 1
        else:
            parts.append(char)
    return "".join(parts)


class OrderedNumberRange:
    """
    Indexable arithmetic progression ``min, min + step, ..., <= max``.

    Behaves like a sequence for :func:`fast_cartesian_product` without
    materializing its values.
    """

    def __init__(self, min_value: int, max_value: int, step: int = 1):
        if step <= 0:
            raise ValueError("step must be positive")
        self.min_value = min_value
        self.max_value = max_value
        self.step = step
        self._length = max(0, (max_value - min_value) // step + 1)

    def __len__(self) -> int:
        return self._length

    def at(self, index: int) -> int:
        if index < 0:
            index += self._length
        if not 0 <= index < self._length:
            raise IndexError("OrderedNumberRange index out of range")
        return self.min_value + index * self.step

    __getitem__ = at


def hash_from_string(text: str, version: int = 1) -> int:
    """
    Polynomial rolling hash used to derive per-column seeds.

    Version 1 sums ``ord(c) * 53**i mod m`` without a final reduction;
    version 3 also reduces the sum modulo ``m``.
    """
    total = 0
    power = 1
    for char in text:
        total += (ord(char) * power) % HASH_MODULUS
        power = (power * HASH_BASE) % HASH_MODULUS
    if version >= 3:
        total %= HASH_MODULUS
    return total
