"""
Pure xoroshiro128+ pseudo-random generator.

States are immutable: every draw returns the value together with the next
state, so two callers holding the same state always see the same sequence.
"""

from dataclasses import dataclass

MASK64 = (1 << 64) - 1


def _rotl(x: int, k: int) -> int:
    return ((x << k) | (x >> (64 - k))) & MASK64


def _splitmix64(state: int) -> tuple[int, int]:
    state = (state + 0x9E3779B97F4A7C15) & MASK64
    z = state
    z = ((z ^ (z >> 30)) * 0xBF58476D1CE4E5B9) & MASK64
    z = ((z ^ (z >> 27)) * 0x94D049BB133111EB) & MASK64
    return z ^ (z >> 31), state


@dataclass(frozen=True)
class Xoroshiro128Plus:
    """
    xoroshiro128+ state.

    Attributes:
        s0: First 64-bit word of state
        s1: Second 64-bit word of state
    """

    s0: int
    s1: int

    @classmethod
    def from_seed(cls, seed: int) -> "Xoroshiro128Plus":
        """
        Expand an integer seed into a full state using splitmix64.

        Negative and oversized seeds are folded into 64 bits.

        Example:
            >>> rng = Xoroshiro128Plus.from_seed(42)
            >>> value, rng = uniform_int(1, 6, rng)
        """
        s0, state = _splitmix64(int(seed) & MASK64)
        s1, _ = _splitmix64(state)
        if s0 == 0 and s1 == 0:
            s1 = 1
        return cls(s0, s1)

    def next(self) -> tuple[int, "Xoroshiro128Plus"]:
        """Return the next 64-bit word and the advanced state."""
        s0, s1 = self.s0, self.s1
        result = (s0 + s1) & MASK64
        s1 ^= s0
        new_s0 = _rotl(s0, 24) ^ s1 ^ ((s1 << 16) & MASK64)
        new_s1 = _rotl(s1, 37)
        return result, Xoroshiro128Plus(new_s0, new_s1)


def uniform_int(
    min_value: int, max_value: int, rng: Xoroshiro128Plus
) -> tuple[int, Xoroshiro128Plus]:
    """
    Draw an integer uniformly from ``[min_value, max_value]``.

    Ranges wider than 64 bits are served by concatenating words, so bigint
    domains are covered as well.

    Args:
        min_value: Inclusive lower bound
        max_value: Inclusive upper bound
        rng: Current state

    Returns:
        Tuple of (value, next state)

    Raises:
        ValueError: If min_value > max_value
    """
    min_value = int(min_value)
    max_value = int(max_value)
    if min_value > max_value:
        raise ValueError(f"Invalid range: min {min_value} is greater than max {max_value}")

    span = max_value - min_value + 1
    if span == 1:
        return min_value, rng

    words = max(1, ((span - 1).bit_length() + 63) // 64)
    space = 1 << (64 * words)
    limit = space - (space % span)

    while True:
        value = 0
        for _ in range(words):
            word, rng = rng.next()
            value = (value << 64) | word
        if value < limit:
            return min_value + value % span, rng
