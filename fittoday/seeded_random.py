"""
Seeded pseudo-random generator for reproducible workout variation.

Each value is a pure function of (seed, draw index), so two generators built
with the same seed produce bit-identical sequences. Instances keep their own
state and are never shared between concurrent generation attempts.
"""

from typing import List, Sequence, TypeVar

T = TypeVar("T")

_MASK_64 = (1 << 64) - 1
_GOLDEN_GAMMA = 0x9E3779B97F4A7C15


def _mix64(z: int) -> int:
    """SplitMix64 finaliser."""
    z = ((z ^ (z >> 30)) * 0xBF58476D1CE4E5B9) & _MASK_64
    z = ((z ^ (z >> 27)) * 0x94D049BB133111EB) & _MASK_64
    return z ^ (z >> 31)


class SeededRandomGenerator:
    """
    Deterministic generator over an explicit seed and draw counter.

    Example:
        >>> rng = SeededRandomGenerator(seed=42)
        >>> rng.next_int(3, 4) in (3, 4)
        True
    """

    def __init__(self, seed: int):
        self.seed = seed & _MASK_64
        self.draws = 0

    def next(self) -> int:
        """Return the next unsigned 64-bit value."""
        self.draws += 1
        return _mix64((self.seed + self.draws * _GOLDEN_GAMMA) & _MASK_64)

    def next_double(self) -> float:
        """Return a float in [0, 1) built from the top 53 bits."""
        return (self.next() >> 11) / float(1 << 53)

    def next_int(self, lower: int, upper: int) -> int:
        """
        Return an integer in the inclusive range [lower, upper].

        Reversed bounds are swapped.
        """
        if lower > upper:
            lower, upper = upper, lower
        span = upper - lower + 1
        return lower + self.next() % span

    def select_elements(self, source: Sequence[T], count: int) -> List[T]:
        """
        Sample without replacement.

        Args:
            source: Candidates to pick from (never mutated)
            count: Number of elements wanted

        Returns:
            Exactly min(count, len(source)) elements; empty when count <= 0
        """
        if count <= 0 or not source:
            return []
        pool = list(source)
        take = min(count, len(pool))
        # Partial Fisher-Yates: only the first `take` slots are settled
        for i in range(take):
            j = self.next_int(i, len(pool) - 1)
            pool[i], pool[j] = pool[j], pool[i]
        return pool[:take]

    def shuffled(self, source: Sequence[T]) -> List[T]:
        """Return a seeded permutation of source."""
        return self.select_elements(source, len(source))
