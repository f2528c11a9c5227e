"""
Seeded pseudo-random generator used to shuffle exam variants.

The generator is a small linear-congruential sequence seeded from a string
hash. Its output depends only on the seed string, so a variant can be
rebuilt byte-for-byte from its stored seed on any platform. Build a fresh
instance per variant and never share one between variants.
"""

from collections.abc import Sequence
from typing import TypeVar

from exam_analysis.core.utils import hash_code

T = TypeVar("T")

LCG_MULTIPLIER = 9301
LCG_INCREMENT = 49297
LCG_MODULUS = 233280


class SeededRandomizer:
    def __init__(self, seed: str) -> None:
        self._state = abs(hash_code(seed))

    def next(self) -> float:
        """Next value in [0, 1)."""
        self._state = (
            self._state * LCG_MULTIPLIER + LCG_INCREMENT
        ) % LCG_MODULUS
        return self._state / LCG_MODULUS

    def shuffle(self, items: Sequence[T]) -> list[T]:
        """Fisher-Yates shuffle from the end. Returns a new list."""
        result = list(items)
        for i in range(len(result) - 1, 0, -1):
            j = int(self.next() * (i + 1))
            result[i], result[j] = result[j], result[i]
        return result

    def sample(self, items: Sequence[T], count: int) -> list[T]:
        """Draw `count` items without replacement, in drawn order."""
        return self.shuffle(items)[:count]
