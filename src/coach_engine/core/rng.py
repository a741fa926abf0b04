"""
Seeded pseudo-random source for session generation.

The seed string is hashed with 32-bit FNV-1a over its UTF-16 code units
and the hash seeds a 32-bit linear congruential generator. Identical
seed strings give identical sequences on every platform, which keeps
regenerated weeks byte-identical. Never use the process-global random
module for session content.
"""

from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")

FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619
LCG_MULTIPLIER = 1664525
LCG_INCREMENT = 1013904223
MASK_32 = 0xFFFFFFFF


def fnv1a_32(seed: str) -> int:
    """FNV-1a hash of the seed's UTF-16 code units, as an unsigned 32-bit int."""
    data = seed.encode("utf-16-le")
    h = FNV_OFFSET_BASIS
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = ((h ^ unit) * FNV_PRIME) & MASK_32
    return h


class SeededRandom:
    """Deterministic uniform source seeded from a string."""

    def __init__(self, seed: str) -> None:
        self.seed = seed
        self._state = fnv1a_32(seed)

    def random(self) -> float:
        """Next value in [0, 1]."""
        self._state = (self._state * LCG_MULTIPLIER + LCG_INCREMENT) & MASK_32
        return self._state / MASK_32

    def choice(self, pool: Sequence[T]) -> T:
        """
        Pick one element of a non-empty pool.

        random() can return exactly 1.0, so the index is clamped into range.
        """
        if not pool:
            raise IndexError("cannot choose from an empty pool")
        idx = min(int(self.random() * len(pool)), len(pool) - 1)
        return pool[idx]
