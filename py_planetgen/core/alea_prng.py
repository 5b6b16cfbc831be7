"""
Alea pseudo-random number generator.

Based on Johannes Baagøe's Alea algorithm. It is used to shuffle the
gradient lattice permutation tables, so the tables depend only on the seed
arguments and never on the numpy release or the platform.
"""

from typing import Iterable, List, Union

SeedArg = Union[int, str]

_TWO_POW_32 = 0x100000000
_TWO_POW_NEG_32 = 2.3283064365386963e-10


def _uint32(n) -> int:
    """Convert to unsigned 32-bit integer."""
    return int(n) & 0xFFFFFFFF


class _Mash:
    """Baagøe's string hash used to seed the generator state."""

    def __init__(self):
        self.n = 0xEFC8249D

    def __call__(self, data) -> float:
        for char in str(data):
            self.n += ord(char)
            h = 0.02519603282416938 * self.n
            self.n = _uint32(h)
            h -= self.n
            h *= self.n
            self.n = _uint32(h)
            h -= self.n
            self.n += h * _TWO_POW_32
        return _uint32(self.n) * _TWO_POW_NEG_32


class AleaPRNG:
    """
    Alea PRNG seeded by one or more arguments.

    Passing a tuple such as ``(seed, "x", 3)`` gives an independent stream
    per argument combination, which is how lattice tables for separate
    octaves and axes are kept apart while sharing one numeric seed.
    """

    def __init__(self, seed: Union[SeedArg, Iterable[SeedArg]]):
        if hasattr(seed, "__iter__") and not isinstance(seed, str):
            args = list(seed)
        else:
            args = [seed]

        mash = _Mash()
        self.s0 = mash(" ")
        self.s1 = mash(" ")
        self.s2 = mash(" ")
        self.c = 1

        for arg in args:
            self.s0 -= mash(arg)
            if self.s0 < 0:
                self.s0 += 1
            self.s1 -= mash(arg)
            if self.s1 < 0:
                self.s1 += 1
            self.s2 -= mash(arg)
            if self.s2 < 0:
                self.s2 += 1

    def random(self) -> float:
        """Generate next random number in [0, 1)."""
        t = 2091639 * self.s0 + self.c * _TWO_POW_NEG_32
        self.s0 = self.s1
        self.s1 = self.s2
        self.c = int(t)
        self.s2 = t - self.c
        return self.s2

    def permutation(self, n: int) -> List[int]:
        """Return ``range(n)`` shuffled with a Fisher-Yates pass."""
        values = list(range(n))
        for i in range(n - 1, 0, -1):
            j = int(self.random() * (i + 1))
            values[i], values[j] = values[j], values[i]
        return values
