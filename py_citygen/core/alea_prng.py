"""
Seedable Alea pseudo-random generator.

Based on Johannes Baagøe's Alea algorithm. One instance is created per
generation run and handed to every stochastic step (priming, weighted
selection, road placement, palettes, building classification) so that a
fixed seed always reproduces the same city.
"""

from typing import Sequence, TypeVar

T = TypeVar("T")

_NORM_32 = 2.3283064365386963e-10  # 2^-32


def _uint32(n):
    """Convert to unsigned 32-bit integer."""
    return int(n) & 0xFFFFFFFF


class AleaPRNG:
    """
    Alea generator with integer helpers for grid work.

    Accepts a string, a number or an iterable of either as seed.
    """

    def __init__(self, seed):
        """Initialize with seed string or number."""
        self.seed = seed
        # Number of draws consumed so far
        self.call_count = 0

        if hasattr(seed, "__iter__") and not isinstance(seed, str):
            args = list(seed)
        else:
            args = [seed]

        mash_n = 0xEFC8249D

        def mash(data):
            nonlocal mash_n
            for char in str(data):
                mash_n = mash_n + ord(char)
                h = 0.02519603282416938 * mash_n
                mash_n = _uint32(h)
                h -= mash_n
                h *= mash_n
                mash_n = _uint32(h)
                h -= mash_n
                mash_n += h * 0x100000000
            return _uint32(mash_n) * _NORM_32

        self.s0 = mash(" ")
        self.s1 = mash(" ")
        self.s2 = mash(" ")
        self.c = 1

        for arg in args:
            self.s0 = (self.s0 - mash(arg)) % 1.0
            self.s1 = (self.s1 - mash(arg)) % 1.0
            self.s2 = (self.s2 - mash(arg)) % 1.0

    def __repr__(self) -> str:
        return f"AleaPRNG(seed={self.seed!r}, calls={self.call_count})"

    def random(self) -> float:
        """Generate next random number in [0, 1)."""
        self.call_count += 1
        t = 2091639 * self.s0 + self.c * _NORM_32
        self.s0 = self.s1
        self.s1 = self.s2
        self.c = int(t)
        self.s2 = t - self.c
        return self.s2

    def randrange(self, low: int, high: int) -> int:
        """
        Draw a uniform integer in ``[low, high)``.

        Raises:
            ValueError: if the range is empty
        """
        if high <= low:
            raise ValueError(f"Empty range for randrange({low}, {high})")
        return low + int(self.random() * (high - low))

    def choice(self, seq: Sequence[T]) -> T:
        """Choose a random element from a non-empty sequence."""
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[self.randrange(0, len(seq))]
