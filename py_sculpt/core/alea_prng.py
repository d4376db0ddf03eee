"""
Python implementation of the Alea PRNG used for all sculpting randomness.

Based on Johannes Baagøe's Alea algorithm. String seeds give reproducible
brush walks, road layouts and mountain placements across runs.
"""

import math


def _uint32(n):
    """Convert to unsigned 32-bit integer."""
    return int(n) & 0xFFFFFFFF


class _Mash:
    """Seed hashing function from the reference Alea implementation."""

    def __init__(self):
        self.n = 0xEFC8249D  # 4022871197

    def __call__(self, data):
        for char in str(data):
            self.n = self.n + ord(char)
            h = 0.02519603282416938 * self.n
            self.n = _uint32(h)
            h -= self.n
            h *= self.n
            self.n = _uint32(h)
            h -= self.n
            self.n += h * 0x100000000  # 2^32
        return _uint32(self.n) * 2.3283064365386963e-10  # 2^-32


class AleaPRNG:
    """
    Alea PRNG with the range helpers the sculpting components need.

    ``uniform`` and ``randint`` follow the usual half-open convention:
    the upper bound is never returned.
    """

    def __init__(self, seed):
        """Initialize with seed string, number or iterable of either."""
        self.call_count = 0

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
            self.s0 = self._fold(self.s0 - mash(arg))
            self.s1 = self._fold(self.s1 - mash(arg))
            self.s2 = self._fold(self.s2 - mash(arg))

    @staticmethod
    def _fold(value):
        return value + 1 if value < 0 else value

    def random(self):
        """Generate next random number in [0, 1)."""
        self.call_count += 1
        t = 2091639 * self.s0 + self.c * 2.3283064365386963e-10  # 2^-32
        self.s0 = self.s1
        self.s1 = self.s2
        self.c = int(t)
        self.s2 = t - self.c
        return self.s2

    def uniform(self, low, high):
        """Uniform float in [low, high)."""
        return low + (high - low) * self.random()

    def randint(self, low, high):
        """Uniform integer in [low, high). Returns ``low`` for empty ranges."""
        if high <= low:
            return int(low)
        return int(low) + int(self.random() * (int(high) - int(low)))

    def chance(self, probability):
        """Return True with the given probability."""
        if probability >= 1:
            return True
        if probability <= 0:
            return False
        return self.random() < probability

    def angle(self):
        """Uniform heading in [0, 2*pi)."""
        return self.random() * 2.0 * math.pi

    def choice(self, seq):
        """Choose a random element from a non-empty sequence."""
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[int(self.random() * len(seq))]
