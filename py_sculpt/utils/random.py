"""
Random number generation utilities.

All sculpting components draw from the shared Alea PRNG so a single seed
reproduces a whole session. Components may also be handed their own
``AleaPRNG`` instance, which is how the tests pin behaviour down.
"""

from ..core.alea_prng import AleaPRNG

# Global PRNG instance
_prng = None


def set_random_seed(seed) -> AleaPRNG:
    """
    Reseed the shared Alea PRNG.

    Args:
        seed: Seed string or number

    Returns:
        The freshly seeded AleaPRNG instance
    """
    global _prng

    _prng = AleaPRNG(seed)
    return _prng


def get_prng() -> AleaPRNG:
    """
    Get the shared Alea PRNG instance, creating a default-seeded one on demand.

    Returns:
        AleaPRNG instance
    """
    global _prng
    if _prng is None:
        _prng = AleaPRNG("default")
    return _prng
