"""
Seed derivation utilities.

Every noise node in a pipeline gets its own seed, derived from the planet's
base seed and a fixed per-stage offset. Seeds wrap to 32 bits, so distinct
offsets always give distinct node seeds for the same base seed.
"""

from ..exceptions import NodeConfigurationError

SEED_BITS = 32
_SEED_MASK = (1 << SEED_BITS) - 1


def derive_seed(base_seed: int, offset: int) -> int:
    """
    Derive the seed of one noise node.

    Args:
        base_seed: 64-bit planet seed from the seed-hashing collaborator
        offset: Fixed offset of the pipeline stage

    Returns:
        ``(base_seed + offset) mod 2**32``
    """
    if isinstance(base_seed, bool) or not isinstance(base_seed, int):
        raise NodeConfigurationError(f"base seed must be an integer, got {base_seed!r}")
    if not 0 <= offset <= _SEED_MASK:
        raise NodeConfigurationError(f"seed offset out of range: {offset}")
    return (base_seed + offset) & _SEED_MASK
