"""
Lattice noise functions shared by the noise generators.

This module holds the low-level coherent noise used by every generator node:
- Seeded permutation tables (shuffled with the Alea PRNG)
- Improved gradient noise in three dimensions
- Integer-hash value noise used for cellular feature points

All functions operate on NumPy arrays and return arrays of the same shape.
"""

import functools
from typing import Tuple

import numpy as np

from .alea_prng import AleaPRNG

TABLE_SIZE = 256

# Twelve cube-edge gradients padded to sixteen so the hash can be masked
_GRADIENTS = np.array(
    [
        [1, 1, 0], [-1, 1, 0], [1, -1, 0], [-1, -1, 0],
        [1, 0, 1], [-1, 0, 1], [1, 0, -1], [-1, 0, -1],
        [0, 1, 1], [0, -1, 1], [0, 1, -1], [0, -1, -1],
        [1, 1, 0], [0, -1, 1], [-1, 1, 0], [0, -1, -1],
    ],
    dtype=np.float64,
)

# Hash constants for integer value noise
_X_NOISE_GEN = 1619
_Y_NOISE_GEN = 31337
_Z_NOISE_GEN = 6971
_SEED_NOISE_GEN = 1013
_STREAM_NOISE_GEN = 2741


@functools.lru_cache(maxsize=8192)
def permutation_table(seed: int, *stream) -> np.ndarray:
    """
    Get the doubled permutation table for a seed and stream.

    Args:
        seed: 32-bit noise seed
        *stream: Extra tags (octave index, axis name) selecting an
            independent table for the same seed

    Returns:
        Read-only int array of length 2 * TABLE_SIZE
    """
    perm = AleaPRNG((seed,) + stream).permutation(TABLE_SIZE)
    table = np.array(perm + perm, dtype=np.intp)
    table.flags.writeable = False
    return table


def s_curve3(t: np.ndarray) -> np.ndarray:
    """Cubic ease curve 3t^2 - 2t^3."""
    return t * t * (3.0 - 2.0 * t)


def s_curve5(t: np.ndarray) -> np.ndarray:
    """Quintic ease curve 6t^5 - 15t^4 + 10t^3."""
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def lerp(a, b, t):
    """Linear interpolation."""
    return a + t * (b - a)


def _split(coord: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Split coordinates into wrapped lattice cell index and fraction."""
    floor = np.floor(coord)
    return floor.astype(np.int64) & (TABLE_SIZE - 1), coord - floor


def _grad(hashes: np.ndarray, x: np.ndarray, y: np.ndarray, z: np.ndarray) -> np.ndarray:
    g = _GRADIENTS[hashes & 15]
    return g[..., 0] * x + g[..., 1] * y + g[..., 2] * z


def gradient_noise_3d(
    x: np.ndarray, y: np.ndarray, z: np.ndarray, perm: np.ndarray
) -> np.ndarray:
    """
    Evaluate improved gradient noise at each coordinate.

    The value is exactly zero on integer lattice points and lies roughly
    within [-1, 1] elsewhere.
    """
    xi, fx = _split(x)
    yi, fy = _split(y)
    zi, fz = _split(z)
    u = s_curve5(fx)
    v = s_curve5(fy)
    w = s_curve5(fz)

    a = perm[xi] + yi
    aa = perm[a] + zi
    ab = perm[a + 1] + zi
    b = perm[xi + 1] + yi
    ba = perm[b] + zi
    bb = perm[b + 1] + zi

    x1 = lerp(
        _grad(perm[aa], fx, fy, fz),
        _grad(perm[ba], fx - 1.0, fy, fz),
        u,
    )
    x2 = lerp(
        _grad(perm[ab], fx, fy - 1.0, fz),
        _grad(perm[bb], fx - 1.0, fy - 1.0, fz),
        u,
    )
    y1 = lerp(x1, x2, v)

    x1 = lerp(
        _grad(perm[aa + 1], fx, fy, fz - 1.0),
        _grad(perm[ba + 1], fx - 1.0, fy, fz - 1.0),
        u,
    )
    x2 = lerp(
        _grad(perm[ab + 1], fx, fy - 1.0, fz - 1.0),
        _grad(perm[bb + 1], fx - 1.0, fy - 1.0, fz - 1.0),
        u,
    )
    y2 = lerp(x1, x2, v)

    return lerp(y1, y2, w)


def int_value_noise_3d(
    ix: np.ndarray, iy: np.ndarray, iz: np.ndarray, seed: int, stream: int = 0
) -> np.ndarray:
    """
    Hash integer lattice coordinates to pseudo-random integers.

    Arithmetic wraps in 32 bits; the result lies in [0, 2**31).
    """
    n = (
        _X_NOISE_GEN * ix
        + _Y_NOISE_GEN * iy
        + _Z_NOISE_GEN * iz
        + _SEED_NOISE_GEN * seed
        + _STREAM_NOISE_GEN * stream
    ) & 0x7FFFFFFF
    n = n.astype(np.uint32)
    n = (n >> np.uint32(13)) ^ n
    n = n * (n * n * np.uint32(60493) + np.uint32(19990303)) + np.uint32(1376312589)
    return (n & np.uint32(0x7FFFFFFF)).astype(np.int64)


def value_noise_3d(
    ix: np.ndarray, iy: np.ndarray, iz: np.ndarray, seed: int, stream: int = 0
) -> np.ndarray:
    """Hash integer lattice coordinates to floats in (-1, 1]."""
    return 1.0 - int_value_noise_3d(ix, iy, iz, seed, stream) / 1073741824.0
