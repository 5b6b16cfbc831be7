"""
Coherent noise generators.

Generators are the leaves of an elevation graph:
- Constant: the same value everywhere
- FractalNoise: summed octaves of gradient noise
- RidgedNoise: ridged multifractal noise with octave feedback
- BillowNoise: octaves folded with 2|n| - 1 for rounded lumps
- CellularNoise: distance to jittered feature points (Worley noise)

Every generator is fully determined by its parameters; the same seed,
frequency, octaves and coordinates always give bit-identical output.
"""

import math

import numpy as np

from .lattice import gradient_noise_3d, permutation_table, value_noise_3d
from .node import (
    Node,
    check_finite,
    check_octaves,
    check_positive,
    check_seed,
)

SQRT_3 = math.sqrt(3.0)


class Constant(Node):
    """Outputs a fixed value."""

    def __init__(self, value: float = 0.0):
        self.value = float(value)

    def get(self, x, y, z):
        return np.full(np.shape(x), self.value, dtype=np.float64)

    def __repr__(self) -> str:
        return f"Constant({self.value})"


class _OctaveNoise(Node):
    """Parameters shared by the multi-octave gradient noise generators."""

    def __init__(
        self,
        seed: int = 0,
        frequency: float = 1.0,
        octaves: int = 6,
        persistence: float = 0.5,
        lacunarity: float = 2.0,
        stream: str = "",
    ):
        self.seed = check_seed(seed)
        self.frequency = check_positive(frequency, "frequency")
        self.octaves = check_octaves(octaves)
        self.persistence = check_positive(persistence, "persistence")
        self.lacunarity = check_positive(lacunarity, "lacunarity")
        self.stream = stream
        # One independent lattice per octave
        self._tables = [
            permutation_table(self.seed, stream, octave) for octave in range(self.octaves)
        ]

    def _octaves(self, x, y, z):
        """Yield (octave index, raw gradient noise) for each octave."""
        x = x * self.frequency
        y = y * self.frequency
        z = z * self.frequency
        for octave, table in enumerate(self._tables):
            yield octave, gradient_noise_3d(x, y, z, table)
            x = x * self.lacunarity
            y = y * self.lacunarity
            z = z * self.lacunarity

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(seed={self.seed}, frequency={self.frequency}, "
            f"octaves={self.octaves})"
        )


class FractalNoise(_OctaveNoise):
    """
    Fractal sum of gradient noise.

    Each octave multiplies frequency by ``lacunarity`` and amplitude by
    ``persistence``. The sum is not normalised, so for persistence 0.5 it
    lies roughly within [-2, 2] and mostly within [-1, 1].
    """

    def get(self, x, y, z):
        result = np.zeros(np.shape(x), dtype=np.float64)
        amplitude = 1.0
        for _, signal in self._octaves(x, y, z):
            result += signal * amplitude
            amplitude *= self.persistence
        return result


class BillowNoise(_OctaveNoise):
    """Fractal noise with every octave folded as ``2|n| - 1``."""

    def get(self, x, y, z):
        result = np.zeros(np.shape(x), dtype=np.float64)
        amplitude = 1.0
        for _, signal in self._octaves(x, y, z):
            result += (2.0 * np.abs(signal) - 1.0) * amplitude
            amplitude *= self.persistence
        return result + 0.5


class RidgedNoise(_OctaveNoise):
    """
    Ridged multifractal noise.

    Every octave is transformed to ``(offset - |n|)**2`` and weighted by the
    previous octave's signal times ``gain`` (clamped to [0, 1]), so detail
    accumulates on the ridges and stays out of the valleys. A single octave
    gives smooth ridges in [-1, 0.25]. ``persistence`` defaults to
    ``1 / lacunarity``.
    """

    def __init__(
        self,
        seed: int = 0,
        frequency: float = 1.0,
        octaves: int = 6,
        persistence: float = None,
        lacunarity: float = 2.0,
        offset: float = 1.0,
        gain: float = 2.0,
        stream: str = "",
    ):
        lacunarity = check_positive(lacunarity, "lacunarity")
        if persistence is None:
            persistence = 1.0 / lacunarity
        super().__init__(seed, frequency, octaves, persistence, lacunarity, stream)
        self.offset = check_finite(offset, "offset")
        self.gain = check_finite(gain, "gain")

    def get(self, x, y, z):
        result = np.zeros(np.shape(x), dtype=np.float64)
        weight = np.ones(np.shape(x), dtype=np.float64)
        amplitude = 1.0
        for _, signal in self._octaves(x, y, z):
            signal = self.offset - np.abs(signal)
            signal = signal * signal * weight
            weight = np.clip(signal * self.gain, 0.0, 1.0)
            result += signal * amplitude
            amplitude *= self.persistence
        return result * 1.25 - 1.0


class CellularNoise(Node):
    """
    Cellular (Worley) noise.

    Each unit cell of the lattice holds one feature point jittered by value
    noise. The output is ``sqrt(3) * distance - 1`` to the nearest feature
    point when ``enable_range`` is set (zero otherwise), plus
    ``displacement`` times the nearest cell's random value. Extra octaves are
    summed with halving amplitude and doubling frequency.
    """

    def __init__(
        self,
        seed: int = 0,
        frequency: float = 1.0,
        octaves: int = 1,
        displacement: float = 1.0,
        enable_range: bool = False,
    ):
        self.seed = check_seed(seed)
        self.frequency = check_positive(frequency, "frequency")
        self.octaves = check_octaves(octaves)
        self.displacement = check_finite(displacement, "displacement")
        self.enable_range = bool(enable_range)

    def _cells(self, x, y, z, octave: int):
        stream = 4 * octave
        xi = np.floor(x).astype(np.int64)
        yi = np.floor(y).astype(np.int64)
        zi = np.floor(z).astype(np.int64)

        best = np.full(np.shape(x), np.inf, dtype=np.float64)
        best_x = np.zeros(np.shape(x), dtype=np.int64)
        best_y = np.zeros(np.shape(x), dtype=np.int64)
        best_z = np.zeros(np.shape(x), dtype=np.int64)

        # Feature points stray up to one cell, so search two cells out
        for dz in range(-2, 3):
            cz = zi + dz
            for dy in range(-2, 3):
                cy = yi + dy
                for dx in range(-2, 3):
                    cx = xi + dx
                    px = cx + value_noise_3d(cx, cy, cz, self.seed, stream)
                    py = cy + value_noise_3d(cx, cy, cz, self.seed, stream + 1)
                    pz = cz + value_noise_3d(cx, cy, cz, self.seed, stream + 2)
                    dist = (px - x) ** 2 + (py - y) ** 2 + (pz - z) ** 2
                    closer = dist < best
                    best = np.where(closer, dist, best)
                    best_x = np.where(closer, np.floor(px).astype(np.int64), best_x)
                    best_y = np.where(closer, np.floor(py).astype(np.int64), best_y)
                    best_z = np.where(closer, np.floor(pz).astype(np.int64), best_z)

        if self.enable_range:
            value = np.sqrt(best) * SQRT_3 - 1.0
        else:
            value = np.zeros(np.shape(x), dtype=np.float64)
        return value + self.displacement * value_noise_3d(
            best_x, best_y, best_z, self.seed, stream + 3
        )

    def get(self, x, y, z):
        x = x * self.frequency
        y = y * self.frequency
        z = z * self.frequency
        result = np.zeros(np.shape(x), dtype=np.float64)
        amplitude = 1.0
        for octave in range(self.octaves):
            result += self._cells(x, y, z, octave) * amplitude
            amplitude *= 0.5
            x = x * 2.0
            y = y * 2.0
            z = z * 2.0
        return result

    def __repr__(self) -> str:
        return (
            f"CellularNoise(seed={self.seed}, frequency={self.frequency}, "
            f"enable_range={self.enable_range})"
        )
