"""
Domain warping.

Turbulence displaces each coordinate by three independent fractal noise
fields before evaluating its source, adding detail without changing the
structure of the source. Chaining two or three turbulence nodes with
rising frequency and falling power adds coarse, then fine, detail.
"""

from .generators import FractalNoise
from .node import Node, check_finite, check_node, check_octaves, check_positive, check_seed

# Sub-lattice offsets keep the three displacement fields from sharing
# lattice points with each other or with the source.
_X_OFFSETS = (12414.0 / 65536.0, 65124.0 / 65536.0, 31337.0 / 65536.0)
_Y_OFFSETS = (26519.0 / 65536.0, 18128.0 / 65536.0, 60493.0 / 65536.0)
_Z_OFFSETS = (53820.0 / 65536.0, 11213.0 / 65536.0, 44845.0 / 65536.0)


class Turbulence(Node):
    """
    Warps the input coordinates of ``source``.

    Args:
        source: Node evaluated at the displaced coordinates
        seed: Seed of the displacement fields
        frequency: Frequency of the displacement fields
        power: Scale applied to each displacement
        roughness: Octave count of the displacement fields
    """

    def __init__(
        self,
        source: Node,
        seed: int = 0,
        frequency: float = 1.0,
        power: float = 1.0,
        roughness: int = 3,
    ):
        self.source = check_node(source, "source")
        self.sources = (self.source,)
        self.seed = check_seed(seed)
        self.frequency = check_positive(frequency, "frequency")
        self.power = check_finite(power, "power")
        self.roughness = check_octaves(roughness, "roughness")

        self._distort = [
            FractalNoise(self.seed, self.frequency, self.roughness, stream=axis)
            for axis in ("turbulence-x", "turbulence-y", "turbulence-z")
        ]

    def displace(self, x, y, z):
        """Return the displaced coordinates."""
        x_distort, y_distort, z_distort = self._distort
        dx = x_distort.get(x + _X_OFFSETS[0], y + _X_OFFSETS[1], z + _X_OFFSETS[2])
        dy = y_distort.get(x + _Y_OFFSETS[0], y + _Y_OFFSETS[1], z + _Y_OFFSETS[2])
        dz = z_distort.get(x + _Z_OFFSETS[0], y + _Z_OFFSETS[1], z + _Z_OFFSETS[2])
        return x + dx * self.power, y + dy * self.power, z + dz * self.power

    def get(self, x, y, z):
        return self.source.get(*self.displace(x, y, z))

    def __repr__(self) -> str:
        return (
            f"Turbulence(seed={self.seed}, frequency={self.frequency}, "
            f"power={self.power}, roughness={self.roughness})"
        )
