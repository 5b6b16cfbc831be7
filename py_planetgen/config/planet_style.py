"""
Terrain constants of a planet style.

A style fixes the look of a planet: continent size, the mix of terrain
types, sea and shelf levels and river depth. The graph shape is the same
for every style; only these constants change.
"""

import math
from dataclasses import dataclass

from ..exceptions import PlanetStyleError


@dataclass(frozen=True)
class PlanetStyle:
    """Constants of the "complex planet" terrain model."""

    # Frequency of the continents, higher gives smaller and more numerous ones
    continent_frequency: float = 0.4

    # Lacunarities, random-looking values close to 2.0 avoid lattice artefacts
    continent_lacunarity: float = 2.208984375
    mountain_lacunarity: float = 2.142578125
    hills_lacunarity: float = 2.162109375
    plains_lacunarity: float = 2.314453125
    badlands_lacunarity: float = 2.212890625

    # "Twistiness" of the warped terrain types
    mountains_twist: float = 1.0
    hills_twist: float = 1.0
    badlands_twist: float = 1.0

    # Levels in planetary elevation units (-1.0 to +1.0)
    sea_level: float = 0.0
    shelf_level: float = -0.375

    # Share of the land covered by each terrain type (0.0 to 1.0)
    mountains_amount: float = 0.5
    badlands_amount: float = 0.3125

    # Below 1.0 rough terrain only appears high up, above 2.0 anywhere
    terrain_offset: float = 1.0

    # Slightly above 1.0 steepens mountain slopes towards the peaks
    mountain_glaciation: float = 1.375

    # Maximum river depth in planetary elevation units
    river_depth: float = 0.0234375

    def __post_init__(self):
        for name, value in self.__dict__.items():
            if not math.isfinite(value):
                raise PlanetStyleError(f"{name} must be finite, got {value}")

        if self.continent_frequency <= 0.0:
            raise PlanetStyleError("continent_frequency must be positive")
        for name in (
            "continent_lacunarity",
            "mountain_lacunarity",
            "hills_lacunarity",
            "plains_lacunarity",
            "badlands_lacunarity",
        ):
            if getattr(self, name) <= 0.0:
                raise PlanetStyleError(f"{name} must be positive")

        # Rivers fade out over [sea_level, sea_level + continent_height_scale]
        if not -1.0 < self.sea_level <= self.continent_height_scale:
            raise PlanetStyleError(
                f"sea_level must lie within (-1.0, {self.continent_height_scale}], "
                f"got {self.sea_level}"
            )
        # The shelf terrace sits between the ocean floor terrace and sea level
        if not -0.75 < self.shelf_level < self.sea_level:
            raise PlanetStyleError(
                f"shelf_level must lie within (-0.75, sea_level={self.sea_level}), "
                f"got {self.shelf_level}"
            )
        if not -1.0 < self.shelf_level + self.sea_level / 2.0 < 1.0:
            raise PlanetStyleError("shelf_level + sea_level / 2 must lie within (-1.0, 1.0)")
        if not 0.0 < self.mountains_amount < 1.0:
            raise PlanetStyleError("mountains_amount must lie within (0.0, 1.0)")
        if not 0.0 <= self.badlands_amount < self.mountains_amount:
            raise PlanetStyleError(
                f"badlands_amount must lie within [0.0, mountains_amount={self.mountains_amount}), "
                f"got {self.badlands_amount}"
            )
        if self.terrain_offset <= 0.0:
            raise PlanetStyleError("terrain_offset must be positive")
        if self.mountain_glaciation <= 0.0:
            raise PlanetStyleError("mountain_glaciation must be positive")
        if not 0.0 < self.river_depth <= self.continent_height_scale:
            raise PlanetStyleError(
                "river_depth must be positive and at most continent_height_scale"
            )

    @property
    def hills_amount(self) -> float:
        """Hills sit halfway between full coverage and the mountains amount."""
        return (1.0 + self.mountains_amount) / 2.0

    @property
    def continent_height_scale(self) -> float:
        """Scale applied to the continent definition, in planetary units."""
        return (1.0 - self.sea_level) / 4.0
