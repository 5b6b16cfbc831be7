"""
Assembly of the planet elevation graph.

The graph is built in dependency order from eight terrain subsystems:
- Continent definition: where the continents and mountain ranges are
- Terrain type definition: where plains, hills and mountains may appear
- Mountainous, hilly, plains and badlands terrain
- River positions
- Final combination: every terrain type scaled into planetary elevation
  units and stamped onto the base continent elevation, then rivers carved

Output values are planetary elevation units: -1.0 is the deepest trench,
0.0 sea level (by default) and +1.0 the highest peak.

Every noise node derives its seed from the base seed plus a fixed offset
from SEED_OFFSETS. The table is part of the terrain model; changing an
entry changes every planet.
"""

from types import MappingProxyType
from typing import Optional

import structlog

from ..config.planet_style import PlanetStyle
from ..utils.random import derive_seed
from .cache import Cache
from .combiners import Add, Blend, Max, Min, Multiply, Select
from .generators import BillowNoise, CellularNoise, Constant, FractalNoise, RidgedNoise
from .modifiers import Clamp, Curve, Exponent, ScaleBias, Terrace
from .node import Node, iter_nodes
from .turbulence import Turbulence

logger = structlog.get_logger()

SEED_OFFSETS = MappingProxyType(
    {
        "base_continent_def.continent": 0,
        "base_continent_def.carver": 1,
        "continent_def.coarse_turbulence": 10,
        "continent_def.intermediate_turbulence": 11,
        "continent_def.fine_turbulence": 12,
        "terrain_type_def.turbulence": 20,
        "mountain_base_def.ridges": 30,
        "mountain_base_def.valleys": 31,
        "mountain_base_def.coarse_turbulence": 32,
        "mountain_base_def.fine_turbulence": 33,
        "mountainous_high.basis_0": 40,
        "mountainous_high.basis_1": 41,
        "mountainous_high.turbulence": 42,
        "mountainous_low.basis_0": 50,
        "mountainous_low.basis_1": 51,
        "hilly_terrain.hills": 60,
        "hilly_terrain.valleys": 61,
        "hilly_terrain.coarse_turbulence": 62,
        "hilly_terrain.fine_turbulence": 63,
        "plains_terrain.basis_0": 70,
        "plains_terrain.basis_1": 71,
        "badlands_sand.dunes": 80,
        "badlands_sand.dune_detail": 81,
        "badlands_cliffs.basis": 90,
        "badlands_cliffs.coarse_turbulence": 91,
        "badlands_cliffs.fine_turbulence": 92,
        "river_positions.large": 100,
        "river_positions.small": 101,
        "river_positions.turbulence": 102,
        "scaled_mountainous_terrain.peak_modulation": 110,
        "scaled_hilly_terrain.hilltop_modulation": 120,
        "continental_shelf.trenches": 130,
        "continents_with_badlands.positions": 140,
    }
)


class PlanetPipeline:
    """
    The complete elevation graph for one seed.

    Each named subsystem is kept as an attribute so it can be sampled on its
    own. ``final_planet`` is the node the sampler evaluates.

    The graph is rebuilt for every generation call. Cache nodes hold a
    single memo, so one instance must not be evaluated from several threads
    at once.
    """

    def __init__(self, seed: int, style: Optional[PlanetStyle] = None):
        self.seed = int(seed)
        self.style = style or PlanetStyle()

        self._build_continent_definition()
        self._build_terrain_type_definition()
        self._build_mountainous_terrain()
        self._build_hilly_terrain()
        self._build_plains_terrain()
        self._build_badlands_terrain()
        self._build_river_positions()
        self._build_scaled_terrain()
        self._build_final_planet()

        self.caches = [node for node in iter_nodes(self.final_planet) if isinstance(node, Cache)]
        self.node_count = sum(1 for _ in iter_nodes(self.final_planet))
        logger.info(
            "Planet pipeline built",
            seed=self.seed,
            nodes=self.node_count,
            caches=len(self.caches),
        )

    def _seed(self, stage: str) -> int:
        return derive_seed(self.seed, SEED_OFFSETS[stage])

    def reset_caches(self) -> None:
        for cache in self.caches:
            cache.reset()

    # Continent definition

    def _build_continent_definition(self) -> None:
        style = self.style
        sea = style.sea_level
        frequency = style.continent_frequency

        continent = FractalNoise(
            seed=self._seed("base_continent_def.continent"),
            frequency=frequency,
            octaves=14,
            persistence=0.5,
            lacunarity=style.continent_lacunarity,
        )
        # Very high values just above sea level mark the mountain ranges
        with_ranges = Curve(
            continent,
            [
                (-2.0000 + sea, -1.625 + sea),
                (-1.0000 + sea, -1.375 + sea),
                (0.0000 + sea, -0.375 + sea),
                (0.0625 + sea, 0.125 + sea),
                (0.1250 + sea, 0.250 + sea),
                (0.2500 + sea, 1.000 + sea),
                (0.5000 + sea, 0.250 + sea),
                (0.7500 + sea, 0.250 + sea),
                (1.0000 + sea, 0.500 + sea),
                (2.0000 + sea, 0.500 + sea),
            ],
        )
        carver = FractalNoise(
            seed=self._seed("base_continent_def.carver"),
            frequency=frequency * 4.34375,
            octaves=11,
            persistence=0.5,
            lacunarity=style.continent_lacunarity,
        )
        # Usually near 1.0, so the minimum only occasionally bites into a range
        scaled_carver = ScaleBias(carver, scale=0.375, bias=0.625)
        carved = Min(scaled_carver, with_ranges)
        self.base_continent_def = Cache(Clamp(carved, -1.0, 1.0), "base_continent_def")

        coarse = Turbulence(
            self.base_continent_def,
            seed=self._seed("continent_def.coarse_turbulence"),
            frequency=frequency * 15.25,
            power=frequency / 113.75,
            roughness=13,
        )
        intermediate = Turbulence(
            coarse,
            seed=self._seed("continent_def.intermediate_turbulence"),
            frequency=frequency * 47.25,
            power=frequency / 433.75,
            roughness=12,
        )
        warped = Turbulence(
            intermediate,
            seed=self._seed("continent_def.fine_turbulence"),
            frequency=frequency * 95.25,
            power=frequency / 1019.75,
            roughness=11,
        )
        # Only the land is warped; coasts and sea floor keep the smooth base
        self.continent_def = Cache(
            Select(
                self.base_continent_def,
                warped,
                self.base_continent_def,
                lower=sea - 0.0375,
                upper=sea + 1000.0375,
                falloff=0.0625,
            ),
            "continent_def",
        )

    def _build_terrain_type_definition(self) -> None:
        style = self.style
        frequency = style.continent_frequency

        # Lets rough terrain escape the high ground: rocky islands, fjords
        warped = Turbulence(
            self.continent_def,
            seed=self._seed("terrain_type_def.turbulence"),
            frequency=frequency * 18.125,
            power=frequency / 20.59375 * style.terrain_offset,
            roughness=3,
        )
        # Sharpens the edge near sea level, making rough terrain rarer
        rarity_shift = Terrace(
            warped,
            [-1.0, style.shelf_level + style.sea_level / 2.0, 1.0],
        )
        self.terrain_type_def = Cache(rarity_shift, "terrain_type_def")

    # Terrain types

    def _build_mountainous_terrain(self) -> None:
        style = self.style
        lacunarity = style.mountain_lacunarity
        twist = style.mountains_twist

        ridges = RidgedNoise(
            seed=self._seed("mountain_base_def.ridges"),
            frequency=1723.0,
            octaves=4,
            lacunarity=lacunarity,
        )
        scaled_ridges = ScaleBias(ridges, scale=0.5, bias=0.375)
        valleys = RidgedNoise(
            seed=self._seed("mountain_base_def.valleys"),
            frequency=367.0,
            octaves=1,
            lacunarity=lacunarity,
        )
        # One octave has a narrow range; stretch it and flip ridges into valleys
        scaled_valleys = ScaleBias(valleys, scale=-2.0, bias=-0.5)
        mountains_and_valleys = Blend(Constant(-1.0), scaled_ridges, scaled_valleys)
        coarse = Turbulence(
            mountains_and_valleys,
            seed=self._seed("mountain_base_def.coarse_turbulence"),
            frequency=1337.0,
            power=1.0 / 6730.0 * twist,
            roughness=4,
        )
        fine = Turbulence(
            coarse,
            seed=self._seed("mountain_base_def.fine_turbulence"),
            frequency=21221.0,
            power=1.0 / 120157.0 * twist,
            roughness=6,
        )
        self.mountain_base_def = Cache(fine, "mountain_base_def")

        high_0 = RidgedNoise(
            seed=self._seed("mountainous_high.basis_0"),
            frequency=2371.0,
            octaves=3,
            lacunarity=lacunarity,
        )
        high_1 = RidgedNoise(
            seed=self._seed("mountainous_high.basis_1"),
            frequency=2341.0,
            octaves=3,
            lacunarity=lacunarity,
        )
        high_warped = Turbulence(
            Max(high_0, high_1),
            seed=self._seed("mountainous_high.turbulence"),
            frequency=31511.0,
            power=1.0 / 180371.0 * twist,
            roughness=4,
        )
        self.mountainous_high = Cache(high_warped, "mountainous_high")

        low_0 = RidgedNoise(
            seed=self._seed("mountainous_low.basis_0"),
            frequency=1381.0,
            octaves=8,
            lacunarity=lacunarity,
        )
        low_1 = RidgedNoise(
            seed=self._seed("mountainous_low.basis_1"),
            frequency=1427.0,
            octaves=8,
            lacunarity=lacunarity,
        )
        # Sign combinations give cracks (-,-), flats (+,-) and ridges (+,+)
        self.mountainous_low = Cache(Multiply(low_0, low_1), "mountainous_low")

        flat_lowlands = ScaleBias(self.mountainous_low, scale=0.03125, bias=-0.96875)
        raised_highlands = Add(
            ScaleBias(self.mountainous_high, scale=0.25, bias=0.25),
            self.mountain_base_def,
        )
        combined = Select(
            flat_lowlands,
            raised_highlands,
            self.mountain_base_def,
            lower=-0.5,
            upper=999.5,
            falloff=0.5,
        )
        lowered_peaks = ScaleBias(combined, scale=0.8, bias=0.0)
        glaciated = Exponent(lowered_peaks, exponent=style.mountain_glaciation)
        self.mountainous_terrain = Cache(glaciated, "mountainous_terrain")

    def _build_hilly_terrain(self) -> None:
        style = self.style
        lacunarity = style.hills_lacunarity
        twist = style.hills_twist

        hills = BillowNoise(
            seed=self._seed("hilly_terrain.hills"),
            frequency=1663.0,
            octaves=6,
            persistence=0.5,
            lacunarity=lacunarity,
        )
        scaled_hills = ScaleBias(hills, scale=0.5, bias=0.5)
        valleys = RidgedNoise(
            seed=self._seed("hilly_terrain.valleys"),
            frequency=367.5,
            octaves=1,
            lacunarity=lacunarity,
        )
        scaled_valleys = ScaleBias(valleys, scale=-2.0, bias=-1.0)
        hills_and_valleys = Blend(Constant(-1.0), scaled_valleys, scaled_hills)
        lowered_hilltops = ScaleBias(hills_and_valleys, scale=0.75, bias=-0.25)
        steepened = Exponent(lowered_hilltops, exponent=1.375)
        coarse = Turbulence(
            steepened,
            seed=self._seed("hilly_terrain.coarse_turbulence"),
            frequency=1531.0,
            power=1.0 / 16921.0 * twist,
            roughness=4,
        )
        fine = Turbulence(
            coarse,
            seed=self._seed("hilly_terrain.fine_turbulence"),
            frequency=21617.0,
            power=1.0 / 117529.0 * twist,
            roughness=6,
        )
        self.hilly_terrain = Cache(fine, "hilly_terrain")

    def _build_plains_terrain(self) -> None:
        lacunarity = self.style.plains_lacunarity

        # Plains are flattened heavily later, so any lumpy texture will do
        basis_0 = BillowNoise(
            seed=self._seed("plains_terrain.basis_0"),
            frequency=1097.5,
            octaves=8,
            persistence=0.5,
            lacunarity=lacunarity,
        )
        basis_1 = BillowNoise(
            seed=self._seed("plains_terrain.basis_1"),
            frequency=1097.5,
            octaves=8,
            persistence=0.5,
            lacunarity=lacunarity,
        )
        combined = Multiply(
            ScaleBias(basis_0, scale=0.5, bias=0.5),
            ScaleBias(basis_1, scale=0.5, bias=0.5),
        )
        self.plains_terrain = Cache(ScaleBias(combined, scale=2.0, bias=-1.0), "plains_terrain")

    def _build_badlands_terrain(self) -> None:
        style = self.style
        lacunarity = style.badlands_lacunarity
        twist = style.badlands_twist

        dunes = RidgedNoise(
            seed=self._seed("badlands_sand.dunes"),
            frequency=6163.5,
            octaves=1,
            lacunarity=lacunarity,
        )
        # Pits whose edges join up with their neighbours
        dune_detail = CellularNoise(
            seed=self._seed("badlands_sand.dune_detail"),
            frequency=16183.25,
            displacement=0.0,
            enable_range=True,
        )
        self.badlands_sand = Cache(
            Add(
                ScaleBias(dunes, scale=0.875, bias=0.0),
                ScaleBias(dune_detail, scale=0.25, bias=0.25),
            ),
            "badlands_sand",
        )

        cliff_basis = FractalNoise(
            seed=self._seed("badlands_cliffs.basis"),
            frequency=style.continent_frequency * 839.0,
            octaves=6,
            persistence=0.5,
            lacunarity=lacunarity,
        )
        # Shallow, then sheer, then flat again on top
        cliff_shape = Curve(
            cliff_basis,
            [
                (-2.000, -2.000),
                (-1.000, -1.000),
                (-0.000, -0.750),
                (0.500, -0.250),
                (0.625, 0.875),
                (0.750, 1.000),
                (2.000, 1.250),
            ],
        )
        flat_tops = Clamp(cliff_shape, -999.125, 0.875)
        terraced = Terrace(flat_tops, [-1.000, -0.875, -0.750, -0.500, 0.000, 1.000])
        coarse = Turbulence(
            terraced,
            seed=self._seed("badlands_cliffs.coarse_turbulence"),
            frequency=16111.0,
            power=1.0 / 141539.0 * twist,
            roughness=3,
        )
        fine = Turbulence(
            coarse,
            seed=self._seed("badlands_cliffs.fine_turbulence"),
            frequency=36107.0,
            power=1.0 / 211543.0 * twist,
            roughness=3,
        )
        self.badlands_cliffs = Cache(fine, "badlands_cliffs")

        # Sand sits just above the cliff base, so it fills the low ground
        flattened_sand = ScaleBias(self.badlands_sand, scale=0.25, bias=-0.75)
        self.badlands_terrain = Cache(Max(self.badlands_cliffs, flattened_sand), "badlands_terrain")

    def _build_river_positions(self) -> None:
        lacunarity = self.style.continent_lacunarity

        large = RidgedNoise(
            seed=self._seed("river_positions.large"),
            frequency=18.75,
            octaves=1,
            lacunarity=lacunarity,
        )
        # Inverts the ridges into channels with steep banks
        large_channels = Curve(
            large,
            [
                (-2.000, 2.000),
                (-1.000, 1.000),
                (-0.125, 0.875),
                (0.000, -1.000),
                (1.000, -1.500),
                (2.000, -2.000),
            ],
        )
        small = RidgedNoise(
            seed=self._seed("river_positions.small"),
            frequency=43.25,
            octaves=1,
            lacunarity=lacunarity,
        )
        small_channels = Curve(
            small,
            [
                (-2.000, 2.0000),
                (-1.000, 1.5000),
                (-0.125, 1.4375),
                (0.000, 0.5000),
                (1.000, 0.2500),
                (2.000, 0.0000),
            ],
        )
        meandering = Turbulence(
            Min(large_channels, small_channels),
            seed=self._seed("river_positions.turbulence"),
            frequency=9.25,
            power=1.0 / 57.75,
            roughness=6,
        )
        # The cubic overshoots 1.0 slightly between control points
        self.river_positions = Cache(Clamp(meandering, -1.0, 1.0), "river_positions")

    # Final combination

    def _build_scaled_terrain(self) -> None:
        style = self.style

        peak_modulation = FractalNoise(
            seed=self._seed("scaled_mountainous_terrain.peak_modulation"),
            frequency=14.5,
            octaves=6,
            persistence=0.5,
            lacunarity=style.mountain_lacunarity,
        )
        # Few high peaks, many lower ones; the multiplier stays near 1.0
        peak_multiplier = ScaleBias(Exponent(peak_modulation, 1.25), scale=0.25, bias=1.0)
        self.scaled_mountainous_terrain = Cache(
            Multiply(
                ScaleBias(self.mountainous_terrain, scale=0.125, bias=0.125),
                peak_multiplier,
            ),
            "scaled_mountainous_terrain",
        )

        hilltop_modulation = FractalNoise(
            seed=self._seed("scaled_hilly_terrain.hilltop_modulation"),
            frequency=13.5,
            octaves=6,
            persistence=0.5,
            lacunarity=style.hills_lacunarity,
        )
        hilltop_multiplier = ScaleBias(
            Exponent(hilltop_modulation, 1.25), scale=0.5, bias=1.5
        )
        self.scaled_hilly_terrain = Cache(
            Multiply(
                ScaleBias(self.hilly_terrain, scale=0.0625, bias=0.0625),
                hilltop_multiplier,
            ),
            "scaled_hilly_terrain",
        )

        self.scaled_plains_terrain = Cache(
            ScaleBias(self.plains_terrain, scale=0.00390625, bias=0.0078125),
            "scaled_plains_terrain",
        )
        self.scaled_badlands_terrain = Cache(
            ScaleBias(self.badlands_terrain, scale=0.0625, bias=0.0625),
            "scaled_badlands_terrain",
        )

    def _build_final_planet(self) -> None:
        style = self.style
        sea = style.sea_level
        shelf = style.shelf_level
        height_scale = style.continent_height_scale

        # A terrace at the shelf level plus one near -1.0 for the ocean floor
        shelf_terraces = Terrace(self.continent_def, [-1.0, -0.75, shelf, 1.0])
        sea_bottom = Clamp(shelf_terraces, -0.75, sea)
        trench_basis = RidgedNoise(
            seed=self._seed("continental_shelf.trenches"),
            frequency=style.continent_frequency * 4.375,
            octaves=16,
            lacunarity=style.continent_lacunarity,
        )
        trenches = ScaleBias(trench_basis, scale=-0.125, bias=-0.125)
        self.continental_shelf = Cache(Add(trenches, sea_bottom), "continental_shelf")

        base_elevation = ScaleBias(self.continent_def, scale=height_scale, bias=0.0)
        self.base_continent_elev = Cache(
            Select(
                base_elevation,
                self.continental_shelf,
                self.continent_def,
                lower=shelf - 1000.0,
                upper=shelf,
                falloff=0.03125,
            ),
            "base_continent_elev",
        )

        self.continents_with_plains = Cache(
            Add(self.base_continent_elev, self.scaled_plains_terrain),
            "continents_with_plains",
        )

        self.continents_with_hills = Cache(
            Select(
                self.continents_with_plains,
                Add(self.base_continent_elev, self.scaled_hilly_terrain),
                self.terrain_type_def,
                lower=1.0 - style.hills_amount,
                upper=1001.0 - style.hills_amount,
                falloff=0.25,
            ),
            "continents_with_hills",
        )

        # Higher continents carry higher mountains
        mountain_uplift = Curve(
            self.continent_def,
            [
                (-1.0, -0.0625),
                (0.0, 0.0000),
                (1.0 - style.mountains_amount, 0.0625),
                (1.0, 0.2500),
            ],
        )
        self.continents_with_mountains = Cache(
            Select(
                self.continents_with_hills,
                Add(
                    Add(self.base_continent_elev, self.scaled_mountainous_terrain),
                    mountain_uplift,
                ),
                self.terrain_type_def,
                lower=1.0 - style.mountains_amount,
                upper=1001.0 - style.mountains_amount,
                falloff=0.25,
            ),
            "continents_with_mountains",
        )

        badlands_positions = FractalNoise(
            seed=self._seed("continents_with_badlands.positions"),
            frequency=16.5,
            octaves=2,
            persistence=0.5,
            lacunarity=style.continent_lacunarity,
        )
        badlands_placed = Select(
            self.continents_with_mountains,
            Add(self.base_continent_elev, self.scaled_badlands_terrain),
            badlands_positions,
            lower=1.0 - style.badlands_amount,
            upper=1001.0 - style.badlands_amount,
            falloff=0.25,
        )
        # Badlands poke out of the terrain but never out of mountains
        self.continents_with_badlands = Cache(
            Max(self.continents_with_mountains, badlands_placed),
            "continents_with_badlands",
        )

        # Never positive: the carve lies within [-river_depth, 0]
        self.scaled_rivers = ScaleBias(
            self.river_positions,
            scale=style.river_depth / 2.0,
            bias=-style.river_depth / 2.0,
        )
        # Deep rivers near the coast, shallow ones inland
        self.continents_with_rivers = Cache(
            Select(
                self.continents_with_badlands,
                Add(self.continents_with_badlands, self.scaled_rivers),
                self.continents_with_badlands,
                lower=sea,
                upper=height_scale + sea,
                falloff=height_scale - sea,
            ),
            "continents_with_rivers",
        )

        self.unscaled_final_planet = Cache(self.continents_with_rivers, "unscaled_final_planet")
        self.final_planet = Clamp(self.unscaled_final_planet, -1.0, 1.0)

    def subsystem(self, name: str) -> Node:
        """Look up a named subsystem node, for example ``"river_positions"``."""
        node = getattr(self, name, None)
        if not isinstance(node, Node):
            raise KeyError(f"Unknown subsystem: {name}")
        return node
