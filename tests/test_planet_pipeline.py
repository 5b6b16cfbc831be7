"""Tests for planet pipeline assembly."""

import numpy as np
import pytest

from py_planetgen.config.planet_style import PlanetStyle
from py_planetgen.core.cache import Cache
from py_planetgen.core.combiners import Select
from py_planetgen.core.generators import BillowNoise, CellularNoise, FractalNoise, RidgedNoise
from py_planetgen.core.modifiers import ScaleBias
from py_planetgen.core.node import Node, iter_nodes
from py_planetgen.core.planet_pipeline import SEED_OFFSETS, PlanetPipeline
from py_planetgen.core.turbulence import Turbulence
from py_planetgen.utils.random import derive_seed

SUBSYSTEMS = [
    "base_continent_def",
    "continent_def",
    "terrain_type_def",
    "mountain_base_def",
    "mountainous_high",
    "mountainous_low",
    "mountainous_terrain",
    "hilly_terrain",
    "plains_terrain",
    "badlands_sand",
    "badlands_cliffs",
    "badlands_terrain",
    "river_positions",
    "scaled_mountainous_terrain",
    "scaled_hilly_terrain",
    "scaled_plains_terrain",
    "scaled_badlands_terrain",
    "continental_shelf",
    "base_continent_elev",
    "continents_with_plains",
    "continents_with_hills",
    "continents_with_mountains",
    "continents_with_badlands",
    "scaled_rivers",
    "continents_with_rivers",
    "unscaled_final_planet",
    "final_planet",
]


def seeded_nodes(pipeline):
    return [
        node
        for node in iter_nodes(pipeline.final_planet)
        if isinstance(node, (FractalNoise, RidgedNoise, BillowNoise, CellularNoise, Turbulence))
    ]


class TestSeedOffsets:
    """Test the per-stage seed offset table."""

    def test_offsets_distinct(self):
        """Test that no two stages share an offset."""
        offsets = list(SEED_OFFSETS.values())
        assert len(offsets) == len(set(offsets))

    def test_table_is_read_only(self):
        """Test that the offset table cannot be edited at runtime."""
        with pytest.raises(TypeError):
            SEED_OFFSETS["base_continent_def.continent"] = 5

    def test_every_noise_node_has_a_distinct_seed(self, pipeline_42):
        """Test that every seeded node draws its own offset."""
        seeds = [node.seed for node in seeded_nodes(pipeline_42)]
        assert len(seeds) == len(SEED_OFFSETS)
        assert len(set(seeds)) == len(seeds)
        assert set(seeds) == {derive_seed(42, offset) for offset in SEED_OFFSETS.values()}


class TestPlanetPipeline:
    """Test graph structure and output properties."""

    def test_subsystems_exposed(self, pipeline_42):
        """Test that every named subsystem is a node."""
        for name in SUBSYSTEMS:
            assert isinstance(pipeline_42.subsystem(name), Node)

    def test_unknown_subsystem(self, pipeline_42):
        """Test that unknown names and non-node attributes raise KeyError."""
        with pytest.raises(KeyError):
            pipeline_42.subsystem("volcanoes")
        with pytest.raises(KeyError):
            pipeline_42.subsystem("seed")

    def test_graph_size(self, pipeline_42):
        """Test that the graph has the full set of nodes and shares subgraphs."""
        assert pipeline_42.node_count > 90
        assert len(pipeline_42.caches) >= 20
        assert all(isinstance(cache, Cache) for cache in pipeline_42.caches)

    def test_continent_def_is_shared(self, pipeline_42):
        """Test that downstream nodes reference one continent definition."""
        consumers = [
            node
            for node in iter_nodes(pipeline_42.final_planet)
            if any(source is pipeline_42.continent_def for source in node.sources)
        ]
        assert len(consumers) >= 4

    def test_output_in_range(self, pipeline_42, coords):
        """Test that the final planet stays within [-1, 1]."""
        pipeline_42.reset_caches()
        values = pipeline_42.final_planet.get(*coords)
        assert np.all(np.isfinite(values))
        assert np.all(values >= -1.0)
        assert np.all(values <= 1.0)

    def test_rivers_never_raise_terrain(self, pipeline_42, coords):
        """Test that the river carve lies within [-river_depth, 0]."""
        values = pipeline_42.scaled_rivers.get(*coords)
        assert np.all(values <= 0.0)
        assert np.all(values >= -pipeline_42.style.river_depth)

    def test_river_positions_in_range(self, pipeline_42, coords):
        """Test that river positions are clamped to [-1, 1]."""
        values = pipeline_42.river_positions.get(*coords)
        assert np.all(np.abs(values) <= 1.0)

    def test_shelf_below_sea_level(self, pipeline_42, coords):
        """Test that the continental shelf never rises above sea level."""
        values = pipeline_42.continental_shelf.get(*coords)
        assert np.all(values <= pipeline_42.style.sea_level)

    def test_deterministic(self, pipeline_42, coords):
        """Test that two pipelines for one seed agree bit for bit."""
        other = PlanetPipeline(42)
        np.testing.assert_array_equal(
            pipeline_42.final_planet.get(*coords), other.final_planet.get(*coords)
        )

    def test_seed_changes_planet(self, pipeline_42, coords):
        """Test that another seed gives another planet."""
        other = PlanetPipeline(43)
        assert not np.array_equal(
            pipeline_42.final_planet.get(*coords), other.final_planet.get(*coords)
        )

    def test_seed_truncated_to_32_bits(self, pipeline_42, coords):
        """Test that only the low 32 bits of the base seed matter."""
        other = PlanetPipeline(2 ** 32 + 42)
        np.testing.assert_array_equal(
            pipeline_42.final_planet.get(*coords), other.final_planet.get(*coords)
        )

    def test_caches_hit_within_one_evaluation(self, pipeline_42, coords):
        """Test that shared subgraphs are evaluated once per coordinate set."""
        pipeline_42.reset_caches()
        pipeline_42.final_planet.get(*coords)
        assert pipeline_42.base_continent_elev.hits > 0
        assert pipeline_42.continents_with_badlands.hits > 0

    def test_reset_caches(self, pipeline_42, coords):
        """Test that reset clears every cache."""
        pipeline_42.final_planet.get(*coords)
        pipeline_42.reset_caches()
        assert all(cache.hits == 0 and cache.misses == 0 for cache in pipeline_42.caches)

    def test_sea_level_moves_coastline(self, coords):
        """Test that raising the sea level floods land."""
        low = PlanetPipeline(7).final_planet.get(*coords)
        high = PlanetPipeline(7, PlanetStyle(sea_level=0.2)).final_planet.get(*coords)
        assert not np.array_equal(low, high)


# (class, frequency, octaves or roughness) per seed stage of the standard style
NOISE_PARAMETERS = {
    "base_continent_def.continent": ("FractalNoise", 0.4, 14),
    "base_continent_def.carver": ("FractalNoise", 0.4 * 4.34375, 11),
    "continent_def.coarse_turbulence": ("Turbulence", 0.4 * 15.25, 13),
    "continent_def.intermediate_turbulence": ("Turbulence", 0.4 * 47.25, 12),
    "continent_def.fine_turbulence": ("Turbulence", 0.4 * 95.25, 11),
    "terrain_type_def.turbulence": ("Turbulence", 0.4 * 18.125, 3),
    "mountain_base_def.ridges": ("RidgedNoise", 1723.0, 4),
    "mountain_base_def.valleys": ("RidgedNoise", 367.0, 1),
    "mountain_base_def.coarse_turbulence": ("Turbulence", 1337.0, 4),
    "mountain_base_def.fine_turbulence": ("Turbulence", 21221.0, 6),
    "mountainous_high.basis_0": ("RidgedNoise", 2371.0, 3),
    "mountainous_high.basis_1": ("RidgedNoise", 2341.0, 3),
    "mountainous_high.turbulence": ("Turbulence", 31511.0, 4),
    "mountainous_low.basis_0": ("RidgedNoise", 1381.0, 8),
    "mountainous_low.basis_1": ("RidgedNoise", 1427.0, 8),
    "hilly_terrain.hills": ("BillowNoise", 1663.0, 6),
    "hilly_terrain.valleys": ("RidgedNoise", 367.5, 1),
    "hilly_terrain.coarse_turbulence": ("Turbulence", 1531.0, 4),
    "hilly_terrain.fine_turbulence": ("Turbulence", 21617.0, 6),
    "plains_terrain.basis_0": ("BillowNoise", 1097.5, 8),
    "plains_terrain.basis_1": ("BillowNoise", 1097.5, 8),
    "badlands_sand.dunes": ("RidgedNoise", 6163.5, 1),
    "badlands_sand.dune_detail": ("CellularNoise", 16183.25, 1),
    "badlands_cliffs.basis": ("FractalNoise", 0.4 * 839.0, 6),
    "badlands_cliffs.coarse_turbulence": ("Turbulence", 16111.0, 3),
    "badlands_cliffs.fine_turbulence": ("Turbulence", 36107.0, 3),
    "river_positions.large": ("RidgedNoise", 18.75, 1),
    "river_positions.small": ("RidgedNoise", 43.25, 1),
    "river_positions.turbulence": ("Turbulence", 9.25, 6),
    "scaled_mountainous_terrain.peak_modulation": ("FractalNoise", 14.5, 6),
    "scaled_hilly_terrain.hilltop_modulation": ("FractalNoise", 13.5, 6),
    "continental_shelf.trenches": ("RidgedNoise", 0.4 * 4.375, 16),
    "continents_with_badlands.positions": ("FractalNoise", 16.5, 2),
}

TURBULENCE_POWERS = {
    "continent_def.coarse_turbulence": 0.4 / 113.75,
    "continent_def.intermediate_turbulence": 0.4 / 433.75,
    "continent_def.fine_turbulence": 0.4 / 1019.75,
    "terrain_type_def.turbulence": 0.4 / 20.59375,
    "mountain_base_def.coarse_turbulence": 1.0 / 6730.0,
    "mountain_base_def.fine_turbulence": 1.0 / 120157.0,
    "mountainous_high.turbulence": 1.0 / 180371.0,
    "hilly_terrain.coarse_turbulence": 1.0 / 16921.0,
    "hilly_terrain.fine_turbulence": 1.0 / 117529.0,
    "badlands_cliffs.coarse_turbulence": 1.0 / 141539.0,
    "badlands_cliffs.fine_turbulence": 1.0 / 211543.0,
    "river_positions.turbulence": 1.0 / 57.75,
}

SCALE_BIAS_PARAMETERS = sorted(
    [
        (0.375, 0.625),
        (0.5, 0.375),
        (-2.0, -0.5),
        (0.03125, -0.96875),
        (0.25, 0.25),
        (0.8, 0.0),
        (0.5, 0.5),
        (-2.0, -1.0),
        (0.75, -0.25),
        (0.5, 0.5),
        (0.5, 0.5),
        (2.0, -1.0),
        (0.875, 0.0),
        (0.25, 0.25),
        (0.25, -0.75),
        (0.25, 1.0),
        (0.125, 0.125),
        (0.5, 1.5),
        (0.0625, 0.0625),
        (0.00390625, 0.0078125),
        (0.0625, 0.0625),
        (-0.125, -0.125),
        (0.25, 0.0),
        (0.01171875, -0.01171875),
    ]
)

SELECT_PARAMETERS = sorted(
    [
        (-0.0375, 1000.0375, 0.0625),
        (-0.5, 999.5, 0.5),
        (-1000.375, -0.375, 0.03125),
        (0.25, 1000.25, 0.25),
        (0.5, 1000.5, 0.25),
        (0.6875, 1000.6875, 0.25),
        (0.0, 0.25, 0.125),
    ]
)


class TestStandardPlanetParameters:
    """Test that the standard style builds the graph with its fixed constants."""

    def test_noise_parameters(self, pipeline_42):
        """Test class, frequency and octave count of every seeded node."""
        by_seed = {node.seed: node for node in seeded_nodes(pipeline_42)}
        for stage, (kind, frequency, octaves) in NOISE_PARAMETERS.items():
            node = by_seed[derive_seed(42, SEED_OFFSETS[stage])]
            assert type(node).__name__ == kind, stage
            assert node.frequency == pytest.approx(frequency, rel=1e-12), stage
            count = node.roughness if isinstance(node, Turbulence) else node.octaves
            assert count == octaves, stage

    def test_turbulence_powers(self, pipeline_42):
        """Test the displacement power of every turbulence node."""
        by_seed = {node.seed: node for node in seeded_nodes(pipeline_42)}
        for stage, power in TURBULENCE_POWERS.items():
            node = by_seed[derive_seed(42, SEED_OFFSETS[stage])]
            assert node.power == pytest.approx(power, rel=1e-12), stage

    def test_scale_bias_parameters(self, pipeline_42):
        """Test every affine stage of the graph."""
        found = sorted(
            (node.scale, node.bias)
            for node in iter_nodes(pipeline_42.final_planet)
            if isinstance(node, ScaleBias)
        )
        assert found == SCALE_BIAS_PARAMETERS

    def test_select_parameters(self, pipeline_42):
        """Test bounds and falloff of every selection."""
        found = sorted(
            (node.lower, node.upper, node.falloff)
            for node in iter_nodes(pipeline_42.final_planet)
            if isinstance(node, Select)
        )
        assert len(found) == len(SELECT_PARAMETERS)
        for actual, expected in zip(found, SELECT_PARAMETERS):
            assert actual == pytest.approx(expected, rel=1e-12)


class TestLatticePointValues:
    """Test subsystem values at the origin, where every gradient octave is zero."""

    def test_base_continent_def(self, pipeline_42):
        """Test the continent curve point (0, -0.375) under the carver at 0.625."""
        assert pipeline_42.base_continent_def.get_value(0.0, 0.0) == -0.375

    def test_plains_terrain(self, pipeline_42):
        """Test two 8-octave billow fields multiplied and rescaled."""
        billow = -(1.0 - 0.5 ** 8) / 0.5 + 0.5
        factor = billow * 0.5 + 0.5
        expected = factor * factor * 2.0 - 1.0
        assert pipeline_42.plains_terrain.get_value(0.0, 0.0) == pytest.approx(expected, abs=1e-12)

    def test_mountainous_low(self, pipeline_42):
        """Test the product of two 8-octave ridged fields."""
        persistence = 1.0 / pipeline_42.style.mountain_lacunarity
        ridged = sum(persistence ** i for i in range(8)) * 1.25 - 1.0
        assert pipeline_42.mountainous_low.get_value(0.0, 0.0) == pytest.approx(
            ridged * ridged, abs=1e-12
        )

    def test_seed_independent_at_origin(self):
        """Test that lattice-point values do not depend on the seed."""
        for seed in (0, 7, 2 ** 63):
            assert PlanetPipeline(seed).base_continent_def.get_value(0.0, 0.0) == -0.375
