"""Shared fixtures for the elevation tests."""

import numpy as np
import pytest

from py_planetgen.core.node import Node
from py_planetgen.core.planet_pipeline import PlanetPipeline


class CoordinateNode(Node):
    """Outputs one of its input coordinates, for checking coordinate flow."""

    def __init__(self, axis: int = 0):
        self.axis = axis
        self.calls = 0

    def get(self, x, y, z):
        self.calls += 1
        return np.array((x, y, z)[self.axis], dtype=np.float64)


@pytest.fixture
def x_node():
    return CoordinateNode(0)


@pytest.fixture
def y_node():
    return CoordinateNode(1)


@pytest.fixture
def z_node():
    return CoordinateNode(2)


@pytest.fixture
def coords():
    """A handful of scattered, non-lattice coordinates."""
    x = np.array([0.13, -1.71, 0.5, 1.999, -0.42, 0.77, 3.3, -2.6])
    y = np.array([0.29, 0.61, -1.25, 0.004, -0.93, 1.58, -0.1, 2.2])
    z = np.zeros_like(x)
    return x, y, z


@pytest.fixture
def grid_4x4():
    """The 4x4 grid of pixel indices covering a 4x4 plane map."""
    return np.array([[i, j] for j in range(4) for i in range(4)], dtype=np.float64)


@pytest.fixture(scope="module")
def pipeline_42():
    return PlanetPipeline(42)
