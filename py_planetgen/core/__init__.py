"""
Core elevation generation functionality.
"""

from .node import Node, iter_nodes
from .generators import Constant, FractalNoise, RidgedNoise, BillowNoise, CellularNoise
from .modifiers import Curve, Terrace, Clamp, ScaleBias, Exponent
from .combiners import Min, Max, Add, Multiply, Blend, Select
from .turbulence import Turbulence
from .cache import Cache
from .planet_pipeline import PlanetPipeline, SEED_OFFSETS
from .elevation_sampler import ElevationSampler, SamplingWindow, elevate, elevate_parallel

__all__ = ['Node', 'iter_nodes',
           'Constant', 'FractalNoise', 'RidgedNoise', 'BillowNoise', 'CellularNoise',
           'Curve', 'Terrace', 'Clamp', 'ScaleBias', 'Exponent',
           'Min', 'Max', 'Add', 'Multiply', 'Blend', 'Select',
           'Turbulence', 'Cache', 'PlanetPipeline', 'SEED_OFFSETS',
           'ElevationSampler', 'SamplingWindow', 'elevate', 'elevate_parallel']
