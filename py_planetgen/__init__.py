"""
Procedural planet elevation generation.

Builds a deterministic graph of noise generators, modifiers and combiners
from a numeric seed and samples it at caller-supplied points.
"""

from .config import PlanetStyle, Settings
from .core import ElevationSampler, PlanetPipeline, SamplingWindow, elevate, elevate_parallel
from .exceptions import (
    ElevationComputationError,
    ElevationError,
    NodeConfigurationError,
    PlanetStyleError,
    SamplingError,
)

__version__ = "0.1.0"

__all__ = ['elevate', 'elevate_parallel', 'PlanetPipeline', 'PlanetStyle', 'Settings',
           'ElevationSampler', 'SamplingWindow',
           'ElevationError', 'NodeConfigurationError', 'PlanetStyleError',
           'SamplingError', 'ElevationComputationError']
