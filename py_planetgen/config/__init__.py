"""
Configuration for elevation generation.
"""

from .planet_style import PlanetStyle
from .settings import Settings, settings

__all__ = ['PlanetStyle', 'Settings', 'settings']
