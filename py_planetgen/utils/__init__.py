"""
Utility modules for seed handling and logging.
"""

from .logging import configure_logging
from .random import derive_seed

__all__ = ['configure_logging', 'derive_seed']
