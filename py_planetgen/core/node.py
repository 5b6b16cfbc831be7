"""
Base class and shared validation for elevation graph nodes.

A node maps coordinates to scalar values. Evaluation is vectorised: ``get``
receives three same-shaped float64 arrays and returns an array of that
shape. Nodes hold references to their inputs, so a single node instance can
feed any number of downstream nodes and a pipeline forms a DAG.
"""

import math
from abc import ABC, abstractmethod
from typing import Iterator, Sequence, Tuple

import numpy as np

from ..exceptions import NodeConfigurationError

MAX_OCTAVES = 30
SEED_MASK = 0xFFFFFFFF


def as_coordinates(x, y, z=0.0) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Convert scalars or arrays to three broadcast 1-D float64 arrays."""
    x = np.atleast_1d(np.asarray(x, dtype=np.float64))
    y = np.atleast_1d(np.asarray(y, dtype=np.float64))
    z = np.atleast_1d(np.asarray(z, dtype=np.float64))
    return tuple(np.broadcast_arrays(x, y, z))


class Node(ABC):
    """Base class for every node in an elevation graph."""

    sources: Tuple["Node", ...] = ()

    @abstractmethod
    def get(self, x: np.ndarray, y: np.ndarray, z: np.ndarray) -> np.ndarray:
        """Evaluate the node at every coordinate."""

    def get_value(self, x: float, y: float, z: float = 0.0) -> float:
        """Evaluate the node at a single coordinate."""
        return float(self.get(*as_coordinates(x, y, z))[0])

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def iter_nodes(root: Node) -> Iterator[Node]:
    """Yield every distinct node reachable from ``root`` once."""
    seen = set()
    stack = [root]
    while stack:
        node = stack.pop()
        if id(node) in seen:
            continue
        seen.add(id(node))
        yield node
        stack.extend(reversed(node.sources))


def check_node(value, name: str) -> Node:
    if not isinstance(value, Node):
        raise NodeConfigurationError(f"{name} must be a Node, got {type(value).__name__}")
    return value


def check_seed(seed) -> int:
    """Normalise a seed to an unsigned 32-bit integer."""
    if isinstance(seed, bool) or not isinstance(seed, (int, np.integer)):
        raise NodeConfigurationError(f"seed must be an integer, got {seed!r}")
    return int(seed) & SEED_MASK


def check_finite(value, name: str) -> float:
    value = float(value)
    if not math.isfinite(value):
        raise NodeConfigurationError(f"{name} must be finite, got {value}")
    return value


def check_positive(value, name: str) -> float:
    value = check_finite(value, name)
    if value <= 0.0:
        raise NodeConfigurationError(f"{name} must be positive, got {value}")
    return value


def check_octaves(octaves, name: str = "octaves") -> int:
    if isinstance(octaves, bool) or not isinstance(octaves, (int, np.integer)):
        raise NodeConfigurationError(f"{name} must be an integer, got {octaves!r}")
    if not 1 <= octaves <= MAX_OCTAVES:
        raise NodeConfigurationError(
            f"{name} must be between 1 and {MAX_OCTAVES}, got {octaves}"
        )
    return int(octaves)


def check_increasing(values: Sequence[float], minimum: int, name: str) -> np.ndarray:
    """Validate a control-point axis: enough entries, finite, strictly increasing."""
    array = np.asarray(values, dtype=np.float64)
    if array.ndim != 1 or len(array) < minimum:
        raise NodeConfigurationError(
            f"{name} needs at least {minimum} control points, got {len(array)}"
        )
    if not np.all(np.isfinite(array)):
        raise NodeConfigurationError(f"{name} control points must be finite")
    if np.any(np.diff(array) <= 0.0):
        raise NodeConfigurationError(f"{name} control points must be strictly increasing")
    return array
