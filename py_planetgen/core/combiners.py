"""
Nodes that combine two or more sources evaluated at the same coordinates.
"""

import numpy as np

from ..exceptions import NodeConfigurationError
from .lattice import lerp, s_curve3
from .node import Node, check_finite, check_node


class _Binary(Node):
    def __init__(self, a: Node, b: Node):
        self.a = check_node(a, "a")
        self.b = check_node(b, "b")
        self.sources = (self.a, self.b)


class Min(_Binary):
    """Pointwise minimum of two sources."""

    def get(self, x, y, z):
        return np.minimum(self.a.get(x, y, z), self.b.get(x, y, z))


class Max(_Binary):
    """Pointwise maximum of two sources."""

    def get(self, x, y, z):
        return np.maximum(self.a.get(x, y, z), self.b.get(x, y, z))


class Add(_Binary):
    """Pointwise sum of two sources."""

    def get(self, x, y, z):
        return self.a.get(x, y, z) + self.b.get(x, y, z)


class Multiply(_Binary):
    """Pointwise product of two sources."""

    def get(self, x, y, z):
        return self.a.get(x, y, z) * self.b.get(x, y, z)


class Blend(Node):
    """
    Cross-fades from ``a`` to ``b`` driven by ``control``.

    A control value of -1 gives ``a``, +1 gives ``b``; values in between
    interpolate linearly. The control is not clamped.
    """

    def __init__(self, a: Node, b: Node, control: Node):
        self.a = check_node(a, "a")
        self.b = check_node(b, "b")
        self.control = check_node(control, "control")
        self.sources = (self.a, self.b, self.control)

    def get(self, x, y, z):
        alpha = (self.control.get(x, y, z) + 1.0) / 2.0
        return lerp(self.a.get(x, y, z), self.b.get(x, y, z), alpha)


class Select(Node):
    """
    Chooses between two sources based on a control signal.

    ``b`` is emitted where the control lies within [lower, upper] and ``a``
    everywhere else. With a positive ``falloff`` each bound becomes a band
    of width ``2 * falloff`` in which the output eases between the sources
    along an S-curve. The falloff is limited to half the bound span.

    Pushing one bound far outside [-1, 1] (for example ``upper=1000.0``)
    disables that side of the window.
    """

    def __init__(
        self,
        a: Node,
        b: Node,
        control: Node,
        lower: float = -1.0,
        upper: float = 1.0,
        falloff: float = 0.0,
    ):
        self.a = check_node(a, "a")
        self.b = check_node(b, "b")
        self.control = check_node(control, "control")
        self.sources = (self.a, self.b, self.control)

        self.lower = check_finite(lower, "lower")
        self.upper = check_finite(upper, "upper")
        if self.lower >= self.upper:
            raise NodeConfigurationError(
                f"select lower bound {self.lower} must be below upper bound {self.upper}"
            )
        falloff = check_finite(falloff, "falloff")
        if falloff < 0.0:
            raise NodeConfigurationError(f"falloff must not be negative, got {falloff}")
        self.falloff = min(falloff, (self.upper - self.lower) / 2.0)

    def get(self, x, y, z):
        control = self.control.get(x, y, z)
        a = self.a.get(x, y, z)
        b = self.b.get(x, y, z)

        if self.falloff <= 0.0:
            inside = (control >= self.lower) & (control <= self.upper)
            return np.where(inside, b, a)

        width = 2.0 * self.falloff
        low_start = self.lower - self.falloff
        low_end = self.lower + self.falloff
        high_start = self.upper - self.falloff
        high_end = self.upper + self.falloff

        rising = s_curve3((control - low_start) / width)
        falling = s_curve3((control - high_start) / width)

        return np.select(
            [
                control < low_start,
                control < low_end,
                control < high_start,
                control < high_end,
            ],
            [a, lerp(a, b, rising), b, lerp(b, a, falling)],
            default=a,
        )

    def __repr__(self) -> str:
        return f"Select(lower={self.lower}, upper={self.upper}, falloff={self.falloff})"
