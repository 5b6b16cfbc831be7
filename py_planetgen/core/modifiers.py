"""
Single-source nodes that reshape the distribution of a signal.

Control-point lists for Curve and Terrace are validated when the node is
built; a malformed list raises NodeConfigurationError instead of producing
garbage during evaluation.
"""

from typing import Iterable, Sequence, Tuple

import numpy as np

from ..exceptions import NodeConfigurationError
from .lattice import lerp
from .node import Node, check_finite, check_increasing, check_node, check_positive


class _Modifier(Node):
    def __init__(self, source: Node):
        self.source = check_node(source, "source")
        self.sources = (self.source,)


class Curve(_Modifier):
    """
    Remaps the source through a cubic curve passing every control point.

    Between control points the curve uses four-point cubic interpolation.
    Below the first or above the last control point the value is
    extrapolated linearly along the boundary segment.
    """

    MIN_CONTROL_POINTS = 4

    def __init__(self, source: Node, control_points: Iterable[Tuple[float, float]]):
        super().__init__(source)
        points = [tuple(point) for point in control_points]
        if any(len(point) != 2 for point in points):
            raise NodeConfigurationError("curve control points must be (input, output) pairs")
        self.inputs = check_increasing(
            [point[0] for point in points], self.MIN_CONTROL_POINTS, "curve"
        )
        self.outputs = np.array([point[1] for point in points], dtype=np.float64)
        if not np.all(np.isfinite(self.outputs)):
            raise NodeConfigurationError("curve outputs must be finite")

    @property
    def control_points(self):
        return list(zip(self.inputs.tolist(), self.outputs.tolist()))

    def get(self, x, y, z):
        value = self.source.get(x, y, z)
        inputs, outputs = self.inputs, self.outputs
        last = len(inputs) - 1

        pos = np.searchsorted(inputs, value, side="right")
        i0 = np.clip(pos - 2, 0, last)
        i1 = np.clip(pos - 1, 0, last)
        i2 = np.clip(pos, 0, last)
        i3 = np.clip(pos + 1, 0, last)

        span = inputs[i2] - inputs[i1]
        inside = span > 0.0
        alpha = (value - inputs[i1]) / np.where(inside, span, 1.0)

        n0, n1, n2, n3 = outputs[i0], outputs[i1], outputs[i2], outputs[i3]
        p = (n3 - n2) - (n0 - n1)
        q = (n0 - n1) - p
        r = n2 - n0
        cubic = ((p * alpha + q) * alpha + r) * alpha + n1

        low_slope = (outputs[1] - outputs[0]) / (inputs[1] - inputs[0])
        high_slope = (outputs[last] - outputs[last - 1]) / (inputs[last] - inputs[last - 1])
        below = outputs[0] + (value - inputs[0]) * low_slope
        above = outputs[last] + (value - inputs[last]) * high_slope

        return np.select([pos == 0, pos > last], [below, above], default=cubic)


class Terrace(_Modifier):
    """
    Snaps the source towards terrace levels.

    Between two neighbouring levels the value follows a quadratic ease from
    the lower level to the upper one, which flattens the ground just above
    each level and steepens it below the next. Values outside the levels are
    clamped to the outermost level. ``invert`` flips the ease so the steep
    part sits above each level.
    """

    MIN_CONTROL_POINTS = 2

    def __init__(self, source: Node, control_points: Sequence[float], invert: bool = False):
        super().__init__(source)
        self.levels = check_increasing(control_points, self.MIN_CONTROL_POINTS, "terrace")
        self.invert = bool(invert)

    @property
    def control_points(self):
        return self.levels.tolist()

    def get(self, x, y, z):
        value = self.source.get(x, y, z)
        levels = self.levels
        last = len(levels) - 1

        pos = np.searchsorted(levels, value, side="right")
        i0 = np.clip(pos - 1, 0, last)
        i1 = np.clip(pos, 0, last)
        low = levels[i0]
        high = levels[i1]

        span = high - low
        same = span <= 0.0
        alpha = (value - low) / np.where(same, 1.0, span)
        if self.invert:
            alpha = 1.0 - alpha
            low, high = high, low
        alpha = alpha * alpha

        return np.where(same, levels[i1], lerp(low, high, alpha))


class Clamp(_Modifier):
    """Restricts the source to [lower, upper]."""

    def __init__(self, source: Node, lower: float = -1.0, upper: float = 1.0):
        super().__init__(source)
        self.lower = check_finite(lower, "lower")
        self.upper = check_finite(upper, "upper")
        if self.lower > self.upper:
            raise NodeConfigurationError(
                f"clamp lower bound {self.lower} exceeds upper bound {self.upper}"
            )

    def get(self, x, y, z):
        return np.clip(self.source.get(x, y, z), self.lower, self.upper)


class ScaleBias(_Modifier):
    """Outputs ``source * scale + bias``."""

    def __init__(self, source: Node, scale: float = 1.0, bias: float = 0.0):
        super().__init__(source)
        self.scale = check_finite(scale, "scale")
        self.bias = check_finite(bias, "bias")

    def get(self, x, y, z):
        return self.source.get(x, y, z) * self.scale + self.bias


class Exponent(_Modifier):
    """
    Applies an exponential curve to a source expected in [-1, 1].

    The value is mapped to [0, 1], raised to ``exponent`` and mapped back.
    The magnitude is used before raising, so stray inputs outside the range
    never produce NaN.
    """

    def __init__(self, source: Node, exponent: float = 1.0):
        super().__init__(source)
        self.exponent = check_positive(exponent, "exponent")

    def get(self, x, y, z):
        value = self.source.get(x, y, z)
        return np.abs((value + 1.0) / 2.0) ** self.exponent * 2.0 - 1.0
