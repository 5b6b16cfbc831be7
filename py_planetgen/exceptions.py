"""
Exceptions raised by the elevation engine.

Configuration problems are reported when a node or a planet style is
constructed; numeric problems are reported after a field has been
evaluated. Nothing inside the engine retries or swallows these errors.
"""


class ElevationError(Exception):
    """Base class for every error raised by py_planetgen."""


class NodeConfigurationError(ElevationError, ValueError):
    """A node was built with parameters outside its valid domain."""


class PlanetStyleError(NodeConfigurationError):
    """A planet style violates one of its cross-field constraints."""


class SamplingError(ElevationError, ValueError):
    """A sampling request (window or point set) is malformed."""


class ElevationComputationError(ElevationError, ArithmeticError):
    """The evaluated field contains NaN or infinite values."""

    def __init__(self, bad_count: int, first_index: int, total: int):
        self.bad_count = bad_count
        self.first_index = first_index
        self.total = total
        super().__init__(
            f"{bad_count} of {total} elevation values are not finite "
            f"(first at point index {first_index})"
        )
