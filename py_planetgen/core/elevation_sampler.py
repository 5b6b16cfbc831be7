"""
Sampling the elevation field at caller-supplied points.

Callers work in grid space: points range over [0, width) x [0, height) and
come from a point generator outside this package. The sampler maps grid
space linearly onto a fixed window of the field's own domain, which is
[-2, 2] x [-2, 2] by default. Width and height only set the resolution of
that mapping; the window itself never moves or zooms.

Grid point ``(i, j)`` lands at ``(x0 + (x1 - x0) * i / width, ...)``, the
same coordinate a width x height plane map would sample for pixel
``(i, j)``. Fractional points keep their fraction unless ``snap_to_grid``
is set. The third coordinate is always 0.0.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
import structlog

from ..config.planet_style import PlanetStyle
from ..config.settings import Settings, settings as default_settings
from ..exceptions import ElevationComputationError, SamplingError
from .node import Node
from .planet_pipeline import PlanetPipeline

logger = structlog.get_logger()

DOMAIN_BOUNDS = (-2.0, 2.0)


@dataclass(frozen=True)
class SamplingWindow:
    """Maps grid-space points onto the field's domain."""

    width: float
    height: float
    x_bounds: Tuple[float, float] = DOMAIN_BOUNDS
    y_bounds: Tuple[float, float] = DOMAIN_BOUNDS

    def __post_init__(self):
        for name in ("width", "height"):
            value = getattr(self, name)
            if not np.isfinite(value) or value <= 0:
                raise SamplingError(f"{name} must be positive, got {value}")
        for name in ("x_bounds", "y_bounds"):
            low, high = getattr(self, name)
            if not (np.isfinite(low) and np.isfinite(high)) or low >= high:
                raise SamplingError(f"{name} must be an increasing pair, got {(low, high)}")

    @property
    def x_step(self) -> float:
        return (self.x_bounds[1] - self.x_bounds[0]) / self.width

    @property
    def y_step(self) -> float:
        return (self.y_bounds[1] - self.y_bounds[0]) / self.height

    def to_domain(self, points: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Convert (N, 2) grid-space points to domain x and y arrays."""
        x = self.x_bounds[0] + self.x_step * points[:, 0]
        y = self.y_bounds[0] + self.y_step * points[:, 1]
        return x, y


def _as_points(points) -> np.ndarray:
    array = np.asarray(points, dtype=np.float64)
    if array.size == 0:
        return array.reshape(0, 2)
    if array.ndim != 2 or array.shape[1] != 2:
        raise SamplingError(f"points must have shape (N, 2), got {array.shape}")
    if not np.all(np.isfinite(array)):
        raise SamplingError("points must be finite")
    return array


class ElevationSampler:
    """
    Evaluates a node at grid-space or domain-space points.

    Args:
        source: Node producing the elevation, usually ``final_planet``
        window: Mapping from grid space to the domain
        guard: Node checked for NaN/inf after evaluation; defaults to
            ``source``. Pointing it at the cache in front of the final clamp
            catches infinities the clamp would hide.
        snap_to_grid: Truncate points to integer pixel indices first
        border_value: Elevation of snapped points outside the window
        check_finite: Raise ElevationComputationError on NaN/inf
    """

    def __init__(
        self,
        source: Node,
        window: SamplingWindow,
        guard: Optional[Node] = None,
        snap_to_grid: bool = False,
        border_value: float = 0.0,
        check_finite: bool = True,
    ):
        self.source = source
        self.window = window
        self.guard = guard
        self.snap_to_grid = snap_to_grid
        self.border_value = float(border_value)
        self.check_finite = check_finite

    def sample(self, points) -> np.ndarray:
        """Elevations of grid-space points, in input order."""
        points = _as_points(points)
        if not self.snap_to_grid:
            return self.sample_domain(np.column_stack(self.window.to_domain(points)))

        indices = np.floor(points)
        inside = (
            (indices[:, 0] >= 0)
            & (indices[:, 0] < np.floor(self.window.width))
            & (indices[:, 1] >= 0)
            & (indices[:, 1] < np.floor(self.window.height))
        )
        result = np.full(len(points), self.border_value, dtype=np.float64)
        if np.any(inside):
            result[inside] = self.sample_domain(
                np.column_stack(self.window.to_domain(indices[inside]))
            )
        return result

    def sample_domain(self, coords) -> np.ndarray:
        """Elevations at domain coordinates, in input order."""
        coords = _as_points(coords)
        if len(coords) == 0:
            return np.zeros(0, dtype=np.float64)

        x = np.ascontiguousarray(coords[:, 0])
        y = np.ascontiguousarray(coords[:, 1])
        z = np.zeros_like(x)

        values = np.array(self.source.get(x, y, z), dtype=np.float64)
        if self.check_finite:
            checked = values if self.guard is None else self.guard.get(x, y, z)
            bad = ~np.isfinite(checked)
            if np.any(bad):
                raise ElevationComputationError(
                    int(bad.sum()), int(np.flatnonzero(bad)[0]), len(values)
                )
        return values


def _check_size(points: np.ndarray, config: Settings) -> None:
    if len(points) > config.max_sample_points:
        raise SamplingError(
            f"{len(points)} points exceed the limit of {config.max_sample_points}"
        )


def _sampler(pipeline: PlanetPipeline, window: SamplingWindow, config: Settings) -> ElevationSampler:
    return ElevationSampler(
        pipeline.final_planet,
        window,
        guard=pipeline.unscaled_final_planet,
        snap_to_grid=config.snap_to_grid,
        border_value=config.border_value,
        check_finite=config.check_finite,
    )


def elevate(
    seed: int,
    points,
    width: float,
    height: float,
    style: Optional[PlanetStyle] = None,
    settings: Optional[Settings] = None,
) -> np.ndarray:
    """
    Generate elevations for a set of grid-space points.

    Builds a fresh pipeline from ``seed``, samples it over the fixed domain
    window and returns one value per point in input order.

    Args:
        seed: Numeric planet seed
        points: (N, 2) array-like of grid-space points
        width: Grid width used to map points onto the domain
        height: Grid height used to map points onto the domain
        style: Terrain constants, defaults to the standard planet style
        settings: Engine settings, defaults to the environment settings

    Returns:
        Array of N elevations within [-1, 1]
    """
    config = settings or default_settings
    points = _as_points(points)
    _check_size(points, config)
    window = SamplingWindow(width, height)

    pipeline = PlanetPipeline(seed, style)
    elevations = _sampler(pipeline, window, config).sample(points)
    logger.info(
        "Elevations generated",
        seed=seed,
        points=len(points),
        width=width,
        height=height,
        min_elevation=float(elevations.min()) if len(elevations) else None,
        max_elevation=float(elevations.max()) if len(elevations) else None,
    )
    return elevations


def elevate_parallel(
    seed: int,
    points,
    width: float,
    height: float,
    workers: int = 4,
    style: Optional[PlanetStyle] = None,
    settings: Optional[Settings] = None,
) -> np.ndarray:
    """
    Generate elevations with several worker threads.

    Points are split into chunks; each worker builds a private pipeline, so
    no cache is ever shared between threads. The result is identical to
    ``elevate`` for the same arguments.
    """
    config = settings or default_settings
    points = _as_points(points)
    _check_size(points, config)
    if workers < 1:
        raise SamplingError(f"workers must be at least 1, got {workers}")
    window = SamplingWindow(width, height)

    chunk_size = config.parallel_chunk_size
    chunks = [points[start:start + chunk_size] for start in range(0, len(points), chunk_size)]
    if not chunks:
        return np.zeros(0, dtype=np.float64)

    def run(chunk: np.ndarray) -> np.ndarray:
        pipeline = PlanetPipeline(seed, style)
        return _sampler(pipeline, window, config).sample(chunk)

    with ThreadPoolExecutor(max_workers=workers) as executor:
        results = list(executor.map(run, chunks))

    logger.info("Elevations generated in parallel", seed=seed, points=len(points), chunks=len(chunks))
    return np.concatenate(results)
