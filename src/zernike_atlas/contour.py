"""Iso-level contours of a Zernike mode by per-angle radial bisection."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from .zernike import evaluate, validate_mode

_LOGGER = logging.getLogger(__name__)

DEFAULT_LEVELS: tuple[float, ...] = (-0.8, -0.4, 0.0, 0.4, 0.8)
DEFAULT_SAMPLES = 200
DEFAULT_ITERATIONS = 20
DEFAULT_TOLERANCE = 0.01
DEFAULT_ACCEPTANCE = 0.1
MIN_POINTS = 3


@dataclass(frozen=True)
class ContourPolyline:
    """Closed loop in unit-disk coordinates; empty when the level was not found."""

    level: float
    points: np.ndarray = field(default_factory=lambda: np.zeros((0, 2), dtype=np.float64))

    @property
    def is_empty(self) -> bool:
        return self.points.shape[0] == 0

    def __len__(self) -> int:
        return int(self.points.shape[0])


def _bisect_radius(
    n: int,
    m: int,
    theta: float,
    level: float,
    iterations: int,
    tolerance: float,
) -> float:
    # CONTRACT: assumes the field is monotonic along the ray; non-monotonic
    # rays can converge to a wrong crossing and are filtered by acceptance.
    r_low, r_high = 0.0, 1.0
    r_mid = 0.5
    for _ in range(iterations):
        r_mid = (r_low + r_high) / 2.0
        value = evaluate(n, m, r_mid, theta)
        if abs(value - level) < tolerance:
            break
        if value > level:
            r_high = r_mid
        else:
            r_low = r_mid
    return r_mid


def trace_contour(
    n: int,
    m: int,
    level: float,
    *,
    samples: int = DEFAULT_SAMPLES,
    iterations: int = DEFAULT_ITERATIONS,
    tolerance: float = DEFAULT_TOLERANCE,
    acceptance: float = DEFAULT_ACCEPTANCE,
) -> ContourPolyline:
    n, m = validate_mode(n, m)
    level = float(level)
    if not -1.0 < level < 1.0:
        raise ValueError(f"contour level must be in (-1, 1), got {level}")
    if samples <= 0:
        raise ValueError(f"samples must be > 0, got {samples}")
    if iterations <= 0:
        raise ValueError(f"iterations must be > 0, got {iterations}")

    points: list[tuple[float, float]] = []
    for i in range(samples):
        theta = (i / samples) * 2.0 * math.pi
        r = _bisect_radius(n, m, theta, level, iterations, tolerance)
        if abs(evaluate(n, m, r, theta) - level) < acceptance:
            points.append((r * math.cos(theta), r * math.sin(theta)))

    if len(points) < MIN_POINTS:
        _LOGGER.debug("level %.3f not found for (n=%d, m=%d): %d points", level, n, m, len(points))
        return ContourPolyline(level=level)
    return ContourPolyline(level=level, points=np.asarray(points, dtype=np.float64))


def trace_contours(
    n: int,
    m: int,
    levels: Sequence[float] = DEFAULT_LEVELS,
    **kwargs: int | float,
) -> tuple[ContourPolyline, ...]:
    return tuple(trace_contour(n, m, level, **kwargs) for level in levels)


__all__ = [
    "DEFAULT_ACCEPTANCE",
    "DEFAULT_ITERATIONS",
    "DEFAULT_LEVELS",
    "DEFAULT_SAMPLES",
    "DEFAULT_TOLERANCE",
    "ContourPolyline",
    "trace_contour",
    "trace_contours",
]
