from __future__ import annotations

import math

import numpy as np
import pytest

from zernike_atlas.contour import DEFAULT_LEVELS, trace_contour, trace_contours
from zernike_atlas.errors import InvalidMode
from zernike_atlas.zernike import evaluate


def test_defocus_zero_level_is_circle() -> None:
    contour = trace_contour(2, 0, 0.0)
    assert len(contour) == 200
    radii = np.hypot(contour.points[:, 0], contour.points[:, 1])
    assert np.allclose(radii, 1.0 / math.sqrt(2.0), atol=0.01)


def test_points_are_in_angular_order() -> None:
    contour = trace_contour(2, 0, 0.4, samples=36)
    angles = np.mod(np.arctan2(contour.points[:, 1], contour.points[:, 0]), 2 * math.pi)
    assert np.all(np.diff(angles) > 0)


def test_accepted_points_lie_near_level() -> None:
    contour = trace_contour(1, 1, 0.4, samples=90)
    assert 3 <= len(contour) < 90
    for x, y in contour.points:
        r = math.hypot(x, y)
        assert r <= 1.0
        assert abs(evaluate(1, 1, r, math.atan2(y, x)) - 0.4) < 0.1


def test_unreachable_level_is_empty() -> None:
    # piston is 1 everywhere, so -0.4 never occurs
    contour = trace_contour(0, 0, -0.4)
    assert contour.is_empty
    assert contour.points.shape == (0, 2)


def test_trace_contours_default_levels() -> None:
    contours = trace_contours(4, 0, samples=24)
    assert tuple(c.level for c in contours) == DEFAULT_LEVELS
    # spherical dips to -0.5 at mid radius; bisection from the centre only
    # finds the outer crossings, so negative levels stay empty
    by_level = {c.level: c for c in contours}
    assert not by_level[0.0].is_empty
    assert not by_level[0.4].is_empty
    assert by_level[-0.8].is_empty
    assert by_level[-0.4].is_empty


@pytest.mark.parametrize("level", [-1.0, 1.0, 1.5])
def test_level_must_be_open_interval(level: float) -> None:
    with pytest.raises(ValueError):
        trace_contour(2, 0, level)


def test_invalid_arguments() -> None:
    with pytest.raises(InvalidMode):
        trace_contour(2, -1, 0.0)
    with pytest.raises(ValueError):
        trace_contour(2, 0, 0.0, samples=0)
