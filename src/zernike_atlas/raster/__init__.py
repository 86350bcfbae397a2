"""Raster renderers: compact previews and the detailed heat map.

Every renderer samples the mode on a square grid over the aperture's
bounding box, skips cells outside the unit disk, colours the rest through
`colors_for` and paints them onto a fresh canvas. Profiles carry the
per-view geometry so the three views share one sampling routine.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Sequence

import numpy as np
from matplotlib.colors import to_rgba
from PIL import Image

from ..colormap import colors_for
from ..contour import DEFAULT_LEVELS, ContourPolyline, trace_contours
from ..zernike import evaluate, validate_mode
from .canvas import (
    RasterImage,
    fill_cells,
    fill_ellipse,
    new_canvas,
    stroke_ellipse,
    stroke_polyline,
    to_image,
)

_LOGGER = logging.getLogger(__name__)

ColorSpec = Any


@dataclass(frozen=True)
class RasterProfile:
    name: str
    width: int
    height: int
    radius: float
    resolution: int
    # vertical squash of the drawn disk (0.5 draws the aperture as an ellipse)
    compression: float = 1.0
    # pixels of fake elevation per unit of field value
    elevation: float = 0.0
    background: ColorSpec | None = None
    outline: ColorSpec | None = None
    outline_width: float = 1.0
    contour_color: ColorSpec = (0.0, 0.0, 0.0, 0.3)
    contour_width: float = 1.0

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"{self.name}: canvas size must be positive")
        if self.radius <= 0:
            raise ValueError(f"{self.name}: radius must be > 0")
        if self.resolution <= 0:
            raise ValueError(f"{self.name}: resolution must be > 0")
        if not 0.0 < self.compression <= 1.0:
            raise ValueError(f"{self.name}: compression must be in (0, 1]")

    @property
    def cell(self) -> float:
        return 2.0 * self.radius / self.resolution

    @property
    def center(self) -> tuple[float, float]:
        return self.width / 2.0, self.height / 2.0


PREVIEW_3D = RasterProfile(
    name="preview_3d",
    width=140,
    height=60,
    radius=30.0,
    resolution=200,
    compression=0.5,
    elevation=7.0,
)
PREVIEW_2D = RasterProfile(
    name="preview_2d",
    width=140,
    height=30,
    radius=30.0,
    resolution=200,
    compression=0.5,
    background=(240 / 255, 240 / 255, 240 / 255, 0.7),
    outline=(0.0, 0.0, 0.0, 0.3),
)
DETAIL_2D = RasterProfile(
    name="detail_2d",
    width=500,
    height=500,
    radius=0.4 * 500,
    resolution=300,
    background="#f0f0f0",
    outline="#999999",
    outline_width=2.0,
)

PROFILES: dict[str, RasterProfile] = {
    profile.name: profile for profile in (PREVIEW_3D, PREVIEW_2D, DETAIL_2D)
}


def profile_with_overrides(base: RasterProfile, overrides: Mapping[str, Any] | None) -> RasterProfile:
    if not overrides:
        return base
    allowed = {f.name for f in fields(RasterProfile)} - {"name"}
    unknown = sorted(set(overrides) - allowed)
    if unknown:
        raise ValueError(f"unknown raster profile keys for {base.name}: {unknown}")
    updates = dict(overrides)
    for key in ("width", "height", "resolution"):
        if key in updates:
            updates[key] = int(updates[key])
    for key in ("radius", "compression", "elevation", "outline_width", "contour_width"):
        if key in updates:
            updates[key] = float(updates[key])
    return replace(base, **updates)


@dataclass(frozen=True)
class DetailRaster:
    image: RasterImage
    contours: tuple[ContourPolyline, ...]


def _sample_cells(n: int, m: int, profile: RasterProfile) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Draw positions and field values of the cells inside the aperture.

    Returned arrays are flattened with the column index outer and the row
    index inner, which is also the paint order.
    """
    res = profile.resolution
    cell = profile.cell
    idx = np.arange(res, dtype=np.float64)
    ii, jj = np.meshgrid(idx, idx, indexing="ij")
    x = ((ii - res / 2.0) * cell).ravel()
    y = ((jj - res / 2.0) * cell).ravel()
    # the drawn disk is squashed vertically; r and theta use the unsquashed y
    r = np.hypot(x, y) / profile.radius
    inside = r <= 1.0
    x, y, r = x[inside], y[inside], r[inside]
    theta = np.arctan2(y, x)
    values = np.asarray(evaluate(n, m, r, theta), dtype=np.float64)
    cx, cy = profile.center
    draw_x = cx + x
    draw_y = cy + y * profile.compression - values * profile.elevation
    return draw_x, draw_y, values


def _paint_aperture(canvas: Image.Image, profile: RasterProfile) -> None:
    cx, cy = profile.center
    rx = profile.radius
    ry = profile.radius * profile.compression
    if profile.background is not None:
        fill_ellipse(canvas, cx, cy, rx, ry, to_rgba(profile.background))
    if profile.outline is not None:
        stroke_ellipse(
            canvas, cx, cy, rx, ry, to_rgba(profile.outline), line_width=profile.outline_width
        )


def render_field(n: int, m: int, profile: RasterProfile) -> Image.Image:
    """Aperture plus field cells on a fresh RGBA canvas."""
    n, m = validate_mode(n, m)
    canvas = new_canvas(profile.width, profile.height)
    _paint_aperture(canvas, profile)
    draw_x, draw_y, values = _sample_cells(n, m, profile)
    painted = fill_cells(canvas, draw_x, draw_y, profile.cell, colors_for(values))
    _LOGGER.debug(
        "%s (n=%d, m=%d): %d cells -> %d pixels on %dx%d",
        profile.name,
        n,
        m,
        values.size,
        painted,
        profile.width,
        profile.height,
    )
    return canvas


def render_preview_3d(n: int, m: int, profile: RasterProfile = PREVIEW_3D) -> RasterImage:
    return to_image(render_field(n, m, profile))


def render_preview_2d(n: int, m: int, profile: RasterProfile = PREVIEW_2D) -> RasterImage:
    return to_image(render_field(n, m, profile))


def render_detail_2d(
    n: int,
    m: int,
    profile: RasterProfile = DETAIL_2D,
    *,
    levels: Sequence[float] = DEFAULT_LEVELS,
    **contour_kwargs: int | float,
) -> DetailRaster:
    canvas = render_field(n, m, profile)
    contours = trace_contours(n, m, levels, **contour_kwargs)
    cx, cy = profile.center
    color = to_rgba(profile.contour_color)
    for contour in contours:
        if contour.is_empty:
            continue
        pts = contour.points * np.array([profile.radius, profile.radius * profile.compression])
        stroke_polyline(canvas, pts + np.array([cx, cy]), color, line_width=profile.contour_width)
    return DetailRaster(image=to_image(canvas), contours=contours)


__all__ = [
    "DETAIL_2D",
    "PREVIEW_2D",
    "PREVIEW_3D",
    "PROFILES",
    "DetailRaster",
    "RasterImage",
    "RasterProfile",
    "profile_with_overrides",
    "render_detail_2d",
    "render_field",
    "render_preview_2d",
    "render_preview_3d",
]
