"""RGBA canvas built on Pillow.

Shapes are drawn with `ImageDraw` onto a transparent layer of the canvas
size and blended with `alpha_composite`, so every primitive is a single
source-over pass regardless of how often its outline touches a pixel.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np
from PIL import Image, ImageDraw


@dataclass(frozen=True)
class RasterImage:
    pixels: np.ndarray

    def __post_init__(self) -> None:
        pixels = np.asarray(self.pixels)
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(f"raster pixels must be (H, W, 4), got shape {pixels.shape}")
        if pixels.dtype != np.uint8:
            raise ValueError(f"raster pixels must be uint8, got {pixels.dtype}")

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def alpha(self) -> np.ndarray:
        return self.pixels[..., 3]

    def as_float(self) -> np.ndarray:
        return self.pixels.astype(np.float64) / 255.0


def new_canvas(width: int, height: int) -> Image.Image:
    if width <= 0 or height <= 0:
        raise ValueError(f"canvas size must be positive, got {width}x{height}")
    return Image.new("RGBA", (int(width), int(height)), (0, 0, 0, 0))


def to_image(canvas: Image.Image) -> RasterImage:
    return RasterImage(pixels=np.array(canvas.convert("RGBA"), dtype=np.uint8))


def _rgba_bytes(color: Sequence[float]) -> tuple[int, int, int, int]:
    rgba = np.asarray(color, dtype=np.float64)
    if rgba.shape != (4,):
        raise ValueError(f"color must be an RGBA 4-tuple, got shape {rgba.shape}")
    r, g, b, a = np.clip(np.round(rgba * 255.0), 0, 255).astype(int)
    return int(r), int(g), int(b), int(a)


def _layer(canvas: Image.Image) -> tuple[Image.Image, ImageDraw.ImageDraw]:
    layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
    return layer, ImageDraw.Draw(layer)


def fill_cells(
    canvas: Image.Image,
    centers_x: np.ndarray,
    centers_y: np.ndarray,
    cell: float,
    colors: np.ndarray,
) -> int:
    """Fill square cells of side `cell` centred at the given pixel positions.

    Cells are painted in array order: where cells overlap, the later one
    wins. A cell smaller than a pixel still paints the pixel holding its
    centre. Returns the number of pixels painted.
    """
    width, height = canvas.size
    cx = np.asarray(centers_x, dtype=np.float64).ravel()
    cy = np.asarray(centers_y, dtype=np.float64).ravel()
    colors = np.asarray(colors, dtype=np.float64).reshape(-1, 4)
    if cx.size == 0:
        return 0
    half = cell / 2.0
    col0 = np.ceil(cx - half - 0.5).astype(np.int64)
    col1 = np.ceil(cx + half - 0.5).astype(np.int64)
    row0 = np.ceil(cy - half - 0.5).astype(np.int64)
    row1 = np.ceil(cy + half - 0.5).astype(np.int64)
    thin_c = col1 <= col0
    col0 = np.where(thin_c, np.floor(cx).astype(np.int64), col0)
    col1 = np.where(thin_c, col0 + 1, col1)
    thin_r = row1 <= row0
    row0 = np.where(thin_r, np.floor(cy).astype(np.int64), row0)
    row1 = np.where(thin_r, row0 + 1, row1)

    winner = np.full(height * width, -1, dtype=np.int64)
    order = np.arange(cx.size, dtype=np.int64)
    span_c = int((col1 - col0).max())
    span_r = int((row1 - row0).max())
    for dc in range(span_c):
        for dr in range(span_r):
            cols = col0 + dc
            rows = row0 + dr
            keep = (cols < col1) & (rows < row1)
            keep &= (cols >= 0) & (cols < width) & (rows >= 0) & (rows < height)
            if not keep.any():
                continue
            np.maximum.at(winner, rows[keep] * width + cols[keep], order[keep])
    painted = np.nonzero(winner >= 0)[0]
    if painted.size:
        layer = np.zeros((height * width, 4), dtype=np.uint8)
        layer[painted] = np.clip(np.round(colors[winner[painted]] * 255.0), 0, 255).astype(np.uint8)
        canvas.alpha_composite(Image.fromarray(layer.reshape(height, width, 4)))
    return int(painted.size)


def _bbox(cx: float, cy: float, rx: float, ry: float) -> list[float]:
    # ImageDraw bounding boxes are inclusive pixel indices
    return [cx - rx, cy - ry, cx + rx - 1.0, cy + ry - 1.0]


def fill_ellipse(
    canvas: Image.Image,
    cx: float,
    cy: float,
    rx: float,
    ry: float,
    color: Sequence[float],
) -> None:
    layer, draw = _layer(canvas)
    draw.ellipse(_bbox(cx, cy, rx, ry), fill=_rgba_bytes(color))
    canvas.alpha_composite(layer)


def stroke_ellipse(
    canvas: Image.Image,
    cx: float,
    cy: float,
    rx: float,
    ry: float,
    color: Sequence[float],
    *,
    line_width: float = 1.0,
) -> None:
    layer, draw = _layer(canvas)
    width = max(int(round(line_width)), 1)
    draw.ellipse(_bbox(cx, cy, rx, ry), outline=_rgba_bytes(color), width=width)
    canvas.alpha_composite(layer)


def stroke_polyline(
    canvas: Image.Image,
    points: np.ndarray,
    color: Sequence[float],
    *,
    line_width: float = 1.0,
    closed: bool = True,
) -> None:
    pts = np.asarray(points, dtype=np.float64)
    if pts.ndim != 2 or pts.shape[1] != 2:
        raise ValueError(f"polyline points must be (K, 2), got shape {pts.shape}")
    if pts.shape[0] < 2:
        return
    path = [(float(x), float(y)) for x, y in pts]
    if closed:
        path.append(path[0])
    layer, draw = _layer(canvas)
    width = max(int(round(line_width)), 1)
    draw.line(path, fill=_rgba_bytes(color), width=width, joint="curve" if width > 2 else None)
    canvas.alpha_composite(layer)


__all__ = [
    "RasterImage",
    "fill_cells",
    "fill_ellipse",
    "new_canvas",
    "stroke_ellipse",
    "stroke_polyline",
    "to_image",
]
