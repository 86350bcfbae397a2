"""Four-stop value -> RGBA gradient shared by the raster and mesh paths."""
from __future__ import annotations

from typing import Any

import numpy as np

# blue -> light blue -> green -> yellow -> red, one band per quarter of t.
GRADIENT_STOPS: tuple[tuple[int, int, int], ...] = (
    (0, 0, 255),
    (0, 170, 255),
    (0, 200, 80),
    (255, 220, 0),
    (255, 0, 0),
)
ALPHA_FLOOR = 0.7

_STOPS = np.asarray(GRADIENT_STOPS, dtype=np.float64) / 255.0
_BANDS = len(GRADIENT_STOPS) - 1


def colors_for(values: Any) -> np.ndarray:
    """Vectorized gradient lookup; returns (..., 4) floats in [0, 1].

    NaN entries (outside the aperture) map to fully transparent black.
    """
    vals = np.asarray(values, dtype=np.float64)
    nan_mask = np.isnan(vals)
    clamped = np.clip(np.where(nan_mask, 0.0, vals), -1.0, 1.0)
    t = (clamped + 1.0) / 2.0
    scaled = t * _BANDS
    band = np.minimum(np.floor(scaled).astype(np.int64), _BANDS - 1)
    local = (scaled - band)[..., None]
    rgb = _STOPS[band] + (_STOPS[band + 1] - _STOPS[band]) * local
    alpha = ALPHA_FLOOR + (1.0 - ALPHA_FLOOR) * np.abs(clamped)
    out = np.concatenate([rgb, alpha[..., None]], axis=-1)
    if nan_mask.any():
        out[nan_mask] = 0.0
    return out


def color_for(value: float) -> tuple[float, float, float, float]:
    rgba = colors_for(float(value))
    return (float(rgba[0]), float(rgba[1]), float(rgba[2]), float(rgba[3]))


def colors_for_bytes(values: Any) -> np.ndarray:
    return np.round(colors_for(values) * 255.0).astype(np.uint8)


def color_for_bytes(value: float) -> tuple[int, int, int, int]:
    rgba = colors_for_bytes(float(value))
    return (int(rgba[0]), int(rgba[1]), int(rgba[2]), int(rgba[3]))


def gradient_colormap(name: str = "zernike_atlas") -> Any:
    """Same stops as a matplotlib colormap over [-1, 1] (opaque)."""
    from matplotlib.colors import LinearSegmentedColormap

    positions = np.linspace(0.0, 1.0, len(GRADIENT_STOPS))
    return LinearSegmentedColormap.from_list(
        name, [(float(pos), tuple(stop)) for pos, stop in zip(positions, _STOPS)]
    )


__all__ = [
    "ALPHA_FLOOR",
    "GRADIENT_STOPS",
    "color_for",
    "color_for_bytes",
    "colors_for",
    "colors_for_bytes",
    "gradient_colormap",
]
