"""Zernike mode atlas: evaluation, rasters, contours and surface meshes."""
from __future__ import annotations

from .catalog import Mode, all_modes, get_mode, mode_at, mode_index, pyramid_rows
from .colormap import color_for, colors_for
from .contour import ContourPolyline, trace_contour, trace_contours
from .errors import InvalidMode
from .mesh import SurfaceMesh, build_mesh
from .raster import (
    DetailRaster,
    RasterImage,
    render_detail_2d,
    render_preview_2d,
    render_preview_3d,
)
from .zernike import evaluate, validate_mode

__version__ = "0.1.0"

__all__ = [
    "ContourPolyline",
    "DetailRaster",
    "InvalidMode",
    "Mode",
    "RasterImage",
    "SurfaceMesh",
    "all_modes",
    "build_mesh",
    "color_for",
    "colors_for",
    "evaluate",
    "get_mode",
    "mode_at",
    "mode_index",
    "pyramid_rows",
    "render_detail_2d",
    "render_preview_2d",
    "render_preview_3d",
    "trace_contour",
    "trace_contours",
    "validate_mode",
]
