"""Static atlas and detail figures (PNG, Agg backend)."""
from __future__ import annotations

from pathlib import Path
from typing import Sequence

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from ..catalog import Mode
from ..colormap import gradient_colormap
from ..mesh import SurfaceMesh
from ..raster import RasterImage
from ..viewer import Thumbnail
from .layout import draw_pyramid, hide_ticks, mesh_collection, setup_scene_axes, view_angles


def save_raster_png(path: str | Path, image: RasterImage) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    plt.imsave(path, image.pixels)
    return path


def plot_atlas(path: str | Path, rows: Sequence[Sequence[Thumbnail]], *, dpi: int = 150) -> Path:
    n_cols = max(len(row) for row in rows) if rows else 1
    fig = plt.figure(figsize=(1.6 * n_cols, 1.2 * max(len(rows), 1)))
    draw_pyramid(fig, rows, bounds=(0.02, 0.02, 0.96, 0.96))
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=dpi)
    plt.close(fig)
    return path


def plot_mode_detail(
    path: str | Path,
    mode: Mode,
    detail_image: RasterImage,
    mesh: SurfaceMesh,
    *,
    rotation: float = 0.0,
    dpi: int = 150,
) -> Path:
    fig = plt.figure(figsize=(10.0, 5.2))
    fig.suptitle(mode.title)
    ax2d = fig.add_subplot(1, 2, 1)
    ax2d.imshow(detail_image.pixels)
    hide_ticks(ax2d)
    ax2d.set_title(mode.description, fontsize=9)
    mappable = plt.cm.ScalarMappable(cmap=gradient_colormap(), norm=plt.Normalize(-1.0, 1.0))
    fig.colorbar(mappable, ax=ax2d, fraction=0.046, pad=0.04)

    ax3d = fig.add_subplot(1, 2, 2, projection="3d")
    ax3d.add_collection3d(mesh_collection(mesh))
    setup_scene_axes(ax3d, mesh)
    elev, azim = view_angles(rotation)
    ax3d.view_init(elev=elev, azim=azim)

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=dpi)
    plt.close(fig)
    return path


__all__ = ["plot_atlas", "plot_mode_detail", "save_raster_png"]
